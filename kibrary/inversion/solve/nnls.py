#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Non-negative least squares. With the Cholesky factorization
:math:`{\bf A}^T {\bf A} = {\bf L L}^T`, the normal equations are equivalent
to minimizing :math:`|{\bf L}^T {\bf m} - {\bf L}^{-1} {\bf A}^T {\bf d}|`,
which is solved under the constraint :math:`{\bf m} \ge 0` by
:func:`scipy.optimize.nnls`.
"""
import numpy as np
import scipy.linalg
import scipy.optimize
from kibrary.exceptions import SingularMatrixException
from kibrary.inversion.solve.base import (InverseProblem, check_nonsingular,
                                         inverse_symmetric)
from kibrary.inversion.solve.methods import InverseMethod


class NonNegativeLeastSquaresMethod(InverseProblem):
    """
    Non-negative least-squares solver of the normal equations. A single
    answer is computed

    Attributes
    ----------
    residual_norm : float
        Norm of the residual of the transformed problem, available after
        :meth:`compute`
    """

    method = InverseMethod.NNLS

    def __init__(self, ata, atd, verbose=True):
        super().__init__(ata, atd, verbose=verbose)
        self.residual_norm = None


    def compute(self):
        """
        Raises
        ------
        SingularMatrixException
            If AtA is not positive definite or is numerically singular
        """
        if self.verbose:
            print('NNLS: factorizing AtA')
        # Cholesky succeeds on rank-deficient matrices perturbed by rounding
        check_nonsingular(self.ata)
        try:
            lower = scipy.linalg.cholesky(self.ata, lower=True)
        except np.linalg.LinAlgError as e:
            raise SingularMatrixException(str(e)) from e
        rhs = scipy.linalg.solve_triangular(lower, self.atd, lower=True)
        m, self.residual_norm = scipy.optimize.nnls(lower.T, rhs)
        self.answers = []
        self._append(m)
        return self.answers


    def compute_covariance(self, sigma_d, j):
        r""" :math:`\sigma_d^2 ({\bf A}^T {\bf A})^{-1}` """
        return sigma_d**2 * inverse_symmetric(self.ata)
