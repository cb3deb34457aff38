#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Singular Value Decomposition
============================

The symmetric matrix :math:`{\bf A}^T {\bf A}` is decomposed as
:math:`{\bf V \Sigma}^2 {\bf V}^T`, the eigenvalues :math:`\sigma_i^2` being
sorted in descending order. The :math:`j`\ th answer is the solution
truncated to the first :math:`j` eigenvectors

.. math::

    {\bf m}_j = \sum_{i \le j} \frac{{\bf v}_i \cdot {\bf A}^T {\bf d}}
    {\sigma_i^2} {\bf v}_i.

Only eigenvalues larger than :math:`n \, \epsilon \, \sigma_1^2` are used,
:math:`\epsilon` being the machine precision.

"""
import os
import warnings
import numpy as np
import scipy.linalg
from kibrary.exceptions import SingularMatrixException
from kibrary.inversion.solve.base import InverseProblem
from kibrary.inversion.solve.methods import InverseMethod

EIGENVALUES_FILE = 'eigenvaluesOfAta.txt'
eps = np.finfo(np.float64).eps


class SingularValueDecomposition(InverseProblem):
    """
    Truncated eigen-decomposition solver of the normal equations

    Attributes
    ----------
    eigenvalues : ndarray of shape (n,)
        Eigenvalues of AtA, in descending order. Available after
        :meth:`compute`

    eigenvectors : ndarray of shape (n, n)
        Corresponding eigenvectors, as columns

    rank : int
        Number of eigenvalues used
    """

    method = InverseMethod.SVD

    def __init__(self, ata, atd, verbose=True):
        super().__init__(ata, atd, verbose=verbose)
        self.eigenvalues = None
        self.eigenvectors = None
        self.rank = 0


    def compute(self):
        """ Decomposes AtA and computes one answer per eigenvector

        Raises
        ------
        SingularMatrixException
            If AtA is zero
        """
        if self.verbose:
            print('SVD: decomposing AtA')
        eigenvalues, eigenvectors = scipy.linalg.eigh(self.ata)
        order = np.argsort(eigenvalues)[::-1]
        self.eigenvalues = eigenvalues[order]
        self.eigenvectors = eigenvectors[:, order]
        n = self.n_parameters
        tolerance = n * eps * max(self.eigenvalues[0], 0) if n else 0
        self.rank = int(np.sum(self.eigenvalues > tolerance))
        if self.rank == 0:
            raise SingularMatrixException('AtA has no positive eigenvalue.')
        if self.rank < n:
            warnings.warn('AtA has rank %d < %d: only %d answers computed'\
                          %(self.rank, n, self.rank))
        self.answers = []
        vtatd = self.eigenvectors.T @ self.atd
        m = np.zeros(n)
        for j in range(self.rank):
            m = m + vtatd[j] / self.eigenvalues[j] * self.eigenvectors[:, j]
            self._append(m)
        return self.answers


    def compute_covariance(self, sigma_d, j):
        r""" Posterior covariance of the :math:`j`-th answer

        .. math::

            \sigma_d^2 \sum_{i \le j} \frac{{\bf v}_i {\bf v}_i^T}{\sigma_i^2}
        """
        v = self.eigenvectors[:, :j]
        return sigma_d**2 * (v / self.eigenvalues[:j]) @ v.T


    def get_base_vectors(self):
        """ Eigenvectors of AtA, as columns """
        return self.eigenvectors


    def output_answers(self, unknowns, path):
        """ Writes the answers and the eigenvalues of AtA (to
        `EIGENVALUES_FILE`) in the folder `path`
        """
        super().output_answers(unknowns, path)
        np.savetxt(os.path.join(path, EIGENVALUES_FILE), self.eigenvalues)
