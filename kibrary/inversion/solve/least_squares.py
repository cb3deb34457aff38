#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Least Squares with Tikhonov Regularization
==========================================

For each damping parameter :math:`\lambda \ge 0`, the solution minimizes
:math:`|{\bf A \cdot m - d}|^2 + \lambda |{\bf T \cdot m} + \eta|^2`, i.e.

.. math::

    {\bf m} = \left( {\bf A}^T {\bf A} + \lambda {\bf T}^T {\bf T} \right)^{-1}
    \cdot \left( {\bf A}^T {\bf d} - \lambda {\bf T}^T \eta \right),

where :math:`\bf T` (identity by default) expresses the combination of
parameters that is driven towards :math:`-\eta` (zero by default). For
:math:`\lambda = 0`, the unregularized solution of the normal equations is
obtained. Each value of :math:`\lambda` is solved independently.

"""
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.solve.base import InverseProblem
from kibrary.inversion.solve.base import inverse_symmetric, solve_symmetric
from kibrary.inversion.solve.methods import InverseMethod
from kibrary.utils import simplest_string


class LeastSquaresMethod(InverseProblem):
    """
    Direct (damped) least-squares solver of the normal equations

    Parameters
    ----------
    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    lambdas : float or list of float
        Damping parameters. One answer is computed for each of them

    t : array-like of shape (k, n), optional
        Regularization operator. Default is the identity

    eta : array-like of shape (k,), optional
        Target of the regularization. Default is zero

    verbose : bool


    Raises
    ------
    ConfigurationException
        If the number of columns of `t` differs from n, the length of `eta`
        from the number of rows of `t`, or some damping is negative
    """

    method = InverseMethod.LS

    def __init__(self, ata, atd, lambdas=0, t=None, eta=None, verbose=True):
        super().__init__(ata, atd, verbose=verbose)
        n = self.n_parameters
        self.lambdas = [float(i) for i in np.atleast_1d(lambdas)]
        if any(lmbda < 0 for lmbda in self.lambdas):
            raise ConfigurationException(message='Damping parameters must be'\
                                         ' non-negative: %s'%self.lambdas)
        if t is None:
            t = np.identity(n)
        t = np.atleast_2d(np.asarray(t, dtype=np.float64))
        if t.shape[1] != n:
            raise ConfigurationException(message='T has %d columns, %d expected.'\
                                         %(t.shape[1], n))
        if eta is None:
            eta = np.zeros(t.shape[0])
        eta = np.asarray(eta, dtype=np.float64).ravel()
        if eta.size != t.shape[0]:
            raise ConfigurationException(message='eta has %d entries, %d expected'\
                                         ' (rows of T).'%(eta.size, t.shape[0]))
        self.t = t
        self.eta = eta
        self._ttt = t.T @ t
        self._tteta = t.T @ eta


    def _lhs(self, lmbda):
        return self.ata + lmbda*self._ttt


    def compute(self):
        """ Solves the normal equations for each damping parameter

        Returns
        -------
        list of ndarray
            One answer per damping parameter

        Raises
        ------
        SingularMatrixException
            If the (damped) system is singular
        """
        self.answers = []
        for lmbda in self.lambdas:
            if self.verbose:
                print('LS: solving with lambda = %s'%simplest_string(lmbda))
            self._append(solve_symmetric(self._lhs(lmbda),
                                         self.atd - lmbda*self._tteta))
        return self.answers


    def compute_covariance(self, sigma_d, j):
        r""" Posterior covariance of the :math:`j`-th answer

        .. math::

            \sigma_d^2 \, {\bf H}^{-1} {\bf A}^T {\bf A} {\bf H}^{-1}, \qquad
            {\bf H} = {\bf A}^T {\bf A} + \lambda_j {\bf T}^T {\bf T}

        Parameters
        ----------
        sigma_d : float

        j : int
            1-indexed position of the damping parameter in :attr:`lambdas`

        Returns
        -------
        ndarray of shape (n, n)
        """
        h_inv = inverse_symmetric(self._lhs(self.lambdas[j - 1]))
        return sigma_d**2 * (h_inv @ self.ata @ h_inv)


    def effective_parameters(self):
        r""" Effective number of parameters
        :math:`tr({\bf H}^{-1} {\bf A}^T {\bf A})` for each damping parameter

        Returns
        -------
        ndarray of shape (n_lambdas,)
        """
        return np.array([np.trace(solve_symmetric(self._lhs(lmbda), self.ata)) \
                         for lmbda in self.lambdas])


    def answer_names(self):
        return ['%s%s'%(self.method.simple_name, simplest_string(lmbda)) \
                for lmbda in self.lambdas[:len(self.answers)]]
