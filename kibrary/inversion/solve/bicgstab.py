#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Stabilized bi-conjugate gradient solver, via
:func:`scipy.sparse.linalg.bicgstab`. Each iterate is kept as an answer.
"""
import warnings
import numpy as np
import scipy.sparse.linalg
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.solve.base import InverseProblem, inverse_symmetric
from kibrary.inversion.solve.methods import InverseMethod


class BiCGStabMethod(InverseProblem):
    """
    BiCGStab solver of the normal equations

    Parameters
    ----------
    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    m0 : array-like of shape (n,), optional
        Initial model. Default is zero

    rtol : float
        Relative tolerance of the residual. Default is 1e-10

    maxiter : int, optional
        Maximum number of iterations. Default is the number of parameters


    Attributes
    ----------
    info : int
        Convergence flag of :func:`scipy.sparse.linalg.bicgstab` (0 means
        convergence)
    """

    method = InverseMethod.BCGS

    def __init__(self, ata, atd, m0=None, rtol=1e-10, maxiter=None, verbose=True):
        super().__init__(ata, atd, verbose=verbose)
        if m0 is None:
            m0 = np.zeros(self.n_parameters)
        m0 = np.asarray(m0, dtype=np.float64)
        if m0.shape != (self.n_parameters,):
            raise ConfigurationException(message='Initial model of shape %s,'\
                                         ' (%d,) expected.'%(m0.shape, self.n_parameters))
        self.m0 = m0
        self.rtol = rtol
        self.maxiter = self.n_parameters if maxiter is None else int(maxiter)
        self.info = None


    def compute(self):
        """ Iterates until convergence or `maxiter` iterations """
        self.answers = []
        if self.verbose:
            print('BCGS: iterating (at most %d times)'%self.maxiter)
        m, self.info = scipy.sparse.linalg.bicgstab(self.ata, self.atd,
                                                    x0=self.m0.copy(),
                                                    rtol=self.rtol,
                                                    maxiter=self.maxiter,
                                                    callback=self._append)
        if self.info != 0:
            warnings.warn('BCGS did not converge (info = %d)'%self.info)
        if not self.answers or not np.array_equal(self.answers[-1], m):
            self._append(m)
        return self.answers


    def compute_covariance(self, sigma_d, j):
        r""" :math:`\sigma_d^2 ({\bf A}^T {\bf A})^{-1}` """
        return sigma_d**2 * inverse_symmetric(self.ata)
