#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Conjugate Gradient
==================

Starting from :math:`{\bf m}_0` (zero by default), the conjugate gradient
method builds a sequence of search directions :math:`{\bf p}_k`, mutually
orthogonal with respect to :math:`{\bf A}^T {\bf A}`,

.. math::

    {\bf r}_0 = {\bf A}^T {\bf d} - {\bf A}^T {\bf A} \cdot {\bf m}_0, \qquad
    {\bf p}_0 = {\bf r}_0,

    \alpha_k = \frac{{\bf p}_k \cdot {\bf r}_k}{{\bf p}_k \cdot
    {\bf A}^T {\bf A} \cdot {\bf p}_k}, \qquad
    {\bf m}_{k+1} = {\bf m}_k + \alpha_k {\bf p}_k, \qquad
    {\bf r}_{k+1} = {\bf r}_k - \alpha_k {\bf A}^T {\bf A} \cdot {\bf p}_k,

    \beta_k = - \frac{{\bf r}_{k+1} \cdot {\bf A}^T {\bf A} \cdot {\bf p}_k}
    {{\bf p}_k \cdot {\bf A}^T {\bf A} \cdot {\bf p}_k}, \qquad
    {\bf p}_{k+1} = {\bf r}_{k+1} + \beta_k {\bf p}_k.

The :math:`k`\ th answer is :math:`{\bf m}_k`; in exact arithmetic, the
:math:`n`\ th one solves the normal equations. Since the orthogonality of the
search directions degrades in floating point, the first answers are usually
the most useful ones for ill-conditioned problems.

"""
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.solve.base import InverseProblem
from kibrary.inversion.solve.methods import InverseMethod


class ConjugateGradientMethod(InverseProblem):
    """
    Conjugate gradient solver of the normal equations

    Parameters
    ----------
    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    m0 : array-like of shape (n,), optional
        Initial model. Default is zero

    verbose : bool


    Attributes
    ----------
    directions : list of ndarray
        Search directions :math:`p_k`, available after :meth:`compute`

    alphas : list of float
        Step lengths
    """

    method = InverseMethod.CG

    def __init__(self, ata, atd, m0=None, verbose=True):
        super().__init__(ata, atd, verbose=verbose)
        if m0 is None:
            m0 = np.zeros(self.n_parameters)
        m0 = np.asarray(m0, dtype=np.float64)
        if m0.shape != (self.n_parameters,):
            raise ConfigurationException(message='Initial model of shape %s,'\
                                         ' (%d,) expected.'%(m0.shape, self.n_parameters))
        self.m0 = m0.copy()
        self.m0.setflags(write=False)
        self.directions = []
        self.alphas = []
        self._pap = []


    def compute(self, n_answers=None):
        """ Performs the iterations

        Parameters
        ----------
        n_answers : int, optional
            Number of iterations (and answers). Default is the number of
            parameters

        Returns
        -------
        list of ndarray
            The answers
        """
        n = self.n_parameters if n_answers is None else int(n_answers)
        self.answers, self.directions, self.alphas, self._pap = [], [], [], []
        ata = self.ata
        m = self.m0.copy()
        r = self.atd - ata @ m
        p = r.copy()
        for k in range(n):
            ap = ata @ p
            pap = float(p @ ap)
            if pap == 0 or not np.isfinite(pap):
                if self.verbose:
                    print('CG converged after %d iterations'%k)
                for i in range(k, n):
                    self._append(m)
                break
            alpha = float(p @ r) / pap
            m = m + alpha*p
            r = r - alpha*ap
            beta = -float(r @ ap) / pap
            self.directions.append(p)
            self.alphas.append(alpha)
            self._pap.append(pap)
            self._append(m)
            p = r + beta*p
        if self.verbose:
            print('CG: %d answers computed'%len(self.answers))
        return self.answers


    def compute_covariance(self, sigma_d, j):
        r""" Posterior covariance of the :math:`j`-th answer

        .. math::

            \sigma_d^2 \sum_{i \le j} \frac{{\bf p}_i {\bf p}_i^T}
            {{\bf p}_i \cdot {\bf A}^T {\bf A} \cdot {\bf p}_i}

        Parameters
        ----------
        sigma_d : float
            Standard deviation of the data noise

        j : int
            Number of search directions used

        Returns
        -------
        ndarray of shape (n, n)
        """
        covariance = np.zeros((self.n_parameters, self.n_parameters))
        for p, pap in zip(self.directions[:j], self._pap[:j]):
            covariance += np.outer(p, p) / pap
        return sigma_d**2 * covariance


    def get_base_vectors(self):
        """ Search directions, as the columns of an array """
        if not self.directions:
            return np.zeros((self.n_parameters, 0))
        return np.column_stack(self.directions)
