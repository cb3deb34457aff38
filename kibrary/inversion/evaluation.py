#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Evaluation of the Solutions
===========================

The normalized variance of the residual of a solution :math:`\bf m` can be
obtained from the normal equations alone,

.. math::

    \frac{|{\bf d - A \cdot m}|^2}{|{\bf obs}|^2} =
    \frac{|{\bf d}|^2 - 2 {\bf A}^T {\bf d} \cdot {\bf m} +
    {\bf m} \cdot {\bf A}^T {\bf A} \cdot {\bf m}}{|{\bf obs}|^2},

where :math:`\bf d` and :math:`\bf obs` are the weighted residual and observed
vectors. Their norms, together with the number of independent data
:math:`N`, are stored in the dInfo file of each inversion. The trade-off
between fit and number of parameters :math:`k` is measured by the Akaike
Information Criterion

.. math::

    AIC = N/\alpha \, (\log 2\pi + \log \sigma^2 + 1) + 2k + 2,

where the empirical factor :math:`\alpha` accounts for the redundancy of the
samples of a waveform. Several values of :math:`\alpha` can be evaluated at
once.

"""
import os
import numpy as np
from kibrary.inversion.setup.files import DInfo
from kibrary.plotting import plot_evaluation
from kibrary.utils import compute_aic, simplest_string

VARIANCE_FILE = 'variance.txt'
PLOT_FILE = 'plot.png'


def combine_dinfo(dinfos):
    r""" Summary scalars of the union of several inversions

    The numbers of independent data are summed, the norms combined as
    :math:`\sqrt{\sum_i |{\bf d}_i|^2}`. This holds for datasets whose
    residuals are independent; for datasets with different noise levels the
    resulting AIC is an approximation.

    Parameters
    ----------
    dinfos : iterable of DInfo (or of 3-tuples)

    Returns
    -------
    DInfo
    """
    dinfos = [DInfo(*i) for i in dinfos]
    if not dinfos:
        raise ValueError('No dInfo to combine')
    return DInfo(sum(i.num_independent for i in dinfos),
                 float(np.sqrt(sum(i.d_norm**2 for i in dinfos))),
                 float(np.sqrt(sum(i.obs_norm**2 for i in dinfos))))


def aic_file_name(alpha):
    return 'aic_%s.txt'%simplest_string(alpha)


class ResultEvaluation:
    """
    Computes normalized variance and AIC of candidate solutions

    Parameters
    ----------
    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    dinfo : DInfo or tuple
        (num_independent, d_norm, obs_norm)

    verbose : bool
        If `True` (default), progress is displayed in console
    """

    def __init__(self, ata, atd, dinfo, verbose=True):
        self.ata = np.asarray(ata, dtype=np.float64)
        self.atd = np.asarray(atd, dtype=np.float64)
        self.dinfo = DInfo(*dinfo)
        self.verbose = verbose


    @property
    def initial_variance(self):
        return self.dinfo.normalized_variance


    def variance_of(self, m):
        """ Normalized variance of the residual of the model `m` """
        m = np.asarray(m, dtype=np.float64)
        variance = self.dinfo.d_norm**2 - 2*(self.atd @ m) + m @ self.ata @ m
        return variance / self.dinfo.obs_norm**2


    def variances(self, answers):
        """ Normalized variances of the initial model (first entry) and of
        each answer

        Parameters
        ----------
        answers : list of ndarray

        Returns
        -------
        ndarray of shape (len(answers) + 1,)
        """
        return np.array([self.initial_variance] + [self.variance_of(m) for m in answers])


    def aics(self, variances, alpha, n_parameters=None):
        """ AIC of each model

        Parameters
        ----------
        variances : ndarray of shape (k,)

        alpha : float
            Redundancy factor; the number of independent data is
            int(num_independent / alpha)

        n_parameters : array-like of shape (k,), optional
            Number of parameters of each model. Default is 0, 1, ..., k-1

        Returns
        -------
        ndarray of shape (k,)
        """
        variances = np.asarray(variances, dtype=np.float64)
        if n_parameters is None:
            n_parameters = np.arange(variances.size)
        n = int(self.dinfo.num_independent / alpha)
        with np.errstate(divide='ignore'):
            return compute_aic(np.clip(variances, 0, None), n, n_parameters)


    def evaluate(self, answers, max_num, alphas, out_path, plot=True):
        """ Writes variance and AIC of the first `max_num` answers

        The files `VARIANCE_FILE` (lines: i variance variance*100) and, for
        each alpha, aic_<alpha>.txt (lines: i AIC AIC/AIC_0) are written to
        `out_path`, the 0-th line referring to the initial model. A figure
        (`PLOT_FILE`) is also saved if `plot` is `True`

        Parameters
        ----------
        answers : list of ndarray

        max_num : int
            Maximum number of answers evaluated

        alphas : list of float

        out_path : str
            Output folder, created if it does not exist

        plot : bool

        Returns
        -------
        variances : ndarray

        aics : dict
            Maps each alpha to the array of AICs
        """
        os.makedirs(out_path, exist_ok=True)
        answers = list(answers)[:max_num]
        if self.verbose:
            print('Computing variance and AIC of %d answers'%len(answers))
        variances = self.variances(answers)
        index = np.arange(variances.size)
        np.savetxt(os.path.join(out_path, VARIANCE_FILE),
                   np.column_stack((index, variances, variances*100)),
                   fmt=['%d', '%.10e', '%.10e'])
        aics = {}
        for alpha in np.atleast_1d(alphas):
            aic = self.aics(variances, alpha)
            aics[float(alpha)] = aic
            np.savetxt(os.path.join(out_path, aic_file_name(alpha)),
                       np.column_stack((index, aic, aic / aic[0])),
                       fmt=['%d', '%.10e', '%.10e'])
        if plot:
            plot_evaluation(index, variances, aics,
                            xlabel='Number of vectors',
                            show=False,
                            save=os.path.join(out_path, PLOT_FILE))
        return variances, aics


    def evaluate_ls(self, answers, lambdas, alphas, out_path, n_effective=None,
                    plot=True):
        """ Writes variance and AIC of damped least-squares answers, one per
        damping parameter

        The files have the same layout as in :meth:`evaluate`, with the
        damping parameter in place of the index. The AIC is normalized by
        that of the initial model (no parameters)

        Parameters
        ----------
        answers : list of ndarray

        lambdas : list of float
            Damping parameter of each answer

        alphas : list of float

        out_path : str

        n_effective : array-like, optional
            Effective number of parameters of each answer (see
            :meth:`LeastSquaresMethod.effective_parameters`). Default is the
            number of unknowns

        plot : bool

        Returns
        -------
        variances : ndarray of shape (len(lambdas),)

        aics : dict
        """
        os.makedirs(out_path, exist_ok=True)
        answers = list(answers)
        lambdas = np.atleast_1d(np.asarray(lambdas, dtype=np.float64))
        if len(answers) != lambdas.size:
            raise ValueError('%d answers for %d damping parameters'\
                             %(len(answers), lambdas.size))
        if n_effective is None:
            n_effective = np.full(lambdas.size, self.atd.size, dtype=np.float64)
        k = np.concatenate(([0], np.asarray(n_effective, dtype=np.float64)))
        variances = self.variances(answers)
        np.savetxt(os.path.join(out_path, VARIANCE_FILE),
                   np.column_stack((lambdas, variances[1:], variances[1:]*100)),
                   fmt='%.10e', header='lambda variance variance%')
        aics = {}
        for alpha in np.atleast_1d(alphas):
            aic = self.aics(variances, alpha, n_parameters=k)
            aics[float(alpha)] = aic[1:]
            np.savetxt(os.path.join(out_path, aic_file_name(alpha)),
                       np.column_stack((lambdas, aic[1:], aic[1:] / aic[0])),
                       fmt='%.10e', header='lambda AIC AIC/AIC_0')
        if plot:
            plot_evaluation(lambdas, variances[1:], aics,
                            xlabel=r'$\lambda$',
                            logx=bool(np.all(lambdas > 0)),
                            show=False,
                            save=os.path.join(out_path, PLOT_FILE))
        return variances[1:], aics
