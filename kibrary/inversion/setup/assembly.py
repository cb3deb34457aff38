#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Normal Equations
================

The number of rows of :math:`\bf A` (the total number of samples of all the
timewindows) is typically much larger than the number of unknowns. Instead of
materializing :math:`\bf A`, :class:`MatrixAssembly` accumulates

.. math::

    {\bf A}^T {\bf A} = \sum_k {\bf A}_k^T {\bf A}_k, \qquad
    {\bf A}^T {\bf d} = \sum_k {\bf A}_k^T {\bf d}_k

one timewindow :math:`k` at a time.

"""
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.setup.amatrix import AMatrixBuilder
from kibrary.inversion.setup.dvector import DVectorBuilder
from kibrary.inversion.setup.files import DInfo, write_normal_equations
from kibrary.inversion.setup.weighting import WeightingHandler
from kibrary.waveform.io import read_basic_ids, read_partial_ids


class MatrixAssembly:
    """
    Builds :math:`A^T A` and :math:`A^T d` from waveforms and partial
    derivatives

    Parameters
    ----------
    basic_ids : iterable of BasicID
        Observed and synthetic records, carrying data

    partial_ids : iterable of PartialID
        Partial derivatives, carrying data

    unknowns : list of UnknownParameter

    weighting_handler : WeightingHandler, optional
        If None, all the weights are 1

    require_all_partials : bool
        See :class:`AMatrixBuilder`

    reuse_ata : ndarray of shape (n, n), optional
        Previously computed :math:`A^T A`. If given, only :math:`A^T d` is
        computed

    verbose : bool
        If `True` (default), progress is displayed in console


    Attributes
    ----------
    dvector : DVectorBuilder

    weighting : Weighting

    amatrix : AMatrixBuilder

    d : ndarray of shape (total_npts,)
        Weighted residual vector

    obs : ndarray of shape (total_npts,)
        Weighted observed vector

    ata : ndarray of shape (n, n)

    atd : ndarray of shape (n,)

    dinfo : DInfo


    Raises
    ------
    ConfigurationException
        If `reuse_ata` is not square or its dimension differs from the number
        of unknowns
    """

    def __init__(self, basic_ids, partial_ids, unknowns, weighting_handler=None,
                 require_all_partials=False, reuse_ata=None, verbose=True):
        self.unknowns = list(unknowns)
        self.verbose = verbose
        n = len(self.unknowns)
        if reuse_ata is not None:
            reuse_ata = np.array(reuse_ata, dtype=np.float64)
            if reuse_ata.ndim != 2 or reuse_ata.shape[0] != reuse_ata.shape[1]:
                raise ConfigurationException(message='AtA of shape %s is not'\
                                             ' square.'%(reuse_ata.shape,))
            if reuse_ata.shape[0] != n:
                raise ConfigurationException(message='AtA dimension (%d) differs'\
                                             ' from the number of unknowns (%d).'\
                                             %(reuse_ata.shape[0], n))
        if verbose:
            print('Setting data for d vector')
        self.dvector = DVectorBuilder(basic_ids, verbose=verbose)
        if weighting_handler is None:
            weighting_handler = WeightingHandler.identity()
        if verbose:
            print('Setting weighting')
        self.weighting = weighting_handler.weigh(self.dvector)
        if verbose:
            print('Reading partial derivatives')
        self.amatrix = AMatrixBuilder(partial_ids, self.unknowns, self.dvector,
                                      require_all_partials=require_all_partials,
                                      verbose=verbose)
        self.d = self.dvector.build_with_weight(self.weighting)
        self.obs = self.dvector.full_obs_vec_with_weight(self.weighting)

        if verbose:
            print('Assembling %s'%('Atd' if reuse_ata is not None else 'AtA and Atd'))
        ata = np.zeros((n, n)) if reuse_ata is None else None
        atd = np.zeros(n)
        for k, block in self.amatrix.iter_blocks(self.weighting):
            start = self.dvector.start_points[k]
            atd += block.T @ self.d[start : start+block.shape[0]]
            if ata is not None:
                ata += block.T @ block
        self.ata = reuse_ata if ata is None else ata
        self.atd = atd
        self.ata.setflags(write=False)
        self.atd.setflags(write=False)
        self.dinfo = DInfo(self.dvector.num_independent,
                           float(np.linalg.norm(self.d)),
                           float(np.linalg.norm(self.obs)))


    @classmethod
    def from_files(cls, basic_path, partial_path, unknowns, weighting_handler=None,
                   require_all_partials=False, reuse_ata=None, verbose=True):
        """ Reads the records from ID files (see :mod:`kibrary.waveform.io`)
        and assembles the normal equations

        Parameters
        ----------
        basic_path, partial_path : str
            Paths to the basic and partial ID files

        unknowns, weighting_handler, require_all_partials, reuse_ata, verbose :
            See :class:`MatrixAssembly`

        Returns
        -------
        MatrixAssembly
        """
        if verbose:
            print('Reading %s'%basic_path)
        basic_ids = read_basic_ids(basic_path)
        if verbose:
            print('Reading %s'%partial_path)
        partial_ids = read_partial_ids(partial_path)
        return cls(basic_ids, partial_ids, unknowns,
                   weighting_handler=weighting_handler,
                   require_all_partials=require_all_partials,
                   reuse_ata=reuse_ata,
                   verbose=verbose)


    @property
    def num_independent(self):
        return self.dinfo.num_independent


    @property
    def normalized_variance(self):
        """ Normalized variance of the residual of the initial model """
        return self.dinfo.normalized_variance


    def build_a(self):
        """ Full weighted matrix :math:`A` (memory intensive) """
        return self.amatrix.build_with_weight(self.weighting)


    def write(self, folder):
        """ Writes ata.lst, atd.lst and dInfo.inf to `folder` """
        write_normal_equations(self.ata, self.atd, self.dinfo, folder)
