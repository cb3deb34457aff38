#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Sensitivity Matrix
==================

Each column of :math:`\bf A` corresponds to an unknown parameter, each block of
rows to a timewindow of the data vector (see :class:`DVectorBuilder`). The
entries of the block :math:`k` in column :math:`j` are

.. math::

    A_{kj} = w_k \, s_j \, \frac{\partial syn_k}{\partial m_j},

where :math:`w_k` is the weight of the timewindow and :math:`s_j` the
weighting coefficient (`size`) of the unknown parameter.

Partial derivatives that do not refer to any of the unknowns, or to any of the
timewindows, are ignored. Where no partial derivative is available, the entries
of :math:`\bf A` are zero, unless `require_all_partials` is `True`.

"""
import warnings
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.voxel.parameters import ParameterType
from kibrary.inversion.setup.dvector import _weights_of


class AMatrixBuilder:
    """
    Builds the (weighted) sensitivity matrix

    Parameters
    ----------
    partial_ids : iterable of PartialID
        Partial derivatives, carrying waveform data

    unknowns : list of UnknownParameter
        Unknown parameters, in the order of the columns

    dvector : DVectorBuilder
        Layout of the rows

    require_all_partials : bool
        If `True`, each timewindow must have a partial derivative with
        respect to each VOXEL and LAYER unknown. Default is `False`, in which
        case missing partial derivatives leave zeros in the matrix

    verbose : bool
        If `True` (default), information about the partials is displayed


    Attributes
    ----------
    columns : dict
        Maps the key of each unknown to its column

    n_partials_used : int
        Number of partial derivatives entering the matrix


    Raises
    ------
    ConfigurationException
        If the unknowns contain duplicates, a used partial lacks data, or has
        a length different from its timewindow, two partials refer to the same
        timewindow and unknown, or `require_all_partials` is `True` and some
        partials are missing
    """

    def __init__(self, partial_ids, unknowns, dvector, require_all_partials=False,
                 verbose=True):
        self.unknowns = list(unknowns)
        self.dvector = dvector
        self.verbose = verbose
        self.columns = {}
        for j, unknown in enumerate(self.unknowns):
            if unknown.key in self.columns:
                raise ConfigurationException(unknown, message='Duplicated'\
                                             ' unknown parameter.')
            self.columns[unknown.key] = j
        self.sizes = np.array([u.size for u in self.unknowns], dtype=np.float64)
        self._partials = [dict() for k in range(dvector.n_timewindow)]
        self.n_partials_used = 0
        for partial in partial_ids:
            self._add(partial)
        if verbose:
            print('%d partial derivatives used for %d unknowns'%(self.n_partials_used,
                                                               len(self.unknowns)))
        missing = self.missing_partials()
        if missing:
            if require_all_partials:
                raise ConfigurationException(*missing[:5], message='%d partial'\
                                             ' derivatives missing.'%len(missing))
            if verbose:
                print('%d partial derivatives missing: zeros are used'%len(missing))


    def column_of(self, partial_id):
        """ Column of the unknown that `partial_id` refers to, or -1 """
        return self.columns.get(partial_id.parameter_key, -1)


    def _add(self, partial):
        j = self.column_of(partial)
        if j < 0:
            return
        k = self.dvector.which_timewindow(partial)
        if k < 0:
            return
        if not partial.contains_data:
            raise ConfigurationException(partial, message='Partial without'\
                                         ' waveform data.')
        if partial.data.size != self.dvector.npts_of_window(k):
            raise ConfigurationException(partial, message='Partial length (%d)'\
                                         ' does not match window length (%d).'\
                                         %(partial.data.size,
                                           self.dvector.npts_of_window(k)))
        if j in self._partials[k]:
            raise ConfigurationException(partial, message='Duplicated partial'\
                                         ' for the same timewindow and unknown.')
        if np.any(np.isnan(partial.data)):
            warnings.warn('Partial contains NaN: %s'%partial)
        self._partials[k][j] = partial.data
        self.n_partials_used += 1


    def missing_partials(self):
        """ Pairs (timewindow index, unknown) of VOXEL and LAYER unknowns
        lacking a partial derivative
        """
        physical = [j for j, u in enumerate(self.unknowns) \
                    if u.parameter_type in (ParameterType.VOXEL, ParameterType.LAYER)]
        return [(k, self.unknowns[j]) for k in range(self.dvector.n_timewindow) \
                for j in physical if j not in self._partials[k]]


    def block(self, k, weight=1.):
        """ Rows of the matrix corresponding to the :math:`k`-th timewindow

        Parameters
        ----------
        k : int
            Index of the timewindow

        weight : float
            Weight of the timewindow

        Returns
        -------
        ndarray of shape (npts_k, n_unknowns)
        """
        block = np.zeros((self.dvector.npts_of_window(k), len(self.unknowns)))
        for j, data in self._partials[k].items():
            block[:, j] = weight * self.sizes[j] * data
        return block


    def iter_blocks(self, weighting):
        """ Yields the index and the weighted block of each timewindow

        Parameters
        ----------
        weighting : Weighting or array-like of shape (n_timewindow,)
        """
        weights = _weights_of(weighting, self.dvector.n_timewindow)
        for k in range(self.dvector.n_timewindow):
            yield k, self.block(k, weights[k])


    def build_with_weight(self, weighting):
        """ Full weighted matrix

        Parameters
        ----------
        weighting : Weighting or array-like of shape (n_timewindow,)
            The same weights used for the data vector

        Returns
        -------
        ndarray of shape (total_npts, n_unknowns)
        """
        a = np.zeros((self.dvector.total_npts, len(self.unknowns)))
        for k, block in self.iter_blocks(weighting):
            start = self.dvector.start_points[k]
            a[start : start+block.shape[0]] = block
        return a
