#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Data Vector
===========

The data vector :math:`\bf d` of the inversion is obtained by concatenating
the residual waveforms :math:`obs - syn` of all the timewindows used. Each
timewindow occupies a contiguous block of the vector; the position of the
first sample of the :math:`i`\ th block is stored in
:attr:`DVectorBuilder.start_points`.

"""
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.exceptions import DataAlignmentException
from kibrary.exceptions import CorruptWaveformException
from kibrary.waveform.ids import START_TIME_DELAY_LIMIT, WaveformType


def pair_up(basic_ids):
    r""" Pairs observed and synthetic records referring to the same timewindow

    Parameters
    ----------
    basic_ids : iterable of BasicID
        Observed and synthetic records

    Returns
    -------
    obs_ids, syn_ids : list of BasicID
        The :math:`i`\ th observed record is paired with the :math:`i`\ th
        synthetic one. The order of the observed records is preserved

    Raises
    ------
    ConfigurationException
        If the same record is given twice, or a record is neither observed
        nor synthetic

    DataAlignmentException
        If a record has no partner, or the start times of a pair differ by
        `START_TIME_DELAY_LIMIT` or more
    """
    obs_ids, syn_ids = [], []
    seen = set()
    for i in basic_ids:
        if i in seen:
            raise ConfigurationException(i, message='Duplicated record.')
        seen.add(i)
        if i.waveform_type is WaveformType.OBS:
            obs_ids.append(i)
        elif i.waveform_type is WaveformType.SYN:
            syn_ids.append(i)
        else:
            raise ConfigurationException(i, message='Only observed and synthetic'\
                                         ' records can be paired.')

    candidates = {}
    for syn in syn_ids:
        candidates.setdefault(syn.pair_key, []).append(syn)

    paired_syn = []
    for obs in obs_ids:
        matches = candidates.get(obs.pair_key)
        if not matches:
            raise DataAlignmentException(obs, message='No synthetic record'\
                                         ' for an observed one.')
        j = int(np.argmin([abs(obs.start_time - s.start_time) for s in matches]))
        syn = matches.pop(j)
        if abs(obs.start_time - syn.start_time) >= START_TIME_DELAY_LIMIT:
            raise DataAlignmentException(obs, syn, message='Start time mismatch'\
                                         ' (limit: %s s).'%START_TIME_DELAY_LIMIT)
        paired_syn.append(syn)

    unpaired = [s for matches in candidates.values() for s in matches]
    if unpaired:
        raise DataAlignmentException(*unpaired[:5], message='%d synthetic'\
                                     ' record(s) without observed'\
                                     ' counterpart.'%len(unpaired))
    return obs_ids, paired_syn


class DVectorBuilder:
    r"""
    Builds the (weighted) residual vector :math:`\bf d = obs - syn`

    Parameters
    ----------
    basic_ids : iterable of BasicID
        Observed and synthetic records, all carrying waveform data

    verbose : bool
        If `True` (default), information about the timewindows is displayed
        in console


    Attributes
    ----------
    obs_ids, syn_ids : list of BasicID
        Paired records, one per timewindow

    n_timewindow : int
        Number of timewindows

    start_points : ndarray of shape (n_timewindow,)
        Index of the first sample of each timewindow in the full vector

    npts_array : ndarray of shape (n_timewindow,)
        Number of samples of each timewindow

    total_npts : int
        Length of the full vector

    num_independent : float
        Number of independent data: the sum over timewindows of
        npts / (min_period * sampling_hz); npts is used when the minimum
        period of a record is not known


    Raises
    ------
    ConfigurationException
        If some record lacks waveform data, or is duplicated

    DataAlignmentException
        If records cannot be paired (see :func:`pair_up`)

    CorruptWaveformException
        If an observed waveform is zero or not finite
    """

    def __init__(self, basic_ids, verbose=True):
        basic_ids = list(basic_ids)
        lacking = [i for i in basic_ids if not i.contains_data]
        if lacking:
            raise ConfigurationException(*lacking[:5], message='%d input record(s)'\
                                         ' without waveform data.'%len(lacking))
        self.verbose = verbose
        self.obs_ids, self.syn_ids = pair_up(basic_ids)
        self.n_timewindow = len(self.obs_ids)
        self._index = {}
        for i, (obs, syn) in enumerate(zip(self.obs_ids, self.syn_ids)):
            self._index.setdefault((WaveformType.OBS, obs.window_key), []).append(i)
            self._index.setdefault((WaveformType.SYN, syn.window_key), []).append(i)
        for obs in self.obs_ids:
            if obs.data.size == 0 or not np.all(np.isfinite(obs.data)) \
                    or np.max(np.abs(obs.data)) == 0:
                raise CorruptWaveformException(obs)
        self.npts_array = np.array([i.npts for i in self.obs_ids], dtype=int)
        self.start_points = np.zeros(self.n_timewindow, dtype=int)
        if self.n_timewindow:
            self.start_points[1:] = np.cumsum(self.npts_array)[:-1]
        self.total_npts = int(np.sum(self.npts_array))
        self.num_independent = self._compute_num_independent()
        if verbose:
            print('%d timewindow%s used, %d points in total'%(self.n_timewindow,
                  '' if self.n_timewindow==1 else 's', self.total_npts))


    def _compute_num_independent(self):
        num = 0.
        for obs in self.obs_ids:
            if obs.min_period is None or obs.min_period <= 0:
                num += obs.npts
            else:
                num += obs.npts / obs.min_period / obs.sampling_hz
        return num


    def which_timewindow(self, basic_id):
        """ Index of the timewindow corresponding to `basic_id`

        Observed records are looked up among the observed records of the
        builder; synthetic records and partial derivatives among the
        synthetic ones.

        Parameters
        ----------
        basic_id : BasicID or PartialID

        Returns
        -------
        int
            Index of the timewindow, or -1 if there is none
        """
        wtype = WaveformType.OBS if basic_id.waveform_type is WaveformType.OBS \
                else WaveformType.SYN
        ids = self.obs_ids if wtype is WaveformType.OBS else self.syn_ids
        for i in self._index.get((wtype, basic_id.window_key), []):
            if abs(basic_id.start_time - ids[i].start_time) < START_TIME_DELAY_LIMIT:
                return i
        return -1


    def npts_of_window(self, i):
        return int(self.npts_array[i])


    def obs_vec(self, i):
        r""" Copy of the observed waveform of the :math:`i`\ th timewindow """
        return np.array(self.obs_ids[i].data)


    def syn_vec(self, i):
        r""" Copy of the synthetic waveform of the :math:`i`\ th timewindow """
        return np.array(self.syn_ids[i].data)


    def compose(self, vectors):
        r""" Concatenates one vector per timewindow into the full vector

        Parameters
        ----------
        vectors : sequence of array-like
            The :math:`i`\ th vector must have :attr:`npts_array` [i] entries

        Returns
        -------
        ndarray of shape (total_npts,)

        Raises
        ------
        ValueError
            If the number or the lengths of the vectors are not consistent
            with the timewindows
        """
        if len(vectors) != self.n_timewindow:
            raise ValueError('%d vectors given, %d timewindows expected'\
                             %(len(vectors), self.n_timewindow))
        v = np.zeros(self.total_npts)
        for i, vec in enumerate(vectors):
            vec = np.asarray(vec, dtype=np.float64)
            if vec.shape != (self.npts_array[i],):
                raise ValueError('Vector %d has shape %s, (%d,) expected'\
                                 %(i, vec.shape, self.npts_array[i]))
            start = self.start_points[i]
            v[start : start+self.npts_array[i]] = vec
        return v


    def decompose(self, vector):
        """ Splits the full vector into one vector per timewindow

        Parameters
        ----------
        vector : array-like of shape (total_npts,)

        Returns
        -------
        list of ndarray

        Raises
        ------
        ValueError
            If the length of `vector` differs from :attr:`total_npts`
        """
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (self.total_npts,):
            raise ValueError('Vector of shape %s, (%d,) expected'\
                             %(vector.shape, self.total_npts))
        return [vector[s : s+n].copy() for s, n in zip(self.start_points,
                                                        self.npts_array)]


    def _full(self, records, weighting=None):
        vectors = [i.data for i in records]
        if weighting is not None:
            weights = _weights_of(weighting, self.n_timewindow)
            vectors = [w * vec for w, vec in zip(weights, vectors)]
        return self.compose(vectors)


    def build_with_weight(self, weighting):
        """ Weighted residual vector

        Parameters
        ----------
        weighting : Weighting or array-like of shape (n_timewindow,)
            Weight of each timewindow

        Returns
        -------
        ndarray of shape (total_npts,)
            :math:`w_i (obs_i - syn_i)` for each timewindow
        """
        weights = _weights_of(weighting, self.n_timewindow)
        return self.compose([w * (obs.data - syn.data) for w, obs, syn in \
                             zip(weights, self.obs_ids, self.syn_ids)])


    def full_obs_vec(self):
        return self._full(self.obs_ids)


    def full_syn_vec(self):
        return self._full(self.syn_ids)


    def full_obs_vec_with_weight(self, weighting):
        return self._full(self.obs_ids, weighting)


    def full_syn_vec_with_weight(self, weighting):
        return self._full(self.syn_ids, weighting)


def _weights_of(weighting, n_timewindow):
    weights = np.asarray(getattr(weighting, 'weights', weighting), dtype=np.float64)
    if weights.shape != (n_timewindow,):
        raise ValueError('%s weights given, %d expected'%(weights.shape,
                                                          n_timewindow))
    return weights
