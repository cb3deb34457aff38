#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ID dataset files: pickled lists of :class:`kibrary.waveform.ids.BasicID`
(``basic.pkl``) or :class:`kibrary.waveform.ids.PartialID`
(``partial.pkl``), together with their waveforms.
"""
import os
from kibrary.utils import load_pickle, save_pickle
from kibrary.waveform.ids import BasicID, PartialID, WaveformType


def write_basic_ids(ids, path):
    """ Saves observed and synthetic records (with their data) to `path`

    Parameters
    ----------
    ids : iterable of BasicID

    path : str
    """
    ids = list(ids)
    for i in ids:
        if not isinstance(i, BasicID) or isinstance(i, PartialID):
            raise TypeError('Not a BasicID: %r'%(i,))
    save_pickle(path, ids)


def write_partial_ids(ids, path):
    """ Saves partial-derivative records (with their data) to `path`

    Parameters
    ----------
    ids : iterable of PartialID

    path : str
    """
    ids = list(ids)
    for i in ids:
        if not isinstance(i, PartialID):
            raise TypeError('Not a PartialID: %r'%(i,))
    save_pickle(path, ids)


def _read(path, cls):
    if not os.path.isfile(path):
        raise FileNotFoundError('ID file not found: %s'%path)
    ids = load_pickle(path)
    for i in ids:
        if not isinstance(i, cls):
            raise TypeError('%s contains a record that is not a %s'\
                            %(path, cls.__name__))
    return ids


def read_basic_ids(path, with_data=True):
    """ Reads the records saved by :func:`write_basic_ids`

    Parameters
    ----------
    path : str

    with_data : bool
        If False, the waveforms are dropped

    Returns
    -------
    list of BasicID

    Raises
    ------
    FileNotFoundError
        If `path` does not exist
    """
    ids = _read(path, BasicID)
    return ids if with_data else [i.without_data() for i in ids]


def read_partial_ids(path, with_data=True):
    """ Reads the records saved by :func:`write_partial_ids`

    Parameters
    ----------
    path : str

    with_data : bool
        If False, the waveforms are dropped

    Returns
    -------
    list of PartialID
    """
    ids = _read(path, PartialID)
    return ids if with_data else [i.without_data() for i in ids]


def split_basic_ids(ids):
    """ Separates observed and synthetic records

    Returns
    -------
    obs_ids, syn_ids : list of BasicID
    """
    obs_ids = [i for i in ids if i.waveform_type is WaveformType.OBS]
    syn_ids = [i for i in ids if i.waveform_type is WaveformType.SYN]
    return obs_ids, syn_ids
