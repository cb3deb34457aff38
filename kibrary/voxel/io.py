#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Reading and writing of unknown-parameter and known-parameter files.

An unknown-parameter file lists one unknown per line (see
:func:`kibrary.voxel.parameters.parameter_from_line`); a known-parameter file
has the same lines followed by the value of the parameter. Empty lines and
everything following a `#` are ignored.
"""
import os
import warnings
import numpy as np
from kibrary.voxel.parameters import parameter_from_line


def _strip_comment(line):
    return line.split('#', 1)[0].strip()


def read_unknowns(path):
    """ Reads an unknown-parameter file

    Parameters
    ----------
    path : str

    Returns
    -------
    list of UnknownParameter
        In the order of the file. Duplicated parameters are discarded (only
        the first occurrence is kept) and a warning is issued

    Raises
    ------
    FileNotFoundError
        If `path` does not exist
    """
    if not os.path.isfile(path):
        raise FileNotFoundError('Unknown-parameter file not found: %s'%path)
    unknowns = []
    seen = set()
    with open(path) as f:
        for line in f:
            line = _strip_comment(line)
            if not line:
                continue
            parameter = parameter_from_line(line)
            if parameter in seen:
                warnings.warn('Duplicated parameter ignored: %s'%line)
                continue
            seen.add(parameter)
            unknowns.append(parameter)
    return unknowns


def write_unknowns(unknowns, path):
    """ Writes the unknown parameters to `path`, one per line """
    with open(path, 'w') as f:
        for parameter in unknowns:
            f.write('%s\n'%parameter.to_line())


def read_known(path):
    """ Reads a known-parameter file

    Parameters
    ----------
    path : str

    Returns
    -------
    parameters : list of UnknownParameter

    values : ndarray of shape (n,)

    Raises
    ------
    FileNotFoundError
        If `path` does not exist

    ValueError
        If a line lacks the value field
    """
    if not os.path.isfile(path):
        raise FileNotFoundError('Known-parameter file not found: %s'%path)
    parameters = []
    values = []
    seen = set()
    with open(path) as f:
        for line in f:
            line = _strip_comment(line)
            if not line:
                continue
            head, _, value = line.rpartition(' ')
            if not head:
                raise ValueError('Invalid known-parameter line: %s'%line)
            parameter = parameter_from_line(head)
            if parameter in seen:
                warnings.warn('Duplicated parameter ignored: %s'%line)
                continue
            seen.add(parameter)
            parameters.append(parameter)
            values.append(float(value))
    return parameters, np.array(values, dtype=np.float64)


def write_known(unknowns, values, path):
    """ Writes each unknown parameter followed by its value

    Parameters
    ----------
    unknowns : list of UnknownParameter

    values : array-like of shape (n,)

    path : str

    Raises
    ------
    ValueError
        If `unknowns` and `values` have different lengths
    """
    values = np.asarray(values, dtype=np.float64).ravel()
    if len(unknowns) != values.size:
        raise ValueError('Number of parameters (%d) and of values (%d) differ'\
                         %(len(unknowns), values.size))
    with open(path, 'w') as f:
        for parameter, value in zip(unknowns, values):
            f.write('%s %s\n'%(parameter.to_line(), repr(float(value))))
