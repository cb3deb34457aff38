#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""


"""

import os
import pickle
from datetime import datetime
import numpy as np
from obspy.geodetics import locations2degrees


def epicentral_distance(lat1, lon1, lat2, lon2):
    """
    Calculates the epicentral distance (in degrees) between coordinate points
    (in degrees). This function calls directly the obspy `locations2degrees`,
    which already supports array-like input.

    Parameters
    ----------
    lat1, lon1, lat2, lon2 : float or array-like of shape (n,)
        Coordinates of the points on the Earth's surface, in degrees.

    Returns
    -------
    Epicentral distance (in degrees)
        If the input is an array (or list) of coordinates, an array of
        distances is returned
    """
    return locations2degrees(lat1, lon1, lat2, lon2)


def compute_variance(d, obs):
    """ Normalized variance of a residual waveform

    Parameters
    ----------
    d : ndarray (n,)
        Residual waveform

    obs : ndarray (n,)
        Observed waveform

    Returns
    -------
    float
        :math:`|d|^2 / |obs|^2`
    """
    d = np.asarray(d, dtype=np.float64)
    obs = np.asarray(obs, dtype=np.float64)
    return np.dot(d, d) / np.dot(obs, obs)


def compute_aic(variance, n, k):
    """ Akaike Information Criterion of a model

    Parameters
    ----------
    variance : float or ndarray
        Normalized variance of the residual

    n : int
        Number of independent data

    k : int or ndarray
        Number of model parameters

    Returns
    -------
    float or ndarray
        :math:`n (\\log 2\\pi + \\log \\sigma^2 + 1) + 2k + 2`
    """
    return n * (np.log(2*np.pi) + np.log(variance) + 1) + 2*np.asarray(k) + 2


def simplest_string(value):
    """ Shortest positional representation of a real number, used in file
    names (e.g., 0.0 -> '0', 2.50 -> '2.5', 1e-05 -> '0.00001')

    Parameters
    ----------
    value : float

    Returns
    -------
    str
    """
    return np.format_float_positional(float(value), trim='-')


def create_output_folder(workdir, prefix, tag=None, append_date=True):
    """ Creates a new folder named prefix[_tag][_date] inside `workdir`

    Parameters
    ----------
    workdir : str
        Parent directory

    prefix : str
        First part of the folder name

    tag : str, optional
        Included in the folder name when not None

    append_date : bool
        If `True` (default), a time stamp (yyyymmddHHMMSS) is appended

    Returns
    -------
    str
        Absolute path of the created folder

    Raises
    ------
    FileExistsError
        If the folder already exists
    """
    name = prefix
    if tag:
        name += '_%s'%tag
    if append_date:
        name += '_%s'%datetime.now().strftime('%Y%m%d%H%M%S')
    path = os.path.abspath(os.path.join(workdir, name))
    os.makedirs(path)
    return path


def load_pickle(path):
    """ Loads a .pickle file

    Parameters
    ----------
    path : str
        Absolute path to the file

    Returns
    -------
    Object contained in the .pickle file
    """
    with open(path, 'rb') as f:
        return pickle.load(f)


def save_pickle(file, obj):
    """ Saves an object to a .pickle file

    Parameters
    ----------
    file : str
        Absolute path to the resulting file

    obj : python object
        Object to be saved (see documentation on the pickle module to know
        more on which Python objects can be stored into .pickle files)
    """
    with open(file, 'wb') as f:
        pickle.dump(obj, f)


