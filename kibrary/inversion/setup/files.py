#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Text files storing the normal equations of an inversion:

- ``ata.lst``: the matrix :math:`A^T A`, one row per line;
- ``atd.lst``: the vector :math:`A^T d`, one entry per line;
- ``dInfo.inf``: the number of independent data and the norms of the
  (weighted) residual and observed vectors, which are needed to evaluate the
  solutions without the waveforms.
"""
import os
from collections import namedtuple
import numpy as np
from kibrary.exceptions import ConfigurationException

ATA_FILE = 'ata.lst'
ATD_FILE = 'atd.lst'
DINFO_FILE = 'dInfo.inf'
UNKNOWNS_FILE = 'unknowns.lst'


class DInfo(namedtuple('DInfo', ['num_independent', 'd_norm', 'obs_norm'])):
    """
    Scalars summarizing the data of an inversion

    Attributes
    ----------
    num_independent : float
        Number of independent data

    d_norm : float
        L2 norm of the weighted residual vector

    obs_norm : float
        L2 norm of the weighted observed vector
    """

    __slots__ = ()

    @property
    def normalized_variance(self):
        return self.d_norm**2 / self.obs_norm**2


def _check_exists(path):
    if not os.path.isfile(path):
        raise FileNotFoundError('File not found: %s'%path)


def write_matrix(matrix, path):
    """ Writes a square matrix, row-major, one row per line """
    np.savetxt(path, np.atleast_2d(matrix), fmt='%.18e')


def read_matrix(path, square=True):
    """ Reads a matrix written by :func:`write_matrix`. If `square` is
    `False`, rectangular matrices are also accepted

    Raises
    ------
    FileNotFoundError
        If `path` does not exist

    ConfigurationException
        If the matrix is not square
    """
    _check_exists(path)
    matrix = np.loadtxt(path, dtype=np.float64, comments='#', ndmin=2)
    if square and matrix.shape[0] != matrix.shape[1]:
        raise ConfigurationException(path, message='Matrix of shape %s is not'\
                                     ' square.'%(matrix.shape,))
    return matrix


def write_vector(vector, path):
    """ Writes a vector, one entry per line """
    np.savetxt(path, np.ravel(vector), fmt='%.18e')


def read_vector(path):
    """ Reads a vector written by :func:`write_vector`. Several entries per
    line are also accepted

    Raises
    ------
    FileNotFoundError
        If `path` does not exist
    """
    _check_exists(path)
    return np.loadtxt(path, dtype=np.float64, comments='#', ndmin=1).ravel()


def write_dinfo(dinfo, path):
    """ Writes the scalars of a :class:`DInfo` """
    with open(path, 'w') as f:
        f.write('# numIndependent dNorm obsNorm\n')
        f.write('%r %r %r\n'%tuple(float(i) for i in dinfo))


def read_dinfo(path):
    """ Reads a file written by :func:`write_dinfo`

    Returns
    -------
    DInfo

    Raises
    ------
    FileNotFoundError
        If `path` does not exist

    ValueError
        If the file does not contain three values
    """
    _check_exists(path)
    values = np.loadtxt(path, dtype=np.float64, comments='#', ndmin=1).ravel()
    if values.size != 3:
        raise ValueError('%s should contain 3 values, %d found'%(path, values.size))
    return DInfo(*values.tolist())


def read_normal_equations(folder):
    """ Reads AtA, Atd and dInfo stored in `folder`

    Returns
    -------
    ata : ndarray of shape (n, n)

    atd : ndarray of shape (n,)

    dinfo : DInfo
    """
    ata = read_matrix(os.path.join(folder, ATA_FILE))
    atd = read_vector(os.path.join(folder, ATD_FILE))
    dinfo = read_dinfo(os.path.join(folder, DINFO_FILE))
    if ata.shape[0] != atd.size:
        raise ConfigurationException(folder, message='AtA (%d) and Atd (%d)'\
                                     ' dimensions differ.'%(ata.shape[0], atd.size))
    return ata, atd, dinfo


def write_normal_equations(ata, atd, dinfo, folder):
    """ Writes AtA, Atd and dInfo to `folder` """
    write_matrix(ata, os.path.join(folder, ATA_FILE))
    write_vector(atd, os.path.join(folder, ATD_FILE))
    write_dinfo(dinfo, os.path.join(folder, DINFO_FILE))
