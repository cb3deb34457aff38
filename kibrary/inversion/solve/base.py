#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base class of the solvers of the normal equations.
"""
import os
import warnings
import numpy as np
import scipy.linalg
from kibrary.exceptions import ConfigurationException
from kibrary.exceptions import SingularMatrixException
from kibrary.voxel.io import write_known


def _readonly(array):
    array = np.array(array, dtype=np.float64)
    array.setflags(write=False)
    return array


class InverseProblem:
    r"""
    Solver of the normal equations :math:`{\bf A}^T {\bf A} \cdot {\bf m} =
    {\bf A}^T \cdot {\bf d}`. Subclasses implement :meth:`compute`, which
    fills the list of candidate solutions (answers), and
    :meth:`compute_covariance`.

    Parameters
    ----------
    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    verbose : bool
        If `True` (default), progress is displayed in console


    Attributes
    ----------
    ata, atd : ndarray
        Read-only copies of the inputs

    answers : list of ndarray
        Read-only candidate solutions, available after :meth:`compute`


    Raises
    ------
    ConfigurationException
        If `ata` is not square or its dimension differs from that of `atd`
    """

    method = None

    def __init__(self, ata, atd, verbose=True):
        ata = np.asarray(ata, dtype=np.float64)
        atd = np.asarray(atd, dtype=np.float64)
        if ata.ndim != 2 or ata.shape[0] != ata.shape[1]:
            raise ConfigurationException(message='AtA of shape %s is not'\
                                         ' square.'%(ata.shape,))
        if atd.ndim != 1 or atd.size != ata.shape[0]:
            raise ConfigurationException(message='AtA (%s) and Atd (%s)'\
                                         ' dimensions differ.'%(ata.shape, atd.shape))
        self.ata = _readonly(ata)
        self.atd = _readonly(atd)
        self.answers = []
        self.verbose = verbose


    def __len__(self):
        return len(self.answers)


    @property
    def n_parameters(self):
        return self.atd.size


    def compute(self):
        raise NotImplementedError


    def compute_covariance(self, sigma_d, j):
        raise NotImplementedError


    def _append(self, answer):
        self.answers.append(_readonly(answer))


    def get_answer_vector(self, i):
        """ The :math:`i`-th candidate solution (1-indexed)

        Raises
        ------
        IndexError
            If :meth:`compute` has not been called, or `i` is not in
            [1, number of answers]
        """
        if not 1 <= i <= len(self.answers):
            raise IndexError('Answer %d not available (%d computed)'\
                             %(i, len(self.answers)))
        return self.answers[i - 1]


    def get_answers(self):
        """ Candidate solutions as the columns of an array of shape
        (n_parameters, n_answers)
        """
        if not self.answers:
            return np.zeros((self.n_parameters, 0))
        return np.column_stack(self.answers)


    def get_base_vectors(self):
        """ Vectors spanning the candidate solutions, as the columns of an
        array. By default, the answers themselves
        """
        return self.get_answers()


    def answer_names(self):
        """ Names of the answer files, one per answer """
        return ['%s%d'%(self.method.simple_name, i+1) for i in range(len(self.answers))]


    def output_answers(self, unknowns, path):
        """ Writes one known-parameter file per answer to the folder `path`

        Parameters
        ----------
        unknowns : list of UnknownParameter
            Unknowns corresponding to the entries of the answers

        path : str
            Output folder, created if it does not exist

        Raises
        ------
        ConfigurationException
            If the number of unknowns differs from the number of parameters
        """
        if len(unknowns) != self.n_parameters:
            raise ConfigurationException(message='%d unknowns given for %d'\
                                         ' parameters.'%(len(unknowns), self.n_parameters))
        os.makedirs(path, exist_ok=True)
        for name, answer in zip(self.answer_names(), self.answers):
            write_known(unknowns, answer, os.path.join(path, '%s.lst'%name))


def solve_symmetric(matrix, rhs):
    """ Solves a symmetric linear system, raising
    :class:`SingularMatrixException` if the matrix is singular or so
    ill-conditioned that its reciprocal condition number is below the
    machine precision
    """
    with warnings.catch_warnings():
        warnings.simplefilter('error', scipy.linalg.LinAlgWarning)
        try:
            return scipy.linalg.solve(matrix, rhs, assume_a='sym')
        except (np.linalg.LinAlgError, scipy.linalg.LinAlgWarning) as e:
            raise SingularMatrixException(str(e)) from e


def check_nonsingular(matrix):
    """ Raises :class:`SingularMatrixException` if the symmetric `matrix` is
    numerically singular
    """
    solve_symmetric(matrix, np.zeros(matrix.shape[0]))


def inverse_symmetric(matrix):
    """ Inverse of a symmetric matrix, raising
    :class:`SingularMatrixException` if the matrix is singular
    """
    return solve_symmetric(matrix, np.identity(matrix.shape[0]))
