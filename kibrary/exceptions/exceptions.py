#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception classes shared by the setup, solve and operations layers.
"""
import numpy as np



class ConfigurationException(Exception):
    """
    Exception raised when the inputs of an inversion are inconsistent, e.g.,
    dimension mismatches between AtA, Atd, T, eta and the unknown parameters,
    records lacking waveform data, or duplicated records.
    """

    def __init__(self, *args, message=None):
        if message is not None:
            self.message = message
        else:
            self.message = 'Inconsistent inversion configuration.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class DataAlignmentException(Exception):
    """
    Exception raised when observed and synthetic records cannot be paired,
    or when the start times of a pair differ by more than the tolerance.
    This indicates a bug in the timewindow preparation.
    """

    def __init__(self, *args, message=None):
        if message is not None:
            self.message = message
        else:
            self.message = 'Observed and synthetic timewindows are not aligned.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class CorruptWaveformException(Exception):
    """
    Exception raised when an observed waveform is identically zero or
    contains infinite or nan values.
    """

    def __init__(self, *args):
        self.message = 'The observed waveform should be finite and non-zero,'
        self.message += ' but it is either zero or contains infinite or nan'
        self.message += ' values.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class SingularMatrixException(np.linalg.LinAlgError):
    """
    Exception raised when the matrix of the (regularized) normal equations
    cannot be inverted. The problem is ill-posed: use a nonzero damping or
    another method.
    """

    def __init__(self, *args):
        self.message = 'The system matrix is singular.'
        for arg in args:
            self.message += '\n%s'%arg
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ParameterError(ValueError):
    """
    ValueError raised when a parameter file lacks a required entry or
    contains an invalid value
    """

    def __init__(self, *args):
        if len(args) == 0:
            msg = 'Bad parameter.'
        elif len(args) == 1:
            msg = 'Bad parameter: %s'%args[0]
        else:
            msg = 'Parameter `%s` has bad value: %s'%(args[0], args[1])
        super().__init__(msg)


