#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Selection of the solver by name.
"""
from enum import Enum
from kibrary.exceptions import ConfigurationException


class InverseMethod(Enum):
    CG = 'CG'
    LS = 'LS'
    SVD = 'SVD'
    NNLS = 'NNLS'
    BCGS = 'BCGS'


    @classmethod
    def of(cls, name):
        """ Method corresponding to its simple name (case insensitive).
        'LSM' is accepted for 'LS'

        Raises
        ------
        ConfigurationException
            If `name` does not correspond to any method
        """
        if isinstance(name, cls):
            return name
        name = str(name).upper()
        if name == 'LSM':
            name = 'LS'
        try:
            return cls[name]
        except KeyError:
            raise ConfigurationException(message='Invalid name for inverse'\
                                         ' method: %s. Choose among %s'\
                                         %(name, [m.value for m in cls])) from None


    @property
    def simple_name(self):
        return self.value


def construct(method, ata, atd, lambdas=None, t=None, eta=None, m0=None,
              verbose=True):
    """ Builds the solver corresponding to `method`

    Parameters
    ----------
    method : InverseMethod or str

    ata : array-like of shape (n, n)

    atd : array-like of shape (n,)

    lambdas : float or list of float, optional
        Damping parameters, used by LS only (default is 0)

    t : array-like of shape (k, n), optional
        Regularization operator, used by LS only (default is the identity)

    eta : array-like of shape (k,), optional
        Target of the regularization, used by LS only (default is zero)

    m0 : array-like of shape (n,), optional
        Initial model, used by CG and BCGS only (default is zero)

    verbose : bool

    Returns
    -------
    InverseProblem
    """
    from kibrary.inversion.solve.bicgstab import BiCGStabMethod
    from kibrary.inversion.solve.conjugate_gradient import ConjugateGradientMethod
    from kibrary.inversion.solve.least_squares import LeastSquaresMethod
    from kibrary.inversion.solve.nnls import NonNegativeLeastSquaresMethod
    from kibrary.inversion.solve.svd import SingularValueDecomposition

    method = InverseMethod.of(method)
    if method is InverseMethod.CG:
        return ConjugateGradientMethod(ata, atd, m0=m0, verbose=verbose)
    if method is InverseMethod.LS:
        return LeastSquaresMethod(ata, atd, lambdas=0 if lambdas is None else lambdas,
                                  t=t, eta=eta, verbose=verbose)
    if method is InverseMethod.SVD:
        return SingularValueDecomposition(ata, atd, verbose=verbose)
    if method is InverseMethod.NNLS:
        return NonNegativeLeastSquaresMethod(ata, atd, verbose=verbose)
    return BiCGStabMethod(ata, atd, m0=m0, verbose=verbose)
