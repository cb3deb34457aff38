r"""
==================================================
Inversion Setup (:mod:`kibrary.inversion.setup`)
==================================================

Construction of the normal equations :math:`{\bf A}^T {\bf A} \cdot {\bf m} =
{\bf A}^T \cdot {\bf d}` from observed and synthetic waveforms and from the
partial derivatives of the synthetics with respect to the unknown parameters.

"""
from .dvector import *
from .weighting import *
from .amatrix import *
from .files import *
from .assembly import *
