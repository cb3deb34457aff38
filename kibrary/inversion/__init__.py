r"""
==========================================
Inversion (:mod:`kibrary.inversion`)
==========================================

Linear waveform inversion through the normal equations
:math:`{\bf A}^T {\bf A} \cdot {\bf m} = {\bf A}^T \cdot {\bf d}`:

- :mod:`kibrary.inversion.setup`: residual vector, weighting, partial
  derivative matrix and their assembly into AtA and Atd
- :mod:`kibrary.inversion.solve`: solvers of the normal equations
- :mod:`kibrary.inversion.evaluation`: variance and AIC of the answers

"""
from . import setup
from . import solve
from .evaluation import *
