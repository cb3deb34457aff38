"""
==============================================
Operations (:mod:`kibrary.operations`)
==============================================

The operations run by the ``kibrary`` command line tool, each configured by
a YAML parameter file (see :mod:`kibrary.config`):

- ``arrange``: assembles AtA, Atd and dInfo from basic and partial ID files
- ``solve``: solves the normal equations of an inversion folder with one or
  more methods, and evaluates the answers
- ``sum-solve``: sums the normal equations of several inversion folders
  before solving them

"""
from .arranger import *
from .solver import *
from .sum_solver import *
