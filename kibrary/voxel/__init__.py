"""
Unknown Parameters and Parameter Files
======================================

"""

from .parameters import *
from .io import *
