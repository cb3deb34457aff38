"""
Waveform Records
================

"""

from .ids import *
from .io import *
