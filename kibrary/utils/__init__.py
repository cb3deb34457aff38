"""
===========================================
Utility Functions (:mod:`kibrary.utils`)
===========================================

This module provides support for several small functions used
throughout the inversion workflow. These include:

- Vectorized calculation of epicentral distances (in degrees), building
  on `ObsPy <https://docs.obspy.org/>`_

- Normalized variance of a residual waveform and the Akaike Information
  Criterion (AIC) of a model with a given number of parameters

- Formatting of real numbers for file names (e.g., damping values)

- Loading and saving .pickle files, creation of time-stamped output
  folders
  
"""
from ._utils import *
