"""
===========================================
Plotting (:mod:`kibrary.plotting`)
===========================================

Kibrary provides support for plotting the results of an inversion through
the functions contained in :mod:`kibrary.plotting`, which allow one to

- Display the normalized variance and the AIC of the candidate solutions
  of an inversion, as a function of their index or of the damping parameter

- Display the solved values of the VOXEL unknowns at a given radius on a
  `CartoPy <https://scitools.org.uk/cartopy/docs/latest/>`_ map

"""
from .plotting import *
