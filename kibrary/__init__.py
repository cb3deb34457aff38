#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
=======
Kibrary
=======
"""

from .__version__ import __version__
from .location import FullPosition, Observer
from . import exceptions
from . import utils
from . import voxel
from . import waveform
from . import inversion
from . import plotting
from . import config
