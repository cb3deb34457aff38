"""
Shared fixtures: a small inversion with two timewindows of three samples and
two VOXEL unknowns, whose normal equations are known in closed form

    AtA = diag(3, 12),  Atd = [3, 12],  m = [1, 1]
"""
import matplotlib
matplotlib.use('Agg')
import numpy as np
import pytest
from kibrary.location import FullPosition, Observer
from kibrary.voxel import Physical3DParameter
from kibrary.waveform import BasicID, PartialID

EVENT = '201104170158A'
OBSERVER_1 = Observer('AAK', 'II', 42.6, 74.5)
OBSERVER_2 = Observer('ABC', 'XX', 43.1, 75.0)
POSITION_1 = FullPosition(0., 0., 6000.)
POSITION_2 = FullPosition(10., 10., 5000.)


def make_record(waveform_type, data, observer=OBSERVER_1, component='T',
                start_time=100., event=EVENT):
    """
    Timewindow sampled at 1 Hz with a minimum period of 2 s

    :rtype: kibrary.waveform.BasicID
    """
    return BasicID(waveform_type, observer, event, component, start_time,
                   sampling_hz=1., phases=('S',), min_period=2.,
                   max_period=200., data=data)


def make_partial(position, data, observer=OBSERVER_1, component='T',
                 start_time=100., variable_type='MU'):
    """
    Partial derivative of the synthetic made by :func:`make_record`

    :rtype: kibrary.waveform.PartialID
    """
    return PartialID(observer, EVENT, component, start_time, 1.,
                     parameter_type='VOXEL', variable_type=variable_type,
                     voxel_position=position, phases=('S',), min_period=2.,
                     max_period=200., data=data)


@pytest.fixture
def record():
    """ Factory of observed and synthetic records """
    return make_record


@pytest.fixture
def partial():
    """ Factory of partial derivatives """
    return make_partial


@pytest.fixture
def basic_ids():
    """
    Two timewindows: obs - syn is 1 in the first and 2 in the second
    """
    return [make_record('OBS', [2., 2., 2.], observer=OBSERVER_1),
            make_record('SYN', [1., 1., 1.], observer=OBSERVER_1, start_time=101.),
            make_record('OBS', [3., 3., 3.], observer=OBSERVER_2),
            make_record('SYN', [1., 1., 1.], observer=OBSERVER_2)]


@pytest.fixture
def unknowns():
    return [Physical3DParameter('MU', POSITION_1, 1.),
            Physical3DParameter('MU', POSITION_2, 2.)]


@pytest.fixture
def partial_ids():
    """
    Each timewindow is only sensitive to one of the unknowns
    """
    return [make_partial(POSITION_1, [1., 1., 1.], observer=OBSERVER_1),
            make_partial(POSITION_2, [1., 1., 1.], observer=OBSERVER_2),
            # not an unknown: ignored
            make_partial(FullPosition(-30., 60., 3480.), [5., 5., 5.],
                         observer=OBSERVER_1)]


@pytest.fixture
def spd_system():
    """
    Well-conditioned symmetric positive definite system of size 6
    """
    rng = np.random.default_rng(42)
    a = rng.normal(size=(30, 6))
    d = rng.normal(size=30)
    return a.T @ a, a.T @ d
