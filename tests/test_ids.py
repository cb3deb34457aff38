"""
Test positions, unknown parameters and waveform records, and the files they
are stored in
"""
import pickle
import numpy as np
import pytest
from obspy import Trace, UTCDateTime
from kibrary.location import FullPosition, Observer
from kibrary.voxel import (ParameterType, VariableType, Physical1DParameter,
                           Physical3DParameter, TimeReceiverSideParameter,
                           TimeSourceSideParameter, parameter_from_line,
                           read_known, read_unknowns, write_known,
                           write_unknowns)
from kibrary.waveform import (BasicID, PartialID, WaveformType, is_pair,
                              read_basic_ids, read_partial_ids,
                              split_basic_ids, write_basic_ids,
                              write_partial_ids)


def test_position_equality_is_rounded():
    """
    The same point read from two files with different precision compares
    equal, and can be used as a dictionary key
    """
    p0 = FullPosition(10., 20., 6000.)
    p1 = FullPosition(10.0000000001, 20., 6000.0000000002)
    assert p0 == p1
    assert hash(p0) == hash(p1)
    assert {p0: 1}[p1] == 1
    assert p0 != FullPosition(10.001, 20., 6000.)


def test_position_is_immutable():
    position = FullPosition(10., 20., 6000.)
    with pytest.raises(AttributeError):
        position.radius = 3480.
    assert pickle.loads(pickle.dumps(position)) == position


def test_observer_identity():
    """
    Observers are identified by station and network only
    """
    assert Observer('AAK', 'II', 42.6, 74.5) == Observer('AAK', 'II')
    assert Observer('AAK', 'II') != Observer('AAK', 'IU')
    assert str(Observer('AAK', 'II', 42.6, 74.5)) == 'AAK II 42.6 74.5'


def test_type_lookup():
    assert ParameterType.of('voxel') is ParameterType.VOXEL
    assert VariableType.of('Vs') is VariableType.Vs
    assert VariableType.of('VSH') is VariableType.Vsh
    with pytest.raises(ValueError):
        ParameterType.of('PLANE')
    with pytest.raises(ValueError):
        VariableType.of('DENSITY')


def test_unknown_identity_ignores_size():
    position = FullPosition(0., 0., 6000.)
    assert Physical3DParameter('MU', position, 1.) == \
        Physical3DParameter('MU', position, 5.)
    assert Physical3DParameter('MU', position, 1.) != \
        Physical3DParameter('Vs', position, 1.)
    assert Physical1DParameter('MU', 6000., 1.) != \
        Physical3DParameter('MU', position, 1.)


@pytest.mark.parametrize('line', [
    'VOXEL MU 10.0 20.0 6000.0 1.5',
    'LAYER Vsh 3505.0 50.0',
    'SOURCE TIME 201104170158A 1.0',
    'RECEIVER TIME AAK II 42.6 74.5 2 1.0',
    ])
def test_parameter_line_round_trip(line):
    parameter = parameter_from_line(line)
    assert parameter.to_line() == line
    assert parameter_from_line(parameter.to_line()) == parameter
    assert pickle.loads(pickle.dumps(parameter)) == parameter


@pytest.mark.parametrize('line', [
    'VOXEL MU 10.0 20.0',
    'LAYER MU abc 1.0',
    'PLANE MU 1.0',
    'RECEIVER TIME AAK II 42.6 74.5',
    ])
def test_invalid_parameter_line(line):
    with pytest.raises(ValueError):
        parameter_from_line(line)


def test_unknowns_file(tmpdir):
    """
    Comments are skipped, duplicates are dropped with a warning
    """
    path = tmpdir.join('unknowns.lst').strpath
    with open(path, 'w') as f:
        f.write('# voxels\n')
        f.write('VOXEL MU 10.0 20.0 6000.0 1.0\n')
        f.write('\n')
        f.write('LAYER MU 6000.0 50.0  # shell\n')
        f.write('VOXEL MU 10.0 20.0 6000.0 2.0\n')
        f.write('SOURCE TIME 201104170158A 1.0\n')
    with pytest.warns(UserWarning):
        unknowns = read_unknowns(path)
    assert [u.parameter_type for u in unknowns] == [ParameterType.VOXEL,
                                                    ParameterType.LAYER,
                                                    ParameterType.SOURCE]
    assert unknowns[0].size == 1.

    path_out = tmpdir.join('copy.lst').strpath
    write_unknowns(unknowns, path_out)
    assert read_unknowns(path_out) == unknowns

    with pytest.raises(FileNotFoundError):
        read_unknowns(tmpdir.join('missing.lst').strpath)


def test_known_file(tmpdir, unknowns):
    path = tmpdir.join('known.lst').strpath
    write_known(unknowns, [0.1, -2.5e-3], path)
    parameters, values = read_known(path)
    assert parameters == unknowns
    np.testing.assert_array_equal(values, [0.1, -2.5e-3])
    with pytest.raises(ValueError):
        write_known(unknowns, [1.], path)


def test_record_data_is_read_only(record):
    obs = record('OBS', [1., 2., 3.])
    assert obs.npts == 3
    assert obs.contains_data
    with pytest.raises(ValueError):
        obs.data[0] = 0.
    assert not obs.without_data().contains_data
    assert obs.without_data() == obs
    with pytest.raises(ValueError):
        BasicID('OBS', obs.observer, obs.event, 'T', 0., 1., npts=4, data=[1., 2.])
    with pytest.raises(ValueError):
        BasicID('OBS', obs.observer, obs.event, 'T', 0., 1.)


def test_is_pair(record):
    obs = record('OBS', [1., 1.])
    assert is_pair(obs, record('SYN', [1., 1.], start_time=110.))
    assert not is_pair(obs, record('SYN', [1., 1.], start_time=120.))
    assert not is_pair(obs, record('SYN', [1., 1.], component='R'))
    assert not is_pair(obs, record('SYN', [1., 1., 1.]))


def test_from_trace():
    """
    The start time is measured from the origin time, and the receiver
    coordinates are taken from the SAC header
    """
    origin = UTCDateTime(2011, 4, 17, 1, 58, 0)
    trace = Trace(data=np.ones(40),
                  header={'station': 'AAK', 'network': 'II', 'channel': 'BHT',
                          'sampling_rate': 20., 'starttime': origin + 600.5,
                          'sac': {'stla': 42.6, 'stlo': 74.5}})
    basic_id = BasicID.from_trace(trace, 'OBS', '201104170158A', origin,
                                  phases=['S'], min_period=8., max_period=200.)
    assert basic_id.component == 'T'
    assert basic_id.npts == 40
    assert basic_id.sampling_hz == 20.
    assert basic_id.start_time == pytest.approx(600.5)
    assert basic_id.observer == Observer('AAK', 'II')
    assert basic_id.observer.latitude == pytest.approx(42.6)


def test_partial_parameter_key(partial, unknowns):
    """
    A partial refers to the unknown sharing its type, variable and position
    """
    derivative = partial(FullPosition(0.0000000001, 0., 6000.), [1., 1., 1.])
    assert derivative.waveform_type is WaveformType.PARTIAL
    assert derivative.parameter_key == unknowns[0].key

    observer = Observer('AAK', 'II', 42.6, 74.5)
    source = PartialID(observer, 'ev', 'T', 0., 1., 'SOURCE', 'TIME', npts=3)
    receiver = PartialID(observer, 'ev', 'T', 0., 1., 'RECEIVER', 'TIME', npts=3)
    layer = PartialID(observer, 'ev', 'T', 0., 1., 'LAYER', 'MU',
                      voxel_position=FullPosition(0., 0., 3505.), npts=3)
    assert source.parameter_key == TimeSourceSideParameter('ev').key
    assert receiver.parameter_key == TimeReceiverSideParameter(observer).key
    assert layer.parameter_key == Physical1DParameter('MU', 3505., 50.).key
    with pytest.raises(ValueError):
        PartialID(observer, 'ev', 'T', 0., 1., 'VOXEL', 'MU', npts=3)


def test_id_files(tmpdir, basic_ids, partial_ids):
    basic_path = tmpdir.join('basic.pkl').strpath
    partial_path = tmpdir.join('partial.pkl').strpath
    write_basic_ids(basic_ids, basic_path)
    write_partial_ids(partial_ids, partial_path)

    read_ids = read_basic_ids(basic_path)
    assert read_ids == basic_ids
    np.testing.assert_array_equal(read_ids[2].data, basic_ids[2].data)
    assert not any(i.contains_data for i in read_basic_ids(basic_path,
                                                           with_data=False))
    assert [i.parameter_key for i in read_partial_ids(partial_path)] == \
        [i.parameter_key for i in partial_ids]

    obs_ids, syn_ids = split_basic_ids(read_ids)
    assert len(obs_ids) == len(syn_ids) == 2

    with pytest.raises(TypeError):
        write_basic_ids(partial_ids, basic_path)
    with pytest.raises(TypeError):
        write_partial_ids(basic_ids, partial_path)
    with pytest.raises(FileNotFoundError):
        read_basic_ids(tmpdir.join('missing.pkl').strpath)
