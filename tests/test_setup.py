"""
Test the construction of the normal equations: pairing of the records, data
vector, weighting, partial derivative matrix and their assembly
"""
import os
import numpy as np
import pytest
from kibrary.exceptions import (ConfigurationException, CorruptWaveformException,
                                DataAlignmentException)
from kibrary.inversion.setup import (AMatrixBuilder, DInfo, DVectorBuilder,
                                     MatrixAssembly, Weighting, WeightingHandler,
                                     pair_up, read_dinfo, read_entry_weights,
                                     read_matrix, read_normal_equations,
                                     read_vector, write_entry_weights,
                                     write_normal_equations)
from kibrary.location import Observer
from kibrary.waveform import write_basic_ids, write_partial_ids


def test_pair_up(record):
    """
    Records are paired whatever their order, each observed record with the
    synthetic one closest in time
    """
    obs = record('OBS', [1., 2.])
    syn_far = record('SYN', [1., 1.], start_time=110.)
    syn_close = record('SYN', [3., 3.], start_time=99.)
    obs_late = record('OBS', [1., 2.], start_time=112.)
    obs_ids, syn_ids = pair_up([syn_far, obs, syn_close, obs_late])
    assert obs_ids == [obs, obs_late]
    assert syn_ids == [syn_close, syn_far]


def test_start_time_mismatch(record):
    with pytest.raises(DataAlignmentException):
        pair_up([record('OBS', [1., 2.]),
                 record('SYN', [1., 2.], start_time=120.)])


def test_unpaired_records(record):
    with pytest.raises(DataAlignmentException):
        pair_up([record('OBS', [1., 2.])])
    with pytest.raises(DataAlignmentException):
        pair_up([record('OBS', [1., 2.]), record('SYN', [1., 2.]),
                 record('SYN', [1., 2.], component='R')])


def test_duplicated_record(record):
    with pytest.raises(ConfigurationException):
        pair_up([record('OBS', [1., 2.]), record('OBS', [1., 2.]),
                 record('SYN', [1., 2.])])


def test_corrupt_observed_waveform(record):
    with pytest.raises(CorruptWaveformException):
        DVectorBuilder([record('OBS', [0., 0.]), record('SYN', [1., 2.])],
                       verbose=False)
    with pytest.raises(CorruptWaveformException):
        DVectorBuilder([record('OBS', [np.nan, 1.]), record('SYN', [1., 2.])],
                       verbose=False)
    with pytest.raises(CorruptWaveformException):
        DVectorBuilder([record('OBS', []), record('SYN', [])], verbose=False)


def test_records_without_data(basic_ids):
    with pytest.raises(ConfigurationException):
        DVectorBuilder([i.without_data() for i in basic_ids], verbose=False)


def test_dvector_layout(basic_ids):
    dvector = DVectorBuilder(basic_ids, verbose=False)
    assert dvector.n_timewindow == 2
    assert dvector.total_npts == 6
    np.testing.assert_array_equal(dvector.start_points, [0, 3])
    # npts / (min_period * sampling_hz)
    assert dvector.num_independent == pytest.approx(3.)
    np.testing.assert_array_equal(dvector.build_with_weight(np.ones(2)),
                                  [1, 1, 1, 2, 2, 2])
    np.testing.assert_array_equal(dvector.full_obs_vec(), [2, 2, 2, 3, 3, 3])
    np.testing.assert_array_equal(dvector.full_syn_vec_with_weight(Weighting([2, 3])),
                                  [2, 2, 2, 3, 3, 3])
    assert dvector.which_timewindow(basic_ids[1]) == 0
    assert dvector.which_timewindow(basic_ids[2]) == 1


def test_which_timewindow_missing(basic_ids, record):
    dvector = DVectorBuilder(basic_ids, verbose=False)
    assert dvector.which_timewindow(record('SYN', [1., 1., 1.], component='Z')) == -1
    assert dvector.which_timewindow(record('SYN', [1., 1., 1.], start_time=300.)) == -1


def test_compose_decompose(basic_ids):
    dvector = DVectorBuilder(basic_ids, verbose=False)
    vector = np.arange(6.)
    parts = dvector.decompose(vector)
    np.testing.assert_array_equal(parts[1], [3, 4, 5])
    np.testing.assert_array_equal(dvector.compose(parts), vector)
    with pytest.raises(ValueError):
        dvector.decompose(np.arange(5.))
    with pytest.raises(ValueError):
        dvector.compose([np.ones(3), np.ones(2)])
    with pytest.raises(ValueError):
        dvector.compose([np.ones(3)])


def test_weighting_schemes(basic_ids):
    dvector = DVectorBuilder(basic_ids, verbose=False)

    def weights(**kwargs):
        return WeightingHandler(verbose=False, **kwargs).weigh(dvector).weights

    np.testing.assert_allclose(weights(), [1, 1])
    np.testing.assert_allclose(weights(scheme='reciprocal'), [1/2, 1/3])
    np.testing.assert_allclose(weights(scheme='reciprocal_norm'),
                               [1/np.sqrt(12), 1/np.sqrt(27)])
    np.testing.assert_allclose(weights(scheme='amplitude_ratio'), [1/2, 1/3])
    np.testing.assert_allclose(weights(factor_t=2., factor_z=5.), [2, 2])
    with pytest.raises(ConfigurationException):
        WeightingHandler(scheme='unknown')


def test_weighting_is_read_only():
    weighting = Weighting([1., 2.])
    assert len(weighting) == 2
    assert weighting.get(1) == 2.
    with pytest.raises(ValueError):
        weighting.weights[0] = 3.
    np.testing.assert_array_equal(Weighting.identity(3).weights, [1, 1, 1])


def test_balance_component(record):
    """
    Two Z windows and one T window: the weights are divided by the square
    root of the fraction of windows of their component
    """
    ids = []
    for i, component in enumerate(['Z', 'Z', 'T']):
        observer = Observer('ST%d'%i, 'XX', 10., 20. + i)
        ids.append(record('OBS', [1., 1.], observer=observer, component=component))
        ids.append(record('SYN', [1., 1.], observer=observer, component=component))
    dvector = DVectorBuilder(ids, verbose=False)
    weighting = WeightingHandler(balance_component=True, verbose=False).weigh(dvector)
    np.testing.assert_allclose(weighting.weights,
                               [np.sqrt(3/2), np.sqrt(3/2), np.sqrt(3)])


def test_balance_geometry(record):
    """
    The first two observers are less than 2.5 degrees apart, the third one
    is far away
    """
    ids = []
    for i, lon in enumerate([20., 21., 100.]):
        observer = Observer('ST%d'%i, 'XX', 10., lon)
        ids.append(record('OBS', [1., 1.], observer=observer))
        ids.append(record('SYN', [1., 1.], observer=observer))
    dvector = DVectorBuilder(ids, verbose=False)
    handler = WeightingHandler(balance_geometry=True, verbose=False,
                               event_positions={ids[0].event: (-20., 150.)})
    np.testing.assert_allclose(handler.weigh(dvector).weights,
                               [1/np.sqrt(2), 1/np.sqrt(2), 1])
    with pytest.raises(ConfigurationException):
        WeightingHandler(balance_geometry=True)
    handler = WeightingHandler(balance_geometry=True, verbose=False,
                               event_positions={'another': (-20., 150.)})
    with pytest.raises(ConfigurationException):
        handler.weigh(dvector)


def test_entry_weights(tmpdir, basic_ids):
    dvector = DVectorBuilder(basic_ids, verbose=False)
    weight_map = {(i.event, i.observer, i.component): 4. for i in dvector.obs_ids}
    path = tmpdir.join('weights.txt').strpath
    write_entry_weights(weight_map, path)
    assert read_entry_weights(path) == weight_map

    handler = WeightingHandler.from_parameters({'scheme': 'reciprocal',
                                                'weight_paths': [path]},
                                               verbose=False)
    np.testing.assert_allclose(handler.weigh(dvector).weights, [2/2, 2/3])

    weight_map.pop((dvector.obs_ids[1].event, dvector.obs_ids[1].observer, 'T'))
    handler = WeightingHandler(weight_maps=[weight_map], verbose=False)
    with pytest.raises(ConfigurationException):
        handler.weigh(dvector)


def test_amatrix(basic_ids, partial_ids, unknowns):
    """
    The unknown sizes multiply the partial derivatives; missing partials are
    zero; partials of other parameters are ignored
    """
    dvector = DVectorBuilder(basic_ids, verbose=False)
    amatrix = AMatrixBuilder(partial_ids, unknowns, dvector, verbose=False)
    assert amatrix.n_partials_used == 2
    assert len(amatrix.missing_partials()) == 2
    assert amatrix.column_of(partial_ids[1]) == 1
    assert amatrix.column_of(partial_ids[2]) == -1
    np.testing.assert_array_equal(amatrix.build_with_weight(np.ones(2)),
                                  [[1, 0], [1, 0], [1, 0],
                                   [0, 2], [0, 2], [0, 2]])
    with pytest.raises(ConfigurationException):
        AMatrixBuilder(partial_ids, unknowns, dvector, require_all_partials=True,
                       verbose=False)


def test_amatrix_inconsistent_partials(basic_ids, partial_ids, unknowns, partial):
    dvector = DVectorBuilder(basic_ids, verbose=False)
    with pytest.raises(ConfigurationException):
        AMatrixBuilder(partial_ids + partial_ids[:1], unknowns, dvector,
                       verbose=False)
    with pytest.raises(ConfigurationException):
        AMatrixBuilder([partial_ids[0].without_data()], unknowns, dvector,
                       verbose=False)
    with pytest.raises(ConfigurationException):
        AMatrixBuilder([partial(unknowns[0].position, [1., 1.])], unknowns,
                       dvector, verbose=False)
    # no timewindow on the radial component
    other_window = partial(unknowns[0].position, [1., 1., 1.], component='R')
    amatrix = AMatrixBuilder([other_window], unknowns, dvector, verbose=False)
    assert amatrix.n_partials_used == 0
    with pytest.raises(ConfigurationException):
        AMatrixBuilder(partial_ids[:1], unknowns + unknowns[:1], dvector,
                       verbose=False)


def test_assembly(basic_ids, partial_ids, unknowns):
    assembly = MatrixAssembly(basic_ids, partial_ids, unknowns, verbose=False)
    np.testing.assert_allclose(assembly.ata, np.diag([3., 12.]))
    np.testing.assert_allclose(assembly.atd, [3., 12.])
    assert assembly.dinfo.num_independent == pytest.approx(3.)
    assert assembly.dinfo.d_norm == pytest.approx(np.sqrt(15.))
    assert assembly.dinfo.obs_norm == pytest.approx(np.sqrt(39.))
    assert assembly.normalized_variance == pytest.approx(15 / 39)
    np.testing.assert_allclose(np.linalg.solve(assembly.ata, assembly.atd), [1., 1.])
    with pytest.raises(ValueError):
        assembly.ata[0, 0] = 0.


def test_weighted_assembly_consistency(basic_ids, partial_ids, unknowns):
    """
    The block-wise accumulation equals the products of the full weighted
    matrix and vector
    """
    handler = WeightingHandler(scheme='reciprocal', factor_t=3., verbose=False)
    assembly = MatrixAssembly(basic_ids, partial_ids, unknowns,
                              weighting_handler=handler, verbose=False)
    a = assembly.build_a()
    np.testing.assert_allclose(assembly.ata, a.T @ a)
    np.testing.assert_allclose(assembly.atd, a.T @ assembly.d)
    np.testing.assert_allclose(assembly.d, [1.5, 1.5, 1.5, 2, 2, 2])


def test_weight_scales_each_block(basic_ids, partial_ids, unknowns):
    """
    Each timewindow of A and d is multiplied by its own weight, once
    """
    dvector = DVectorBuilder(basic_ids, verbose=False)
    amatrix = AMatrixBuilder(partial_ids, unknowns, dvector, verbose=False)
    w = Weighting([0.5, 3.])
    ones = np.ones(dvector.n_timewindow)
    a, a_weighted = amatrix.build_with_weight(ones), amatrix.build_with_weight(w)
    d, d_weighted = dvector.build_with_weight(ones), dvector.build_with_weight(w)
    for k in range(dvector.n_timewindow):
        rows = slice(dvector.start_points[k],
                     dvector.start_points[k] + dvector.npts_of_window(k))
        np.testing.assert_allclose(a_weighted[rows], w.get(k) * a[rows])
        np.testing.assert_allclose(d_weighted[rows], w.get(k) * d[rows])
        np.testing.assert_allclose(amatrix.block(k, w.get(k)), a_weighted[rows])
    assert np.any(a[rows] != 0)
    np.testing.assert_allclose(d_weighted, [0.5, 0.5, 0.5, 6., 6., 6.])


def test_reuse_ata(basic_ids, partial_ids, unknowns):
    assembly = MatrixAssembly(basic_ids, partial_ids, unknowns,
                              reuse_ata=np.identity(2), verbose=False)
    np.testing.assert_array_equal(assembly.ata, np.identity(2))
    np.testing.assert_allclose(assembly.atd, [3., 12.])
    with pytest.raises(ConfigurationException):
        MatrixAssembly(basic_ids, partial_ids, unknowns,
                       reuse_ata=np.identity(3), verbose=False)


def test_assembly_from_files(tmpdir, basic_ids, partial_ids, unknowns):
    basic_path = tmpdir.join('basic.pkl').strpath
    partial_path = tmpdir.join('partial.pkl').strpath
    write_basic_ids(basic_ids, basic_path)
    write_partial_ids(partial_ids, partial_path)
    assembly = MatrixAssembly.from_files(basic_path, partial_path, unknowns,
                                         verbose=False)
    np.testing.assert_allclose(assembly.ata, np.diag([3., 12.]))

    folder = tmpdir.mkdir('inversion').strpath
    assembly.write(folder)
    ata, atd, dinfo = read_normal_equations(folder)
    np.testing.assert_array_equal(ata, assembly.ata)
    np.testing.assert_array_equal(atd, assembly.atd)
    assert dinfo == assembly.dinfo


def test_matrix_files(tmpdir):
    folder = tmpdir.strpath
    ata = np.array([[2., 1e-17], [1e-17, 3.]])
    write_normal_equations(ata, [1., 2.], DInfo(10., 1., 2.), folder)
    assert read_dinfo(os.path.join(folder, 'dInfo.inf')).normalized_variance == 0.25
    np.testing.assert_array_equal(read_matrix(os.path.join(folder, 'ata.lst')), ata)
    np.testing.assert_array_equal(read_vector(os.path.join(folder, 'atd.lst')), [1, 2])

    path = tmpdir.join('t.lst').strpath
    np.savetxt(path, np.ones((1, 3)))
    assert read_matrix(path, square=False).shape == (1, 3)
    with pytest.raises(ConfigurationException):
        read_matrix(path)

    with open(os.path.join(folder, 'dInfo.inf'), 'w') as f:
        f.write('1 2\n')
    with pytest.raises(ValueError):
        read_dinfo(os.path.join(folder, 'dInfo.inf'))
    with pytest.raises(FileNotFoundError):
        read_matrix(tmpdir.join('missing.lst').strpath)
