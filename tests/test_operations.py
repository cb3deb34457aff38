"""
Test the command line operations end to end: arrange, solve and sum-solve
"""
import os
import numpy as np
import pytest
import yaml
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.setup import read_matrix, read_normal_equations
from kibrary.operations.cli import kibrary_parser, main
from kibrary.operations.sum_solver import sum_normal_equations
from kibrary.voxel import Physical3DParameter, read_known, write_unknowns
from kibrary.location import FullPosition
from kibrary.waveform import write_basic_ids, write_partial_ids


def write_yaml(path, params):
    with open(path, 'w') as f:
        yaml.safe_dump(params, f)
    return path


@pytest.fixture
def inversion_folder(tmpdir, basic_ids, partial_ids, unknowns):
    """
    Runs `kibrary arrange` in `tmpdir` and returns the output folder
    """
    write_basic_ids(basic_ids, tmpdir.join('basic.pkl').strpath)
    write_partial_ids(partial_ids, tmpdir.join('partial.pkl').strpath)
    write_unknowns(unknowns, tmpdir.join('unknowns.lst').strpath)
    path = write_yaml(tmpdir.join('arrange.yaml').strpath,
                      {'basic_path': 'basic.pkl',
                       'partial_path': 'partial.pkl',
                       'unknowns_path': 'unknowns.lst',
                       'append_date': False,
                       'verbose': False})
    assert main(['arrange', '-p', path]) == 0
    return tmpdir.join('inversion').strpath


def test_arrange(inversion_folder, unknowns):
    ata, atd, dinfo = read_normal_equations(inversion_folder)
    np.testing.assert_allclose(ata, np.diag([3., 12.]))
    np.testing.assert_allclose(atd, [3., 12.])
    assert dinfo.num_independent == pytest.approx(3.)
    for name in ('unknowns.lst', 'parameters.yaml'):
        assert os.path.isfile(os.path.join(inversion_folder, name))


def test_arrange_existing_folder(tmpdir, inversion_folder):
    """
    Output folders are never overwritten
    """
    with pytest.raises(FileExistsError):
        main(['arrange', '-p', tmpdir.join('arrange.yaml').strpath])


def test_solve(tmpdir, inversion_folder, unknowns):
    path = write_yaml(tmpdir.join('solve.yaml').strpath,
                      {'inversion_path': 'inversion',
                       'methods': ['CG', 'LS', 'SVD', 'NNLS', 'BCGS'],
                       'lambdas': [0., 1.],
                       'alphas': [1., 100.],
                       'tag': 'all',
                       'append_date': False,
                       'plot': False,
                       'verbose': False})
    assert main(['solve', '-p', path]) == 0
    out = tmpdir.join('solve_all').strpath
    for name in ('CG/CG2.lst', 'CG/variance.txt', 'CG/aic_1.txt', 'CG/aic_100.txt',
                 'LS/LS0.lst', 'LS/LS1.lst', 'LS/variance.txt',
                 'SVD/SVD2.lst', 'SVD/eigenvaluesOfAta.txt',
                 'NNLS/NNLS1.lst', 'BCGS/BCGS1.lst', 'parameters.yaml'):
        assert os.path.isfile(os.path.join(out, name)), name
    for name in ('CG/CG2.lst', 'LS/LS0.lst', 'SVD/SVD2.lst', 'NNLS/NNLS1.lst'):
        parameters, values = read_known(os.path.join(out, name))
        assert parameters == unknowns
        np.testing.assert_allclose(values, [1., 1.], rtol=1e-8)


def test_solve_with_regularization(tmpdir, inversion_folder):
    """
    T and eta are read from files; T may be rectangular
    """
    np.savetxt(tmpdir.join('t.lst').strpath, [[1., -1.]])
    np.savetxt(tmpdir.join('eta.lst').strpath, [1.])
    path = write_yaml(tmpdir.join('solve.yaml').strpath,
                      {'inversion_path': 'inversion',
                       'methods': 'LS',
                       'lambdas': 2.,
                       't_path': 't.lst',
                       'eta_path': 'eta.lst',
                       'append_date': False,
                       'plot': False,
                       'verbose': False})
    assert main(['solve', '-p', path]) == 0
    _, values = read_known(tmpdir.join('solve', 'LS', 'LS2.lst').strpath)
    t = np.array([[1., -1.]])
    expected = np.linalg.solve(np.diag([3., 12.]) + 2*t.T @ t,
                               np.array([3., 12.]) - 2*t.T @ [1.])
    np.testing.assert_allclose(values, expected)


def test_failed_method(tmpdir, inversion_folder):
    """
    A failing method is reported and does not prevent the others
    """
    path = write_yaml(tmpdir.join('solve.yaml').strpath,
                      {'inversion_path': 'inversion',
                       'methods': ['GAUSS', 'CG'],
                       'append_date': False,
                       'plot': False,
                       'verbose': False})
    assert main(['solve', '-p', path]) == 1
    assert os.path.isfile(tmpdir.join('solve', 'CG', 'CG1.lst').strpath)


def test_sum_solve(tmpdir, inversion_folder):
    path = write_yaml(tmpdir.join('sum.yaml').strpath,
                      {'inversion_paths': ['inversion', 'inversion'],
                       'methods': ['LS'],
                       'append_date': False,
                       'plot': False,
                       'verbose': False})
    assert main(['sum-solve', '-p', path]) == 0
    out = tmpdir.join('sumSolve').strpath
    ata, atd, dinfo = read_normal_equations(out)
    np.testing.assert_allclose(ata, np.diag([6., 24.]))
    np.testing.assert_allclose(atd, [6., 24.])
    assert dinfo.num_independent == pytest.approx(6.)
    assert dinfo.normalized_variance == pytest.approx(15 / 39)
    _, values = read_known(os.path.join(out, 'LS', 'LS0.lst'))
    np.testing.assert_allclose(values, [1., 1.])


def test_sum_different_unknowns(tmpdir, inversion_folder):
    other = tmpdir.mkdir('other')
    for name in ('ata.lst', 'atd.lst', 'dInfo.inf'):
        other.join(name).write(tmpdir.join('inversion', name).read())
    write_unknowns([Physical3DParameter('Vs', FullPosition(0., 0., 6000.), 1.),
                    Physical3DParameter('Vs', FullPosition(1., 0., 6000.), 1.)],
                   other.join('unknowns.lst').strpath)
    with pytest.raises(ConfigurationException):
        sum_normal_equations([inversion_folder, other.strpath], verbose=False)
    with pytest.raises(ConfigurationException):
        sum_normal_equations([], verbose=False)
    ata, _, _, _ = sum_normal_equations([inversion_folder], verbose=False)
    np.testing.assert_array_equal(
        ata, read_matrix(os.path.join(inversion_folder, 'ata.lst')))


def test_template_command(tmpdir):
    path = tmpdir.join('template.yaml').strpath
    assert main(['template', 'sum-solve', '-o', path]) == 0
    with open(path) as f:
        assert 'inversion_paths: REQUIRED' in f.read()


def test_parser():
    parser = kibrary_parser()
    args = parser.parse_args(['solve', '-p', 'parameters.yaml'])
    assert args.command == 'solve'
    assert args.parameter_file == 'parameters.yaml'
    with pytest.raises(SystemExit):
        parser.parse_args(['solve'])
    with pytest.raises(SystemExit):
        parser.parse_args(['template', 'invert'])
    assert main([]) == 1
