#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Solution of the normal equations stored in an inversion folder
(``kibrary solve``).

For each method, a sub-folder named after the method is created, containing
one known-parameter file per answer and the evaluation of the answers
(variance.txt, aic_<alpha>.txt, plot.png). Methods are independent: the
failure of one of them is reported and does not prevent the others from
running.
"""
import os
import sys
import traceback
from kibrary.config import PARAMETER_FILE, write_parameters
from kibrary.inversion.evaluation import ResultEvaluation
from kibrary.inversion.setup.files import UNKNOWNS_FILE, read_normal_equations
from kibrary.inversion.setup.files import read_matrix, read_vector
from kibrary.inversion.solve import InverseMethod, construct
from kibrary.utils import create_output_folder
from kibrary.voxel.io import read_unknowns


def _optional(path, reader):
    return None if path is None else reader(path)


def solve_methods(ata, atd, dinfo, unknowns, params, out_path):
    """ Solves the normal equations with each method in params['methods']

    Parameters
    ----------
    ata, atd : ndarray

    dinfo : DInfo

    unknowns : list of UnknownParameter

    params : dict
        Parameters of the operation 'solve' or 'sum-solve'

    out_path : str
        Folder where the sub-folder of each method is created

    Returns
    -------
    failed : list of str
        Methods that raised an exception
    """
    verbose = params['verbose']
    t = _optional(params['t_path'], lambda p: read_matrix(p, square=False))
    eta = _optional(params['eta_path'], read_vector)
    m0 = _optional(params['m0_path'], read_vector)
    evaluation = ResultEvaluation(ata, atd, dinfo, verbose=verbose)
    failed = []
    for name in params['methods']:
        try:
            method = InverseMethod.of(name)
            method_path = os.path.join(out_path, method.simple_name)
            problem = construct(method, ata, atd, lambdas=params['lambdas'],
                                t=t, eta=eta, m0=m0, verbose=verbose)
            problem.compute()
            problem.output_answers(unknowns, method_path)
            if method is InverseMethod.LS:
                evaluation.evaluate_ls(problem.answers, problem.lambdas,
                                       params['alphas'], method_path,
                                       n_effective=problem.effective_parameters(),
                                       plot=params['plot'])
            else:
                evaluation.evaluate(problem.answers, params['evaluate_num'],
                                    params['alphas'], method_path,
                                    plot=params['plot'])
        except Exception:
            print('Method %s failed:'%name, file=sys.stderr)
            traceback.print_exc()
            failed.append(str(name))
    return failed


def solve(params):
    """ Solves the normal equations of params['inversion_path']

    Parameters
    ----------
    params : dict
        As returned by :func:`kibrary.config.load_parameters` for the
        operation 'solve'

    Returns
    -------
    out_path : str
        Path of the output folder

    failed : list of str
        Methods that raised an exception
    """
    folder = params['inversion_path']
    ata, atd, dinfo = read_normal_equations(folder)
    unknowns = read_unknowns(os.path.join(folder, UNKNOWNS_FILE))
    out_path = create_output_folder(params['workdir'], 'solve',
                                    tag=params['tag'],
                                    append_date=params['append_date'])
    write_parameters(params, os.path.join(out_path, PARAMETER_FILE))
    failed = solve_methods(ata, atd, dinfo, unknowns, params, out_path)
    if params['verbose']:
        print('Output written to %s'%out_path)
    return out_path, failed
