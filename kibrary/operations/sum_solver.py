#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Joint solution of several inversions sharing the same unknowns
(``kibrary sum-solve``). AtA and Atd are summed, the dInfo scalars combined
(see :func:`kibrary.inversion.evaluation.combine_dinfo`), and the result is
solved as in ``kibrary solve``.
"""
import os
import numpy as np
from kibrary.config import PARAMETER_FILE, write_parameters
from kibrary.exceptions import ConfigurationException
from kibrary.inversion.evaluation import combine_dinfo
from kibrary.inversion.setup.files import UNKNOWNS_FILE
from kibrary.inversion.setup.files import read_normal_equations, write_normal_equations
from kibrary.operations.solver import solve_methods
from kibrary.utils import create_output_folder
from kibrary.voxel.io import read_unknowns, write_unknowns


def sum_normal_equations(folders, verbose=True):
    """ Sums the normal equations stored in `folders`

    Parameters
    ----------
    folders : list of str
        Inversion folders, each containing ata.lst, atd.lst, dInfo.inf and
        unknowns.lst

    Returns
    -------
    ata : ndarray of shape (n, n)

    atd : ndarray of shape (n,)

    dinfo : DInfo

    unknowns : list of UnknownParameter

    Raises
    ------
    ConfigurationException
        If no folder is given, or the unknowns differ between folders
    """
    if not folders:
        raise ConfigurationException(message='No inversion folder to sum.')
    ata, atd, dinfos, unknowns = None, None, [], None
    for folder in folders:
        if verbose:
            print('Reading %s'%folder)
        ata_i, atd_i, dinfo_i = read_normal_equations(folder)
        unknowns_i = read_unknowns(os.path.join(folder, UNKNOWNS_FILE))
        if unknowns is None:
            unknowns = unknowns_i
            ata, atd = np.array(ata_i), np.array(atd_i)
        else:
            if unknowns_i != unknowns:
                raise ConfigurationException(folder, message='Unknown parameters'\
                                             ' differ between the inversions.')
            ata += ata_i
            atd += atd_i
        if len(unknowns_i) != atd_i.size:
            raise ConfigurationException(folder, message='%d unknowns for AtA of'\
                                         ' dimension %d.'%(len(unknowns_i), atd_i.size))
        dinfos.append(dinfo_i)
    return ata, atd, combine_dinfo(dinfos), unknowns


def sum_solve(params):
    """ Sums and solves the normal equations of params['inversion_paths']

    Parameters
    ----------
    params : dict
        As returned by :func:`kibrary.config.load_parameters` for the
        operation 'sum-solve'

    Returns
    -------
    out_path : str

    failed : list of str
        Methods that raised an exception
    """
    ata, atd, dinfo, unknowns = sum_normal_equations(params['inversion_paths'],
                                                     verbose=params['verbose'])
    out_path = create_output_folder(params['workdir'], 'sumSolve',
                                    tag=params['tag'],
                                    append_date=params['append_date'])
    write_normal_equations(ata, atd, dinfo, out_path)
    write_unknowns(unknowns, os.path.join(out_path, UNKNOWNS_FILE))
    write_parameters(params, os.path.join(out_path, PARAMETER_FILE))
    failed = solve_methods(ata, atd, dinfo, unknowns, params, out_path)
    if params['verbose']:
        print('Output written to %s'%out_path)
    return out_path, failed
