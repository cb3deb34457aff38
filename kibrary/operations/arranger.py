#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Assembly of the normal equations from ID files (``kibrary arrange``).

The output folder contains ata.lst, atd.lst, dInfo.inf, a copy of the
unknown-parameter file and the parameters of the run.
"""
import os
from kibrary.config import PARAMETER_FILE, write_parameters
from kibrary.inversion.setup import MatrixAssembly, WeightingHandler
from kibrary.inversion.setup.files import UNKNOWNS_FILE, read_matrix
from kibrary.utils import create_output_folder
from kibrary.voxel.io import read_unknowns, write_unknowns


def arrange(params):
    """ Builds AtA, Atd and dInfo

    Parameters
    ----------
    params : dict
        As returned by :func:`kibrary.config.load_parameters` for the
        operation 'arrange'

    Returns
    -------
    str
        Path of the output folder
    """
    verbose = params['verbose']
    unknowns = read_unknowns(params['unknowns_path'])
    if verbose:
        print('%d unknown parameters read from %s'%(len(unknowns),
                                                    params['unknowns_path']))
    weighting_handler = WeightingHandler.from_parameters(params['weighting'],
                                                         verbose=verbose)
    reuse_ata = None
    if params['reuse_ata_path'] is not None:
        reuse_ata = read_matrix(params['reuse_ata_path'])
    assembly = MatrixAssembly.from_files(params['basic_path'],
                                         params['partial_path'],
                                         unknowns,
                                         weighting_handler=weighting_handler,
                                         require_all_partials=params['require_all_partials'],
                                         reuse_ata=reuse_ata,
                                         verbose=verbose)

    out_path = create_output_folder(params['workdir'], 'inversion',
                                    tag=params['tag'],
                                    append_date=params['append_date'])
    assembly.write(out_path)
    write_unknowns(unknowns, os.path.join(out_path, UNKNOWNS_FILE))
    write_parameters(params, os.path.join(out_path, PARAMETER_FILE))
    if verbose:
        print('Normalized variance of the initial model: %.5f'\
              %assembly.normalized_variance)
        print('Output written to %s'%out_path)
    return out_path
