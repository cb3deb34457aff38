#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Parameter Files
===============

Each operation of the command line tool is configured through a YAML
parameter file. A commented template, listing all the parameters of an
operation together with their default values, can be created through

    $ kibrary template <operation>

Parameters whose default value is `REQUIRED` must be given. Relative paths
are resolved with respect to `workdir`, which is itself resolved with respect
to the folder containing the parameter file.

"""
import os
import re
import copy
import warnings
import yaml
from kibrary.exceptions import ParameterError

REQUIRED = 'REQUIRED'
OPERATIONS = ('arrange', 'solve', 'sum-solve')
PARAMETER_FILE = 'parameters.yaml'

_COMMON = [
    ('workdir', '.', 'Working directory, where the output folder is created'),
    ('tag', None, 'Tag included in the name of the output folder'),
    ('append_date', True, 'Whether to append a time stamp to the output folder name'),
    ('verbose', True, 'Whether to display progress in console'),
    ]

_WEIGHTING = [
    ('scheme', 'identity', 'Weighting scheme: identity, reciprocal, '
     'reciprocal_norm or amplitude_ratio'),
    ('factor_z', 1.0, 'Factor multiplied to the Z component'),
    ('factor_r', 1.0, 'Factor multiplied to the R component'),
    ('factor_t', 1.0, 'Factor multiplied to the T component'),
    ('balance_component', False, 'Whether to balance the number of '
     'timewindows of each component'),
    ('balance_geometry', False, 'Whether to balance event and observer '
     'positions (needs event_positions_path)'),
    ('event_positions_path', None, 'File listing: event latitude longitude'),
    ('weight_paths', [], 'Entry-weight files (event station network latitude '
     'longitude component weight)'),
    ]

_SOLVE = [
    ('methods', ['CG'], 'Inverse methods: CG, LS, SVD, NNLS, BCGS'),
    ('lambdas', [0.0], 'Damping parameters of the LS method'),
    ('t_path', None, 'Matrix T of the LS regularization (default: identity)'),
    ('eta_path', None, 'Vector eta of the LS regularization (default: zero)'),
    ('m0_path', None, 'Initial model of CG and BCGS (default: zero)'),
    ('alphas', [1.0, 100.0, 1000.0], 'Redundancy factors used for the AIC'),
    ('evaluate_num', 100, 'Maximum number of answers evaluated'),
    ('plot', True, 'Whether to plot variance and AIC'),
    ]

SCHEMA = {
    'arrange': _COMMON + [
        ('basic_path', REQUIRED, 'Basic ID file (observed and synthetic records)'),
        ('partial_path', REQUIRED, 'Partial ID file'),
        ('unknowns_path', REQUIRED, 'Unknown-parameter file'),
        ('require_all_partials', False, 'Whether missing partial derivatives '
         'are an error (otherwise they are zero)'),
        ('reuse_ata_path', None, 'Existing ata.lst; if given only Atd is computed'),
        ('weighting', _WEIGHTING, 'Weighting of the timewindows'),
        ],
    'solve': _COMMON + [
        ('inversion_path', REQUIRED, 'Folder containing ata.lst, atd.lst, '
         'dInfo.inf and unknowns.lst'),
        ] + _SOLVE,
    'sum-solve': _COMMON + [
        ('inversion_paths', REQUIRED, 'Folders containing ata.lst, atd.lst, '
         'dInfo.inf and unknowns.lst, to be summed'),
        ] + _SOLVE,
    }

PATH_KEYS = ('basic_path', 'partial_path', 'unknowns_path', 'reuse_ata_path',
             'inversion_path', 'inversion_paths', 't_path', 'eta_path',
             'm0_path', 'event_positions_path', 'weight_paths')
LIST_KEYS = ('methods', 'lambdas', 'alphas', 'inversion_paths', 'weight_paths')


def _check_operation(operation):
    if operation not in OPERATIONS:
        raise ParameterError('operation', '%s (choose among %s)'%(operation,
                                                                 OPERATIONS))


def defaults(operation):
    """ Default parameters of `operation`, as a dictionary """
    _check_operation(operation)

    def to_dict(schema):
        return {key: to_dict(value) if key == 'weighting' else copy.deepcopy(value)
                for key, value, _ in schema}

    return to_dict(SCHEMA[operation])


def loadyaml(filename):
    """
    Loads a YAML file, reading floats such as 1e-3 (which PyYAML reads as
    strings) as numbers, and the strings 'None' and 'inf' as None and
    float('inf')

    Parameters
    ----------
    filename : str

    Returns
    -------
    dict
    """
    class Loader(yaml.SafeLoader):
        pass

    Loader.add_implicit_resolver(
        u'tag:yaml.org,2002:float',
        re.compile(u'''^(?:
         [-+]?(?:[0-9][0-9_]*)\\.[0-9_]*(?:[eE][-+]?[0-9]+)?
        |[-+]?(?:[0-9][0-9_]*)(?:[eE][-+]?[0-9]+)
        |\\.[0-9_]+(?:[eE][-+][0-9]+)?
        |[-+]?[0-9][0-9_]*(?::[0-5]?[0-9])+\\.[0-9_]*
        |[-+]?\\.(?:inf|Inf|INF)
        |\\.(?:nan|NaN|NAN))$''', re.X),
        list(u'-+0123456789.'))

    with open(filename, 'r') as f:
        mydict = yaml.load(f, Loader=Loader)
    if mydict is None:
        mydict = dict()
    if not isinstance(mydict, dict):
        raise ParameterError('%s does not contain a mapping'%filename)

    def replace(d):
        for key, val in d.items():
            if isinstance(val, dict):
                replace(val)
            elif val == 'None':
                d[key] = None
            elif val == 'inf':
                d[key] = float('inf')

    replace(mydict)
    return mydict


def _resolve(path, workdir):
    if path is None:
        return None
    path = os.path.expanduser(str(path))
    return path if os.path.isabs(path) else os.path.abspath(os.path.join(workdir, path))


def _merge(params, default, section=None):
    merged = copy.deepcopy(default)
    for key, value in params.items():
        if key not in default:
            name = key if section is None else '%s.%s'%(section, key)
            warnings.warn('Unknown parameter ignored: %s'%name)
            continue
        if isinstance(default[key], dict):
            if value is None:
                continue
            if not isinstance(value, dict):
                raise ParameterError(key, value)
            merged[key] = _merge(value, default[key], section=key)
        else:
            merged[key] = value
    return merged


def _validate(params, section=None):
    for key, value in params.items():
        if isinstance(value, dict):
            _validate(value, section=key)
            continue
        name = key if section is None else '%s.%s'%(section, key)
        if value == REQUIRED:
            raise ParameterError('Parameter `%s` is required'%name)
        if key in LIST_KEYS:
            if value is None:
                value = []
            elif not isinstance(value, (list, tuple)):
                value = [value]
            params[key] = list(value)
    for key in ('lambdas', 'alphas'):
        if key in params:
            try:
                params[key] = [float(i) for i in params[key]]
            except (TypeError, ValueError):
                raise ParameterError(key, params[key]) from None
    if 'lambdas' in params and any(i < 0 for i in params['lambdas']):
        raise ParameterError('lambdas', params['lambdas'])
    if 'alphas' in params and (not params['alphas'] or any(i <= 0 for i in params['alphas'])):
        raise ParameterError('alphas', params['alphas'])
    if 'methods' in params and not params['methods']:
        raise ParameterError('methods', params['methods'])
    if 'evaluate_num' in params:
        try:
            params['evaluate_num'] = int(params['evaluate_num'])
        except (TypeError, ValueError):
            raise ParameterError('evaluate_num', params['evaluate_num']) from None


def _resolve_paths(params, workdir):
    for key, value in params.items():
        if isinstance(value, dict):
            _resolve_paths(value, workdir)
        elif key in PATH_KEYS:
            if isinstance(value, list):
                params[key] = [_resolve(i, workdir) for i in value]
            else:
                params[key] = _resolve(value, workdir)


def load_parameters(path, operation):
    """ Reads the parameter file of `operation`

    Missing parameters are set to their defaults, relative paths are resolved
    and the values are validated

    Parameters
    ----------
    path : str
        YAML parameter file

    operation : str
        One of `OPERATIONS`

    Returns
    -------
    dict

    Raises
    ------
    FileNotFoundError
        If `path` does not exist

    ParameterError
        If a required parameter is missing or a value is invalid
    """
    _check_operation(operation)
    if not os.path.isfile(path):
        raise FileNotFoundError('Parameter file not found: %s'%path)
    params = _merge(loadyaml(path), defaults(operation))
    _validate(params)
    basedir = os.path.dirname(os.path.abspath(path))
    params['workdir'] = _resolve(params['workdir'] or '.', basedir)
    _resolve_paths(params, params['workdir'])
    return params


def _template_lines(schema, indent=''):
    lines = []
    for key, value, description in schema:
        lines.append('%s# %s'%(indent, description))
        if key == 'weighting':
            lines.append('%s%s:'%(indent, key))
            lines.extend(_template_lines(value, indent=indent + '  '))
            continue
        dumped = yaml.safe_dump({key: value}, default_flow_style=True,
                                width=1000).strip()
        lines.append('%s%s'%(indent, dumped[1:-1].strip()))
    return lines


def write_template(operation, path):
    """ Writes a commented parameter file of `operation`, with the default
    values

    Raises
    ------
    FileExistsError
        If `path` already exists
    """
    _check_operation(operation)
    if os.path.exists(path):
        raise FileExistsError('%s already exists'%path)
    lines = ['# Parameter file of: kibrary %s'%operation,
             '# Parameters set to %s must be given'%REQUIRED, '']
    lines.extend(_template_lines(SCHEMA[operation]))
    with open(path, 'w') as f:
        f.write('\n'.join(lines) + '\n')
    return path


def write_parameters(params, path):
    """ Saves the (resolved) parameters of a run """
    with open(path, 'w') as f:
        yaml.safe_dump(params, f, default_flow_style=False, sort_keys=False)
