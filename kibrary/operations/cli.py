#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The ``kibrary`` command line tool.

.. rubric::
    $ kibrary template solve          # writes parameters_solve.yaml
    $ kibrary solve -p parameters_solve.yaml
"""
import sys
import argparse
from kibrary.__version__ import __version__
from kibrary.config import OPERATIONS, load_parameters, write_template
from kibrary.operations.arranger import arrange
from kibrary.operations.solver import solve
from kibrary.operations.sum_solver import sum_solve


def kibrary_parser():
    """
    Command-line argument parser, with one sub-command per operation

    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='kibrary',
        description='Assembly and solution of the normal equations of '
                    'full-waveform inversions',
        epilog="'kibrary [command] -h' for more detailed descriptions of "
               "each command.")
    parser.add_argument('--version', action='version',
                        version='%(prog)s ' + __version__)
    subparser = parser.add_subparsers(title='command', dest='command')

    template = subparser.add_parser(
        'template', help='Write a default parameter file',
        description='Write a commented parameter file, with default values, '
                    'for one of the operations')
    template.add_argument('operation', choices=OPERATIONS,
                          help='Operation the parameter file refers to')
    template.add_argument('-o', '--output', default=None,
                          help='Output path, default: parameters_<operation>.yaml')

    descriptions = {
        'arrange': 'Build AtA, Atd and dInfo from basic and partial ID files',
        'solve': 'Solve the normal equations of an inversion folder',
        'sum-solve': 'Sum the normal equations of several inversion folders '
                     'and solve them',
        }
    for operation in OPERATIONS:
        sub = subparser.add_parser(operation, help=descriptions[operation],
                                   description=descriptions[operation])
        sub.add_argument('-p', '--parameter_file', required=True,
                         help='YAML parameter file')
    return parser


def main(argv=None):
    """ Entry point of the command line tool. Returns the exit status """
    parser = kibrary_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    if args.command == 'template':
        output = args.output or 'parameters_%s.yaml'%args.operation.replace('-', '_')
        write_template(args.operation, output)
        print('%s is created.'%output)
        return 0

    params = load_parameters(args.parameter_file, args.command)
    if args.command == 'arrange':
        arrange(params)
        return 0
    run = solve if args.command == 'solve' else sum_solve
    _, failed = run(params)
    if failed:
        print('Failed methods: %s'%', '.join(failed), file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
