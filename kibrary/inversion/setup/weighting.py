#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Weighting
=========

Timewindows of very different amplitude, or recorded at very dense parts of
the network, would otherwise dominate the inversion. Each timewindow :math:`i`
is therefore multiplied by a scalar :math:`w_i`, applied both to the rows of
:math:`\bf A` and to the entries of :math:`\bf d`, so that the normal
equations become :math:`{\bf A}^T {\bf W}^2 {\bf A} \cdot {\bf m} = {\bf A}^T
{\bf W}^2 \cdot {\bf d}`.

The weight is the product of

- a scheme-dependent factor (see `SCHEMES`):

  * `identity`: 1;
  * `reciprocal`: :math:`1 / \max |obs|`;
  * `reciprocal_norm`: :math:`1 / \| obs \|_2`;
  * `amplitude_ratio`: :math:`\min(r, 1/r)`, where :math:`r = \max |obs| /
    \max |syn|`;

- a factor depending on the component (Z, R or T);
- optionally, :math:`1 / \sqrt{N_c / N}`, where :math:`N_c` is the number of
  timewindows of the same component and :math:`N` the total number of
  timewindows (`balance_component`);
- optionally, :math:`1 / \sqrt{N_g}`, where :math:`N_g` is the number of
  timewindows of the same component whose event and observer both lie within
  `GEOMETRY_DISTANCE` degrees of those of the timewindow (`balance_geometry`);
- the square root of the weights listed, for each (event, observer,
  component), in any number of entry-weight files.

"""
import os
import numpy as np
from kibrary.exceptions import ConfigurationException
from kibrary.location import Observer
from kibrary.utils import epicentral_distance

SCHEMES = ('identity', 'reciprocal', 'reciprocal_norm', 'amplitude_ratio')
GEOMETRY_DISTANCE = 2.5


class Weighting:
    """
    Scalar weight of each timewindow

    Parameters
    ----------
    weights : array-like of shape (n_timewindow,)


    Attributes
    ----------
    weights : ndarray of shape (n_timewindow,)
        Read-only array of weights
    """

    def __init__(self, weights):
        weights = np.array(weights, dtype=np.float64).ravel()
        if not np.all(np.isfinite(weights)):
            raise ConfigurationException(message='Weights must be finite.')
        weights.setflags(write=False)
        self.weights = weights


    def __len__(self):
        return self.weights.size


    def get(self, i):
        """ Weight of the :math:`i`-th timewindow """
        return float(self.weights[i])


    @classmethod
    def identity(cls, n_timewindow):
        return cls(np.ones(n_timewindow))


class WeightingHandler:
    r"""
    Computes the weights of the timewindows of a :class:`DVectorBuilder`

    Parameters
    ----------
    scheme : str
        One of `SCHEMES`. Default is 'identity'

    factor_z, factor_r, factor_t : float
        Factors multiplied to the Z, R and T components. Default is 1

    balance_component : bool
        If `True`, the weights are divided by :math:`\sqrt{N_c / N}`

    balance_geometry : bool
        If `True`, the weights are divided by :math:`\sqrt{N_g}`. Requires
        `event_positions`

    weight_maps : list of dict, optional
        Each dictionary maps (event, observer, component) to a weight, whose
        square root is multiplied to the corresponding timewindow. See
        :func:`read_entry_weights`

    event_positions : dict, optional
        Maps event ids to (latitude, longitude), in degrees

    verbose : bool
        If `True` (default), information about the weighting is displayed
    """

    def __init__(self, scheme='identity', factor_z=1., factor_r=1., factor_t=1.,
                 balance_component=False, balance_geometry=False,
                 weight_maps=None, event_positions=None, verbose=True):
        scheme = str(scheme).lower()
        if scheme not in SCHEMES:
            raise ConfigurationException(message='Unknown weighting scheme: %s.'\
                                         ' Choose among %s'%(scheme, SCHEMES))
        if balance_geometry and event_positions is None:
            raise ConfigurationException(message='Event positions are needed'\
                                         ' to balance the geometry.')
        self.scheme = scheme
        self.factors = {'Z': float(factor_z),
                        'R': float(factor_r),
                        'T': float(factor_t)}
        self.balance_component = balance_component
        self.balance_geometry = balance_geometry
        self.weight_maps = list(weight_maps) if weight_maps else []
        self.event_positions = event_positions
        self.verbose = verbose


    @classmethod
    def identity(cls):
        return cls(verbose=False)


    @classmethod
    def from_parameters(cls, params, verbose=True):
        """ Builds the handler from the `weighting` section of a parameter
        file (see :mod:`kibrary.config`)

        Parameters
        ----------
        params : dict
            With keys 'scheme', 'factor_z', 'factor_r', 'factor_t',
            'balance_component', 'balance_geometry', 'weight_paths'
            and 'event_positions_path'. Paths must be absolute

        Returns
        -------
        WeightingHandler
        """
        weight_maps = [read_entry_weights(p) for p in params.get('weight_paths') or []]
        event_positions = None
        if params.get('event_positions_path'):
            event_positions = read_event_positions(params['event_positions_path'])
        return cls(scheme=params.get('scheme', 'identity'),
                   factor_z=params.get('factor_z', 1.),
                   factor_r=params.get('factor_r', 1.),
                   factor_t=params.get('factor_t', 1.),
                   balance_component=params.get('balance_component', False),
                   balance_geometry=params.get('balance_geometry', False),
                   weight_maps=weight_maps,
                   event_positions=event_positions,
                   verbose=verbose)


    def _scheme_factor(self, obs, syn):
        if self.scheme == 'identity':
            return 1.
        if self.scheme == 'reciprocal':
            return 1. / np.max(np.abs(obs))
        if self.scheme == 'reciprocal_norm':
            return 1. / np.linalg.norm(obs)
        ratio = np.max(np.abs(obs)) / np.max(np.abs(syn))
        return min(ratio, 1./ratio)


    def _geometry_counts(self, dvector):
        n = dvector.n_timewindow
        try:
            events = np.array([self.event_positions[i.event] for i in dvector.obs_ids],
                              dtype=np.float64).reshape(n, 2)
        except KeyError as e:
            raise ConfigurationException(message='Position of event %s not'\
                                         ' available.'%e.args[0]) from None
        observers = np.array([(i.observer.latitude, i.observer.longitude) \
                              for i in dvector.obs_ids], dtype=np.float64).reshape(n, 2)
        components = np.array([i.component for i in dvector.obs_ids])
        counts = np.zeros(n, dtype=int)
        for i in range(n):
            dist_event = epicentral_distance(events[i, 0], events[i, 1],
                                             events[:, 0], events[:, 1])
            dist_observer = epicentral_distance(observers[i, 0], observers[i, 1],
                                                observers[:, 0], observers[:, 1])
            close = (components == components[i]) \
                    & (dist_event < GEOMETRY_DISTANCE) \
                    & (dist_observer < GEOMETRY_DISTANCE)
            counts[i] = np.sum(close)
        return counts


    def weigh(self, dvector):
        """ Computes the weight of each timewindow of `dvector`

        Parameters
        ----------
        dvector : DVectorBuilder

        Returns
        -------
        Weighting

        Raises
        ------
        ConfigurationException
            If an entry-weight map lacks a timewindow, or the position of an
            event is not available
        """
        n = dvector.n_timewindow
        components = [i.component for i in dvector.obs_ids]
        counts = {c: components.count(c) for c in set(components)}
        geometry = self._geometry_counts(dvector) if self.balance_geometry else None

        weights = np.ones(n)
        for i in range(n):
            obs_id = dvector.obs_ids[i]
            weight = self._scheme_factor(obs_id.data, dvector.syn_ids[i].data)
            weight *= self.factors.get(obs_id.component, 1.)
            if self.balance_component:
                weight /= np.sqrt(counts[obs_id.component] / n)
            if geometry is not None:
                weight /= np.sqrt(geometry[i])
            entry = (obs_id.event, obs_id.observer, obs_id.component)
            for weight_map in self.weight_maps:
                if entry not in weight_map:
                    raise ConfigurationException(obs_id, message='Timewindow not'\
                                                 ' listed in an entry-weight map.')
                weight *= np.sqrt(weight_map[entry])
            weights[i] = weight
        if self.verbose:
            print('Weighting (%s): min %.3e, max %.3e'%(self.scheme,
                  np.min(weights) if n else np.nan, np.max(weights) if n else np.nan))
        return Weighting(weights)


def read_entry_weights(path):
    """ Reads an entry-weight file

    Each line contains: event station network latitude longitude component
    weight. Lines starting with `#` are ignored.

    Parameters
    ----------
    path : str

    Returns
    -------
    dict
        Maps (event, Observer, component) to the weight
    """
    if not os.path.isfile(path):
        raise FileNotFoundError('Entry-weight file not found: %s'%path)
    weight_map = {}
    with open(path) as f:
        for line in f:
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            if len(parts) != 7:
                raise ValueError('Invalid entry-weight line in %s: %s'%(path, line))
            observer = Observer(parts[1], parts[2], float(parts[3]), float(parts[4]))
            weight_map[(parts[0], observer, parts[5].upper())] = float(parts[6])
    return weight_map


def write_entry_weights(weight_map, path):
    """ Writes a dictionary such as the one returned by
    :func:`read_entry_weights` to `path`
    """
    with open(path, 'w') as f:
        f.write('# event station network latitude longitude component weight\n')
        for (event, observer, component), weight in sorted(weight_map.items(),
                key=lambda item: (item[0][0], item[0][1].network,
                                  item[0][1].station, item[0][2])):
            f.write('%s %s %s %s\n'%(event, observer, component, repr(float(weight))))


def read_event_positions(path):
    """ Reads a file listing, on each line, an event id followed by its
    latitude and longitude

    Returns
    -------
    dict
        Maps event ids to (latitude, longitude)
    """
    if not os.path.isfile(path):
        raise FileNotFoundError('Event-position file not found: %s'%path)
    positions = {}
    with open(path) as f:
        for line in f:
            line = line.split('#', 1)[0].strip()
            if not line:
                continue
            event, lat, lon = line.split()[:3]
            positions[event] = (float(lat), float(lon))
    return positions
