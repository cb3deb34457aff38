#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Locations
=========

Immutable value objects describing where things are: points inside the
Earth (:class:`FullPosition`), used to locate voxels and layers of the
model parameterization, and seismic receivers (:class:`Observer`).

Equality of positions is evaluated on coordinates rounded to
`DECIMALS` digits, so that the same point read from two different text
files (e.g., a partial-derivative dataset and an unknown-parameter list)
compares equal.
"""
DECIMALS = 6


class FullPosition:
    """
    Point inside the Earth

    Parameters
    ----------
    latitude, longitude : float
        Geographic coordinates, in degrees

    radius : float
        Distance from the center of the Earth, in km
    """

    __slots__ = ('_latitude', '_longitude', '_radius')

    def __init__(self, latitude, longitude, radius):
        object.__setattr__(self, '_latitude', float(latitude))
        object.__setattr__(self, '_longitude', float(longitude))
        object.__setattr__(self, '_radius', float(radius))


    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable'%self.__class__.__name__)


    @property
    def latitude(self):
        return self._latitude


    @property
    def longitude(self):
        return self._longitude


    @property
    def radius(self):
        return self._radius


    @property
    def key(self):
        return (round(self._latitude, DECIMALS),
                round(self._longitude, DECIMALS),
                round(self._radius, DECIMALS))


    def __eq__(self, other):
        if not isinstance(other, FullPosition):
            return NotImplemented
        return self.key == other.key


    def __hash__(self):
        return hash(self.key)


    def __str__(self):
        return '%s %s %s'%(self._latitude, self._longitude, self._radius)


    def __repr__(self):
        return 'FullPosition(%s, %s, %s)'%(self._latitude,
                                           self._longitude,
                                           self._radius)


    def __reduce__(self):
        return (self.__class__, (self._latitude, self._longitude, self._radius))


class Observer:
    """
    Seismic receiver, identified by station and network codes

    Parameters
    ----------
    station, network : str

    latitude, longitude : float
        Position of the receiver, in degrees. They do not take part in the
        equality of two observers
    """

    __slots__ = ('_station', '_network', '_latitude', '_longitude')

    def __init__(self, station, network, latitude=0., longitude=0.):
        object.__setattr__(self, '_station', str(station))
        object.__setattr__(self, '_network', str(network))
        object.__setattr__(self, '_latitude', float(latitude))
        object.__setattr__(self, '_longitude', float(longitude))


    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable'%self.__class__.__name__)


    @property
    def station(self):
        return self._station


    @property
    def network(self):
        return self._network


    @property
    def latitude(self):
        return self._latitude


    @property
    def longitude(self):
        return self._longitude


    def __eq__(self, other):
        if not isinstance(other, Observer):
            return NotImplemented
        return (self._station, self._network) == (other._station, other._network)


    def __hash__(self):
        return hash((self._station, self._network))


    def __str__(self):
        return '%s %s %s %s'%(self._station, self._network,
                              self._latitude, self._longitude)


    def __repr__(self):
        return 'Observer(%s.%s)'%(self._network, self._station)


    def __reduce__(self):
        return (self.__class__, (self._station, self._network,
                                 self._latitude, self._longitude))
