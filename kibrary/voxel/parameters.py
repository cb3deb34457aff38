#!/usr/bin/env python3
# -*- coding: utf-8 -*-
r"""
Unknown Parameters
==================

Each column of the matrix :math:`\bf A` corresponds to one scalar degree of
freedom of the model, here called *unknown parameter*. Kibrary supports four
kinds of unknowns:

- :class:`Physical3DParameter` (``VOXEL``): perturbation of an elastic
  property (see :class:`VariableType`) inside a 3-D voxel;
- :class:`Physical1DParameter` (``LAYER``): perturbation of an elastic
  property inside a spherical shell of given radius;
- :class:`TimeSourceSideParameter` (``SOURCE``): time shift affecting all the
  records of one event;
- :class:`TimeReceiverSideParameter` (``RECEIVER``): time shift affecting all
  the records of one station.

Every unknown carries a weighting coefficient `size` (e.g., the volume of the
voxel) that multiplies the partial derivatives before the inversion. The
coefficient does not take part in the identity of the parameter: two unknowns
differing only in `size` are the same unknown.

"""
from enum import Enum
from kibrary.location import FullPosition, Observer, DECIMALS


class ParameterType(Enum):
    VOXEL = 'VOXEL'
    LAYER = 'LAYER'
    SOURCE = 'SOURCE'
    RECEIVER = 'RECEIVER'


    @classmethod
    def of(cls, name):
        """ Parameter type corresponding to `name` (case insensitive) """
        if isinstance(name, cls):
            return name
        try:
            return cls[str(name).upper()]
        except KeyError:
            raise ValueError('Unknown parameter type: %s'%name) from None


class VariableType(Enum):
    RHO = 'RHO'
    Vp = 'Vp'
    Vs = 'Vs'
    Vb = 'Vb'
    LAMBDA = 'LAMBDA'
    MU = 'MU'
    LAMBDA2MU = 'LAMBDA2MU'
    KAPPA = 'KAPPA'
    Vpv = 'Vpv'
    Vph = 'Vph'
    Vsv = 'Vsv'
    Vsh = 'Vsh'
    ETA = 'ETA'
    A = 'A'
    C = 'C'
    F = 'F'
    L = 'L'
    N = 'N'
    XI = 'XI'
    Qmu = 'Qmu'
    Qkappa = 'Qkappa'
    TIME = 'TIME'


    @classmethod
    def of(cls, name):
        """ Variable type corresponding to `name` """
        if isinstance(name, cls):
            return name
        try:
            return cls[name]
        except KeyError:
            pass
        for member in cls:
            if member.name.upper() == str(name).upper():
                return member
        raise ValueError('Unknown variable type: %s'%name)


class UnknownParameter:
    """
    Base class of the unknown parameters. Subclasses define :attr:`key`,
    the hashable identity of the parameter, and :meth:`to_line`, the
    representation used in the parameter files.
    """

    parameter_type = None
    __slots__ = ('_size',)

    def __init__(self, size):
        object.__setattr__(self, '_size', float(size))


    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable'%self.__class__.__name__)


    @property
    def size(self):
        """ Weighting coefficient applied to the partial derivatives """
        return self._size


    @property
    def variable_type(self):
        return VariableType.TIME


    @property
    def key(self):
        raise NotImplementedError


    def to_line(self):
        raise NotImplementedError


    def __eq__(self, other):
        if not isinstance(other, UnknownParameter):
            return NotImplemented
        return self.key == other.key


    def __hash__(self):
        return hash(self.key)


    def __str__(self):
        return self.to_line()


    def __repr__(self):
        return '%s(%s)'%(self.__class__.__name__, self.to_line())


class Physical3DParameter(UnknownParameter):
    """
    Elastic perturbation inside a voxel

    Parameters
    ----------
    variable_type : str or VariableType
        Perturbed property (e.g., 'Vs', 'MU')

    position : FullPosition
        Center of the voxel

    size : float
        Weighting coefficient (e.g., volume of the voxel)
    """

    parameter_type = ParameterType.VOXEL
    __slots__ = ('_variable_type', '_position')

    def __init__(self, variable_type, position, size):
        super().__init__(size)
        object.__setattr__(self, '_variable_type', VariableType.of(variable_type))
        object.__setattr__(self, '_position', position)


    @property
    def variable_type(self):
        return self._variable_type


    @property
    def position(self):
        return self._position


    @property
    def key(self):
        return ('VOXEL', self._variable_type.name, self._position.key)


    def to_line(self):
        return 'VOXEL %s %s %s %s %s'%(self._variable_type.name,
                                       self._position.latitude,
                                       self._position.longitude,
                                       self._position.radius,
                                       self._size)


    def __reduce__(self):
        return (self.__class__, (self._variable_type, self._position, self._size))


class Physical1DParameter(UnknownParameter):
    """
    Elastic perturbation inside a spherical shell

    Parameters
    ----------
    variable_type : str or VariableType

    radius : float
        Radius of the layer (km)

    size : float
        Weighting coefficient (e.g., thickness of the layer)
    """

    parameter_type = ParameterType.LAYER
    __slots__ = ('_variable_type', '_radius')

    def __init__(self, variable_type, radius, size):
        super().__init__(size)
        object.__setattr__(self, '_variable_type', VariableType.of(variable_type))
        object.__setattr__(self, '_radius', float(radius))


    @property
    def variable_type(self):
        return self._variable_type


    @property
    def radius(self):
        return self._radius


    @property
    def key(self):
        return ('LAYER', self._variable_type.name, round(self._radius, DECIMALS))


    def to_line(self):
        return 'LAYER %s %s %s'%(self._variable_type.name, self._radius, self._size)


    def __reduce__(self):
        return (self.__class__, (self._variable_type, self._radius, self._size))


class TimeSourceSideParameter(UnknownParameter):
    """
    Time shift common to all the records of an event

    Parameters
    ----------
    event : str
        Event identifier (e.g., GlobalCMT id)

    size : float
    """

    parameter_type = ParameterType.SOURCE
    __slots__ = ('_event',)

    def __init__(self, event, size=1.):
        super().__init__(size)
        object.__setattr__(self, '_event', str(event))


    @property
    def event(self):
        return self._event


    @property
    def key(self):
        return ('SOURCE', 'TIME', self._event)


    def to_line(self):
        return 'SOURCE TIME %s %s'%(self._event, self._size)


    def __reduce__(self):
        return (self.__class__, (self._event, self._size))


class TimeReceiverSideParameter(UnknownParameter):
    """
    Time shift common to all the records of a station

    Parameters
    ----------
    observer : Observer

    bouncing_order : int
        Distinguishes the time terms of phases bouncing a different number
        of times beneath the receiver (1 for direct phases)

    size : float
    """

    parameter_type = ParameterType.RECEIVER
    __slots__ = ('_observer', '_bouncing_order')

    def __init__(self, observer, bouncing_order=1, size=1.):
        super().__init__(size)
        object.__setattr__(self, '_observer', observer)
        object.__setattr__(self, '_bouncing_order', int(bouncing_order))


    @property
    def observer(self):
        return self._observer


    @property
    def bouncing_order(self):
        return self._bouncing_order


    @property
    def key(self):
        return ('RECEIVER', 'TIME', self._observer, self._bouncing_order)


    def to_line(self):
        return 'RECEIVER TIME %s %s %s %s %s %s'%(self._observer.station,
                                                  self._observer.network,
                                                  self._observer.latitude,
                                                  self._observer.longitude,
                                                  self._bouncing_order,
                                                  self._size)


    def __reduce__(self):
        return (self.__class__, (self._observer, self._bouncing_order, self._size))


def parameter_from_line(line):
    """ Parses one line of an unknown-parameter file

    Parameters
    ----------
    line : str
        Whitespace-separated fields, e.g. 'VOXEL MU 10.0 20.0 6000.0 1.0',
        'LAYER MU 6000.0 1.0', 'SOURCE TIME 201104170158A 1.0',
        'RECEIVER TIME AAK II 42.6 74.5 1 1.0'

    Returns
    -------
    UnknownParameter

    Raises
    ------
    ValueError
        If the line cannot be parsed
    """
    parts = line.split()
    if not parts:
        raise ValueError('Empty parameter line')
    ptype = ParameterType.of(parts[0])
    try:
        if ptype is ParameterType.VOXEL:
            lat, lon, r, size = map(float, parts[2:6])
            if len(parts) != 6:
                raise ValueError
            return Physical3DParameter(parts[1], FullPosition(lat, lon, r), size)
        if ptype is ParameterType.LAYER:
            if len(parts) != 4:
                raise ValueError
            return Physical1DParameter(parts[1], float(parts[2]), float(parts[3]))
        if ptype is ParameterType.SOURCE:
            if len(parts) != 4:
                raise ValueError
            return TimeSourceSideParameter(parts[2], float(parts[3]))
        if len(parts) != 8:
            raise ValueError
        observer = Observer(parts[2], parts[3], float(parts[4]), float(parts[5]))
        return TimeReceiverSideParameter(observer, int(parts[6]), float(parts[7]))
    except ValueError:
        raise ValueError('Invalid parameter line: %s'%line.strip()) from None
