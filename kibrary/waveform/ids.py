#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Waveform Records
================

A timewindow cut from an observed or a synthetic seismogram is described by
a :class:`BasicID`: who recorded it (:class:`kibrary.location.Observer`),
which event generated it, the component, the seismic phases it contains,
its start time (in seconds after the origin time of the event), its
sampling rate, its number of points and its pass band. The sampled data
themselves, when available, are stored as a read-only numpy array.

Partial derivatives of a synthetic timewindow with respect to one unknown
parameter are described by :class:`PartialID`.

An observed and a synthetic record are *paired* when they share observer,
event, component, phases, sampling rate, number of points and pass band,
and when their start times differ by less than `START_TIME_DELAY_LIMIT`.

"""
from enum import Enum
import numpy as np
from obspy import UTCDateTime
from kibrary.location import Observer, DECIMALS
from kibrary.voxel.parameters import ParameterType, VariableType

START_TIME_DELAY_LIMIT = 15.0


class WaveformType(Enum):
    OBS = 'OBS'
    SYN = 'SYN'
    PARTIAL = 'PARTIAL'


def _round(value):
    return None if value is None else round(float(value), DECIMALS)


def _readonly(data):
    data = np.array(data, dtype=np.float64).ravel()
    data.setflags(write=False)
    return data


class BasicID:
    """
    Observed or synthetic timewindow

    Parameters
    ----------
    waveform_type : WaveformType or str
        'OBS' or 'SYN'

    observer : Observer

    event : str
        Event identifier

    component : str
        'Z', 'R' or 'T'

    start_time : float
        Start of the timewindow, in seconds after the origin time

    sampling_hz : float
        Sampling rate (Hz)

    npts : int, optional
        Number of samples. If None, it is taken from `data`

    phases : iterable of str
        Seismic phases contained in the timewindow (e.g., ['S', 'ScS'])

    min_period, max_period : float, optional
        Pass band of the waveform (s)

    data : array-like, optional
        Sampled waveform


    Attributes
    ----------
    data : ndarray of shape (npts,) or None
        Read-only copy of the waveform
    """

    def __init__(self, waveform_type, observer, event, component, start_time,
                 sampling_hz, npts=None, phases=(), min_period=None,
                 max_period=None, data=None):
        self.waveform_type = WaveformType(waveform_type)
        self.observer = observer
        self.event = str(event)
        self.component = str(component).upper()
        self.start_time = float(start_time)
        self.sampling_hz = float(sampling_hz)
        self.phases = tuple(phases)
        self.min_period = None if min_period is None else float(min_period)
        self.max_period = None if max_period is None else float(max_period)
        self.data = None if data is None else _readonly(data)
        if npts is None:
            if self.data is None:
                raise ValueError('Either npts or data must be given')
            npts = self.data.size
        self.npts = int(npts)
        if self.data is not None and self.data.size != self.npts:
            raise ValueError('npts (%d) and length of data (%d) differ'\
                             %(self.npts, self.data.size))


    @classmethod
    def from_trace(cls, trace, waveform_type, event, origin_time,
                   component=None, phases=(), min_period=None,
                   max_period=None, latitude=None, longitude=None):
        """ Builds a record from an ObsPy trace

        Parameters
        ----------
        trace : obspy.Trace
            Seismogram cut to the timewindow

        waveform_type : WaveformType or str

        event : str

        origin_time : obspy.UTCDateTime or str
            Origin time of the event; the start time of the record is
            measured from it

        component : str, optional
            If None, the last character of the channel code is used

        phases : iterable of str

        min_period, max_period : float, optional

        latitude, longitude : float, optional
            Coordinates of the receiver. If None, they are taken from the
            SAC header of the trace (stla, stlo), when present

        Returns
        -------
        BasicID
        """
        stats = trace.stats
        if latitude is None or longitude is None:
            sac = stats.get('sac', {})
            latitude = sac.get('stla', np.nan) if latitude is None else latitude
            longitude = sac.get('stlo', np.nan) if longitude is None else longitude
        observer = Observer(stats.station, stats.network, latitude, longitude)
        if component is None:
            component = stats.channel[-1]
        start_time = stats.starttime - UTCDateTime(origin_time)
        return cls(waveform_type=waveform_type,
                   observer=observer,
                   event=event,
                   component=component,
                   start_time=start_time,
                   sampling_hz=stats.sampling_rate,
                   npts=stats.npts,
                   phases=phases,
                   min_period=min_period,
                   max_period=max_period,
                   data=trace.data)


    @property
    def contains_data(self):
        return self.data is not None


    @property
    def window_key(self):
        """ Identity of the timewindow, regardless of its start time and
        number of points
        """
        return (self.observer, self.event, self.component, self.phases,
                _round(self.sampling_hz), _round(self.min_period),
                _round(self.max_period))


    @property
    def pair_key(self):
        """ Fields that must coincide for two records to be paired """
        return (self.observer, self.event, self.component, self.phases,
                _round(self.sampling_hz), self.npts, _round(self.min_period),
                _round(self.max_period))


    @property
    def key(self):
        return (self.waveform_type, self.pair_key, _round(self.start_time))


    def without_data(self):
        """ Copy of the record without waveform """
        return self.__class__(**self._kwargs(data=None))


    def with_data(self, data):
        """ Copy of the record carrying `data` """
        return self.__class__(**self._kwargs(data=data))


    def _kwargs(self, data):
        return dict(waveform_type=self.waveform_type,
                    observer=self.observer,
                    event=self.event,
                    component=self.component,
                    start_time=self.start_time,
                    sampling_hz=self.sampling_hz,
                    npts=self.npts,
                    phases=self.phases,
                    min_period=self.min_period,
                    max_period=self.max_period,
                    data=data)


    def __eq__(self, other):
        if not isinstance(other, BasicID):
            return NotImplemented
        return self.key == other.key


    def __hash__(self):
        return hash(self.key)


    def __str__(self):
        return '%s %s %s %s %s %s %s %s %s %s'%(self.observer, self.event,
                                                self.component,
                                                self.waveform_type.value,
                                                self.start_time, self.npts,
                                                self.sampling_hz,
                                                self.min_period,
                                                self.max_period,
                                                ','.join(self.phases))


    def __repr__(self):
        return '%s(%s)'%(self.__class__.__name__, self)


def is_pair(id0, id1):
    """ Whether two records refer to the same timewindow

    Parameters
    ----------
    id0, id1 : BasicID

    Returns
    -------
    bool
        True if they share the :attr:`BasicID.pair_key` and their start times
        differ by less than `START_TIME_DELAY_LIMIT`
    """
    return id0.pair_key == id1.pair_key \
        and abs(id0.start_time - id1.start_time) < START_TIME_DELAY_LIMIT


class PartialID(BasicID):
    """
    Partial derivative of a synthetic timewindow with respect to an unknown

    Parameters
    ----------
    observer, event, component, start_time, sampling_hz, npts, phases,
    min_period, max_period, data :
        As in :class:`BasicID`

    parameter_type : ParameterType or str
        'VOXEL', 'LAYER', 'SOURCE' or 'RECEIVER'

    variable_type : VariableType or str
        Differentiated property; 'TIME' for SOURCE and RECEIVER

    voxel_position : FullPosition, optional
        Location of the VOXEL unknown; only the radius is used for LAYER
        unknowns. Not needed for SOURCE and RECEIVER unknowns, whose location
        are the event and the observer of the record
    """

    def __init__(self, observer, event, component, start_time, sampling_hz,
                 parameter_type, variable_type, voxel_position=None,
                 npts=None, phases=(), min_period=None, max_period=None,
                 data=None, waveform_type=WaveformType.PARTIAL):
        super().__init__(WaveformType.PARTIAL, observer, event, component,
                         start_time, sampling_hz, npts=npts, phases=phases,
                         min_period=min_period, max_period=max_period,
                         data=data)
        self.parameter_type = ParameterType.of(parameter_type)
        self.variable_type = VariableType.of(variable_type)
        if self.parameter_type in (ParameterType.VOXEL, ParameterType.LAYER) \
                and voxel_position is None:
            raise ValueError('A position is needed for %s partials'\
                             %self.parameter_type.value)
        self.voxel_position = voxel_position


    @property
    def parameter_key(self):
        """ Identity of the unknown parameter this partial refers to, as
        given by :attr:`kibrary.voxel.UnknownParameter.key`
        """
        ptype = self.parameter_type
        if ptype is ParameterType.VOXEL:
            return ('VOXEL', self.variable_type.name, self.voxel_position.key)
        if ptype is ParameterType.LAYER:
            return ('LAYER', self.variable_type.name,
                    round(self.voxel_position.radius, DECIMALS))
        if ptype is ParameterType.SOURCE:
            return ('SOURCE', 'TIME', self.event)
        # Receiver-side partials refer to the direct phase
        return ('RECEIVER', 'TIME', self.observer, 1)


    @property
    def key(self):
        return (super().key, self.parameter_key)


    def _kwargs(self, data):
        kwargs = super()._kwargs(data)
        kwargs.update(parameter_type=self.parameter_type,
                      variable_type=self.variable_type,
                      voxel_position=self.voxel_position)
        return kwargs


    def __str__(self):
        location = '' if self.voxel_position is None else ' %s'%self.voxel_position
        return '%s %s %s%s'%(super().__str__(), self.parameter_type.value,
                             self.variable_type.name, location)
