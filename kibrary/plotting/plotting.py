#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Figures of the evaluation of the answers and of the solved voxel values.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib as mpl
from mpl_toolkits.axes_grid1 import make_axes_locatable
import cartopy.crs as ccrs
import cartopy.feature as cfeature
from kibrary.voxel.parameters import ParameterType, VariableType



def add_earth_features(ax, scale='110m', oceans_color='aqua',
                       lands_color='coral', edgecolor='k', lands_lw=0.5,
                       oceans_lw=0.5):
    """
    Adds natural features to a `cartopy.mpl.geoaxes.GeoAxesSubplot`, fetching
    data from the `Natural Earth dataset <http://www.naturalearthdata.com/>`_

    Parameters
    ----------
    ax : cartopy.mpl.geoaxes.GeoAxesSubplot

    scale : {'10m', '50m', '110m'}
        Resolution of the Earth features displayed in the figure. Passed to
        `cartopy.feature.NaturalEarthFeature`. Default is '110m'

    oceans_color, lands_color : str
        Color of oceans and continents in the map. They should be valid
        `matplotlib` colors or be part of `cartopy.cfeature.COLORS`. Defaults
        are 'aqua' and 'coral'

    edgecolor : str
        Color of the coastlines. Default is 'k' (black)

    lands_lw, oceans_lw : float
        Linewidths for lands and oceans
    """
    if oceans_color == 'water':
        oceans_color = cfeature.COLORS[oceans_color]
    if lands_color == 'land':
        lands_color = cfeature.COLORS[lands_color]
    land = cfeature.NaturalEarthFeature('physical',
                                        'land',
                                        scale=scale,
                                        edgecolor=edgecolor,
                                        facecolor=lands_color)
    ocean = cfeature.NaturalEarthFeature('physical',
                                         'ocean',
                                         scale=scale,
                                         edgecolor=edgecolor,
                                         facecolor=oceans_color)
    ax.add_feature(land, linewidth=lands_lw)
    ax.add_feature(ocean, linewidth=oceans_lw)


def make_colorbar(ax, mappable, size='5%', pad='3%', **kwargs):
    """ Prepares and attaches a colorbar to the GeoAxesSubplot

    Parameters
    ----------
    ax : cartopy.mpl.geoaxes.GeoAxesSubplot

    mappable : matplotlib.cm.ScalarMappable

    size : str
        Width of the colorbar, default is '5%'

    pad : str
        Space between the colorbar and ax, default is '3%'

    **kwargs
        Additional keyword arguments passed to
        `matplotlib.pyplot.colorbar`


    Returns
    -------
    matplotlib.colorbar.Colorbar
    """
    divider = make_axes_locatable(ax)
    orientation = kwargs.pop('orientation', 'horizontal')
    loc = 'right' if orientation == 'vertical' else 'bottom'
    cax = divider.append_axes(loc, size, pad=pad, axes_class=mpl.pyplot.Axes)
    cb = ax.get_figure().colorbar(mappable,
                                  cax=cax,
                                  orientation=orientation,
                                  **kwargs)
    return cb


def _finalize(fig, show, save):
    if save is not None:
        fig.savefig(save, dpi=200, bbox_inches='tight')
    if show:
        plt.show()
    elif save is not None:
        plt.close(fig)


def plot_evaluation(x, variances, aics, xlabel='i', logx=False, ax=None,
                    show=True, save=None):
    """
    Displays the normalized variance (right axis, in percent) and the AIC
    (left axis, one curve per alpha) of a series of models

    Parameters
    ----------
    x : ndarray of shape (n,)
        Abscissa of the models (index of the answer or damping parameter)

    variances : ndarray of shape (n,)
        Normalized variances

    aics : dict
        Maps each alpha to an ndarray of shape (n,)

    xlabel : str

    logx : bool
        If `True`, the abscissa is in logarithmic scale

    ax : matplotlib.axes.Axes, optional
        If None, a new figure is created

    show : bool
        If `True` (default), the figure is showed once generated

    save : str, optional
        If not None, the figure is saved to this path


    Returns
    -------
    ax, ax_variance : matplotlib.axes.Axes
        Returned only if `show` is `False` and `save` is None
    """
    if ax is None:
        fig = plt.figure(figsize=(7, 4.5))
        ax = fig.add_subplot(1, 1, 1)
    fig = ax.get_figure()
    colors = plt.rcParams['axes.prop_cycle'].by_key()['color']
    for i, (alpha, aic) in enumerate(sorted(aics.items())):
        ax.plot(x, aic, color=colors[i % len(colors)], lw=1.5,
                label=r'AIC, $\alpha$ = %s'%np.format_float_positional(alpha, trim='-'))
    ax.set_xlabel(xlabel)
    ax.set_ylabel('AIC')
    ax_variance = ax.twinx()
    ax_variance.plot(x, np.asarray(variances)*100, color='k', ls='--', lw=1.5,
                     label='Normalized variance')
    ax_variance.set_ylabel('Normalized variance (%)')
    if logx:
        ax.set_xscale('log')
    handles, labels = ax.get_legend_handles_labels()
    handles2, labels2 = ax_variance.get_legend_handles_labels()
    ax.legend(handles + handles2, labels + labels2, loc='upper right',
              framealpha=0.9)
    if show or save is not None:
        _finalize(fig, show, save)
    else:
        return ax, ax_variance


def plot_voxel_map(unknowns, values, radius, variable_type=None, ax=None,
                   projection='Robinson', map_boundaries=None, add_features=None,
                   resolution='110m', colorbar=True, cmap='RdBu', vmin=None,
                   vmax=None, show=True, save=None, cbar_dict={}, **kwargs):
    """
    Displays the values of the VOXEL unknowns located at a given radius

    Parameters
    ----------
    unknowns : list of UnknownParameter

    values : ndarray of shape (n,)
        Value of each unknown (e.g., an answer of an inversion)

    radius : float
        Radius (km) of the voxels displayed

    variable_type : str or VariableType, optional
        If not None, only the unknowns of this variable are displayed

    ax : cartopy.mpl.geoaxes.GeoAxesSubplot, optional
        If None, a new figure is created using `projection`

    projection : str
        Name of a `cartopy.crs` projection. Default is 'Robinson'

    map_boundaries : list or tuple of floats, shape (4,), optional
        Lonmin, lonmax, latmin, latmax (in degrees) defining the extent of
        the map. If None, the whole globe is displayed

    add_features : bool, optional
        If `True`, coastlines are drawn. Default is `True` when `ax` is None

    resolution : {'10m', '50m', '110m'}
        Resolution of the Earth features

    colorbar : bool

    cmap, vmin, vmax :
        Passed to `matplotlib.pyplot.scatter`. If `vmin` and `vmax` are
        None, a colorscale symmetric about zero is used

    show : bool

    save : str, optional
        If not None, the figure is saved to this path

    cbar_dict : dict
        Keyword arguments passed to :func:`make_colorbar`

    **kwargs
        Additional inputs passed to `matplotlib.pyplot.scatter`


    Returns
    -------
    If show is False and save is None, the `PathCollection` of the scatter
    plot, together with the colorbar (if `colorbar` is `True`)

    Raises
    ------
    ValueError
        If no VOXEL unknown lies at `radius`
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size != len(unknowns):
        raise ValueError('%d values for %d unknowns'%(values.size, len(unknowns)))
    if variable_type is not None:
        variable_type = VariableType.of(variable_type)
    lats, lons, c = [], [], []
    for unknown, value in zip(unknowns, values):
        if unknown.parameter_type is not ParameterType.VOXEL:
            continue
        if variable_type is not None and unknown.variable_type is not variable_type:
            continue
        if not np.isclose(unknown.position.radius, radius):
            continue
        lats.append(unknown.position.latitude)
        lons.append(unknown.position.longitude)
        c.append(value)
    if not c:
        raise ValueError('No voxel at radius %s'%radius)
    c = np.array(c)
    if vmin is None and vmax is None:
        vmax = np.nanmax(np.abs(c))
        vmin = -vmax

    add_features = add_features if add_features is not None else ax is None
    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(1, 1, 1, projection=getattr(ccrs, projection)())
    if add_features:
        add_earth_features(ax,
                           scale=resolution,
                           oceans_color='none',
                           edgecolor='k',
                           lands_color='none')
    img = ax.scatter(lons, lats, c=c, cmap=cmap, vmin=vmin, vmax=vmax,
                     transform=ccrs.PlateCarree(), **kwargs)
    if map_boundaries is not None:
        ax.set_extent(map_boundaries, ccrs.PlateCarree())
    else:
        ax.set_global()
    cb = make_colorbar(ax, img, **cbar_dict) if colorbar else None
    if show or save is not None:
        _finalize(ax.get_figure(), show, save)
    else:
        return (img, cb) if colorbar else img
