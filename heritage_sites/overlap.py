"""
Point-in-raster overlap classification.

This module contains:
- CoverageMask, an immutable in-memory georeferenced raster
- Binarization of categorical land-use codes
- Reprojection of masks to a common CRS
- Sampling of one cell per site and the derived overlap flag
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from pyproj import CRS
from rasterio.enums import Resampling
from rasterio.transform import array_bounds, rowcol
from rasterio.warp import calculate_default_transform, reproject

logger = logging.getLogger(__name__)

# Nodata value written by binarize_mask
BINARY_NODATA = 255


@dataclass(frozen=True)
class CoverageMask:
    """
    Georeferenced raster of a land-use class.

    Parameters
    ----------
    data : numpy.ndarray
        2-D grid of cell values. A read-only copy is kept.
    transform : affine.Affine
        Maps (col, row) cell indices to coordinates in ``crs``.
    crs : str or rasterio.crs.CRS or pyproj.CRS
        Coordinate reference system of the grid.
    nodata : float, optional
        Cell value meaning "no valid data here".
    """
    data: np.ndarray
    transform: object
    crs: object
    nodata: float = None

    def __post_init__(self):
        data = np.array(self.data, copy=True)
        if data.ndim != 2:
            raise ValueError(f"Mask data must be 2-D, got shape {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, 'data', data)

    @property
    def shape(self):
        return self.data.shape

    @property
    def bounds(self):
        """(left, bottom, right, top) of the grid."""
        height, width = self.shape
        west, south, east, north = array_bounds(height, width, self.transform)
        return west, south, east, north

    def valid_cells(self):
        """Boolean grid, False where the cell is nodata or NaN."""
        valid = np.ones(self.shape, dtype=bool)
        if self.data.dtype.kind == 'f':
            valid &= ~np.isnan(self.data)
        if self.nodata is not None and not np.isnan(self.nodata):
            valid &= self.data != self.nodata
        return valid


def binarize_mask(mask, class_codes):
    """
    Map selected class codes to 1 and every other valid cell to 0.

    Parameters
    ----------
    mask : CoverageMask
        Categorical raster (e.g. land cover codes).
    class_codes : iterable of int
        Codes that count as "covered".

    Returns
    -------
    CoverageMask
        uint8 mask with values 0/1 and nodata cells set to BINARY_NODATA.
    """
    codes = list(class_codes)
    if not codes:
        raise ValueError("class_codes must list at least one code")

    binary = np.isin(mask.data, codes).astype('uint8')
    binary[~mask.valid_cells()] = BINARY_NODATA

    logger.debug(
        "Binarized mask with codes %s: %d covered cells", codes, int((binary == 1).sum())
    )
    return CoverageMask(binary, mask.transform, mask.crs, nodata=BINARY_NODATA)


def same_crs(crs_a, crs_b):
    """True when two CRS definitions describe the same reference."""
    if crs_a is None or crs_b is None:
        return crs_a is None and crs_b is None
    return CRS.from_user_input(crs_a) == CRS.from_user_input(crs_b)


def align_mask(mask, dst_crs):
    """
    Reproject a mask to ``dst_crs`` with nearest-neighbour resampling.

    Only the CRS is matched; the output grid is whatever
    calculate_default_transform picks, since sampling is point based.
    Returns the input unchanged when the CRS already matches.
    """
    if dst_crs is None or same_crs(mask.crs, dst_crs):
        return mask

    height, width = mask.shape
    transform, dst_width, dst_height = calculate_default_transform(
        mask.crs, dst_crs, width, height, *mask.bounds
    )

    nodata = mask.nodata
    if nodata is None and mask.data.dtype.kind == 'f':
        nodata = np.nan
    # Without a nodata value, cells outside the source grid read as 0 (not covered)
    fill = 0 if nodata is None else nodata
    destination = np.full((dst_height, dst_width), fill, dtype=mask.data.dtype)

    reproject(
        source=np.ascontiguousarray(mask.data),
        destination=destination,
        src_transform=mask.transform,
        src_crs=mask.crs,
        src_nodata=nodata,
        dst_transform=transform,
        dst_crs=dst_crs,
        dst_nodata=nodata,
        # Categorical data: never interpolate class codes
        resampling=Resampling.nearest,
    )

    logger.info("Reprojected mask from %s to %s (%dx%d)", mask.crs, dst_crs, dst_width, dst_height)
    return CoverageMask(destination, transform, dst_crs, nodata=mask.nodata)


def sample_mask_values(mask, sites):
    """
    Read the single cell under each site.

    Parameters
    ----------
    mask : CoverageMask
        Raster to sample.
    sites : GeoDataFrame
        Point geometries. Reprojected to the mask CRS when needed.

    Returns
    -------
    Series
        Cell value per site (aligned with ``sites.index``), NaN when the
        point lies outside the grid or on a nodata cell.
    """
    values = np.full(len(sites), np.nan, dtype='float64')
    if len(sites) == 0:
        return pd.Series(values, index=sites.index, name='value')

    if sites.crs is not None and not same_crs(sites.crs, mask.crs):
        sites = sites.to_crs(mask.crs)

    xs = sites.geometry.x.to_numpy()
    ys = sites.geometry.y.to_numpy()
    rows, cols = rowcol(mask.transform, xs, ys)
    rows = np.asarray(rows, dtype='int64')
    cols = np.asarray(cols, dtype='int64')

    height, width = mask.shape
    inside = (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)

    valid = np.zeros(len(sites), dtype=bool)
    valid[inside] = mask.valid_cells()[rows[inside], cols[inside]]
    values[valid] = mask.data[rows[valid], cols[valid]]

    n_outside = int((~inside).sum())
    if n_outside:
        logger.debug("%d of %d sites fall outside the mask extent", n_outside, len(sites))

    return pd.Series(values, index=sites.index, name='value')


def classify_overlap(mask, sites, flag_name='covered'):
    """
    Produce one overlap flag per site.

    A site is covered when the cell containing it holds a nonzero value.
    Points outside the grid and nodata cells are not covered.

    Parameters
    ----------
    mask : CoverageMask
        Binary mask (0/1). Categorical rasters must be binarized first.
    sites : GeoDataFrame
        Sites with a ``site_id`` column and point geometries.
    flag_name : str, optional
        Name of the output flag column. Default 'covered'.

    Returns
    -------
    DataFrame
        Columns ``site_id`` and ``flag_name``; exactly one row per site.
    """
    values = sample_mask_values(mask, sites)
    flags = values.notna().to_numpy() & (values.fillna(0).to_numpy() != 0)

    records = pd.DataFrame({
        'site_id': sites['site_id'].to_numpy(),
        flag_name: flags,
    })
    logger.info("%s: %d of %d sites covered", flag_name, int(flags.sum()), len(records))
    return records
