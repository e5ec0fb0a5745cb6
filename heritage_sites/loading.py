"""
Raster, site table and boundary loading functions.

This module contains functions for:
- Reading coverage mask rasters, clipped to a region and aligned to a CRS
- Reading the heritage site table and assigning stable site identifiers
- Selecting administrative boundary polygons for a geographic scope
"""

import logging
from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
import rasterio
from rasterio.errors import RasterioIOError
from rasterio.mask import mask as rio_mask

from heritage_sites.config import SITE_COLUMNS, STORAGE_CRS, BOUNDARY_NAME_FIELD
from heritage_sites.exceptions import LoadError, GeometryError
from heritage_sites.overlap import CoverageMask, align_mask, binarize_mask

logger = logging.getLogger(__name__)


def _as_geoseries(region, region_crs=None):
    """Wrap a region (GeoDataFrame, GeoSeries or shapely geometry) as a GeoSeries."""
    if isinstance(region, gpd.GeoDataFrame):
        return region.geometry
    if isinstance(region, gpd.GeoSeries):
        return region
    return gpd.GeoSeries([region], crs=region_crs)


def _clip_shapes(region, region_crs, raster_crs):
    """GeoJSON-like shapes of a region in the raster CRS."""
    geoms = _as_geoseries(region, region_crs)
    if geoms.crs is not None and raster_crs is not None:
        geoms = geoms.to_crs(raster_crs)
    return [geom.__geo_interface__ for geom in geoms if geom is not None and not geom.is_empty]


def load_coverage_mask(path, clip_geometry=None, clip_crs=None, dst_crs=None,
                       band=1, class_codes=None):
    """
    Load one band of a raster as a CoverageMask.

    Parameters
    ----------
    path : str or Path
        Raster file readable by rasterio.
    clip_geometry : GeoDataFrame, GeoSeries or shapely geometry, optional
        Region to crop to. Cells outside the region become nodata
        (or 0 when the raster declares no nodata value).
    clip_crs : str, optional
        CRS of ``clip_geometry`` when it is a bare shapely geometry.
    dst_crs : str or CRS, optional
        Target CRS. The mask is reprojected when it differs.
    band : int, optional
        Band index to read. Default 1.
    class_codes : iterable of int, optional
        When given, the mask is binarized: these codes become 1, the rest 0.

    Returns
    -------
    CoverageMask

    Raises
    ------
    LoadError
        The file is missing or cannot be read.
    GeometryError
        The clip region does not intersect the raster extent.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError("Raster file not found", path=str(path))

    try:
        with rasterio.open(path) as src:
            if band < 1 or band > src.count:
                raise LoadError(f"Band {band} not in raster (has {src.count})", path=str(path))

            if clip_geometry is not None:
                shapes = _clip_shapes(clip_geometry, clip_crs, src.crs)
                if not shapes:
                    raise GeometryError("Clip region is empty", path=str(path))
                try:
                    data, transform = rio_mask(src, shapes, crop=True, indexes=band)
                except ValueError as e:
                    raise GeometryError(
                        f"Clip region does not intersect raster extent ({e})", path=str(path)
                    ) from e
            else:
                data = src.read(band)
                transform = src.transform

            coverage = CoverageMask(data, transform, src.crs, nodata=src.nodata)
    except RasterioIOError as e:
        raise LoadError(f"Cannot read raster: {e}", path=str(path)) from e

    logger.info("Loaded %s: %dx%d cells, CRS %s", path.name, coverage.shape[1],
                coverage.shape[0], coverage.crs)

    coverage = align_mask(coverage, dst_crs)
    if class_codes is not None:
        coverage = binarize_mask(coverage, class_codes)
    return coverage


def clip_sites(sites, region, region_crs=None):
    """
    Keep the sites whose point lies within a region.

    Identifiers are left untouched; re-load to get contiguous ids.
    """
    geoms = _as_geoseries(region, region_crs)
    if geoms.crs is not None and sites.crs is not None:
        geoms = geoms.to_crs(sites.crs)
    area = geoms.union_all()
    return sites[sites.geometry.within(area)].copy()


def prepare_sites(df, category="Cultural", crs=None, region=None,
                  columns=SITE_COLUMNS, source=None):
    """
    Turn a raw site table into a sites GeoDataFrame.

    Filters to one category, optionally clips to a region, assigns
    ``site_id`` 1..n in input order and reprojects to ``crs``.

    Parameters
    ----------
    df : DataFrame
        Raw table with the source columns named in ``columns``.
    category : str, optional
        Category value to keep. Default 'Cultural'.
    crs : str or CRS, optional
        Target CRS. Coordinates are read as EPSG:4326.
    region : GeoDataFrame, GeoSeries or shapely geometry, optional
        Keep only sites within this region (before ids are assigned).
    columns : dict, optional
        Source column -> pipeline column mapping.
    source : str, optional
        Origin of the table, used in error messages.

    Returns
    -------
    GeoDataFrame
        Columns site_id, name, country, area_hectares, geometry.
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise LoadError(f"Missing required columns: {missing}", path=source)

    table = df[list(columns)].rename(columns=columns)
    table = table[table['category'] == category].reset_index(drop=True)

    raw_area = table['area_hectares']
    table['area_hectares'] = pd.to_numeric(raw_area, errors='coerce')
    coerced = raw_area.notna() & table['area_hectares'].isna()
    if coerced.any():
        logger.warning(
            "Non-numeric area_hectares read as missing: %s",
            ', '.join(f"{name!r}={value!r}" for name, value
                      in zip(table.loc[coerced, 'name'], raw_area[coerced]))
        )
    lon = pd.to_numeric(table['longitude'], errors='coerce')
    lat = pd.to_numeric(table['latitude'], errors='coerce')
    bad_coords = lon.isna() | lat.isna()
    if bad_coords.any():
        names = table.loc[bad_coords, 'name'].tolist()
        raise LoadError(f"Missing or non-numeric coordinates for sites: {names}", path=source)

    sites = gpd.GeoDataFrame(
        table[['name', 'country', 'area_hectares']],
        geometry=gpd.points_from_xy(lon, lat),
        crs=STORAGE_CRS
    )

    if region is not None:
        sites = clip_sites(sites, region).reset_index(drop=True)

    sites.insert(0, 'site_id', np.arange(1, len(sites) + 1, dtype='int64'))

    if crs is not None:
        sites = sites.to_crs(crs)

    return sites


def load_sites(path, category="Cultural", crs=None, region=None, columns=SITE_COLUMNS):
    """
    Load the heritage site table from a delimited text file.

    See prepare_sites for the parameters. Identifiers depend on the file
    order and the filters: never reuse them across loads.

    Raises
    ------
    LoadError
        The file is missing, unreadable or lacks required columns.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError("Site table not found", path=str(path))

    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise LoadError(f"Cannot parse site table: {e}", path=str(path)) from e

    sites = prepare_sites(df, category=category, crs=crs, region=region,
                          columns=columns, source=str(path))
    logger.info("Loaded %d %s sites from %s", len(sites), category, path.name)
    return sites


def load_region(path, name, name_field=BOUNDARY_NAME_FIELD):
    """
    Select one named region from a boundary layer.

    Parameters
    ----------
    path : str or Path
        Vector file readable by geopandas.
    name : str
        Value of ``name_field`` to select (e.g. 'Italy').
    name_field : str, optional
        Attribute holding region names.

    Returns
    -------
    GeoDataFrame
        One row with the dissolved region geometry.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError("Boundary file not found", path=str(path))

    try:
        boundaries = gpd.read_file(path)
    except Exception as e:
        raise LoadError(f"Cannot read boundaries: {e}", path=str(path)) from e

    if name_field not in boundaries.columns:
        raise LoadError(f"Boundary layer has no '{name_field}' field", path=str(path))

    selected = boundaries[boundaries[name_field] == name]
    if len(selected) == 0:
        raise LoadError(f"Region '{name}' not found in field '{name_field}'", path=str(path))

    region = selected[['geometry']].dissolve().reset_index(drop=True)
    region[name_field] = name
    return region
