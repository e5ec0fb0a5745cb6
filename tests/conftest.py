import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
import rasterio
from rasterio.transform import from_origin
from shapely.geometry import box

from heritage_sites.overlap import CoverageMask

# 10x10 one-degree grid covering lon 0..10, lat 0..10
GRID_TRANSFORM = from_origin(0, 10, 1, 1)


def make_mask(data, transform=GRID_TRANSFORM, crs='EPSG:4326', nodata=None):
    return CoverageMask(np.asarray(data), transform, crs, nodata=nodata)


def make_sites(rows, crs='EPSG:4326'):
    """rows: (site_id, name, country, area_hectares, lon, lat)"""
    df = pd.DataFrame(rows, columns=['site_id', 'name', 'country', 'area_hectares', 'lon', 'lat'])
    return gpd.GeoDataFrame(
        df[['site_id', 'name', 'country', 'area_hectares']],
        geometry=gpd.points_from_xy(df['lon'], df['lat']),
        crs=crs
    )


def write_raster(path, data, transform=GRID_TRANSFORM, crs='EPSG:4326', nodata=None):
    data = np.asarray(data)
    profile = {
        'driver': 'GTiff',
        'height': data.shape[0],
        'width': data.shape[1],
        'count': 1,
        'dtype': str(data.dtype),
        'crs': crs,
        'transform': transform,
    }
    if nodata is not None:
        profile['nodata'] = nodata
    with rasterio.open(path, 'w', **profile) as dst:
        dst.write(data, 1)
    return path


def write_sites_csv(path, rows):
    """rows: (name_en, category, area_hectares, states_name_en, longitude, latitude)"""
    df = pd.DataFrame(rows, columns=['name_en', 'category', 'area_hectares',
                                     'states_name_en', 'longitude', 'latitude'])
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def empty_mask():
    return make_mask(np.zeros((10, 10), dtype='uint8'))


@pytest.fixture
def north_half_mask():
    # Rows 0-4 cover lat 5..10
    data = np.zeros((10, 10), dtype='uint8')
    data[:5, :] = 1
    return make_mask(data)


@pytest.fixture
def landcover_mask():
    # Code 19 (urban) on the east half, other classes elsewhere
    data = np.full((10, 10), 10, dtype='uint8')
    data[:, 5:] = 19
    data[9, 0] = 0
    return make_mask(data, nodata=0)


@pytest.fixture
def sample_sites():
    return make_sites([
        (1, 'North West', 'Italy', 150.0, 2.5, 7.5),
        (2, 'South West', 'Italy', 250.0, 2.5, 2.5),
        (3, 'South East', 'China', 400.0, 7.5, 2.5),
        (4, 'Far Away', 'China', 120.0, 40.0, 40.0),
    ])


@pytest.fixture
def raster_files(tmp_path):
    wdpa = np.zeros((10, 10), dtype='uint8')
    wdpa[:5, :] = 1
    landcover = np.full((10, 10), 10, dtype='uint8')
    landcover[:, 5:] = 19

    return {
        'wdpa': write_raster(tmp_path / 'wdpa.tif', wdpa),
        'urban': write_raster(tmp_path / 'urban.tif', landcover, nodata=0),
    }


@pytest.fixture
def sites_csv(tmp_path):
    return write_sites_csv(tmp_path / 'whc_sites.csv', [
        ('Protected Site', 'Cultural', 500.0, 'Italy', 2.5, 7.5),
        ('Open Site', 'Cultural', 300.0, 'Italy', 2.5, 2.5),
        ('Small Site', 'Cultural', 40.0, 'Italy', 1.5, 1.5),
        ('Urban Site', 'Cultural', 900.0, 'China', 7.5, 2.5),
        ('Natural Site', 'Natural', 800.0, 'China', 3.5, 3.5),
        ('Remote Site', 'Cultural', 200.0, 'Italy', 3.5, 0.5),
    ])


@pytest.fixture
def boundaries_file(tmp_path):
    boundaries = gpd.GeoDataFrame(
        {'NAME': ['Italy', 'Italy', 'China']},
        geometry=[box(0, 0, 5, 5), box(0, 5, 5, 10), box(5, 0, 10, 10)],
        crs='EPSG:4326'
    )
    path = tmp_path / 'boundaries.geojson'
    boundaries.to_file(path, driver='GeoJSON')
    return path
