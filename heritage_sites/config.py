"""
Configuration file for the heritage site overlap workflow.

This module centralizes all configurable parameters including:
- File paths for the mask rasters, the site table and boundaries
- Filtering thresholds (minimum area, minimum group size, category)
- Urban land-use class codes
- Geographic scopes (global, Italy, China)

Per-run parameters are bundled in an AnalysisConfig object which the
pipeline passes into each stage.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

import numpy as np

# =====================================================================
# Project Paths
# =====================================================================

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
DATA_RAW = DATA_DIR / "raw"

# Results directories
RESULTS_DIR = PROJECT_ROOT / "results"

# Default input files
WDPA_RASTER = DATA_RAW / "wdpa_raster.tif"
URBAN_RASTER = DATA_RAW / "urban_landcover.tif"
SITES_TABLE = DATA_RAW / "whc_sites.csv"
BOUNDARIES = DATA_RAW / "world_boundaries.shp"

# =====================================================================
# Site Filtering Parameters
# =====================================================================

# Minimum site area (hectares)
MIN_AREA_HECTARES = 100

# Countries need more than this many retained sites for the large-group view
MIN_GROUP_SIZE = 3

# Heritage category to include
CATEGORY_FILTER = "Cultural"

VALID_CATEGORIES = ["Cultural", "Natural", "Mixed"]

# =====================================================================
# Raster Class Codes
# =====================================================================

# Land-use code of the urban class in the land cover raster
URBAN_CLASS_CODES = (19,)

# None means the protected-area raster is already binary (nonzero = protected)
WDPA_CLASS_CODES = None

# =====================================================================
# Site Table Columns
# =====================================================================

# Source column -> pipeline column
SITE_COLUMNS = {
    'name_en': 'name',
    'category': 'category',
    'area_hectares': 'area_hectares',
    'states_name_en': 'country',
    'longitude': 'longitude',
    'latitude': 'latitude',
}

# =====================================================================
# Coordinate Reference Systems
# =====================================================================

# Source CRS of the site coordinates
STORAGE_CRS = 'EPSG:4326'  # WGS84

# =====================================================================
# Geographic Scopes
# =====================================================================

# Field in the boundary layer holding the country name
BOUNDARY_NAME_FIELD = 'NAME'

SCOPES = {
    'global': {
        'region': None,
        'description': 'All sites worldwide',
    },
    'italy': {
        'region': 'Italy',
        'description': 'Sites within the boundary of Italy',
    },
    'china': {
        'region': 'China',
        'description': 'Sites within the boundary of China',
    },
}


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Parameters of one pipeline run.

    Parameters
    ----------
    crs : str or pyproj.CRS, optional
        Target coordinate reference. None means the CRS of the
        protected-area mask.
    min_area_hectares : float
        Sites below this area are filtered out.
    min_group_size : int
        Countries need more than this many sites for the large-group view.
    category_filter : str
        Heritage category to include.
    urban_class_codes : tuple of int
        Land-use codes mapped to "urban" in the urban raster.
    wdpa_class_codes : tuple of int, optional
        Codes mapped to "protected"; None keeps the raster as a binary mask.
    """
    crs: object = None
    min_area_hectares: float = MIN_AREA_HECTARES
    min_group_size: int = MIN_GROUP_SIZE
    category_filter: str = CATEGORY_FILTER
    urban_class_codes: tuple = field(default=URBAN_CLASS_CODES)
    wdpa_class_codes: tuple = WDPA_CLASS_CODES

    def validate(self):
        """Validate parameter values, raising ValueError on the first problem."""
        if (self.min_area_hectares is None or not np.isfinite(self.min_area_hectares)
                or self.min_area_hectares < 0):
            raise ValueError(
                f"min_area_hectares must be >= 0, got {self.min_area_hectares}"
            )
        if self.min_group_size is None or self.min_group_size < 0:
            raise ValueError(
                f"min_group_size must be >= 0, got {self.min_group_size}"
            )
        if not self.category_filter:
            raise ValueError("category_filter must be a non-empty string")
        if self.urban_class_codes is not None and len(self.urban_class_codes) == 0:
            raise ValueError("urban_class_codes must list at least one code")
        if self.wdpa_class_codes is not None and len(self.wdpa_class_codes) == 0:
            raise ValueError("wdpa_class_codes must list at least one code")
        return self

    def with_crs(self, crs):
        """Return a copy bound to a concrete target CRS."""
        return replace(self, crs=crs)


def get_scope(name):
    """Look up a geographic scope by name."""
    try:
        return SCOPES[name]
    except KeyError:
        raise ValueError(
            f"Invalid scope: {name}. Must be one of: {list(SCOPES.keys())}"
        ) from None


# =====================================================================
# Validation
# =====================================================================

def validate_config():
    """Validate configuration settings."""
    if CATEGORY_FILTER not in VALID_CATEGORIES:
        raise ValueError(
            f"Invalid CATEGORY_FILTER: {CATEGORY_FILTER}. "
            f"Must be one of: {VALID_CATEGORIES}"
        )

    if MIN_AREA_HECTARES < 0:
        raise ValueError(f"MIN_AREA_HECTARES ({MIN_AREA_HECTARES}) must be >= 0")

    if MIN_GROUP_SIZE < 0:
        raise ValueError(f"MIN_GROUP_SIZE must be >= 0")

    missing = {'name', 'category', 'area_hectares', 'country',
               'longitude', 'latitude'} - set(SITE_COLUMNS.values())
    if missing:
        raise ValueError(f"SITE_COLUMNS is missing targets: {sorted(missing)}")

# Run validation on import
validate_config()
