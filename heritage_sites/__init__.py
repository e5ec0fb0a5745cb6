"""
Heritage site overlap screening.

This package contains domain-specific logic organized into:
- config: Configuration parameters, scopes and paths
- exceptions: Load, geometry and data quality errors
- log: Colored console logging setup
- loading: Raster, site table and boundary loaders
- overlap: Point-in-raster overlap classification
- analysis: Flag joins, site filtering and area statistics
- reporting: Plain-text summary tables
- pipeline: One parameterised run per geographic scope
"""

__version__ = "1.0.0"
