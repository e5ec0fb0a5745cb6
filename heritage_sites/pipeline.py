"""
One parameterised overlap analysis run per geographic scope.

Stages: load masks and sites -> classify overlap -> join flags ->
fill absent samples -> filter -> aggregate.
"""

import logging
from dataclasses import dataclass

import pandas as pd

from heritage_sites import config as cfg
from heritage_sites.analysis import (
    join_overlap_flags, fill_uncovered, filter_sites, overlap_summary,
    describe_area, country_statistics, large_groups
)
from heritage_sites.loading import load_coverage_mask, load_sites, load_region
from heritage_sites.overlap import classify_overlap

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Tables produced by one run."""
    scope: str
    config: cfg.AnalysisConfig
    sites: pd.DataFrame
    flags: pd.DataFrame
    filtered: pd.DataFrame
    overlap_counts: pd.Series
    summary: pd.Series
    country_stats: pd.DataFrame
    large_groups: pd.DataFrame


def analyze_sites(sites, wdpa_mask, urban_mask, config, scope='custom'):
    """
    Run classification, join, filter and aggregation on loaded inputs.

    Parameters
    ----------
    sites : GeoDataFrame
        Output of load_sites.
    wdpa_mask, urban_mask : CoverageMask
        Binary masks; both are sampled in their own CRS.
    config : AnalysisConfig
        Thresholds for this run.
    scope : str, optional
        Label used in the report.

    Returns
    -------
    PipelineResult
    """
    config.validate()

    wdpa_records = classify_overlap(wdpa_mask, sites, flag_name='wdpa_flag')
    urban_records = classify_overlap(urban_mask, sites, flag_name='urban_flag')

    joined = join_overlap_flags(sites, wdpa_records, urban_records)
    flags = fill_uncovered(joined)
    filtered = filter_sites(flags, config.min_area_hectares)

    stats = country_statistics(filtered)
    return PipelineResult(
        scope=scope,
        config=config,
        sites=sites,
        flags=flags,
        filtered=filtered,
        overlap_counts=overlap_summary(flags),
        summary=describe_area(filtered),
        country_stats=stats,
        large_groups=large_groups(stats, config.min_group_size),
    )


def run_pipeline(wdpa_path, urban_path, sites_path, config=None, region=None, scope='custom'):
    """
    Load all inputs for one region and analyze them.

    The protected-area mask fixes the CRS unless ``config.crs`` is set;
    the urban mask and the sites are reprojected to it.

    Parameters
    ----------
    wdpa_path, urban_path, sites_path : str or Path
        Input files.
    config : AnalysisConfig, optional
        Defaults from heritage_sites.config when omitted.
    region : GeoDataFrame, optional
        Clip region; None for a global run.
    scope : str, optional
        Label used in the report.

    Returns
    -------
    PipelineResult
    """
    config = (config or cfg.AnalysisConfig()).validate()

    wdpa_mask = load_coverage_mask(
        wdpa_path, clip_geometry=region, dst_crs=config.crs,
        class_codes=config.wdpa_class_codes
    )
    config = config.with_crs(config.crs or wdpa_mask.crs)

    urban_mask = load_coverage_mask(
        urban_path, clip_geometry=region, dst_crs=config.crs,
        class_codes=config.urban_class_codes
    )

    sites = load_sites(sites_path, category=config.category_filter,
                       crs=config.crs, region=region)

    logger.info("Running %s analysis on %d sites", scope, len(sites))
    return analyze_sites(sites, wdpa_mask, urban_mask, config, scope=scope)


def run_scope(scope, wdpa_path, urban_path, sites_path, boundaries_path=None, config=None):
    """
    Run the pipeline for a named scope from heritage_sites.config.SCOPES.

    Country scopes need ``boundaries_path`` to look up their region.
    """
    scope_info = cfg.get_scope(scope)
    region = None
    if scope_info['region'] is not None:
        if boundaries_path is None:
            raise ValueError(f"Scope '{scope}' needs a boundaries file")
        region = load_region(boundaries_path, scope_info['region'])

    return run_pipeline(wdpa_path, urban_path, sites_path, config=config,
                        region=region, scope=scope)
