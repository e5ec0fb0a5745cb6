"""
Overlap flag joins, site filtering and area statistics.

This module contains functions for:
- Joining per-layer overlap flags onto the complete site set
- Resolving absent samples to "not covered"
- Filtering sites by overlap flags and minimum area
- Computing area statistics overall and by country
"""

import logging

import numpy as np
import pandas as pd

from heritage_sites.exceptions import DataQualityError

logger = logging.getLogger(__name__)

FLAG_COLUMNS = ('wdpa_flag', 'urban_flag')
SITE_FIELDS = ['site_id', 'name', 'country', 'area_hectares']
STAT_COLUMNS = ['count', 'mean', 'median', 'std', 'min', 'max']


def _check_unique_ids(df, label):
    duplicated = df.loc[df['site_id'].duplicated(), 'site_id']
    if len(duplicated) > 0:
        raise ValueError(
            f"Duplicate site_id in {label}: {sorted(duplicated.unique().tolist())}"
        )


def join_overlap_flags(sites, wdpa_records, urban_records,
                       wdpa_flag='wdpa_flag', urban_flag='urban_flag'):
    """
    Attach both overlap flags to every site.

    The join is anchored on the complete site set: every site appears
    exactly once, records for unknown ids are dropped, and a site without
    a record for a layer gets a missing flag (resolve it with
    fill_uncovered).

    Parameters
    ----------
    sites : DataFrame
        Sites with site_id, name, country, area_hectares.
    wdpa_records : DataFrame
        site_id and ``wdpa_flag`` columns from classify_overlap.
    urban_records : DataFrame
        site_id and ``urban_flag`` columns from classify_overlap.

    Returns
    -------
    DataFrame
        Columns site_id, name, country, area_hectares, wdpa_flag, urban_flag.
    """
    _check_unique_ids(sites, 'sites')
    _check_unique_ids(wdpa_records, 'protected-area records')
    _check_unique_ids(urban_records, 'urban records')

    flags = pd.merge(
        wdpa_records[['site_id', wdpa_flag]].rename(columns={wdpa_flag: 'wdpa_flag'}),
        urban_records[['site_id', urban_flag]].rename(columns={urban_flag: 'urban_flag'}),
        on='site_id', how='outer'
    )
    base = pd.DataFrame(sites[SITE_FIELDS])
    joined = pd.merge(flags, base, on='site_id', how='right')

    return joined[SITE_FIELDS + list(FLAG_COLUMNS)].reset_index(drop=True)


def fill_uncovered(df, flag_columns=FLAG_COLUMNS):
    """
    Resolve absent overlap samples to "not covered".

    A site with no sample for a layer (e.g. outside the raster extent)
    is treated as not covered by that layer. Flag columns come back as
    plain bool with no missing values.
    """
    df = df.copy()
    for col in flag_columns:
        n_missing = int(df[col].isna().sum())
        if n_missing:
            logger.info("%s: %d sites without a sample, set to not covered", col, n_missing)
        df[col] = df[col].astype('boolean').fillna(False).astype(bool)
    return df


def _numeric_area(df):
    """Area as float, raising DataQualityError for missing/invalid/negative values."""
    area = pd.to_numeric(df['area_hectares'], errors='coerce').astype('float64')
    bad = area.isna() | ~np.isfinite(area) | (area < 0)
    if bad.any():
        raise DataQualityError(
            "Missing or invalid area_hectares", site_ids=df.loc[bad, 'site_id'].tolist()
        )
    return area


def filter_sites(df, min_area_hectares, flag_columns=FLAG_COLUMNS):
    """
    Keep sites outside both layers whose area meets the threshold.

    Retention: wdpa_flag is False, urban_flag is False and
    area_hectares >= min_area_hectares. A missing or non-numeric area
    fails the comparison; such sites are dropped with a warning.

    Parameters
    ----------
    df : DataFrame
        Output of fill_uncovered.
    min_area_hectares : float
        Minimum site area.

    Returns
    -------
    DataFrame
        Retained rows with all their attributes.

    Raises
    ------
    ValueError
        A flag column still holds missing values.
    """
    for col in flag_columns:
        if df[col].isna().any():
            raise ValueError(f"Column '{col}' has unresolved flags, apply fill_uncovered first")

    uncovered = pd.Series(True, index=df.index)
    for col in flag_columns:
        uncovered &= ~df[col].astype(bool)

    area = pd.to_numeric(df['area_hectares'], errors='coerce').astype('float64')
    invalid = uncovered & ~np.isfinite(area)
    if invalid.any():
        logger.warning(
            "Dropped %d uncovered sites with missing or invalid area (site_id: %s)",
            int(invalid.sum()), ', '.join(str(i) for i in df.loc[invalid, 'site_id'])
        )

    # NaN compares False, so invalid areas never pass
    keep = uncovered & ~invalid & (area >= min_area_hectares)

    filtered = df[keep].copy()
    filtered['area_hectares'] = area[keep]

    logger.info(
        "Kept %d of %d sites (%d outside both layers, min area %s ha)",
        len(filtered), len(df), int(uncovered.sum()), min_area_hectares
    )
    return filtered.reset_index(drop=True)


def overlap_summary(df):
    """
    Count sites by overlap class.

    Returns
    -------
    Series
        total, in_wdpa, in_urban, in_both, in_neither
    """
    wdpa = df['wdpa_flag'].astype(bool)
    urban = df['urban_flag'].astype(bool)
    return pd.Series({
        'total': len(df),
        'in_wdpa': int(wdpa.sum()),
        'in_urban': int(urban.sum()),
        'in_both': int((wdpa & urban).sum()),
        'in_neither': int((~wdpa & ~urban).sum()),
    })


def describe_area(df):
    """
    Area statistics over all rows.

    Standard deviation uses the n-1 denominator and is NaN (undefined)
    for a single site.

    Returns
    -------
    Series
        count, mean, median, std, min, max in hectares.
    """
    area = _numeric_area(df)
    summary = area.agg(STAT_COLUMNS)
    summary['count'] = int(summary['count'])
    return summary


def country_statistics(df):
    """
    Area statistics grouped by country.

    Countries are grouped by exact, case-sensitive name. Sites with no
    country form their own group so counts always add up.

    Returns
    -------
    DataFrame
        Indexed by country with columns count, mean, median, std, min, max.
    """
    area = _numeric_area(df)
    grouped = df.assign(area_hectares=area).groupby('country', sort=True, dropna=False)
    stats = grouped['area_hectares'].agg(STAT_COLUMNS)
    stats['count'] = stats['count'].astype('int64')
    stats.index.name = 'country'
    return stats


def large_groups(stats, min_group_size):
    """Countries with more than ``min_group_size`` sites, ascending by count."""
    selected = stats[stats['count'] > min_group_size]
    return selected.sort_values('count', kind='stable')
