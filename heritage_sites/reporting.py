"""
Plain-text summary tables for the overlap analysis.
"""

from pathlib import Path

import pandas as pd

UNDEFINED = "undefined"


def format_value(value, precision=2):
    """Format a statistic, printing missing values (e.g. std of one site) as 'undefined'."""
    if value is None or pd.isna(value):
        return UNDEFINED
    return f"{value:,.{precision}f}"


def format_statistics_table(stats, precision=2):
    """
    Render a statistics DataFrame (e.g. from country_statistics) as text.

    Parameters
    ----------
    stats : DataFrame
        Columns count, mean, median, std, min, max.
    precision : int, optional
        Decimal places for the area columns. Default 2.

    Returns
    -------
    str
    """
    if len(stats) == 0:
        return "  (no sites)"

    table = pd.DataFrame(index=stats.index)
    for col in stats.columns:
        if col == 'count':
            table[col] = stats[col].map(lambda v: f"{int(v):,}")
        else:
            table[col] = stats[col].map(lambda v: format_value(v, precision))
    table.index = table.index.map(lambda v: UNDEFINED if pd.isna(v) else str(v))
    return table.to_string()


def format_summary(summary, precision=2):
    """Render overall area statistics (from describe_area) as indented lines."""
    lines = [f"  Count: {int(summary['count']):,}"]
    for key in ['mean', 'median', 'std', 'min', 'max']:
        label = 'Std' if key == 'std' else key.capitalize()
        lines.append(f"  {label}: {format_value(summary[key], precision)}")
    return "\n".join(lines)


def format_report(result):
    """
    Build the full text report of a pipeline run.

    Parameters
    ----------
    result : PipelineResult
        Output of run_pipeline / analyze_sites.

    Returns
    -------
    str
    """
    config = result.config
    counts = result.overlap_counts
    lines = [
        f"Heritage Site Overlap Report ({result.scope})",
        "=" * 80,
        "",
        f"Category: {config.category_filter}",
        f"Minimum area: {format_value(config.min_area_hectares)} ha",
        f"CRS: {config.crs}",
        "",
        "Overlap:",
        f"  Sites loaded: {counts['total']:,}",
        f"  In protected areas: {counts['in_wdpa']:,}",
        f"  In urban areas: {counts['in_urban']:,}",
        f"  In both: {counts['in_both']:,}",
        f"  In neither: {counts['in_neither']:,}",
        f"  Retained after area filter: {len(result.filtered):,}",
        "",
        "Area of retained sites (ha):",
        format_summary(result.summary),
        "",
        "Area by country (ha):",
        format_statistics_table(result.country_stats),
        "",
        f"Countries with more than {config.min_group_size} sites (ha):",
        format_statistics_table(result.large_groups),
    ]
    return "\n".join(lines) + "\n"


def save_report(text, output_path):
    """Write a report to a text file, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write(text)

    print(f"Report saved to {output_path}")
