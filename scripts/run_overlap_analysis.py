"""
Script: Run Overlap Analysis

Screens UNESCO cultural heritage sites against protected-area and urban
land cover rasters for one geographic scope.

Workflow:
1. Load the protected-area raster (fixes the CRS) and the urban raster,
   clipped to the scope's boundary for country scopes
2. Load heritage sites of the selected category
3. Sample both rasters at every site
4. Keep sites outside both layers with area >= minimum
5. Report area statistics overall and by country

BEFORE RUNNING:
Place the input files in data/raw/ (see heritage_sites/config.py) or pass
their paths as arguments.

Usage:
    python scripts/run_overlap_analysis.py --scope italy -v
"""

import logging
import sys
from argparse import ArgumentParser

from heritage_sites import config
from heritage_sites.exceptions import HeritageSitesError
from heritage_sites.log import setup_logging
from heritage_sites.pipeline import run_scope
from heritage_sites.reporting import format_report, save_report

logger = logging.getLogger("heritage_sites")


def build_parser():
    parser = ArgumentParser(description="Heritage site overlap screening")
    parser.add_argument("--scope", choices=list(config.SCOPES.keys()), default="global",
                        help="Geographic scope of the run")
    parser.add_argument("--wdpa", default=str(config.WDPA_RASTER),
                        help="Protected-area raster")
    parser.add_argument("--urban", default=str(config.URBAN_RASTER),
                        help="Urban land cover raster")
    parser.add_argument("--sites", default=str(config.SITES_TABLE),
                        help="Heritage site table (CSV)")
    parser.add_argument("--boundaries", default=str(config.BOUNDARIES),
                        help="Administrative boundaries for country scopes")
    parser.add_argument("--min-area", type=float, default=config.MIN_AREA_HECTARES,
                        help="Minimum site area in hectares")
    parser.add_argument("--min-group-size", type=int, default=config.MIN_GROUP_SIZE,
                        help="Countries need more than this many sites in the large-group table")
    parser.add_argument("--category", default=config.CATEGORY_FILTER,
                        choices=config.VALID_CATEGORIES, help="Heritage category to include")
    parser.add_argument("--urban-codes", type=int, nargs="+",
                        default=list(config.URBAN_CLASS_CODES),
                        help="Land cover codes counted as urban")
    parser.add_argument("--wdpa-codes", type=int, nargs="+", default=None,
                        help="Protected-area raster codes counted as protected "
                             "(default: any nonzero cell)")
    parser.add_argument("--report", default=None,
                        help="Also write the report to this file")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    print("=" * 80)
    print("Heritage Site Overlap Analysis")
    print("=" * 80)
    print(f"\nScope: {args.scope} ({config.SCOPES[args.scope]['description']})")
    print(f"  - Minimum area: {args.min_area} ha")
    print(f"  - Category: {args.category}")
    print(f"  - Urban class codes: {', '.join(str(c) for c in args.urban_codes)}")
    if args.wdpa_codes:
        print(f"  - Protected-area class codes: {', '.join(str(c) for c in args.wdpa_codes)}")

    try:
        analysis_config = config.AnalysisConfig(
            min_area_hectares=args.min_area,
            min_group_size=args.min_group_size,
            category_filter=args.category,
            urban_class_codes=tuple(args.urban_codes),
            wdpa_class_codes=tuple(args.wdpa_codes) if args.wdpa_codes else None,
        ).validate()
        result = run_scope(
            args.scope, args.wdpa, args.urban, args.sites,
            boundaries_path=args.boundaries, config=analysis_config
        )
    except (HeritageSitesError, ValueError) as e:
        logger.error("Analysis failed: %s", e)
        return 1

    report = format_report(result)
    print("\n" + report)

    if args.report:
        save_report(report, args.report)

    print("=" * 80)
    print("ANALYSIS COMPLETE")
    print("=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
