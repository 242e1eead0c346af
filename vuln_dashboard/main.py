#!/usr/bin/env python3
"""
Container Vulnerability Dashboard v1.0
Main entry point for the command-line interface.

Loads a group/repo/image vulnerability inventory, applies the dashboard
filters, prints the summary metrics and optionally exports the filtered
records.

Usage:
    python -m vuln_dashboard.main --input FILE_OR_URL [options]

Example:
    python -m vuln_dashboard.main --input data/vulnerabilities.json \\
        --severity critical high --exclude-invalid-norisk --output report.xlsx
"""

import sys
import argparse
import logging
from pathlib import Path

from .config import SEVERITY_LABELS, SEVERITY_ORDER, VERSION
from .core.dashboard import DashboardSession
from .core.data_loader import DataLoadError
from .core.sorting import SORT_ASCENDING, SORT_DESCENDING
from .filters.filter_spec import FilterSpec
from .settings import SettingsManager
from .statistics.chart_data import get_severity_distribution


def build_filter_spec(args, defaults: FilterSpec) -> FilterSpec:
    """Overlay command-line filter options on the saved defaults."""
    spec = defaults.copy()

    if args.search:
        spec.search_query = args.search
    if args.severity:
        spec.severity = [s.lower() for s in args.severity]
    if args.kai_status:
        spec.kai_status = list(args.kai_status)
    if args.package:
        spec.package_name = args.package
    if args.cve:
        spec.cve = args.cve
    if args.min_cvss is not None:
        spec.min_cvss = args.min_cvss
    if args.max_cvss is not None:
        spec.max_cvss = args.max_cvss
    if args.start or args.end:
        spec.set_date_range(args.start, args.end)
    if args.exclude_invalid_norisk:
        spec.exclude_invalid_norisk = True
    if args.exclude_ai_invalid_norisk:
        spec.exclude_ai_invalid_norisk = True

    return spec


def export_results(session: DashboardSession, output_path: Path) -> bool:
    """Export the filtered records in the format given by the file suffix."""
    from .export.csv_export import export_to_csv
    from .export.excel_export import export_to_excel
    from .export.json_export import export_to_json

    suffix = output_path.suffix.lower()
    if suffix == '.csv':
        return export_to_csv(session.filtered, str(output_path))
    if suffix == '.json':
        return export_to_json(session.filtered, str(output_path), metrics=session.metrics, include_metadata=True)
    if suffix == '.xlsx':
        return export_to_excel(session.filtered, str(output_path), metrics=session.metrics)

    print(f"Unknown output format: {output_path.suffix}")
    return False


def print_summary(session: DashboardSession) -> None:
    metrics = session.metrics

    print(f"Showing {metrics.total_vulnerabilities:,} of {len(session.records):,} vulnerabilities")
    if session.filter_spec.exclude_invalid_norisk:
        print("  Excluding: invalid - norisk")
    if session.filter_spec.exclude_ai_invalid_norisk:
        print("  Excluding: ai-invalid-norisk")

    print()
    distribution = get_severity_distribution(session.filtered)
    for severity in SEVERITY_ORDER:
        print(f"  {SEVERITY_LABELS[severity]:<10} {distribution[severity]:>8,}")
    print()
    print(f"  Average CVSS      {metrics.average_cvss:.2f}")
    print(f"  With fix          {metrics.vulnerabilities_with_fix:,}")
    print(f"  Unique packages   {metrics.unique_packages:,}")
    print(f"  Unique CVEs       {metrics.unique_cves:,}")


def run_cli(args) -> int:
    """Run in command-line mode."""
    settings_manager = SettingsManager(args.settings) if args.settings else SettingsManager()
    settings = settings_manager.settings

    source = args.input or settings.data_source
    spec = build_filter_spec(args, settings.default_filter_spec())

    session = DashboardSession(
        filter_spec=spec,
        sort_field=args.sort or settings.sort_field,
        sort_direction=args.direction or settings.sort_direction
    )

    print(f"Container Vulnerability Dashboard v{VERSION}")
    print("=" * 50)
    print(f"Loading: {source}")

    try:
        session.load(source)
    except DataLoadError as e:
        print(f"Error: {e}")
        return 1

    settings_manager.update_recent_source(source)
    print_summary(session)

    if args.top:
        print()
        columns = ['cve', 'severity', 'cvss', 'package_name', 'package_version', 'image_name']
        print(session.filtered[columns].head(args.top).to_string(index=False))

    if args.output:
        output_path = Path(args.output)
        if not export_results(session, output_path):
            return 1
        print(f"Results exported to: {output_path}")

    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description=f"Container Vulnerability Dashboard v{VERSION} - Vulnerability Analysis Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Summary of a local inventory:
    python -m vuln_dashboard.main --input vulnerabilities.json

  Critical and high findings, manual analysis view, exported to Excel:
    python -m vuln_dashboard.main -i vulnerabilities.json --severity critical high \\
        --exclude-invalid-norisk --output report.xlsx
        """
    )

    parser.add_argument('--input', '-i', metavar='SOURCE',
                        help='Inventory JSON file or http(s) URL (default: last used source)')
    parser.add_argument('--output', '-o', metavar='FILE',
                        help='Export filtered records to .csv, .json or .xlsx')
    parser.add_argument('--settings', metavar='FILE',
                        help='Settings file (default: ~/.vuln_dashboard/settings.json)')

    filters = parser.add_argument_group('filters')
    filters.add_argument('--search', '-q', help='Free-text search')
    filters.add_argument('--severity', nargs='+', metavar='LEVEL', help='Severities to include')
    filters.add_argument('--kai-status', nargs='+', metavar='STATUS', help='Triage statuses to include')
    filters.add_argument('--package', help='Package name contains')
    filters.add_argument('--cve', help='CVE id contains')
    filters.add_argument('--min-cvss', type=float, help='Minimum CVSS score')
    filters.add_argument('--max-cvss', type=float, help='Maximum CVSS score')
    filters.add_argument('--start', metavar='DATE', help='Published on or after (YYYY-MM-DD, from 00:00:00)')
    filters.add_argument('--end', metavar='DATE', help='Published on or before (YYYY-MM-DD, whole day included)')
    filters.add_argument('--exclude-invalid-norisk', action='store_true',
                         help="Hide findings triaged as 'invalid - norisk'")
    filters.add_argument('--exclude-ai-invalid-norisk', action='store_true',
                         help="Hide findings triaged as 'ai-invalid-norisk'")

    view = parser.add_argument_group('view')
    view.add_argument('--sort', metavar='FIELD', help='Sort field (cvss, severity, cve, package_name, published, ...)')
    view.add_argument('--direction', choices=[SORT_ASCENDING, SORT_DESCENDING], help='Sort direction')
    view.add_argument('--top', type=int, default=0, metavar='N', help='Print the first N records')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        exit_code = run_cli(args)
    except ValueError as e:
        parser.error(str(e))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
