"""
Command-line interface for the log converter.
Main entry point for exporting ESS activity logs to a timesheet workbook.
"""

import argparse
import sys
import logging
from datetime import date
from typing import List, Optional

from . import __version__
from .config import ConfigManager, ESSConfig, ExportConfig, load_env_config
from .converter import convert_to_excel
from .ess_client import ESSClient
from .exceptions import LogConverterError
from .models import ExportParams
from .sheet_renderer import MONTH_CASES, SheetStyle


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def progress_callback(message: str) -> None:
    """Simple progress callback function."""
    print(f"[INFO] {message}")


def resolve_ess_config(args) -> ESSConfig:
    """Combine YAML config, environment and command line options, later ones winning."""
    config_manager = ConfigManager(args.config_dir)
    ess_config = config_manager.load_ess_config().merge(load_env_config(args.env_file))

    return ess_config.merge(ESSConfig(
        base_url=getattr(args, 'url', None) or "",
        username=getattr(args, 'username', None) or "",
        password=getattr(args, 'password', None) or "",
        employee_id=getattr(args, 'employee_id', None) or "",
    ))


def connect(ess_config: ESSConfig) -> Optional[ESSClient]:
    """Log in with the given configuration, printing why when it cannot."""
    if not ess_config.base_url:
        print("Error: ESS base URL not configured. Set BASE_URL, use 'log-converter config setup' or provide --url")
        return None

    if not ess_config.username or not ess_config.password:
        print("Error: ESS credentials not configured. Set USERNAME_ESS/PASSWORD_ESS or provide --username/--password")
        return None

    progress_callback("Logging in to ESS...")
    client = ESSClient(ess_config.base_url)
    login_result = client.login(ess_config.username, ess_config.password)
    progress_callback(f"Login successful: {login_result.user_info.employee_name or ess_config.username}")

    if not ess_config.employee_id:
        ess_config.employee_id = str(login_result.user_info.employee_id)

    return client


def resolve_months(args, export_config: ExportConfig) -> List[int]:
    months = args.months or export_config.months
    invalid = [m for m in months if not 1 <= m <= 12]
    if invalid:
        raise ValueError(f"Invalid month(s): {', '.join(str(m) for m in invalid)}")
    return months


def cmd_export(args) -> int:
    """Handle export command."""
    setup_logging(args.verbose)

    config_manager = ConfigManager(args.config_dir)
    export_config = config_manager.load_export_config()

    project = args.project or export_config.project_name
    if not project:
        print("Error: Project not specified. Use --project or 'log-converter projects' to list them.")
        return 1

    try:
        months = resolve_months(args, export_config)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if not months:
        print("Error: No months specified. Use --months, e.g. --months 7 8 9")
        return 1

    year = args.year or export_config.year or date.today().year
    randomize = export_config.randomize if args.randomize is None else args.randomize
    params = ExportParams(
        project_filter=project,
        is_randomize_duration=randomize,
        min_duration=args.min_duration if args.min_duration is not None else export_config.min_duration,
        max_duration=args.max_duration if args.max_duration is not None else export_config.max_duration,
    )
    style = SheetStyle(
        styled=export_config.styled and not args.plain,
        month_case=args.month_case or export_config.month_case,
    )
    output = args.output or export_config.output_file

    try:
        params.validate()

        ess_config = resolve_ess_config(args)
        client = connect(ess_config)
        if client is None:
            return 1

        progress_callback(f"Fetching activities for month(s) {', '.join(str(m) for m in months)} of {year}...")
        activities = client.fetch_activities(ess_config.employee_id, months, year)
        progress_callback(f"Fetched {len(activities)} activities")

        for activity in activities:
            logging.debug(f"Tanggal: {activity.date_string}, Project: {activity.project_name}, "
                          f"Duration: {activity.duration}, Activity: {activity.activity_detail}")

        progress_callback(f"Building timesheet for project '{project}'...")
        workbook = convert_to_excel(activities, params, style)
        workbook.save(output)

    except LogConverterError as e:
        print(f"Error: {e}")
        return 1

    progress_callback(f"Excel file created: {output}")
    return 0


def cmd_projects(args) -> int:
    """Handle projects command."""
    setup_logging(args.verbose)

    try:
        ess_config = resolve_ess_config(args)
        client = connect(ess_config)
        if client is None:
            return 1

        progress_callback("Fetching project assignments...")
        projects = client.project_list(ess_config.employee_id)
    except LogConverterError as e:
        print(f"Error: {e}")
        return 1

    if not projects:
        print("No projects found.")
        return 1

    print("\nAvailable Projects:")
    print("-" * 50)
    for name in sorted(projects):
        print(f"  {name}")

    return 0


def cmd_download(args) -> int:
    """Handle download command."""
    setup_logging(args.verbose)

    config_manager = ConfigManager(args.config_dir)
    export_config = config_manager.load_export_config()

    try:
        months = resolve_months(args, export_config)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if not months:
        print("Error: No months specified. Use --months, e.g. --months 7 8 9")
        return 1

    year = args.year or export_config.year or date.today().year

    try:
        ess_config = resolve_ess_config(args)
        client = connect(ess_config)
        if client is None:
            return 1

        output = args.output or f"activities_{ess_config.employee_id}_{year}.{'xlsx' if args.format == 'excel' else args.format}"
        progress_callback(f"Downloading activities for month(s) {', '.join(str(m) for m in months)} of {year}...")
        success = client.download_activities_to_file(output, ess_config.employee_id, months, year, args.format)
    except LogConverterError as e:
        print(f"Error: {e}")
        return 1

    if success:
        progress_callback(f"Data downloaded successfully to {output}")
        return 0
    else:
        print("Error: Failed to download data.")
        return 1


def cmd_config(args) -> int:
    """Handle configuration commands."""
    setup_logging(args.verbose)

    config_manager = ConfigManager(args.config_dir)

    if args.config_action == 'setup':
        print("Log Converter Configuration Setup")
        print("=" * 40)

        ess_config = config_manager.interactive_ess_setup()
        save_password = input("\nSave password to config file? (not recommended) (y/n) [n]: ").strip().lower().startswith('y')
        config_manager.save_ess_config(ess_config, save_password)

        export_config = config_manager.interactive_export_setup()
        config_manager.save_export_config(export_config)

        print("\nConfiguration saved successfully!")
        return 0

    elif args.config_action == 'show':
        config_manager.show_config_status()
        return 0

    elif args.config_action == 'sample':
        return 0 if config_manager.create_sample_config() else 1

    else:
        print(f"Unknown config action: {args.config_action}")
        return 1


def cmd_serve(args) -> int:
    """Run the HTTP API."""
    setup_logging(args.verbose)

    import uvicorn

    # the API reads BASE_URL from the environment; load .env before it starts
    load_env_config(args.env_file)
    progress_callback(f"Starting API on http://{args.host}:{args.port}")
    uvicorn.run("log_converter.api:app", host=args.host, port=args.port)
    return 0


def add_credential_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--url', help='ESS API base URL')
    parser.add_argument('--username', help='ESS username')
    parser.add_argument('--password', help='ESS password')
    parser.add_argument('--employee-id', help='Employee ID (default: from login)')


def add_period_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--months', type=int, nargs='+', help='Month numbers to fetch, e.g. 7 8 9')
    parser.add_argument('--year', type=int, help='Year to fetch (default: current year)')


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Log Converter - export ESS activity logs to a monthly timesheet workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'log-converter {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--config-dir',
        help='Custom configuration directory (default: ~/.log_converter)'
    )

    parser.add_argument(
        '--env-file',
        help='Environment file with BASE_URL, USERNAME_ESS, PASSWORD_ESS (default: .env)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Export command
    export_parser = subparsers.add_parser('export', help='Export a project timesheet to Excel')
    add_credential_arguments(export_parser)
    add_period_arguments(export_parser)
    export_parser.add_argument('--project', help='Project name to export')
    export_parser.add_argument('--randomize', dest='randomize', action='store_true', default=None,
                               help='Replace durations with random hours')
    export_parser.add_argument('--no-randomize', dest='randomize', action='store_false', default=None,
                               help='Keep the logged durations even when the config enables randomizing')
    export_parser.add_argument('--min-duration', type=int, help='Minimum random duration in hours')
    export_parser.add_argument('--max-duration', type=int, help='Maximum random duration in hours')
    export_parser.add_argument('--plain', action='store_true', help='Write values without fonts, borders or alignment')
    export_parser.add_argument('--month-case', choices=MONTH_CASES, help='Month label case (default: upper)')
    export_parser.add_argument('--output', '-o', help='Output xlsx file path')
    export_parser.set_defaults(func=cmd_export)

    # Projects command
    projects_parser = subparsers.add_parser('projects', help='List assigned projects')
    add_credential_arguments(projects_parser)
    projects_parser.set_defaults(func=cmd_projects)

    # Download command
    download_parser = subparsers.add_parser('download', help='Download raw activity logs')
    add_credential_arguments(download_parser)
    add_period_arguments(download_parser)
    download_parser.add_argument('--output', '-o', help='Output file path')
    download_parser.add_argument('--format', choices=['csv', 'excel', 'json'], default='csv',
                                 help='Output format (default: csv)')
    download_parser.set_defaults(func=cmd_download)

    # Config command
    config_parser = subparsers.add_parser('config', help='Manage configuration')
    config_parser.add_argument('config_action', choices=['setup', 'show', 'sample'],
                               help='Configuration action')
    config_parser.set_defaults(func=cmd_config)

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Bind address (default: 127.0.0.1)')
    serve_parser.add_argument('--port', type=int, default=8000, help='Port (default: 8000)')
    serve_parser.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI application."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 1
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
