from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .asset_exporter import MissingAssetPolicy
from .categories import describe_schemes
from .chart_compiler import ROTATIONS, TARGET_FORMATS, TICKS_PER_MEASURE
from .config import ENV_CONFIG_PATH, ENV_IGNORE_INCOMPLETE, ENV_ON_MISSING, resolve_settings
from .errors import ConfigurationError
from .logging_utils import configure_logging, render_fields_block
from .runner import EXIT_SUCCESS, BatchRunner
from .validation import validate_config_file
from .validation_output import ValidationFormatter
from .version import __version__

LOGGER = logging.getLogger(__name__)
CONSOLE = Console()

EXIT_CONFIG_ERROR = 1

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_ENVIRONMENT_HELP = f"""environment variables:
  {ENV_CONFIG_PATH:<30} configuration file used when --config is omitted
  {ENV_IGNORE_INCOMPLETE:<30} treat tracks with missing assets as complete (true/false)
  {ENV_ON_MISSING:<30} missing-asset policy: warn, prompt or fail
"""


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-level", choices=_LOG_LEVELS, type=str.upper, help="Log level for the log file and console")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chartbatch",
        description="Batch-compile a music-game track library into a categorized distribution layout.",
        epilog=_ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile every track folder under <path>/music",
        epilog=_ENVIRONMENT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    compile_parser.add_argument("--config", type=Path, help="YAML configuration file")
    compile_parser.add_argument("-p", "--path", help="Source root containing the 'music' folder")
    compile_parser.add_argument("-o", "--output", help="Output root for compiled tracks")
    compile_parser.add_argument(
        "-m", "--music", nargs="?", const="", help="Audio asset folder (no value: <path>/SoundData)"
    )
    compile_parser.add_argument(
        "-c", "--cover", nargs="?", const="", help="Cover image folder (no value: <path>/AssetBundleImages/jacket)"
    )
    compile_parser.add_argument(
        "-v", "--video", nargs="?", const="", help="Background video folder (no value: <path>/MovieData)"
    )
    compile_parser.add_argument("-f", "--format", help=f"Target chart format: {', '.join(TARGET_FORMATS)}")
    compile_parser.add_argument(
        "-g", "--genre", type=int, help="Category scheme index (see 'chartbatch schemes')"
    )
    compile_parser.add_argument("-r", "--rotate", help=f"Rotate charts: {', '.join(ROTATIONS)}")
    compile_parser.add_argument(
        "-s", "--shift", type=int, help=f"Shift charts by ticks ({TICKS_PER_MEASURE} ticks per measure)"
    )
    compile_parser.add_argument("-d", "--decimal", action="store_true", help="Rate levels with decimals")
    compile_parser.add_argument(
        "-i", "--ignore", action="store_true", help="Keep tracks whose assets are missing as complete"
    )
    compile_parser.add_argument("-n", "--number", action="store_true", help="Use the track id as folder name")
    compile_parser.add_argument("-j", "--json", action="store_true", help="Write log.json with compiled tracks")
    compile_parser.add_argument("-z", "--zip", action="store_true", help="Archive each compiled track as a zip")
    compile_parser.add_argument(
        "-k", "--collection", action="store_true", help="Write genre and version collection manifests"
    )
    compile_parser.add_argument(
        "--on-missing",
        choices=[policy.value for policy in MissingAssetPolicy],
        help="What to do when a requested asset is missing",
    )
    _add_logging_arguments(compile_parser)
    compile_parser.set_defaults(handler=run_compile)

    validate_parser = subparsers.add_parser("validate-config", help="Validate a YAML configuration file")
    validate_parser.add_argument("config", type=Path, help="Configuration file to validate")
    validate_parser.add_argument("--no-suggestions", action="store_true", help="Hide fix suggestions")
    validate_parser.set_defaults(handler=run_validate_config)

    schemes_parser = subparsers.add_parser("schemes", help="List category scheme indexes")
    schemes_parser.set_defaults(handler=run_schemes)

    return parser


def _configure_from_args(args: argparse.Namespace) -> None:
    level = "DEBUG" if getattr(args, "verbose", False) else getattr(args, "log_level", None) or "INFO"
    configure_logging(level, log_file=getattr(args, "log_file", None))


def run_compile(args: argparse.Namespace) -> int:
    _configure_from_args(args)
    try:
        settings = resolve_settings(args)
    except ConfigurationError as exc:
        LOGGER.error(render_fields_block("Configuration Error", {"Error": exc}))
        CONSOLE.print(f"[bold red]Configuration error:[/bold red] {exc}")
        return EXIT_CONFIG_ERROR

    LOGGER.info(
        render_fields_block(
            "Compilation Started",
            {
                "Version": __version__,
                "Source": settings.source_root,
                "Output": settings.output_root,
                "Category Scheme": settings.category_scheme.display_name,
                "Missing Assets": settings.on_missing_asset.value,
                "Ignore Incomplete": settings.ignore_incomplete,
            },
            pad_top=False,
        )
    )
    return BatchRunner(settings, console=CONSOLE).run()


def run_validate_config(args: argparse.Namespace) -> int:
    config_path = Path(args.config)
    if not config_path.is_file():
        CONSOLE.print(f"[bold red]Configuration file not found:[/bold red] {config_path}")
        return EXIT_CONFIG_ERROR

    report, _ = validate_config_file(config_path)
    formatter = ValidationFormatter(CONSOLE, show_suggestions=not getattr(args, "no_suggestions", False))
    formatter.format_report(report)
    return EXIT_SUCCESS if report.is_valid else EXIT_CONFIG_ERROR


def run_schemes(args: argparse.Namespace) -> int:
    CONSOLE.print(describe_schemes(), markup=False)
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
