"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the content risk service.

- serve: run the HTTP API under uvicorn
- analyze: assess one draft from the command line
- config: print the effective configuration

Configuration comes from CONTENT_RISK_* environment variables
(optionally from a .env file); flags only cover process concerns.

============================================================
USAGE
============================================================
python -m orchestrator.cli serve --port 8080
python -m orchestrator.cli analyze --text "Draft post" --platform twitter
python -m orchestrator.cli analyze --file draft.txt --json
python -m orchestrator.cli config

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.exceptions import ConfigurationError, ValidationError
from risk_scoring.config import PipelineConfig

from .core import build_http_service, format_assessment_summary, setup_logging
from .models import AnalysisJob, MEDIA_CONTENT_TYPES


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="content-risk",
        description="Pre-publication content risk assessment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --host 0.0.0.0 --port 8080
  %(prog)s analyze --text "Draft post" --platform twitter --platform reddit
  %(prog)s analyze --file draft.txt --json
  %(prog)s config
        """
    )

    # --------------------------------------------------------
    # Global Options
    # --------------------------------------------------------
    parser.add_argument(
        "--env-file",
        type=str,
        metavar="PATH",
        help="Read CONTENT_RISK_* variables from this file first",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        default="text",
        help="Logging format (default: text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # serve
    # --------------------------------------------------------
    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    # --------------------------------------------------------
    # analyze
    # --------------------------------------------------------
    analyze = commands.add_parser("analyze", help="Assess one draft")
    source = analyze.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", type=str, help="Draft text")
    source.add_argument("--file", type=str, metavar="PATH", help="Read the draft from a file")
    analyze.add_argument(
        "--platform",
        action="append",
        default=[],
        help="Target platform (repeatable)",
    )
    analyze.add_argument(
        "--content-type",
        type=str,
        choices=list(MEDIA_CONTENT_TYPES),
        default="text",
    )
    analyze.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON",
    )

    # --------------------------------------------------------
    # config
    # --------------------------------------------------------
    commands.add_parser("config", help="Print the effective configuration")

    return parser


def validate_args(args: argparse.Namespace) -> List[str]:
    """Validate command line arguments."""
    errors = []

    if args.command == "serve" and not 0 < args.port < 65536:
        errors.append(f"Invalid port: {args.port}")

    if args.command == "analyze" and args.file and not Path(args.file).is_file():
        errors.append(f"File not found: {args.file}")

    return errors


# ============================================================
# COMMANDS
# ============================================================

async def run_analyze(args: argparse.Namespace, config: PipelineConfig) -> int:
    """Assess one draft and print the result."""
    text = args.text if args.text is not None else Path(args.file).read_text(encoding="utf-8")
    job = AnalysisJob.from_text(
        text,
        platforms=args.platform,
        content_type=args.content_type,
    )

    service = build_http_service(config)
    try:
        result = await service.submit_for_analysis(job)
    finally:
        await service.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_assessment_summary(result))

    return 0


def run_serve(args: argparse.Namespace, config: PipelineConfig) -> int:
    """Serve the HTTP API until interrupted."""
    import uvicorn

    from api.server import create_app

    app = create_app(build_http_service(config))
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    setup_logging(level=args.log_level, log_format=args.log_format)

    try:
        config = PipelineConfig.from_env(args.env_file)
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return 1

    if args.command == "config":
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    if args.command == "serve":
        return run_serve(args, config)

    try:
        return asyncio.run(run_analyze(args, config))
    except ValidationError as e:
        print(f"Invalid submission: {e.message}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
