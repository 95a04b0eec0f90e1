"""
CLI entry point for grant-directory.

Usage:
    python -m grant_directory serve
    python -m grant_directory sitemap --output public/sitemap.xml
    python -m grant_directory classify --state CA --city Sacramento --title "Arts Grant" --id 3f2b8c1e-...
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Grant directory web site and tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the site with the default settings.yml
  python -m grant_directory serve

  # Serve a specific export on another port
  python -m grant_directory serve --data exports/grants.jsonl --port 9000

  # Write the sitemap
  python -m grant_directory sitemap --output public/sitemap.xml

  # Show how a record is classified and where it lives
  python -m grant_directory classify --state "Washington, DC" --city Statewide --title "Arts Grant" --id abc-123
        """,
    )

    parser.add_argument("--config", type=str, help="Path to settings.yml config file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Output logs as JSON")
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument("--data", type=str, help="Grants JSON/JSONL file (overrides config)")
    serve_parser.add_argument("--agencies", type=str, help="Agencies JSON/JSONL file (overrides config)")
    serve_parser.add_argument("--host", type=str, help="Bind address (overrides config)")
    serve_parser.add_argument("--port", type=int, help="Port (overrides config)")

    sitemap_parser = subparsers.add_parser("sitemap", help="Write sitemap.xml")
    sitemap_parser.add_argument("--data", type=str, help="Grants JSON/JSONL file (overrides config)")
    sitemap_parser.add_argument("--agencies", type=str, help="Agencies JSON/JSONL file (overrides config)")
    sitemap_parser.add_argument("--output", type=str, default="sitemap.xml", help="Output file (default: sitemap.xml)")

    classify_parser = subparsers.add_parser("classify", help="Classify one record and print its canonical path")
    classify_parser.add_argument("--state", type=str, default=None)
    classify_parser.add_argument("--city", type=str, default=None)
    classify_parser.add_argument("--type", dest="grant_type", type=str, default=None)
    classify_parser.add_argument("--title", type=str, default="")
    classify_parser.add_argument("--id", dest="grant_id", type=str, default="")

    return parser, parser.parse_args(argv)


def _load_repository(args, settings):
    from .storage import GrantRepository

    grants_path = args.data or settings.grants_path
    agencies_path = args.agencies or settings.agencies_path
    return GrantRepository.from_files(grants_path, agencies_path)


def run_classify(args) -> dict:
    """Classify a record given on the command line."""
    from .core.location import classify
    from .core.slug import build_path

    location = classify(args.state, args.city, grant_type=args.grant_type)
    return {
        "jurisdiction": location.jurisdiction.value,
        "stateCode": getattr(location, "state_code", None),
        "citySlug": getattr(location, "city_slug", None),
        "path": build_path(location, args.title, args.grant_id),
    }


def run_sitemap(args, settings) -> Path:
    from .sitemap import build_sitemap_entries, render_sitemap_xml

    repository = _load_repository(args, settings)
    entries = build_sitemap_entries(repository, settings.site_url)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_sitemap_xml(entries), encoding="utf-8")

    logger = structlog.get_logger(__name__)
    logger.info("sitemap_written", path=str(output), entries=len(entries))
    return output


def run_serve(args, settings) -> None:
    from .web.server import start_web_server

    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port

    repository = _load_repository(args, settings)
    asyncio.run(start_web_server(repository, settings))


def main(argv=None):
    """Main entry point."""
    parser, args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"grant-directory {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)
    logger = structlog.get_logger(__name__)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "classify":
            print(json.dumps(run_classify(args), indent=2))
            sys.exit(0)

        from .config.loader import load_settings
        settings = load_settings(args.config)

        if args.command == "sitemap":
            run_sitemap(args, settings)
        elif args.command == "serve":
            run_serve(args, settings)
        sys.exit(0)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
