"""Main entry point for the organization contact finder."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from app.collectors.factory import build_collectors
from app.config.environment import EnvironmentConfig
from app.config.exceptions import ConfigurationError
from app.config.loader import load_config, validate_config_file
from app.config.models import RunConfig
from app.domain.models import RunSummary
from app.logging import get_logger
from app.logging.config import configure_logging
from app.persistence.database import close_database, init_database
from app.pipeline import ContactPipeline
from app.sinks import CompositeResultSink, DatabaseResultSink, JsonLinesResultSink, ResultSink
from app.utils.rate_limiter import DomainRateLimiter

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[RunConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    run_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif run_config.logging and run_config.logging.level:
        env_config.log_level = run_config.logging.level
    else:
        env_config.log_level = "INFO"

    return run_config, env_config


def build_sink(run_config: RunConfig) -> ResultSink:
    """Database sink, plus a JSON-lines sink when output.results_path is set."""
    sinks: List[ResultSink] = [DatabaseResultSink()]
    if run_config.output.results_path:
        sinks.append(JsonLinesResultSink(path=run_config.output.results_path))
    return CompositeResultSink(sinks)


def write_summary_file(summary: RunSummary, path: str) -> None:
    summary_path = Path(path)
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary.to_output_dict(), f, indent=2)
        f.write("\n")


def check_config(config_path: Optional[Path]) -> int:
    """Validate the configuration without running; returns the exit code."""
    if config_path is not None:
        return 0 if validate_config_file(config_path) else 1

    try:
        run_config, _ = load_config(None)
    except ConfigurationError as e:
        print(f"✗ Configuration validation failed:\n{e}")
        return 1

    print(f"✓ Configuration is valid ({len(run_config.organizations)} organization(s))")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the contact finder once over the configured organizations.

    Returns:
        Exit code: 0 when the run completed (even with per-organization
        failures), 1 on invalid input or an unrecoverable startup error.
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Organization contact finder - collect, validate and rank decision-maker contacts"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML/JSON run configuration "
        "(default: CONTACT_FINDER_INPUT, then config.yaml / config.json)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Validate the configuration and exit",
    )

    args = parser.parse_args(argv)

    if args.check_config:
        return check_config(args.config)

    sink: Optional[ResultSink] = None
    try:
        run_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=run_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Contact finder starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "organizations": len(run_config.organizations),
                "log_level": env_config.log_level,
            },
        )

        init_database(env_config.database_url)
        sink = build_sink(run_config)

        rate_limiter = DomainRateLimiter.from_milliseconds(run_config.min_domain_delay_ms)
        collectors = build_collectors(run_config, rate_limiter)

        pipeline = ContactPipeline(
            config=run_config,
            sink=sink,
            collectors=collectors,
            rate_limiter=rate_limiter,
        )
        result = pipeline.run_once()
        summary = result.summary

        if run_config.output.summary_path:
            try:
                write_summary_file(summary, run_config.output.summary_path)
            except OSError as e:
                logger.error(
                    f"Failed to write summary file: {e}",
                    extra={"event": "summary.write_failed", "path": run_config.output.summary_path},
                )

        print(json.dumps(summary.to_output_dict()))

        if result.had_errors:
            logger.warning(
                f"{len(result.failed_organizations)} organization(s) failed: "
                f"{', '.join(result.failed_organizations)}",
                extra={
                    "event": "run.organizations_failed",
                    "failed_organizations": result.failed_organizations,
                },
            )

        logger.info(
            f"Run finished: {summary.organizations_processed} organization(s), "
            f"{summary.candidates_found} found, {summary.candidates_valid} valid, "
            f"{summary.candidates_saved} saved, {summary.errors} error(s)",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": type(e).__name__},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1
    finally:
        if sink is not None:
            sink.close()
        close_database()


if __name__ == "__main__":
    sys.exit(main())
