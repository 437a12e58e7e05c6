"""
Main CLI entry point for ochat.

Launches the Textual settings panel for the ochat configuration file.
"""

import argparse
import sys
from pathlib import Path

from ochat.logging import configure_logging_from_args, get_logger
from ochat.paths import get_settings_path


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="ochat",
        description="ochat - settings panel for a local Ollama chat client",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the settings file (default: settings.json in the ochat config folder)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (overrides --verbose and the settings file)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the ochat CLI.

    Args:
        argv: Command-line arguments (for testing)

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # Console output would corrupt the TUI; only files receive log lines.
    configure_logging_from_args(
        verbose=args.verbose,
        log_level=args.log_level,
        log_file=str(args.log_file) if args.log_file else None,
        console=False,
    )
    logger = get_logger(__name__)

    from ochat.config import FileSettingsStore, PersistenceError, ValidationError

    settings_path = Path(args.config).expanduser().resolve() if args.config else get_settings_path()
    store = FileSettingsStore(settings_path)
    try:
        settings = store.load()
    except (PersistenceError, ValidationError) as e:
        logger.error("Failed to load settings from %s: %s", settings_path, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not (args.verbose or args.log_level or args.log_file):
        from ochat.ui.tui.app import configure_logging_for_settings
        configure_logging_for_settings(settings)

    logger.info("Starting TUI with settings from %s", settings_path)
    try:
        from ochat.ui.tui.app import run_tui
        return run_tui(store, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
