"""crowdptr command-line interface"""

import argparse
import sys
from typing import NoReturn

from crowdptr import __version__


def arguments_parse(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Args:
        argv: Optional argument list, defaults to sys.argv.

    Returns:
        Parsed CLI arguments.
    """
    parser = argparse.ArgumentParser(
        prog="crowdptr",
        description="Replay remote audience pointer input on the local X11 display",
    )

    parser.add_argument("--version", action="version", version=f"crowdptr {__version__}")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )

    parser.add_argument(
        "--channel", type=str, default=None, help="Channel to relay (overrides config)"
    )

    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="Websocket endpoint the channel is appended to (overrides config)",
    )

    parser.add_argument(
        "--display", type=str, default=None, help="X11 display name (overrides config)"
    )

    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Synthesize local pointer events (overrides config)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Log synthesized events instead of injecting them into X11",
    )

    parser.add_argument(
        "--verbose", action="store_true", help="Log every packet and dropped frame"
    )

    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (overrides config)"
    )

    parser.add_argument(
        "--info", action="store_true", help="Enable info logging (overrides config)"
    )

    parser.add_argument(
        "--warning", action="store_true", help="Enable warning logging (overrides config)"
    )

    parser.add_argument(
        "--error", action="store_true", help="Enable error logging (overrides config)"
    )

    return parser.parse_args(argv)


def logLevelOverride_get(args: argparse.Namespace) -> str | None:
    """
    Resolve explicit log level override flags.

    Args:
        args: Parsed CLI args.

    Returns:
        Selected log level or None.
    """
    if args.error:
        return "ERROR"
    if args.warning:
        return "WARNING"
    if args.info:
        return "INFO"
    if args.debug:
        return "DEBUG"
    return None


def main() -> NoReturn:
    """Main entry point for the crowdptr command"""
    args = arguments_parse()

    log_level_override: str | None = logLevelOverride_get(args)
    if log_level_override is not None:
        setattr(args, "log_level", log_level_override)

    try:
        from crowdptr.relay.main import relay_run

        relay_run(args)

    except KeyboardInterrupt:
        print("\nShutting down...")
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
