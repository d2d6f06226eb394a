from __future__ import annotations

import argparse

from .__version import __version__
from ._logging import get_logger, setup_colored_logging
from .config import LOG_LEVELS, EditorServiceConfig

logger = get_logger(__name__, "main")

_DESCRIPTION = """\
polymer-lsp: Language Server Protocol implementation for Polymer elements

Provides editor support for HTML documents using Polymer with:
• Autocompletion for element tags, with snippets for their slots
• Autocompletion for attributes, including those contributed by behaviors
• Autocompletion for properties inside {{...}} and [[...]] data bindings
• Find references for element tags and bound properties"""


def main():
    """Main entry point for the language server."""
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="polymer-lsp",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=None,
        choices=LOG_LEVELS,
        help="Set the logging level (default: $POLYMER_LSP_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory that imports are resolved against, until the editor sends a workspace root",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    server_parser = subparsers.add_parser(
        "server",
        help="Start the LSP server",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    server_parser.add_argument("--tcp", action="store_true", help="Use TCP instead of stdio")
    server_parser.add_argument(
        "--port", type=int, default=8080, help="TCP port to listen on (default: %(default)s)"
    )
    server_parser.add_argument("--stdio", action="store_true", help="Use stdio (default)")

    args = parser.parse_args()

    # Require explicit subcommand
    if args.command is None:
        parser.error(
            "A subcommand is required. Use 'polymer-lsp server' to start the LSP server.\n"
            "See 'polymer-lsp --help' for available commands."
        )

    try:
        config = EditorServiceConfig.from_environment(log_level=args.log_level, root_dir=args.root)
    except ValueError as e:
        parser.error(f"Invalid configuration: {e}")

    setup_colored_logging(level=config.logging_level)

    if args.command == "server":
        if args.tcp and args.stdio:
            parser.error("--tcp and --stdio are mutually exclusive")

        # Import server only when actually needed
        from .server import create_server

        server = create_server(config)

        if args.tcp:
            logger.info(f"Starting Polymer LSP server ({__version__}) on TCP port {args.port}")
            server.start_tcp("localhost", args.port)
        else:
            logger.info(f"Starting Polymer LSP server ({__version__}) on stdio")
            server.start_io()


if __name__ == "__main__":
    main()
