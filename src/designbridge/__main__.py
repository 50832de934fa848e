"""Entry point for running designbridge.

Usage:
    python -m designbridge            # bridge: MCP on stdio + worker listener
    python -m designbridge worker     # reference worker

The bridge owns stdout for MCP messages; logs go to stderr or the
configured log file.
"""

import sys

from designbridge.cli import run_cli


def main() -> None:
    sys.exit(run_cli(sys.argv[1:]))


if __name__ == "__main__":
    main()
