"""Command-line interface for designbridge."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace

from designbridge import __version__
from designbridge.config import Config, load_config
from designbridge.logging import setup_logging

log = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="designbridge",
        description="Relay MCP tool calls to a design worker over WebSocket",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v verbose, -vv trace)",
    )
    parser.add_argument(
        "--config-root",
        help="Project directory holding .designbridge/config.yaml",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Process to run (default: bridge)")

    bridge_parser = subparsers.add_parser(
        "bridge",
        help="MCP stdio server plus the worker listener",
    )
    bridge_parser.add_argument("--host", help="Listener host")
    bridge_parser.add_argument("--port", type=int, help="Listener port")
    bridge_parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds before an unanswered request fails",
    )

    worker_parser = subparsers.add_parser(
        "worker",
        help="Reference worker editing an in-memory document",
    )
    worker_parser.add_argument("--url", help="Bridge WebSocket URL")

    return parser


def apply_overrides(config: Config, parsed: argparse.Namespace) -> Config:
    """Layer command-line flags over the loaded config."""
    bridge = config.bridge
    if getattr(parsed, "host", None):
        bridge = replace(bridge, host=parsed.host)
    if getattr(parsed, "port", None):
        bridge = replace(bridge, port=parsed.port)
    if getattr(parsed, "timeout", None):
        bridge = replace(bridge, request_timeout=parsed.timeout)

    worker = config.worker
    if getattr(parsed, "url", None):
        worker = replace(worker, url=parsed.url)

    logging_config = config.logging
    if parsed.verbose:
        logging_config = replace(logging_config, verbose=min(2 + parsed.verbose, 4))

    return replace(config, bridge=bridge, worker=worker, logging=logging_config)


async def run_worker(config: Config) -> None:
    from designbridge.worker import WorkerClient, WorkerSession

    client = WorkerClient(
        WorkerSession(),
        config.worker.url,
        reconnect_delay=config.worker.reconnect_delay,
    )
    try:
        await client.run()
    finally:
        await client.stop()


def run_cli(args: Sequence[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)
    mode = parsed.mode or "bridge"

    config = apply_overrides(load_config(root=parsed.config_root), parsed)
    setup_logging(config.logging)

    try:
        if mode == "bridge":
            from designbridge.mcp.server import run_bridge

            log.info("Starting bridge (listener ws://%s:%d/)", config.bridge.host, config.bridge.port)
            asyncio.run(run_bridge(config))
        else:
            log.info("Starting worker (bridge %s)", config.worker.url)
            asyncio.run(run_worker(config))
    except KeyboardInterrupt:
        log.info("Interrupted, exiting")
    return 0
