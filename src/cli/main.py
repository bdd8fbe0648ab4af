"""mapcache CLI entry points.
This module exposes commands for resolving cached source mappings.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cache.source_mappings import SourceMappingsCache
from core.chain_spec import ChainSpec, load_chain_spec
from core.config import MapCacheConfig
from core.constants import CHAIN_SPEC_VERSION
from core.errors import IOFailure, MapCacheError
from core.logging_config import configure_cli_logging
from mappings.mapping_io import load_mappings_file, write_mappings_file
from processors.base import ProcessorChain, hash_file
from processors.registry import build_chain


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="mapcache", description="Source mappings cache CLI")
    parser.add_argument("--cache-root", help="Override MAPCACHE_CACHE_ROOT for this command")
    parser.add_argument("--verbose", action="store_true", help="Log debug events to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_resolve_command(subparsers)
    _add_switch_command(subparsers)
    _add_chain_hash_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the mapcache CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_cli_logging(args.verbose)
    try:
        config = _build_config(args.cache_root)
        if args.command == "resolve":
            return _run_resolve_command(config, args)
        if args.command == "switch":
            return _run_switch_command(args)
        if args.command == "chain-hash":
            return _run_chain_hash_command(args)
    except MapCacheError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(cache_root: str | None) -> MapCacheConfig:
    """Build config with optional cache-root override.

    Args:
        cache_root: Optional override path.

    Returns:
        Validated runtime config.
    """
    config = MapCacheConfig.from_env()
    if cache_root:
        config = replace(config, cache_root=Path(cache_root).expanduser().resolve())
    return config


def _run_resolve_command(config: MapCacheConfig, args: argparse.Namespace) -> int:
    """Handle resolve command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    base_path = Path(args.base).expanduser().resolve()
    chain = _load_chain(args.chain, base_path)
    cache = SourceMappingsCache.from_config(config)
    resolved_path = cache.resolve(
        base_path,
        chain,
        force_refresh=args.refresh or config.refresh_deps,
        working_namespace=args.working_namespace or config.working_namespace,
        target_namespace=args.target_namespace or config.target_namespace,
    )
    print(resolved_path)
    return 0


def _run_switch_command(args: argparse.Namespace) -> int:
    """Handle switch command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    input_path = Path(args.input).expanduser().resolve()
    output_path = Path(args.output).expanduser().resolve()
    store = load_mappings_file(input_path, args.namespace)
    write_mappings_file(store, args.namespace, output_path)
    print(output_path)
    return 0


def _run_chain_hash_command(args: argparse.Namespace) -> int:
    """Handle chain-hash command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    base_path = Path(args.base).expanduser().resolve() if args.base else None
    chain = _load_chain(args.chain, base_path)
    print(chain.identity() if len(chain) else "-")
    return 0


def _load_chain(chain_path: str | None, base_path: Path | None) -> ProcessorChain:
    """Build the configured chain, keyed to the base table contents when given."""
    spec = load_chain_spec(chain_path) if chain_path else ChainSpec(version=CHAIN_SPEC_VERSION, processors=())
    base_identity = _base_identity(base_path) if base_path is not None else None
    return build_chain(spec, base_identity=base_identity)


def _base_identity(base_path: Path) -> str:
    try:
        return hash_file(base_path)
    except OSError as error:
        raise IOFailure(
            f"Failed to read base mapping table {base_path}: {error}. "
            "Check that the file exists and is readable."
        ) from error


def _add_resolve_command(subparsers: Any) -> None:
    """Register resolve subcommand."""
    parser = subparsers.add_parser(
        "resolve",
        help="Resolve processed source mappings, reusing cached artifacts",
    )
    parser.add_argument("base", help="Base Tiny v2 mapping table")
    parser.add_argument("--chain", help="YAML processor chain spec; omit for pass-through")
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Recompute even when a cached artifact exists",
    )
    parser.add_argument("--working-namespace", help="Source namespace while processors run")
    parser.add_argument("--target-namespace", help="Source namespace of the written artifact")


def _add_switch_command(subparsers: Any) -> None:
    """Register switch subcommand."""
    parser = subparsers.add_parser(
        "switch",
        help="Rewrite a mapping table with another source namespace",
    )
    parser.add_argument("input", help="Input Tiny v2 mapping table")
    parser.add_argument("output", help="Output path")
    parser.add_argument("--namespace", required=True, help="New source namespace")


def _add_chain_hash_command(subparsers: Any) -> None:
    """Register chain-hash subcommand."""
    parser = subparsers.add_parser("chain-hash", help="Print the identity of a processor chain")
    parser.add_argument("--chain", required=True, help="YAML processor chain spec")
    parser.add_argument("--base", help="Optional base table folded into the identity")
