"""Typed chain-spec parsing for declarative mapping processor chains.

This module loads and validates YAML files describing the ordered mapping
processors applied to a base mapping table. One strict schema is shared by
the CLI and SDK so a chain configuration always hashes the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence, cast

import yaml

from core.constants import CHAIN_SPEC_VERSION
from core.errors import ChainSpecError


@dataclass(frozen=True)
class ProcessorSpec:
    """One configured processor entry from a chain-spec file."""

    processor_type: str
    params: Mapping[str, object]


@dataclass(frozen=True)
class ChainSpec:
    """Validated chain-spec root object."""

    version: int
    processors: tuple[ProcessorSpec, ...]


def load_chain_spec(spec_path: str | Path) -> ChainSpec:
    """Load and validate a YAML chain-spec from disk.

    Args:
        spec_path: File path to YAML chain-spec.

    Returns:
        Fully validated chain-spec object.

    Raises:
        ChainSpecError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(spec_path)
    return parse_chain_spec(payload)


def parse_chain_spec(payload: object) -> ChainSpec:
    """Validate an already-decoded chain-spec payload."""
    root_mapping = _expect_mapping(payload, "chain spec root")
    _validate_root_keys(root_mapping)
    version = _parse_version(root_mapping)
    processors = _parse_processors(root_mapping)
    return ChainSpec(version=version, processors=processors)


def _load_yaml_payload(spec_path: str | Path) -> object:
    spec_file = Path(spec_path).expanduser().resolve()
    if not spec_file.exists():
        raise ChainSpecError(
            f"Chain spec file does not exist at {spec_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(spec_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise ChainSpecError(
            f"Failed to read chain spec at {spec_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise ChainSpecError(
            f"Failed to parse YAML chain spec at {spec_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise ChainSpecError(
            f"Chain spec at {spec_file} is empty. Define 'version' and 'processors'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise ChainSpecError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise ChainSpecError(f"Invalid {context}: expected object mapping, got {type(value).__name__}.")


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise ChainSpecError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise ChainSpecError(
            f"Chain spec field 'version' must be an integer. Set version: {CHAIN_SPEC_VERSION}."
        )
    if raw_version != CHAIN_SPEC_VERSION:
        raise ChainSpecError(
            f"Unsupported chain spec version {raw_version}. Use version: {CHAIN_SPEC_VERSION}."
        )
    return raw_version


def _parse_processors(root_mapping: Mapping[str, object]) -> tuple[ProcessorSpec, ...]:
    raw_processors = root_mapping.get("processors")
    if raw_processors is None:
        return ()
    rows = _expect_sequence(raw_processors, "chain spec processors")
    return tuple(_parse_processor(row, index) for index, row in enumerate(rows))


def _parse_processor(row: object, processor_index: int) -> ProcessorSpec:
    context = f"chain spec processor #{processor_index + 1}"
    processor_mapping = _expect_mapping(row, context)
    raw_type = processor_mapping.get("type")
    if not isinstance(raw_type, str) or not raw_type.strip():
        raise ChainSpecError(f"Invalid {context}: field 'type' must be a non-empty string.")
    params = {key: value for key, value in processor_mapping.items() if key != "type"}
    return ProcessorSpec(processor_type=raw_type.strip(), params=params)


def _validate_root_keys(root_mapping: Mapping[str, object]) -> None:
    allowed_keys = {"version", "processors"}
    unknown_keys = sorted(set(root_mapping) - allowed_keys)
    if unknown_keys:
        raise ChainSpecError(
            f"Chain spec contains unknown root fields: {', '.join(unknown_keys)}."
        )
