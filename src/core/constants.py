"""Core constants used across mapcache modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_CACHE_ROOT = Path(".mapcache")
SOURCE_MAPPINGS_DIR_NAME = "source_mappings"
CACHE_FILE_EXTENSION = ".tiny"
LOCK_FILE_SUFFIX = ".lock"
LOCKS_DIR_NAME = ".locks"
DEFAULT_LOCK_TIMEOUT_SECONDS = 60.0
HASH_ALGORITHM = "sha256"
INTERMEDIARY_NAMESPACE = "intermediary"
NAMED_NAMESPACE = "named"
DEFAULT_WORKING_NAMESPACE = INTERMEDIARY_NAMESPACE
DEFAULT_TARGET_NAMESPACE = NAMED_NAMESPACE
TINY_V2_HEADER = "tiny"
TINY_V2_MAJOR_VERSION = 2
TINY_V2_MINOR_VERSION = 0
ESCAPED_NAMES_PROPERTY = "escaped-names"
MAPPINGS_FILE_ENCODING = "utf-8"
CHAIN_SPEC_VERSION = 1
