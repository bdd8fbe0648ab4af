"""Mapping processors.

This package defines the mapping processor capability, ordered processor
chains with a stable identity, and the built-in processor variants.
"""
