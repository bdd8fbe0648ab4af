"""Derived source mappings cache.

This package resolves the mapping table used by the rest of a build,
reusing artifacts keyed by the identity of the configured processor chain.
"""
