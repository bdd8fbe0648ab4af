"""Mapping table model and serialization.

This package holds the in-memory mapping store, the source-namespace
switch view, and the Tiny v2 reader and writer used for cached artifacts.
"""
