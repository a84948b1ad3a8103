"""Tar packing and reading."""
