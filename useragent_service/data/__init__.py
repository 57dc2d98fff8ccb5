"""Packaged user-agent catalogs."""
