"""Bundled catalog and story definitions."""
