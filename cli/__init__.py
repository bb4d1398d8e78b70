"""CLI package for querying the hardware sample interpolation service."""
