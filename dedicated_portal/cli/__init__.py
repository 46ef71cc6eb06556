"""Command line interface."""

from .main import clusters_cli, customers_cli

__all__ = ["clusters_cli", "customers_cli"]
