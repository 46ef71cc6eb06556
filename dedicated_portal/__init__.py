"""Dedicated portal clusters and customers backends."""

__version__ = "0.1.0"
