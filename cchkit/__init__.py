"""Customizable contraction hierarchies, nearest-node lookup and graph helpers for route planning."""

__version__ = "0.1.0"