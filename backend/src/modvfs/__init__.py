"""Mod load-order and virtual-filesystem conflict resolution engine."""

__version__ = "0.1.0"
