"""Linkup Stage: social graph, feed and realtime messaging backend."""

__version__ = "0.1.0"
