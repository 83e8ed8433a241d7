"""Treasure hunt management: records, operations, scores, monitor and hub."""

__version__ = "0.1.0"
__all__ = ["records", "operations", "manager", "scores", "monitor", "hub"]