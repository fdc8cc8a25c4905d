"""Utility helpers for customhook."""

from customhook.utils.deep_merge import deep_merge

__all__ = ["deep_merge"]
