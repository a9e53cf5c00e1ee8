"""Protocol definitions for BOM components."""

from .blocks import BlockResolver

__all__ = ["BlockResolver"]
