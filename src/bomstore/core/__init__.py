"""BOM reader core."""

from .container import BOMContainer, open_bom

__all__ = ["BOMContainer", "open_bom"]
