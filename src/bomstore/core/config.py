"""Configuration for the BOM reader.

Defines the tunable parameters used while decoding a container.
"""

from __future__ import annotations

from dataclasses import dataclass

IDENTITY_SCHEMES = ("explicit", "positional")


@dataclass
class BOMConfig:
    """Configuration parameters for reading BOM containers.

    Attributes:
        paths_variable: Variable holding the path manifest tree
        path_separator: Separator used when joining path components
        identity_scheme: "explicit" reads entry ids from the value block,
            "positional" numbers entries from 1 in traversal order
        max_nodes: Ceiling on nodes visited per traversal (None = block count)
        supported_versions: Container and tree versions accepted on open
    """

    paths_variable: str = "Paths"
    path_separator: bytes = b"/"
    identity_scheme: str = "explicit"
    max_nodes: int | None = None
    supported_versions: tuple[int, ...] = (1,)

    def __post_init__(self) -> None:
        if self.identity_scheme not in IDENTITY_SCHEMES:
            raise ValueError(f"Unknown identity scheme: {self.identity_scheme}")
        if self.max_nodes is not None and self.max_nodes <= 0:
            raise ValueError(f"max_nodes must be positive: {self.max_nodes}")
