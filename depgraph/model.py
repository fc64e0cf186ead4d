"""Graph data model for shader modules and their dependencies."""

from typing import Any, Dict, Optional


class ModuleNode:
    """
    One shader module in a dependency graph.

    ``deps`` maps each import name used by the module to the ``id`` of the
    node it resolved to. ``source`` stays None until the module's transforms
    have been applied.
    """

    def __init__(self, id: int, file: str, entry: bool = False):
        self.id = id
        self.file = file
        self.source: Optional[str] = None
        self.deps: Dict[str, int] = {}
        self.entry = entry

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly mapping of this node."""
        return {
            "id": self.id,
            "deps": dict(self.deps),
            "file": self.file,
            "source": self.source,
            "entry": self.entry,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleNode):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ModuleNode(id={self.id}, file={self.file!r}, deps={self.deps!r}, entry={self.entry})"
