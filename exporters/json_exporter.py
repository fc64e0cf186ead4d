"""JSON exporter for shader dependency lists (machine-friendly format)."""

import json
from typing import Any, Dict, Iterable, List

from depgraph.model import ModuleNode


def to_json(
    nodes: Iterable[ModuleNode],
    indent: int = 2,
    include_source: bool = True,
) -> str:
    """
    Convert a dependency list to JSON.

    The output is the list bundlers consume: one object per module with
    ``id``, ``deps``, ``file``, ``source`` and ``entry``.

    Args:
        nodes: Nodes of a built graph.
        indent: JSON indentation level.
        include_source: If False, leave out module sources.

    Returns:
        JSON string representation of the dependency list.
    """
    data: List[Dict[str, Any]] = []
    for node in nodes:
        item = node.to_dict()
        if not include_source:
            del item["source"]
        data.append(item)

    return json.dumps(data, indent=indent)
