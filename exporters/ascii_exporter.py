"""ASCII tree-style exporter for shader dependency lists."""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from depgraph.model import ModuleNode


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "


def to_ascii(
    nodes: Sequence[ModuleNode],
    base: Optional[Union[str, Path]] = None,
    style: str = "tree",
) -> str:
    """
    Render a dependency list as a tree rooted at its entry modules.

    Each line shows the import name a module was reached by and its path.
    A module already shown further up the same branch is marked ``[*]``
    and not expanded again, which keeps import cycles finite.

    Args:
        nodes: Nodes of a built graph.
        base: Optional base directory for relative path display.
        style: Output style - "tree" (Unicode) or "ascii" (pure ASCII).

    Returns:
        Tree string, empty for an empty list.
    """
    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    by_id: Dict[int, ModuleNode] = {node.id: node for node in nodes}

    # Modules added directly rather than imported
    imported: Set[int] = set()
    for node in nodes:
        imported.update(node.deps.values())
    roots = [node for node in nodes if node.entry or node.id not in imported]

    lines: List[str] = []
    for i, root in enumerate(roots):
        _render_node(
            by_id=by_id,
            node=root,
            label=_display_path(root.file, base),
            prefix="",
            is_last=True,
            chars=chars,
            visited=set(),
            lines=lines,
            is_root=True,
            base=base,
        )

        if i < len(roots) - 1:
            lines.append("")

    return "\n".join(lines)


def _render_node(
    by_id: Dict[int, ModuleNode],
    node: ModuleNode,
    label: str,
    prefix: str,
    is_last: bool,
    chars: Tuple[str, str, str, str],
    visited: Set[int],
    lines: List[str],
    is_root: bool,
    base: Optional[Union[str, Path]],
) -> None:
    """Recursively render a node and its dependencies."""
    branch, last, vertical, space = chars

    is_cycle = node.id in visited
    cycle_marker = " [*]" if is_cycle else ""

    if is_root:
        lines.append(f"{label}{cycle_marker}")
    else:
        connector = last if is_last else branch
        lines.append(f"{prefix}{connector}{label}{cycle_marker}")

    if is_cycle:
        return

    visited.add(node.id)

    deps = list(node.deps.items())
    if is_root:
        child_prefix = ""
    else:
        child_prefix = prefix + (space if is_last else vertical)

    for index, (import_name, dep_id) in enumerate(deps):
        child_is_last = index == len(deps) - 1
        child = by_id.get(dep_id)

        if child is None:
            connector = last if child_is_last else branch
            lines.append(f"{child_prefix}{connector}{import_name} [MISSING]")
            continue

        _render_node(
            by_id=by_id,
            node=child,
            label=f"{import_name} ({_display_path(child.file, base)})",
            prefix=child_prefix,
            is_last=child_is_last,
            chars=chars,
            visited=visited,
            lines=lines,
            is_root=False,
            base=base,
        )

    # Allow the same module in other branches, still catching cycles
    visited.discard(node.id)


def _display_path(path: str, base: Optional[Union[str, Path]]) -> str:
    """Get the display path for a module file, relative to base when inside it."""
    file_path = Path(path)
    if base is not None:
        try:
            file_path = file_path.relative_to(Path(base).resolve())
        except ValueError:
            pass
    return file_path.as_posix()
