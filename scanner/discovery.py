"""Filesystem helpers: reading sources and locating package configs."""

import asyncio
import json
from pathlib import Path
from typing import Any, List, Optional, Union

from .transforms import TransformEntry


CONFIG_FILENAME = "package.json"

# Key of the package config holding glslify settings
CONFIG_KEY = "glslify"

# Option keys consumed at registration time, never passed to a transform
RESERVED_OPTIONS = ("global", "post")


def read_text(path: Union[str, Path]) -> str:
    """Read a source file as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


async def read_text_async(path: Union[str, Path]) -> str:
    """Read a source file as UTF-8 text without blocking the event loop."""
    return await asyncio.to_thread(read_text, path)


def find_up(directory: Union[str, Path], filename: str) -> Optional[Path]:
    """
    Find the nearest directory containing ``filename``, walking upward.

    Args:
        directory: Directory to start from.
        filename: Name of the file to look for.

    Returns:
        Path of the found file, or None when no ancestor contains it.
    """
    current = Path(directory).resolve()

    for folder in (current, *current.parents):
        candidate = folder / filename
        if candidate.is_file():
            return candidate

    return None


def find_package_config(directory: Union[str, Path]) -> Optional[Path]:
    """Find the nearest enclosing package config for a directory."""
    return find_up(directory, CONFIG_FILENAME)


async def find_package_config_async(directory: Union[str, Path]) -> Optional[Path]:
    """Async variant of :func:`find_package_config`."""
    return await asyncio.to_thread(find_package_config, directory)


def get_transforms_from_config(
    config: Any,
    basedir: Optional[Path] = None,
) -> List[TransformEntry]:
    """
    Get the transforms declared by a package config.

    Entries under ``glslify.transform`` are either a bare transform name or
    a ``[name, options]`` pair. The ``global`` and ``post`` options are
    dropped, since they only make sense at registration time.

    Args:
        config: Parsed config, or its raw JSON text.
        basedir: Directory of the config; declared names load relative to it.

    Returns:
        Unresolved transform entries, in declaration order.

    Raises:
        ValueError: If ``config`` is text that is not valid JSON
            (``json.JSONDecodeError``), or declares transforms in a shape
            other than the above.
    """
    if isinstance(config, (str, bytes)):
        config = json.loads(config)

    settings = config.get(CONFIG_KEY) if isinstance(config, dict) else None
    declared = settings.get("transform") if isinstance(settings, dict) else None
    if declared is None:
        return []
    if not isinstance(declared, list):
        raise ValueError(f"{CONFIG_KEY}.transform must be a list, got {declared!r}")

    entries: List[TransformEntry] = []
    for item in declared:
        name, options = _parse_entry(item)
        entries.append(TransformEntry(name, name, strip_reserved(options), basedir))

    return entries


def _parse_entry(item: Any):
    """Split one declared transform into its name and options."""
    if isinstance(item, str) and item:
        return item, {}

    if isinstance(item, list) and 1 <= len(item) <= 2:
        name = item[0]
        options = item[1] if len(item) == 2 else {}
        if isinstance(name, str) and name and isinstance(options, (dict, type(None))):
            return name, options

    raise ValueError(
        f"invalid {CONFIG_KEY}.transform entry {item!r}: "
        "expected a name or a [name, options] pair"
    )


def strip_reserved(options: Any) -> dict:
    """Copy transform options without the reserved control keys."""
    if not isinstance(options, dict):
        return {}
    return {k: v for k, v in options.items() if k not in RESERVED_OPTIONS}
