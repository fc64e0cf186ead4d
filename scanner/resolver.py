"""Resolution of glslify module specifiers to shader files."""

import asyncio
import json
from pathlib import Path
from typing import List, Optional, Union


DEFAULT_EXTENSIONS = (".glsl",)

VENDOR_DIR = "node_modules"

# Package config fields naming a package's entry shader, by priority
ENTRY_FIELDS = ("glslify", "main")

DEFAULT_ENTRY = "index.glsl"


class UnresolvedModule(LookupError):
    """Raised when a specifier cannot be mapped to a file."""

    def __init__(self, specifier: str, basedir: Union[str, Path]):
        super().__init__(f"cannot find module {specifier!r} from '{basedir}'")
        self.specifier = specifier
        self.basedir = str(basedir)


def resolve_module(specifier: str, basedir: Union[str, Path]) -> Path:
    """
    Resolve a module specifier to a canonical file path.

    Tries multiple resolution strategies:
    1. Relative (``./``, ``../``) or absolute paths against ``basedir``,
       as a file, with a default extension, or as a package directory.
    2. Bare package names (``glsl-noise``, ``glsl-noise/simplex/3d``,
       ``@scope/pkg``) in ``node_modules`` directories of ``basedir``
       and each of its parents.

    Args:
        specifier: Module specifier from an import pragma.
        basedir: Directory of the importing file.

    Returns:
        Resolved path of the file, symlinks followed.

    Raises:
        UnresolvedModule: If no strategy finds a file.
    """
    if not specifier:
        raise UnresolvedModule(specifier, basedir)

    basedir = Path(basedir).resolve()

    if _is_path_specifier(specifier):
        resolved = _resolve_path((basedir / specifier).resolve())
        if resolved is not None:
            return resolved
        raise UnresolvedModule(specifier, basedir)

    package, subpath = _split_package(specifier)
    for vendor_dir in _vendor_dirs(basedir):
        package_dir = vendor_dir / package
        if not package_dir.is_dir():
            continue

        if subpath:
            resolved = _resolve_path((package_dir / subpath).resolve())
        else:
            resolved = _resolve_directory(package_dir)
        if resolved is not None:
            return resolved

    raise UnresolvedModule(specifier, basedir)


async def resolve_module_async(specifier: str, basedir: Union[str, Path]) -> Path:
    """Async variant of :func:`resolve_module`."""
    return await asyncio.to_thread(resolve_module, specifier, basedir)


def _is_path_specifier(specifier: str) -> bool:
    """Check if a specifier is a path rather than a package name."""
    return (
        specifier in (".", "..")
        or specifier.startswith(("./", "../", "/"))
        or Path(specifier).is_absolute()
    )


def _split_package(specifier: str):
    """Split ``pkg/sub/path`` (or ``@scope/pkg/sub``) into package and subpath."""
    parts = specifier.split("/")
    count = 2 if specifier.startswith("@") else 1
    return "/".join(parts[:count]), "/".join(parts[count:])


def _vendor_dirs(basedir: Path) -> List[Path]:
    """List candidate vendor directories from ``basedir`` up to the filesystem root."""
    return [
        folder / VENDOR_DIR
        for folder in (basedir, *basedir.parents)
        if folder.name != VENDOR_DIR
    ]


def _resolve_path(candidate: Path) -> Optional[Path]:
    """Resolve a path as a file, a file with default extension, or a directory."""
    resolved = _resolve_file(candidate)
    if resolved is not None:
        return resolved

    if candidate.is_dir():
        return _resolve_directory(candidate)

    return None


def _resolve_directory(directory: Path) -> Optional[Path]:
    """Resolve a package directory to its entry shader."""
    config_path = directory / "package.json"

    if config_path.is_file():
        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            config = {}

        for field in ENTRY_FIELDS:
            entry = config.get(field) if isinstance(config, dict) else None
            # "glslify" may hold transform settings, "main" a script entry
            if isinstance(entry, str) and entry and not entry.endswith(".js"):
                resolved = _resolve_file((directory / entry).resolve())
                if resolved is not None:
                    return resolved

    return _resolve_file(directory / DEFAULT_ENTRY)


def _resolve_file(candidate: Path) -> Optional[Path]:
    """Resolve a path as a file, trying default extensions."""
    if candidate.is_file():
        return candidate.resolve()

    for ext in DEFAULT_EXTENSIONS:
        with_ext = candidate.parent / (candidate.name + ext)
        if with_ext.is_file():
            return with_ext.resolve()

    return None
