"""Loading of source transforms by name."""

import importlib
import importlib.util
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union


TransformFn = Callable[[str, str, Dict[str, Any]], Any]


class TransformEntry:
    """
    A transform together with the options it was registered with.

    ``transform`` is either the transform callable or, before resolution,
    the name it will be loaded by. ``basedir`` is the directory a name is
    loaded relative to; None means the graph's working directory.
    """

    def __init__(
        self,
        name: Optional[str],
        transform: Union[str, TransformFn],
        options: Optional[Dict[str, Any]] = None,
        basedir: Optional[Path] = None,
    ):
        self.name = name
        self.transform = transform
        self.options = options if options is not None else {}
        self.basedir = basedir

    @classmethod
    def coerce(cls, value: Any) -> "TransformEntry":
        """Wrap a bare callable into an entry; entries pass through."""
        if isinstance(value, cls):
            return value
        return cls(transform_name(value), value, {})

    def __repr__(self) -> str:
        return f"TransformEntry(name={self.name!r}, options={self.options!r})"


def transform_name(transform: Any) -> str:
    """Get a display name for a transform reference."""
    if isinstance(transform, str):
        return transform
    return getattr(transform, "__qualname__", None) or repr(transform)


def require_transform(name: str, opts: Optional[Dict[str, Any]] = None) -> Any:
    """
    Load a transform by name.

    A name ending in ``.py`` (or starting with ``.``/``/``) is loaded from
    that file, relative to ``opts["cwd"]``. Anything else is imported as a
    module, with an optional ``:attribute`` suffix selecting an object
    inside it.

    Args:
        name: Transform name, e.g. ``"glsl_hex"``, ``"pkg.mod:fn"`` or
            ``"./transforms/hex.py"``.
        opts: Loader options; ``cwd`` is the base for file paths.

    Returns:
        The loaded module or object.

    Raises:
        ImportError: If the transform cannot be found or imported.
    """
    cwd = Path((opts or {}).get("cwd") or Path.cwd())

    if _is_file_reference(name):
        return _load_file((cwd / name).resolve())

    module_name, _, attribute = name.partition(":")
    module = importlib.import_module(module_name)
    if not attribute:
        return module

    try:
        return getattr(module, attribute)
    except AttributeError:
        raise ImportError(
            f"transform module {module_name!r} has no attribute {attribute!r}"
        ) from None


def _is_file_reference(name: str) -> bool:
    """Check if a transform name points at a file rather than a module."""
    return name.endswith(".py") or name.startswith((".", "/")) or Path(name).is_absolute()


def _load_file(path: Path) -> Any:
    """Import a Python file as an anonymous module."""
    if not path.is_file():
        raise ImportError(f"cannot find transform file '{path}'")

    module_name = "_glsldeps_transform_" + path.stem
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load transform file '{path}'")

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
