"""Scanner module for pragma extraction, module resolution and transform loading."""

from .pragmas import Pragmas, extract_pragmas, get_import_name, has_pragmas
from .resolver import UnresolvedModule, resolve_module, resolve_module_async
from .discovery import (
    find_package_config,
    find_package_config_async,
    get_transforms_from_config,
    read_text,
    read_text_async,
)
from .transforms import TransformEntry, require_transform

__all__ = [
    "Pragmas",
    "extract_pragmas",
    "get_import_name",
    "has_pragmas",
    "UnresolvedModule",
    "resolve_module",
    "resolve_module_async",
    "find_package_config",
    "find_package_config_async",
    "get_transforms_from_config",
    "read_text",
    "read_text_async",
    "TransformEntry",
    "require_transform",
]
