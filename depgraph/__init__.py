"""Dependency graphs of glslify shaders."""

from .builder import DependencyGraph
from .errors import (
    AsyncInSyncContext,
    ConfigParseError,
    ConfigurationError,
    DepGraphError,
    MissingSyncInterface,
    NoEntryYet,
    PreconditionError,
    ReadError,
    ResolutionError,
    TransformError,
)
from .model import ModuleNode

__all__ = [
    "DependencyGraph",
    "ModuleNode",
    "DepGraphError",
    "ConfigurationError",
    "AsyncInSyncContext",
    "ReadError",
    "ConfigParseError",
    "ResolutionError",
    "TransformError",
    "MissingSyncInterface",
    "PreconditionError",
    "NoEntryYet",
]
