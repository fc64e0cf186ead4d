"""Errors raised while building a shader dependency graph."""

from typing import Optional


class DepGraphError(Exception):
    """Base class for dependency graph errors."""


class ConfigurationError(DepGraphError):
    """A graph was constructed with missing or inconsistent collaborators."""


class AsyncInSyncContext(ConfigurationError):
    """An asynchronous collaborator was given to a synchronous graph."""

    def __init__(self, collaborator: str):
        super().__init__(
            f"{collaborator} is asynchronous but the graph is synchronous; "
            "pass a synchronous implementation or use async_mode=True"
        )
        self.collaborator = collaborator


class ReadError(DepGraphError):
    """A source or config file could not be read."""

    def __init__(self, filename: str, reason: object):
        super().__init__(f"cannot read {filename}: {reason}")
        self.filename = filename


class ConfigParseError(DepGraphError):
    """A package config file is not valid JSON."""

    def __init__(self, filename: str, reason: object):
        super().__init__(f"{filename}: {reason}")
        self.filename = filename


class ResolutionError(DepGraphError):
    """An import specifier could not be resolved to a module."""

    def __init__(self, specifier: str, basedir: str, reason: object):
        super().__init__(f"cannot resolve {specifier!r} from {basedir}: {reason}")
        self.specifier = specifier
        self.basedir = basedir


class TransformError(DepGraphError):
    """A transform failed to load or to transform a file."""

    def __init__(
        self,
        message: str,
        transform: Optional[str] = None,
        filename: Optional[str] = None,
    ):
        super().__init__(message)
        self.transform = transform
        self.filename = filename


class MissingSyncInterface(TransformError):
    """A transform loaded for a synchronous graph has no ``sync`` interface."""

    def __init__(self, transform: str):
        super().__init__(
            f"transform {transform} does not provide a synchronous interface",
            transform=transform,
        )


class PreconditionError(DepGraphError):
    """An operation was called before the graph was ready for it."""


class NoEntryYet(PreconditionError):
    """Transforms were requested before any entry file was added."""

    def __init__(self):
        super().__init__(
            "get_transforms_for_file may only be called after adding your entry file"
        )
