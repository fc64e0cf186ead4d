"""Graph builder that orchestrates reading, transforming and resolving shaders."""

import asyncio
import inspect
import logging
import uuid
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from scanner.discovery import (
    find_package_config,
    find_package_config_async,
    get_transforms_from_config,
    read_text,
    read_text_async,
    strip_reserved,
)
from scanner.pragmas import extract_pragmas, get_import_name
from scanner.resolver import resolve_module, resolve_module_async
from scanner.transforms import TransformEntry, require_transform, transform_name

from .errors import (
    AsyncInSyncContext,
    ConfigParseError,
    ConfigurationError,
    DepGraphError,
    MissingSyncInterface,
    NoEntryYet,
    ReadError,
    ResolutionError,
    TransformError,
)
from .model import ModuleNode
from .steps import DEFAULT_PARALLEL, Fanout, Steps, call, run_async, run_sync


logger = logging.getLogger(__name__)

INLINE_PREFIX = "__INLINE__"

VENDOR_DIR = "node_modules"

PathType = Union[str, "PathLike[str]"]


def canonical(path: PathType) -> str:
    """Get the identity of a file: absolute, with symlinks resolved."""
    return str(Path(path).resolve())


def is_vendored(entry_dir: Path, file_dir: Path) -> bool:
    """Check if ``file_dir`` lies in a vendor directory below ``entry_dir``."""
    entry_parts = entry_dir.parts
    file_parts = file_dir.parts

    common = 0
    while (
        common < min(len(entry_parts), len(file_parts))
        and entry_parts[common] == file_parts[common]
    ):
        common += 1

    return VENDOR_DIR in file_parts[common:]


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return str(value)


def _mark_retrieved(future: "asyncio.Future[Any]") -> None:
    if not future.cancelled():
        future.exception()


class DependencyGraph:
    """
    Dependency graph of a glslify shader and everything it imports.

    One instance builds one bundle: nodes, the resolve cache and the
    per-directory transform cache all live on the instance. The scheduling
    mode is fixed at construction. In synchronous mode every operation
    returns its result; in asynchronous mode every operation returns an
    awaitable, and collaborators may be coroutine functions.

    Files are identified by their resolved absolute path, so a module
    reached through a symlink is built once.

    Args:
        cwd: Working directory; base for registered transform names and
            inline sources. Defaults to the process working directory.
        async_mode: Build with asyncio instead of blocking calls.
        read_file: ``(path) -> str`` reading a source file.
        resolve: ``(specifier, basedir) -> path`` mapping an import to a file.
        transform_require: ``(name, opts) -> object`` loading a transform.
        find_config: ``(directory) -> Optional[path]`` locating the nearest
            package config.
        files: Mapping of path to source, served instead of reading the
            file. Relative paths are taken against ``cwd``.
        on_file: Callback invoked with each file visited.
        parallel: Imports of one file resolved concurrently in async mode.
    """

    def __init__(
        self,
        cwd: Optional[PathType] = None,
        *,
        async_mode: bool = False,
        read_file: Optional[Callable[..., Any]] = None,
        resolve: Optional[Callable[..., Any]] = None,
        transform_require: Optional[Callable[..., Any]] = None,
        find_config: Optional[Callable[..., Any]] = None,
        files: Optional[Mapping[str, str]] = None,
        on_file: Optional[Callable[[str], Any]] = None,
        parallel: int = DEFAULT_PARALLEL,
    ):
        if cwd is None:
            cwd = Path.cwd()
        if not isinstance(cwd, (str, PathLike)):
            raise ConfigurationError("cwd must be a string path")

        self.cwd = Path(cwd).resolve()
        self.async_mode = async_mode
        self.parallel = parallel

        self._read = read_file or (read_text_async if async_mode else read_text)
        self._resolve = resolve or (resolve_module_async if async_mode else resolve_module)
        self._transform_require = transform_require or require_transform
        self._find_config = find_config or (
            find_package_config_async if async_mode else find_package_config
        )

        for label, collaborator in (
            ("read_file", self._read),
            ("resolve", self._resolve),
            ("transform_require", self._transform_require),
            ("find_config", self._find_config),
        ):
            if not callable(collaborator):
                raise ConfigurationError(f"{label} must be callable")
            if not async_mode and inspect.iscoroutinefunction(collaborator):
                raise AsyncInSyncContext(label)

        self._nodes: List[ModuleNode] = []
        self._cache: Dict[str, ModuleNode] = {}
        # directory -> resolved transforms, or a future while being computed
        self._transform_cache: Dict[str, Any] = {}
        self._file_cache: Dict[str, str] = {
            canonical(self.cwd / path): source for path, source in (files or {}).items()
        }

        self._transforms: List[TransformEntry] = []
        self._global_transforms: List[TransformEntry] = []
        self._listeners: List[Callable[[str], Any]] = []
        if on_file is not None:
            self._listeners.append(on_file)

    @property
    def nodes(self) -> List[ModuleNode]:
        """Return the nodes discovered so far, indexed by id."""
        return list(self._nodes)

    def on_file(self, callback: Callable[[str], Any]) -> "DependencyGraph":
        """Register a callback invoked with every file visited."""
        self._listeners.append(callback)
        return self

    def transform(
        self,
        transform: Union[str, Callable[..., Any]],
        opts: Optional[Mapping[str, Any]] = None,
    ) -> "DependencyGraph":
        """
        Register a transform for the files of this graph.

        Should be called before ``add``. Transforms are callables taking
        ``(filename, source, options)`` and returning the new source (or, in
        async mode, an awaitable of it), or names loaded through
        ``transform_require`` relative to ``cwd``.

        Args:
            transform: The transform or its name.
            opts: Options passed to the transform. ``global`` applies it to
                vendored files too; ``post`` transforms are left to the
                bundling stage and ignored here.

        Returns:
            The graph, for chaining.
        """
        opts = dict(opts or {})
        name = transform_name(transform)

        if opts.get("post"):
            logger.warning("Ignoring post transform %s", name)
            return self

        entry = TransformEntry(name, transform, strip_reserved(opts))
        if opts.get("global"):
            self._global_transforms.append(entry)
        else:
            self._transforms.append(entry)
        return self

    def add(self, filename: PathType) -> Any:
        """
        Add a shader file to the graph, including all its dependencies.

        Transforms are applied along the way, as they may add or remove
        imports.

        Args:
            filename: Path of the shader, relative to the process working
                directory or absolute.

        Returns:
            The list of nodes once the whole graph has been built, or an
            awaitable of it in async mode. The node for ``filename`` is
            allocated immediately in both modes. Nodes allocated by the
            build are numbered depth first in import order once it
            completes.
        """
        node = self._add_node(canonical(filename))
        self._cache.setdefault(node.file, node)
        return self._drive(self._add_steps(node))

    def inline(self, source: str, basedir: Optional[PathType] = None) -> Any:
        """
        Add an inline shader source to the graph.

        The source gets a unique synthetic filename inside ``basedir`` (or
        the working directory), so its relative imports resolve from there.
        """
        directory = Path(basedir).resolve() if basedir else self.cwd
        filename = str(directory / (INLINE_PREFIX + uuid.uuid4().hex))
        self._file_cache[filename] = source
        return self.add(filename)

    def read_file(self, filename: PathType) -> Any:
        """Read a file through the file cache and the configured reader."""
        return self._drive(self._read_steps(canonical(filename)))

    def get_transforms_for_file(self, filename: PathType) -> Any:
        """
        Determine which transforms apply to a file.

        The rules follow browserify:

        - your shader files get the transforms registered with ``transform``;
        - files in ``node_modules`` do not get those local transforms;
        - every file gets the transforms declared under ``glslify.transform``
          in its nearest ``package.json``, after the local ones; their names
          load relative to that ``package.json``;
        - global transforms come last.

        Results are cached per directory.

        Raises:
            NoEntryYet: If no file has been added yet.
        """
        return self._drive(self._transforms_steps(canonical(filename)))

    def resolve_transform(self, transform: Union[str, Callable[..., Any]]) -> Any:
        """Resolve a transform name to a callable; callables are kept as-is."""
        return self._drive(self._resolve_transform_steps(transform, self.cwd))

    def apply_transforms(
        self,
        filename: str,
        source: str,
        transforms: Iterable[Any],
    ) -> Any:
        """
        Apply transforms to a source, in order.

        Args:
            filename: Path of the file being transformed.
            source: Source to transform.
            transforms: ``TransformEntry`` objects or bare callables.

        Returns:
            The transformed source (an awaitable of it in async mode).
            An empty list returns ``source`` unchanged.
        """
        entries = [TransformEntry.coerce(t) for t in transforms]
        return self._drive(self._apply_steps(filename, source, entries))

    def _drive(self, steps: Steps) -> Any:
        if self.async_mode:
            return run_async(steps)
        return run_sync(steps)

    def _add_node(self, filename: str) -> ModuleNode:
        node = ModuleNode(len(self._nodes), filename, entry=not self._nodes)
        self._nodes.append(node)
        return node

    def _notify(self, filename: str) -> None:
        for listener in self._listeners:
            listener(filename)

    def _renumber(self, root: ModuleNode) -> None:
        """
        Number the nodes allocated since ``root`` in depth-first import order.

        Sync builds already allocate in that order. Async builds allocate
        as sibling resolutions complete, so their ids are rewritten here.
        """
        start = root.id
        fresh = self._nodes[start:]
        by_id = {node.id: node for node in fresh}

        ordered: List[ModuleNode] = []
        seen = set()
        stack = [root]
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            ordered.append(node)
            stack.extend(by_id[i] for i in reversed(list(node.deps.values())) if i in by_id)
        ordered.extend(node for node in fresh if node.id not in seen)

        ids = {node.id: start + index for index, node in enumerate(ordered)}
        if all(old == new for old, new in ids.items()):
            return

        for node in self._nodes:
            node.deps = {name: ids.get(dep, dep) for name, dep in node.deps.items()}
        for node in ordered:
            node.id = ids[node.id]
        self._nodes[start:] = ordered

    def _add_steps(self, node: ModuleNode) -> Steps:
        yield from self._build_steps(node)
        self._renumber(node)
        logger.info("Built graph of %s: %d modules", node.file, len(self._nodes))
        return list(self._nodes)

    def _build_steps(self, node: ModuleNode) -> Steps:
        filename = node.file
        source = yield from self._read_steps(filename)
        self._notify(filename)

        transforms = yield from self._transforms_steps(filename)
        node.source = yield from self._apply_steps(filename, source, transforms)

        pragmas = extract_pragmas(node.source)
        basedir = Path(filename).parent
        bound = yield Fanout(
            [self._import_steps(raw, basedir) for raw in pragmas.imports],
            self.parallel,
        )

        for import_name, dep_id in bound:
            node.deps[import_name] = dep_id

    def _import_steps(self, raw: str, basedir: Path) -> Steps:
        import_name = get_import_name(raw)
        try:
            resolved = yield call(self._resolve, import_name, str(basedir))
            resolved = canonical(resolved)
        except DepGraphError:
            raise
        except Exception as exc:
            raise ResolutionError(import_name, str(basedir), exc) from exc

        cached = self._cache.get(resolved)
        if cached is not None:
            logger.debug("Import %s from %s: cached as %d", import_name, basedir, cached.id)
            return import_name, cached.id

        # Cache before building so cyclic imports land on this node
        child = self._add_node(resolved)
        self._cache[resolved] = child
        logger.debug("Import %s from %s: %s", import_name, basedir, resolved)

        yield from self._build_steps(child)
        return import_name, child.id

    def _read_steps(self, filename: str) -> Steps:
        if filename in self._file_cache:
            return self._file_cache[filename]

        logger.debug("Reading %s", filename)
        try:
            source = yield call(self._read, filename)
        except DepGraphError:
            raise
        except Exception as exc:
            raise ReadError(filename, exc) from exc

        return self._file_cache.setdefault(filename, _as_text(source))

    def _transforms_steps(self, filename: str) -> Steps:
        if not self._nodes:
            raise NoEntryYet()

        entry_dir = Path(self._nodes[0].file).parent
        file_dir = Path(filename).parent
        key = str(file_dir)

        cached = self._transform_cache.get(key)
        if isinstance(cached, asyncio.Future):
            return (yield call(asyncio.shield, cached))
        if cached is not None:
            return cached

        # Files of this directory arriving meanwhile wait on the same lookup
        pending = None
        if self.async_mode:
            pending = asyncio.get_running_loop().create_future()
            pending.add_done_callback(_mark_retrieved)
            self._transform_cache[key] = pending

        try:
            resolved = yield from self._collect_transforms_steps(entry_dir, file_dir)
        except BaseException as exc:
            if pending is not None:
                del self._transform_cache[key]
                if isinstance(exc, Exception):
                    pending.set_exception(exc)
                else:
                    pending.cancel()
            raise

        self._transform_cache[key] = resolved
        if pending is not None:
            pending.set_result(resolved)
        return resolved

    def _collect_transforms_steps(self, entry_dir: Path, file_dir: Path) -> Steps:
        local = [] if is_vendored(entry_dir, file_dir) else self._transforms
        declared = yield from self._config_steps(file_dir)

        resolved: List[TransformEntry] = []
        for entry in local + declared + self._global_transforms:
            fn = yield from self._resolve_transform_steps(
                entry.transform, entry.basedir or self.cwd
            )
            resolved.append(TransformEntry(entry.name, fn, entry.options, entry.basedir))
        return resolved

    def _config_steps(self, directory: Path) -> Steps:
        config_path = yield call(self._find_config, str(directory))
        if config_path is None:
            return []

        config_file = Path(config_path).resolve()
        text = yield from self._read_steps(str(config_file))
        try:
            return get_transforms_from_config(text, config_file.parent)
        except ValueError as exc:
            raise ConfigParseError(str(config_file), exc) from exc

    def _resolve_transform_steps(
        self,
        transform: Union[str, Callable[..., Any]],
        basedir: Path,
    ) -> Steps:
        if callable(transform):
            return transform

        try:
            loaded = yield call(self._transform_require, transform, {"cwd": basedir})
        except DepGraphError:
            raise
        except Exception as exc:
            raise TransformError(
                f"cannot load transform {transform}: {exc}", transform=transform
            ) from exc

        return self._select_interface(transform, loaded)

    def _select_interface(self, name: str, loaded: Any) -> Callable[..., Any]:
        if self.async_mode:
            fn = loaded
            if not callable(fn):
                fn = getattr(loaded, "transform", None) or getattr(loaded, "sync", None)
            if not callable(fn):
                raise TransformError(f"transform {name} is not callable", transform=name)
            return fn

        fn = getattr(loaded, "sync", None)
        if not callable(fn):
            raise MissingSyncInterface(name)
        return fn

    def _apply_steps(
        self,
        filename: str,
        source: str,
        transforms: List[TransformEntry],
    ) -> Steps:
        if transforms:
            logger.debug("Applying %d transforms to %s", len(transforms), filename)

        for entry in transforms:
            try:
                output = yield call(entry.transform, filename, _as_text(source), entry.options)
            except Exception as exc:
                raise TransformError(
                    f"transform {entry.name} failed on {filename}: {exc}",
                    transform=entry.name,
                    filename=filename,
                ) from exc

            if not self.async_mode and inspect.isawaitable(output):
                if inspect.iscoroutine(output):
                    output.close()
                raise TransformError(
                    f"transform {entry.name} is asynchronous but the graph is synchronous",
                    transform=entry.name,
                    filename=filename,
                )
            source = output

        return source

    def __repr__(self) -> str:
        mode = "async" if self.async_mode else "sync"
        return f"DependencyGraph(cwd='{self.cwd}', mode={mode}, nodes={len(self._nodes)})"
