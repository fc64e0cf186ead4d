"""Extraction of glslify pragmas from shader sources."""

import re
from typing import Iterator, List, NamedTuple


# Marker following "#pragma" on every glslify directive
PRAGMA_MARKER = "glslify"

PRAGMA_PATTERN = re.compile(r"^pragma\s+" + PRAGMA_MARKER + r":")

EXPORT_PATTERN = re.compile(
    r"^pragma\s+" + PRAGMA_MARKER + r":\s*export\(([^\)]+)\)"
)

IMPORT_PATTERN = re.compile(
    r"^pragma\s+" + PRAGMA_MARKER + r":\s*([^=\s]+)\s*=\s*require\(([^\)]+)\)"
)


class Pragmas(NamedTuple):
    """Pragmas declared by one source, in order of appearance."""

    imports: List[str]
    exports: List[str]
    bindings: List[str]


def iter_directives(source: str) -> Iterator[str]:
    """
    Yield the preprocessor directives of a GLSL source.

    A directive starts with a ``#`` that is the first non-blank character
    of a line and runs to the end of that line, following backslash
    continuations. Comments are skipped, so directive-like text inside
    ``//`` or ``/* */`` comments is never reported. Comments inside a
    directive are dropped from the yielded text.

    Args:
        source: Shader source text.

    Yields:
        Directive text without the leading ``#`` and surrounding whitespace.
    """
    length = len(source)
    i = 0
    line_start = True

    while i < length:
        char = source[i]

        if source.startswith("//", i):
            end = source.find("\n", i)
            i = length if end == -1 else end
            continue

        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        if char == "\n":
            line_start = True
            i += 1
            continue

        if char in " \t\r\f\v":
            i += 1
            continue

        if char == "#" and line_start:
            directive, i = _read_directive(source, i + 1)
            yield directive.strip()
            continue

        line_start = False
        i += 1


def _read_directive(source: str, i: int):
    """Read a directive body starting at index ``i``; return (text, next index)."""
    length = len(source)
    parts: List[str] = []

    while i < length:
        char = source[i]

        if char == "\\" and source.startswith("\n", i + 1):
            i += 2
            continue
        if char == "\\" and source.startswith("\r\n", i + 1):
            i += 3
            continue

        if char == "\n":
            break

        if source.startswith("//", i):
            end = source.find("\n", i)
            i = length if end == -1 else end
            break

        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            i = length if end == -1 else end + 2
            parts.append(" ")
            continue

        parts.append(char)
        i += 1

    return "".join(parts), i


def extract_pragmas(source: str) -> Pragmas:
    """
    Extract glslify import and export pragmas from a shader source.

    Imports are recorded as the raw text inside ``require(...)``, constructor
    arguments included; ``bindings`` holds the local name each import is
    assigned to, index for index.

    Args:
        source: Shader source text.

    Returns:
        Pragmas with imports, exports and bindings lists (possibly empty).
    """
    imports: List[str] = []
    exports: List[str] = []
    bindings: List[str] = []

    for directive in iter_directives(source):
        if not PRAGMA_PATTERN.match(directive):
            continue

        exported = EXPORT_PATTERN.match(directive)
        if exported:
            exports.append(exported.group(1))
            continue

        imported = IMPORT_PATTERN.match(directive)
        if imported:
            bindings.append(imported.group(1))
            imports.append(imported.group(2))

    return Pragmas(imports=imports, exports=exports, bindings=bindings)


def has_pragmas(source: str) -> bool:
    """Check whether a source declares any glslify pragma."""
    return any(PRAGMA_PATTERN.match(d) for d in iter_directives(source))


def get_import_name(raw: str) -> str:
    """
    Get the module specifier from a raw ``require(...)`` argument list.

    Takes the first comma-separated field, trims it and strips one layer
    of surrounding single or double quotes.

    Args:
        raw: Raw import text, e.g. ``"glsl-noise", a = b``.

    Returns:
        The specifier handed to the module resolver.
    """
    name = re.split(r"\s*,\s*", raw, maxsplit=1)[0].strip()
    name = re.sub(r"^'|'$", "", name)
    name = re.sub(r'^"|"$', "", name)
    return name
