"""Line-oriented scalar extraction from raw YAML text.

These helpers deliberately avoid a YAML parser: manifests in a project may
contain Helm template directives (``{{ .Values.x }}``) that are not valid
standalone YAML. Only two addressing modes are supported:

- top-level keys (lines with no leading whitespace)
- keys exactly one level (two spaces) under a top-level ``metadata:`` block

Multi-line scalars, anchors and deeper paths are intentionally unsupported.
"""

from __future__ import annotations

DOCUMENT_SEPARATOR = "\n---"
TEMPLATE_MARKER = "{{"


def split_documents(content: str) -> list[str]:
    """Split text into YAML documents on newline + ``---``.

    A ``---`` on the very first line does not split; it stays part of the
    first document and is removed by the caller's trim.
    """
    return content.split(DOCUMENT_SEPARATOR)


def strip_quotes(value: str) -> str:
    """Remove one layer of matching single or double quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _is_indented(line: str) -> bool:
    return line.startswith((" ", "\t"))


def _match_key(line: str, key: str) -> str | None:
    """Return the non-empty value of ``key: value`` on a line, else None."""
    trimmed = line.strip()
    if not trimmed.startswith(key):
        return None
    rest = trimmed[len(key) :].strip()
    if not rest.startswith(":"):
        return None
    value = strip_quotes(rest[1:].strip())
    return value or None


def extract_field(content: str, key: str) -> str | None:
    """Extract the first top-level scalar for ``key``.

    Args:
        content: Raw document text
        key: Key name without the colon (e.g. "kind")

    Returns:
        The trimmed, unquoted value, or None if not found. Empty values do not
        count as a match and the search continues.
    """
    for line in content.splitlines():
        if _is_indented(line):
            continue
        value = _match_key(line, key)
        if value is not None:
            return value
    return None


def extract_metadata_field(content: str, key: str) -> str | None:
    """Extract a scalar nested directly under the top-level ``metadata:`` block.

    Only lines indented by exactly two spaces are considered. The block ends at
    the first non-blank line that returns to column zero.

    Args:
        content: Raw document text
        key: Key name under metadata (e.g. "name", "namespace")

    Returns:
        The trimmed, unquoted value, or None if not found
    """
    in_metadata = False
    for line in content.splitlines():
        if not in_metadata:
            if not _is_indented(line) and line.strip() == "metadata:":
                in_metadata = True
            continue

        if line.strip() and not _is_indented(line):
            break

        if line.startswith("  ") and not line.startswith("   "):
            value = _match_key(line, key)
            if value is not None:
                return value
    return None


def extract_images(content: str) -> list[str]:
    """Collect every ``image:`` value at any indentation.

    List-item forms (``- image: x``) are accepted as well. Values that start
    with a template marker are skipped.
    """
    images: list[str] = []
    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("- "):
            trimmed = trimmed[2:].lstrip()
        if not trimmed.startswith("image:"):
            continue
        value = strip_quotes(trimmed[len("image:") :].strip())
        if value and not value.startswith(TEMPLATE_MARKER):
            images.append(value)
    return images


def extract_replicas(content: str) -> int | None:
    """Return the first ``replicas:`` value that parses as a non-negative integer."""
    for line in content.splitlines():
        trimmed = line.strip()
        if not trimmed.startswith("replicas:"):
            continue
        raw = strip_quotes(trimmed[len("replicas:") :].strip())
        if raw.isascii() and raw.isdigit():
            return int(raw)
    return None
