"""In-place rewrite of a workload's replica count."""

from __future__ import annotations

import re
from pathlib import Path

from loguru import logger

from endfield.errors import ReplicaPatchError

from .fields import DOCUMENT_SEPARATOR, extract_metadata_field

_REPLICAS_LINE = re.compile(
    r"^(?P<head>\s*replicas:\s*)(?P<quote>[\"']?)(?P<value>\d+)(?P=quote)"
    r"(?P<tail>\s*(?:#.*)?)$"
)


def _patch_document(doc: str, replicas: int) -> str | None:
    lines = doc.splitlines(keepends=True)
    for i, line in enumerate(lines):
        body = line.rstrip("\r\n")
        match = _REPLICAS_LINE.match(body)
        if match is None:
            continue
        ending = line[len(body) :]
        quote = match["quote"]
        value = f"{quote}{replicas}{quote}"
        lines[i] = f"{match['head']}{value}{match['tail']}{ending}"
        return "".join(lines)
    return None


def patch_replicas(file_path: str | Path, label: str, replicas: int) -> None:
    """Rewrite the replica count of the document named ``label``.

    The first document whose metadata name equals ``label`` and which already
    declares an integer ``replicas:`` is patched. Only the value on that line
    changes; indentation, quoting, trailing comments and every other byte of
    the file are preserved.

    Args:
        file_path: Manifest file to patch
        label: metadata.name of the target workload
        replicas: New replica count

    Raises:
        ReplicaPatchError: If the file cannot be read or written, or no
            matching document declares replicas
    """
    if replicas < 0:
        raise ReplicaPatchError(f"Replica count must be non-negative, got {replicas}")

    path = Path(file_path)
    try:
        with path.open(encoding="utf-8", newline="") as fh:
            content = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ReplicaPatchError(f"Cannot read {path}", str(exc)) from exc

    docs = content.split(DOCUMENT_SEPARATOR)
    for index, doc in enumerate(docs):
        if extract_metadata_field(doc, "name") != label:
            continue
        patched_doc = _patch_document(doc, replicas)
        if patched_doc is None:
            continue
        docs[index] = patched_doc
        break
    else:
        raise ReplicaPatchError(f"'{label}' with replicas not found in {path}")

    patched = DOCUMENT_SEPARATOR.join(docs)
    if patched == content:
        logger.debug(f"{path} already has {replicas} replicas for {label}")
        return

    try:
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(patched)
    except OSError as exc:
        raise ReplicaPatchError(f"Cannot write {path}", str(exc)) from exc
    logger.info(f"Set replicas of {label} to {replicas} in {path}")
