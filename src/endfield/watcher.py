"""Project file watcher for manifest edits.

Watches a project tree recursively and reports create, modify and remove
events for ``.yaml``/``.yml`` files. Generated output (``rendered/``,
``charts/``) and ``.git`` are ignored. Repeated events for the same path
within the debounce window are dropped, so a burst of writes from one save
is reported once.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

ChangeKind = Literal["create", "modify", "remove"]

WATCH_SUFFIXES = {".yaml", ".yml"}
IGNORED_PARTS = {"rendered", "charts", ".git"}
DEFAULT_DEBOUNCE_SECONDS = 0.3


@dataclass(frozen=True)
class FileChange:
    path: str
    kind: ChangeKind


class ManifestEventHandler(FileSystemEventHandler):
    """Filters and debounces watchdog events, forwarding them as FileChange."""

    def __init__(
        self,
        root: Path,
        callback: Callable[[FileChange], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self.root = root
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def should_ignore(self, path: str) -> bool:
        candidate = Path(path)
        if candidate.suffix not in WATCH_SUFFIXES:
            return True
        try:
            parts = candidate.relative_to(self.root).parts
        except ValueError:
            parts = candidate.parts
        return any(part in IGNORED_PARTS for part in parts)

    def _is_duplicate(self, path: str) -> bool:
        now = self.clock()
        with self._lock:
            last = self._last_seen.get(path)
            if last is not None and now - last < self.debounce_seconds:
                return True
            self._last_seen[path] = now
        return False

    def reset(self) -> None:
        with self._lock:
            self._last_seen.clear()

    def emit(self, path: str | bytes, kind: ChangeKind) -> None:
        path = path.decode() if isinstance(path, bytes) else path
        if self.should_ignore(path) or self._is_duplicate(path):
            return
        logger.debug(f"Manifest {kind}: {path}")
        try:
            self.callback(FileChange(path=path, kind=kind))
        except Exception:
            # The observer thread must survive a failing subscriber.
            logger.exception(f"File change callback failed for {path}")

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.emit(event.src_path, "create")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.emit(event.src_path, "modify")

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.emit(event.src_path, "remove")

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.emit(event.src_path, "remove")
            self.emit(event.dest_path, "create")


class ProjectWatcher:
    """Owns the observer for one project session.

    Usage:
        watcher = ProjectWatcher(callback=on_change)
        watcher.start("/path/to/project")
        ...
        watcher.stop()

    Calling ``start`` again replaces the previous observer.
    """

    def __init__(
        self,
        callback: Callable[[FileChange], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self.path: Path | None = None
        self._observer: Observer | None = None
        self._handler: ManifestEventHandler | None = None

    def start(self, project_path: str | Path) -> None:
        """Begin watching ``project_path`` recursively.

        Raises:
            FileNotFoundError: If the project directory does not exist
        """
        path = Path(project_path).resolve()
        if not path.is_dir():
            raise FileNotFoundError(f"Path does not exist: {project_path}")

        self.stop()
        self._handler = ManifestEventHandler(
            root=path,
            callback=self.callback,
            debounce_seconds=self.debounce_seconds,
            clock=self.clock,
        )
        observer = Observer()
        observer.schedule(self._handler, str(path), recursive=True)
        observer.start()
        self._observer = observer
        self.path = path
        logger.info(f"Watching {path}")

    def stop(self) -> None:
        """Stop the current observer, if any, and forget debounce state."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info(f"Stopped watching {self.path}")
        if self._handler is not None:
            self._handler.reset()
            self._handler = None
        self.path = None

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()
