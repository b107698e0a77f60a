from __future__ import annotations

import logging
import shutil
from pathlib import Path
from threading import Lock
from typing import List, Optional


logger = logging.getLogger(__name__)

SYSTEM_LOG_NAME = "system_monitor.log"


class ReportStore:
    """Flat-file storage for incident reports and the shared system log.

    With no ``root_path`` the store is disabled: nothing is written and the
    monitor runs in a degraded, log-only mode.
    """

    def __init__(self, root_path: Optional[Path] = None) -> None:
        self.root_path = root_path
        self._lock = Lock()
        if root_path:
            root_path.mkdir(parents=True, exist_ok=True)

    @property
    def enabled(self) -> bool:
        return self.root_path is not None

    @property
    def log_path(self) -> Optional[Path]:
        if self.root_path is None:
            return None
        return self.root_path / SYSTEM_LOG_NAME

    def write_report(self, filename: str, content: str) -> Path:
        path = self._resolve(filename)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return path

    def append_log(self, line: str) -> None:
        log_path = self.log_path
        if log_path is None:
            return
        with self._lock:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            with log_path.open("a", encoding="utf-8") as handle:
                handle.write(line.rstrip("\n") + "\n")

    def purge(self) -> int:
        """Delete every file and directory under the report root."""
        if self.root_path is None or not self.root_path.exists():
            return 0

        removed = 0
        with self._lock:
            for entry in self.root_path.iterdir():
                try:
                    if entry.is_dir() and not entry.is_symlink():
                        shutil.rmtree(entry)
                    else:
                        entry.unlink()
                except OSError:
                    logger.exception("Failed to remove report entry", extra={"path": str(entry)})
                    continue
                removed += 1
        return removed

    def list_reports(self) -> List[str]:
        if self.root_path is None or not self.root_path.exists():
            return []
        return sorted(
            path.name
            for path in self.root_path.iterdir()
            if path.is_file() and path.suffix == ".txt"
        )

    def read_report(self, filename: str) -> str:
        if self.root_path is None:
            raise KeyError(f"Report {filename!r} not found; report storage is disabled.")
        path = self._resolve(filename)
        if not path.is_file():
            raise KeyError(f"Report {filename!r} not found.")
        return path.read_text(encoding="utf-8")

    def _resolve(self, filename: str) -> Path:
        if self.root_path is None:
            raise RuntimeError("Report storage is disabled.")
        name = Path(filename).name
        if not name or name != filename or name in {".", ".."}:
            raise ValueError(f"Invalid report name {filename!r}.")
        return self.root_path / name
