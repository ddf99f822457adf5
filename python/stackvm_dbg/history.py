"""File-backed command history usable as a prompt_toolkit history."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from prompt_toolkit.history import History

LOGGER = logging.getLogger("stackvm_dbg.history")


class HistoryStore(History):
    """History list persisted to a text file, capped at ``limit`` entries.

    Adjacent duplicates are collapsed. Failing to write the file is logged and
    otherwise ignored so the REPL keeps running.
    """

    def __init__(self, path: Optional[str], *, limit: int = 1000) -> None:
        super().__init__()
        self.limit = max(1, int(limit or 1))
        self.path = Path(path).expanduser() if path else None
        self.entries: List[str] = []
        if self.path:
            self._load()

    def _load(self) -> None:
        try:
            data = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        except OSError as exc:
            LOGGER.warning("cannot read history %s: %s", self.path, exc)
            return
        lines = [line.strip() for line in data.splitlines() if line.strip()]
        self.entries = lines[-self.limit :]

    # prompt_toolkit wants the newest entry first.
    def load_history_strings(self) -> Iterable[str]:
        return list(reversed(self.entries))

    def store_string(self, string: str) -> None:
        self.append(string)

    def append(self, line: str) -> bool:
        text = line.strip()
        if not text:
            return False
        if self.entries and self.entries[-1] == text:
            return False
        self.entries.append(text)
        if len(self.entries) > self.limit:
            self.entries = self.entries[-self.limit :]
        self._persist()
        return True

    def _persist(self) -> None:
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("\n".join(self.entries) + "\n", encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("cannot write history %s: %s", self.path, exc)

    def snapshot(self) -> List[str]:
        return list(self.entries)
