"""Key/value persistence for board state."""

import sqlite3
from pathlib import Path
from typing import Dict, Optional, Union

SCHEMA_KEY = "schema"
RECORDS_KEY = "records"
VIEW_STATE_KEY = "view_state"
THEME_KEY = "theme"


class KeyValueStore:
    """Get/set of opaque text blobs by key."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class MemoryStore(KeyValueStore):
    """In-process store backed by a dict."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data = dict(data) if data else {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqliteStore(KeyValueStore):
    """SQLite file holding a single key/value table."""

    def __init__(self, path: Union[str, Path], read_only: bool = False):
        self.path = Path(path)
        self.read_only = read_only
        if read_only:
            if not self.path.exists():
                raise FileNotFoundError(f"Database not found: {self.path}")
            self.conn = sqlite3.connect(f"file:{self.path}?mode=ro", uri=True)
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.path))
            self._ensure_tables()

    def _ensure_tables(self) -> None:
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS _state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
        """
        )

    def get(self, key: str) -> Optional[str]:
        try:
            row = self.conn.execute(
                "SELECT value FROM _state WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.OperationalError:
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        if self.read_only:
            raise ValueError(f"Database is read-only: {self.path}")
        self.conn.execute(
            "INSERT OR REPLACE INTO _state (key, value) VALUES (?, ?)",
            (key, value),
        )
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()
