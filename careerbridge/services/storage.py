import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)


class LocalStorage:
    """Durable string-valued key/value store kept in a single JSON file.

    Mirrors browser localStorage: values are strings, every write replaces the whole
    file, and a missing or unreadable file behaves like an empty store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Local storage unreadable", path=str(self.path), error=str(e))
            return {}

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Local storage corrupt", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("Local storage corrupt", path=str(self.path), error="not an object")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def keys(self) -> List[str]:
        return list(self._read_all().keys())
