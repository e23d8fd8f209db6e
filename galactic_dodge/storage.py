"""
Key-value persistence for the best time and the unlocked level count
"""

import json
import logging
import math
import os
from typing import Dict, Union

logger = logging.getLogger("galactic_dodge.storage")

Number = Union[int, float]


class MemoryStore:
    """In-process store; what the env and the tests use"""

    def __init__(self, initial: Dict[str, Number] = None):
        self._data: Dict[str, Number] = dict(initial or {})

    def get_number(self, key: str, default: float = 0.0) -> float:
        try:
            value = float(self._data.get(key, default))
        except (TypeError, ValueError):
            return default
        return value if math.isfinite(value) else default

    def set_number(self, key: str, value: float) -> None:
        self._data[key] = float(value)

    def get_int(self, key: str, default: int = 0) -> int:
        try:
            return int(self._data.get(key, default))
        except (TypeError, ValueError, OverflowError):
            return default

    def set_int(self, key: str, value: int) -> None:
        self._data[key] = int(value)


class JsonFileStore(MemoryStore):
    """MemoryStore mirrored to a JSON file on every write"""

    def __init__(self, path: str):
        self.path = path
        data = {}
        if os.path.exists(path):
            try:
                with open(path, "r") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable save file {path}: {e}")
                data = {}
            if not isinstance(data, dict):
                data = {}
        super().__init__(data)

    def _flush(self) -> None:
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._data, f, indent=2)

    def set_number(self, key: str, value: float) -> None:
        super().set_number(key, value)
        self._flush()

    def set_int(self, key: str, value: int) -> None:
        super().set_int(key, value)
        self._flush()
