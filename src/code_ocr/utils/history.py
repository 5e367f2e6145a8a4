"""
Extraction history backed by a JSON file.

Newest entries first, capped at ``max_items``.
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .io import load_json, save_json

logger = logging.getLogger(__name__)

MAX_HISTORY = 20
PREVIEW_LENGTH = 100


@dataclass
class HistoryItem:
    """One extracted snippet."""
    id: str
    code: str
    language: str
    timestamp: int  # milliseconds since epoch
    preview: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=str(data["id"]),
            code=data["code"],
            language=data["language"],
            timestamp=int(data["timestamp"]),
            preview=data.get("preview", ""),
        )


def make_preview(code: str, length: int = PREVIEW_LENGTH) -> str:
    return code[:length].replace("\n", " ")


class HistoryStore:
    """
    Bounded list of past extractions stored as JSON.

    A missing or unreadable file reads as an empty history.
    """

    def __init__(
        self,
        path: Union[str, Path],
        max_items: int = MAX_HISTORY,
        preview_length: int = PREVIEW_LENGTH
    ):
        if max_items <= 0:
            raise ValueError(f"max_items must be positive, got {max_items}")
        self.path = Path(path)
        self.max_items = max_items
        self.preview_length = preview_length

    def list(self) -> List[HistoryItem]:
        if not self.path.exists():
            return []
        try:
            data = load_json(self.path)
            return [HistoryItem.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable history file {self.path}: {e}")
            return []

    def _write(self, items: List[HistoryItem]) -> None:
        save_json([item.to_dict() for item in items], self.path)

    def add(self, code: str, language: str) -> HistoryItem:
        item = HistoryItem(
            id=uuid.uuid4().hex,
            code=code,
            language=language,
            timestamp=int(time.time() * 1000),
            preview=make_preview(code, self.preview_length),
        )
        items = [item] + self.list()
        self._write(items[:self.max_items])
        logger.debug(f"Added history item {item.id} ({language})")
        return item

    def get(self, item_id: str) -> Optional[HistoryItem]:
        for item in self.list():
            if item.id == item_id:
                return item
        return None

    def remove(self, item_id: str) -> bool:
        items = self.list()
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            return False
        self._write(remaining)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
