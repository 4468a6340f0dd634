"""JSON persistence for the expense collection.

The backing file is a small key-value blob store: a JSON object whose
values are JSON-serializable blobs.  Expenses live under
``config.STORAGE_KEY`` as an array of records.  Reads never raise and
fall back to an empty collection; failed writes are logged and the app
keeps running on its in-memory state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

try:
    from . import config
    from .models import Expense, ExpenseValidationError
except ImportError:
    import config
    from models import Expense, ExpenseValidationError

logger = logging.getLogger(__name__)


class ExpenseStorage:
    """Load and save the expense list under one key of a JSON file."""

    def __init__(self, path: Optional[Path] = None, key: str = config.STORAGE_KEY):
        self.path = Path(path) if path is not None else config.STORAGE_PATH
        self.key = key

    def _read_blobs(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return data

    def _write_blobs(self, blobs: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        with tmp.open('w', encoding='utf-8') as handle:
            json.dump(blobs, handle, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def load(self) -> List[Expense]:
        try:
            stored = self._read_blobs().get(self.key) or []
        except (json.JSONDecodeError, OSError, ValueError) as exc:
            logger.warning("Error loading expenses from %s: %s", self.path, exc)
            return []
        if not isinstance(stored, list):
            logger.warning("Ignoring stored expenses: expected a list, got %s", type(stored).__name__)
            return []
        expenses = []
        for record in stored:
            try:
                expenses.append(Expense.from_dict(record))
            except ExpenseValidationError as exc:
                logger.warning("Skipping stored expense %r: %s", record, exc)
        return expenses

    def save(self, expenses: Sequence[Expense]) -> bool:
        """Persist the collection; returns False when the write failed."""
        try:
            try:
                blobs = self._read_blobs()
            except (json.JSONDecodeError, ValueError):
                blobs = {}
            blobs[self.key] = [expense.to_dict() for expense in expenses]
            self._write_blobs(blobs)
        except OSError as exc:
            logger.warning("Error saving expenses to %s: %s", self.path, exc)
            return False
        return True

    def clear(self) -> bool:
        try:
            try:
                blobs = self._read_blobs()
            except (json.JSONDecodeError, ValueError):
                blobs = {}
            if self.key not in blobs:
                return True
            del blobs[self.key]
            self._write_blobs(blobs)
        except OSError as exc:
            logger.warning("Error clearing expenses in %s: %s", self.path, exc)
            return False
        return True


def load_expenses(path: Optional[Path] = None) -> List[Expense]:
    return ExpenseStorage(path).load()


def save_expenses(expenses: Sequence[Expense], path: Optional[Path] = None) -> bool:
    return ExpenseStorage(path).save(expenses)
