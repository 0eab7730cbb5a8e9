"""
src/context/loader.py

Read-only snapshot of a caller's local key-value store.

Values are JSON-serialised strings, the way the mobile app keeps them
(calendarEvents, decisionHistory, priorities). Each handler call loads a fresh
snapshot; nothing here writes back.
"""


import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import DEFAULT_DATA_DIR
from orchestrator.errors import InvalidCallerId, StoreError


logger = logging.getLogger(__name__)

# Caller ids name a file directly under the data dir
CALLER_ID_RE = re.compile(r"[\w-]+")


class LocalStore:

    def __init__(self, items: Optional[Dict[str, str]] = None):

        self._items = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:

        return self._items.get(key)

    def read_collection(self, key: str) -> List[Any]:
        """Parse the JSON array stored under `key`; a missing key is an empty list."""

        raw = self.get_item(key)

        if raw is None or not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreError(f"Store key '{key}' does not hold valid JSON") from e

        if not isinstance(data, list):
            raise StoreError(f"Store key '{key}' must hold a JSON array")

        return data


def store_path(caller_id: str, data_dir: Path = DEFAULT_DATA_DIR) -> Path:
    """
    <data_dir>/<caller_id>.json

    Raises:
        InvalidCallerId: the id is not a plain file stem (letters, digits,
            '_' or '-'), so it cannot point outside data_dir.
    """

    if not isinstance(caller_id, str) or not CALLER_ID_RE.fullmatch(caller_id):
        raise InvalidCallerId(caller_id)

    return Path(data_dir) / f"{caller_id}.json"

def load_store(caller_id: str, data_dir: Path = DEFAULT_DATA_DIR) -> LocalStore:
    """
    Load <data_dir>/<caller_id>.json as a LocalStore.

    The file is an object of key -> array (or key -> JSON string). A caller with
    no file yet gets an empty store.

    Raises:
        InvalidCallerId: see store_path.
        StoreError: the file is not a JSON object.
    """

    path = store_path(caller_id, data_dir)

    if not path.exists():
        logger.info("No local store for caller %s at %s", caller_id, path)
        return LocalStore()

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Store file %s is not valid JSON: %s", path, e)
        raise StoreError(f"{path.name} is not valid JSON") from e

    if not isinstance(data, dict):
        raise StoreError(f"{path.name} must contain a JSON object")

    items = {k: v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}

    return LocalStore(items)
