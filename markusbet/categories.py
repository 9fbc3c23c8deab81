import json
from typing import Dict, MutableMapping

from .models import CATEGORY_PARLAY, CATEGORY_SINGLE

CATEGORY_STORAGE_KEY = "markusbet_categories"
CATEGORIES = (CATEGORY_SINGLE, CATEGORY_PARLAY)


class CategoryStore:
    """
    Per-client id -> category overlay.

    The whole map lives as one JSON string under ``CATEGORY_STORAGE_KEY`` in
    ``storage`` (the request session, which is a signed cookie) and is read and
    written whole on every call. Nothing is shared between browsers.
    """

    def __init__(self, storage: MutableMapping):
        self.storage = storage

    def mapping(self) -> Dict[str, str]:
        raw = self.storage.get(CATEGORY_STORAGE_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]):
        self.storage[CATEGORY_STORAGE_KEY] = json.dumps(data)

    def get(self, id) -> str:
        category = self.mapping().get(str(id))
        return category if category in CATEGORIES else CATEGORY_SINGLE

    def set(self, id, category: str):
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category!r}")
        data = self.mapping()
        data[str(id)] = category
        self._save(data)

    def remove(self, id):
        data = self.mapping()
        if data.pop(str(id), None) is not None:
            self._save(data)
