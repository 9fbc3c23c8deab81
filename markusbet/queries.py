"""
Query layer between the views and the backend actor.

Fetched predictions are cached for a short staleness window and merged with
the per-client category overlay on every read. Mutations invalidate the cache
unconditionally; the next read refetches from the actor.
"""
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.conf import settings

from .backend import get_actor
from .categories import CATEGORIES, CategoryStore
from .exceptions import ActorUnavailableError
from .models import CATEGORY_PARLAY, CATEGORY_SINGLE

PREDICTIONS_KEY = "predictions"
FIELD_NAMES = (
    "home_team", "away_team", "match_date", "league",
    "prediction", "odds", "confidence", "analysis",
)


class QueryCache:
    """In-process cache of actor results, ``ttl`` seconds per entry."""

    def __init__(self, ttl: Optional[int] = None, clock: Callable[[], float] = time.time):
        if ttl is None:
            ttl = getattr(settings, "MARKUSBET_QUERY_TTL", 300)
        self.ttl = ttl
        self.clock = clock
        self.seed_attempted = False
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str):
        hit = self._entries.get(key)
        if not hit:
            return None
        ts, val = hit
        if self.clock() - ts > self.ttl:
            self._entries.pop(key, None)
            return None
        return val

    def set(self, key: str, val: Any):
        self._entries[key] = (self.clock(), val)
        return val

    def invalidate(self, *keys: str):
        for key in keys:
            self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()
        self.seed_attempted = False


_default_cache: Optional[QueryCache] = None

def default_cache() -> QueryCache:
    global _default_cache
    if _default_cache is None:
        _default_cache = QueryCache()
    return _default_cache


class PredictionQueries:
    def __init__(self, actor, categories: CategoryStore, cache: Optional[QueryCache] = None):
        self.actor = actor
        self.categories = categories
        self.cache = cache if cache is not None else default_cache()

    def _require_actor(self):
        if self.actor is None:
            raise ActorUnavailableError()
        return self.actor

    @property
    def _native_category(self) -> bool:
        return bool(getattr(self.actor, "supports_category", False))

    # ---------- reads ----------
    def _fetch(self) -> List[Dict[str, Any]]:
        actor = self._require_actor()
        cached = self.cache.get(PREDICTIONS_KEY)
        if cached is not None:
            return cached
        rows = list(actor.get_predictions())
        if not rows and not self.cache.seed_attempted:
            self.cache.seed_attempted = True
            actor.seed_initial_data()
            rows = list(actor.get_predictions())
        return self.cache.set(PREDICTIONS_KEY, rows)

    def _category_for(self, row: Dict[str, Any]) -> str:
        if self._native_category and row.get("category") in CATEGORIES:
            return row["category"]
        return self.categories.get(row["id"])

    def list(self) -> List[Dict[str, Any]]:
        return [{**row, "category": self._category_for(row)} for row in self._fetch()]

    def list_single(self) -> List[Dict[str, Any]]:
        return [p for p in self.list() if p["category"] != CATEGORY_PARLAY]

    def list_parlay(self) -> List[Dict[str, Any]]:
        return [p for p in self.list() if p["category"] == CATEGORY_PARLAY]

    def get(self, id) -> Optional[Dict[str, Any]]:
        return next((p for p in self.list() if str(p["id"]) == str(id)), None)

    # ---------- auth ----------
    def login(self, password: str) -> Optional[str]:
        return self._require_actor().admin_login(password)

    def logout(self, token: str) -> bool:
        return self._require_actor().admin_logout(token)

    def is_authenticated(self, token: Optional[str]) -> bool:
        actor = self._require_actor()
        if not token:
            return False
        return bool(actor.is_admin_authenticated(token))

    # ---------- admin mutations ----------
    def _call_with_category(self, method, *args, category: str):
        if self._native_category:
            return method(*args, category=category)
        return method(*args)

    def add(self, token: str, fields: Dict[str, Any]) -> Optional[int]:
        actor = self._require_actor()
        category = fields.get("category") or CATEGORY_SINGLE
        values = [fields[name] for name in FIELD_NAMES]
        new_id = self._call_with_category(actor.add_prediction_as_admin, token, *values, category=category)
        if new_id is not None:
            self.categories.set(new_id, category)
        self.cache.invalidate(PREDICTIONS_KEY)
        return new_id

    def update(self, token: str, id, fields: Dict[str, Any]) -> bool:
        actor = self._require_actor()
        category = fields.get("category") or CATEGORY_SINGLE
        values = [fields[name] for name in FIELD_NAMES]
        ok = bool(self._call_with_category(actor.update_prediction_as_admin, token, id, *values, category=category))
        if ok:
            self.categories.set(id, category)
        self.cache.invalidate(PREDICTIONS_KEY)
        return ok

    def delete(self, token: str, id) -> bool:
        actor = self._require_actor()
        ok = bool(actor.delete_prediction_as_admin(token, id))
        self.categories.remove(id)
        self.cache.invalidate(PREDICTIONS_KEY)
        return ok

    # ---------- football-data import ----------
    def fetch_matches(self, token: str, competition_code: str) -> str:
        return self._require_actor().fetch_matches_by_competition(token, competition_code)


def queries_for(request) -> PredictionQueries:
    """Queries bound to the request's session; a missing actor surfaces on first use."""
    try:
        actor = get_actor()
    except ActorUnavailableError:
        actor = None
    return PredictionQueries(actor, CategoryStore(request.session))
