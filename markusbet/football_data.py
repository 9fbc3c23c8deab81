# markusbet/football_data.py
# football-data.org v4 helpers used by the actor to proxy match lists
# Docs: https://docs.football-data.org/general/v4/index.html

import json
import os
import time
from typing import Any, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .log import log_err, log_info

FOOTBALL_DATA_API_KEY = os.getenv("FOOTBALL_DATA_API_KEY")
BASE_URL = os.getenv("FOOTBALL_DATA_URL", "https://api.football-data.org/v4")
DEFAULT_TIMEOUT = 20

# ----- tiny in-memory cache (free tier allows 10 requests/minute)
_CACHE: Dict[str, Tuple[float, str]] = {}
CACHE_TTL = int(os.getenv("CACHE_TTL", "300"))  # 5 minutes default

def _cache_get(key: str) -> Optional[str]:
    item = _CACHE.get(key)
    if not item:
        return None
    ts, val = item
    if time.time() - ts > CACHE_TTL:
        _CACHE.pop(key, None)
        return None
    return val

def _cache_set(key: str, val: str):
    _CACHE[key] = (time.time(), val)

def clear_cache():
    _CACHE.clear()

def _headers():
    return {"X-Auth-Token": FOOTBALL_DATA_API_KEY or "", "Accept": "application/json"}

def _session() -> requests.Session:
    session = requests.Session()
    retries = Retry(total=1, backoff_factor=1, status_forcelist=[429, 500, 502, 503, 504, 408], raise_on_status=False)
    session.mount("https://", HTTPAdapter(max_retries=retries))
    return session

def _error_text(message: str) -> str:
    return json.dumps({"message": message})

def _get_text(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """GET ``path`` and return the body as text.

    Error payloads from the API are passed through untouched so the caller can
    surface the upstream ``message``. Network failures become a JSON text with
    a ``message`` of their own. Only successful bodies are cached.
    """
    params = {k: v for k, v in (params or {}).items() if v is not None}
    url = f"{BASE_URL}{path}"
    key = f"{url}|{sorted(params.items())}"
    cached = _cache_get(key)
    if cached is not None:
        return cached
    if not FOOTBALL_DATA_API_KEY:
        log_err("football-data key missing", path=path)
        return _error_text("Football data API key is not configured.")
    try:
        r = _session().get(url, headers=_headers(), params=params, timeout=DEFAULT_TIMEOUT)
    except requests.exceptions.Timeout:
        log_err("football-data timeout", path=path)
        return _error_text("Football data API timed out. Please try again.")
    except requests.exceptions.RequestException as e:
        log_err("football-data request failed", path=path, error=str(e))
        return _error_text(f"Football data API request failed: {e}")
    log_info("football-data response", path=path, status=r.status_code)
    if r.status_code == 200:
        _cache_set(key, r.text)
    return r.text

# -------------- Core lookups --------------
def get_matches() -> str:
    """Matches across the competitions available to the API key (today by default)."""
    return _get_text("/matches")

def get_competition_matches(code: str, status: str = "SCHEDULED") -> str:
    code = (code or "").strip().upper()
    return _get_text(f"/competitions/{code}/matches", {"status": status})
