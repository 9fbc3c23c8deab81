# markusbet/imports.py
# Turning raw football-data.org payloads into prediction form prefills

import json
from datetime import timezone as dt_timezone
from typing import Any, Dict, List, Optional

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .exceptions import UpstreamAPIError

COMPETITIONS = [
    ("PL", "Premier League"),
    ("PD", "La Liga"),
    ("BL1", "Bundesliga"),
    ("SA", "Serie A"),
    ("FL1", "Ligue 1"),
    ("PPL", "Primeira Liga"),
    ("DED", "Eredivisie"),
]
COMPETITION_NAMES = dict(COMPETITIONS)
DEFAULT_COMPETITION = "PL"
ALL_LEAGUES = "ALL"
DEFAULT_CONFIDENCE = "75"

def parse_api_error(text: str) -> str:
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return text
    if isinstance(parsed, dict) and parsed.get("message"):
        return str(parsed["message"])
    return text

def parse_matches(json_text: str) -> List[Dict[str, Any]]:
    """Matches from a proxied response; error payloads raise ``UpstreamAPIError``."""
    try:
        parsed = json.loads(json_text)
    except (TypeError, ValueError):
        raise UpstreamAPIError("Unexpected response from server.")
    if not isinstance(parsed, dict):
        raise UpstreamAPIError("Unexpected response from server.")
    if parsed.get("message") and "matches" not in parsed:
        raise UpstreamAPIError(str(parsed["message"]))
    matches = parsed.get("matches") or []
    return matches if isinstance(matches, list) else []

# -------------- dates --------------
def _parse_utc(utc_date: str):
    try:
        dt = parse_datetime(utc_date or "")
    except ValueError:
        return None
    if dt is None:
        return None
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt, dt_timezone.utc)
    return dt

def format_match_date_local(utc_date: str) -> str:
    """``YYYY-MM-DDTHH:MM`` in the configured local zone, ``""`` if unparseable."""
    dt = _parse_utc(utc_date)
    if dt is None:
        return ""
    return timezone.localtime(dt).strftime("%Y-%m-%dT%H:%M")

def format_display_date(utc_date: str) -> str:
    dt = _parse_utc(utc_date)
    if dt is None:
        return utc_date
    dt = dt.astimezone(dt_timezone.utc)
    return f"{dt.day} {dt:%b %Y, %H:%M} UTC"

# -------------- competitions --------------
def competition_name(match: Dict[str, Any], code: str) -> str:
    name = (match.get("competition") or {}).get("name")
    if name:
        return name
    return COMPETITION_NAMES.get(code, code)

def unique_leagues(matches: List[Dict[str, Any]], code: str) -> List[str]:
    seen: List[str] = []
    for m in matches:
        name = competition_name(m, code)
        if name not in seen:
            seen.append(name)
    return seen

def filter_by_league(matches: List[Dict[str, Any]], league: Optional[str], code: str) -> List[Dict[str, Any]]:
    if not league or league == ALL_LEAGUES:
        return matches
    return [m for m in matches if competition_name(m, code) == league]

def prefill_from_match(match: Dict[str, Any], code: str) -> Dict[str, str]:
    """Initial add-form data for a fetched match; the tip itself is left to the admin."""
    return {
        "home_team": ((match.get("homeTeam") or {}).get("name") or ""),
        "away_team": ((match.get("awayTeam") or {}).get("name") or ""),
        "match_date": format_match_date_local(match.get("utcDate") or ""),
        "league": competition_name(match, code),
        "prediction": "",
        "odds": "",
        "confidence": DEFAULT_CONFIDENCE,
        "analysis": "",
    }
