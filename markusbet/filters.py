# markusbet/filters.py
# Display-side helpers for prediction cards: today filter, tabs, stats, labels

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from django.utils import timezone

from .models import CATEGORY_PARLAY

HIGH_CONFIDENCE = 70
MEDIUM_CONFIDENCE = 40

def _date_prefix(match_date: str) -> Optional[date]:
    try:
        return datetime.strptime((match_date or "")[:10], "%Y-%m-%d").date()
    except ValueError:
        return None

def today_only(predictions: List[Dict[str, Any]], today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Keep today's predictions; undated or unparseable ones are always kept."""
    today = today or timezone.localdate()
    out = []
    for p in predictions:
        d = _date_prefix(p.get("match_date") or "")
        if d is None or d == today:
            out.append(p)
    return out

def partition(predictions: List[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    single, parlay = [], []
    for p in predictions:
        (parlay if p.get("category") == CATEGORY_PARLAY else single).append(p)
    return single, parlay

def confidence_label(confidence) -> str:
    c = int(confidence or 0)
    if c >= HIGH_CONFIDENCE: return "High"
    if c >= MEDIUM_CONFIDENCE: return "Medium"
    return "Low"

def prediction_type(prediction: str) -> str:
    lower = (prediction or "").lower()
    if "draw" in lower: return "draw"
    if "away" in lower: return "loss"
    return "win"

LEAGUE_EMOJI = [
    (("premier", "england"), "🏴"),
    (("la liga", "spain"), "🇪🇸"),
    (("bundesliga", "germany"), "🇩🇪"),
    (("serie a", "italy"), "🇮🇹"),
    (("ligue", "france"), "🇫🇷"),
    (("champions",), "⭐"),
    (("europa",), "🌍"),
    (("greek", "super league", "greece"), "🇬🇷"),
]

def league_emoji(league: str) -> str:
    lower = (league or "").lower()
    for needles, emoji in LEAGUE_EMOJI:
        if any(n in lower for n in needles):
            return emoji
    return "⚽"

def format_match_date(match_date: str) -> str:
    """``Sat 1 Mar, 15:00`` style; anything unparseable comes back unchanged."""
    try:
        dt = datetime.fromisoformat((match_date or "").replace("Z", "+00:00"))
    except ValueError:
        return match_date
    if timezone.is_aware(dt):
        dt = timezone.localtime(dt)
    return f"{dt:%a} {dt.day} {dt:%b, %H:%M}"

def stats(predictions: List[Dict[str, Any]]) -> Dict[str, str]:
    total = len(predictions)
    avg_odds = f"{sum(float(p.get('odds') or 0) for p in predictions) / total:.2f}" if total else "—"
    high = sum(1 for p in predictions if int(p.get("confidence") or 0) >= HIGH_CONFIDENCE)
    return {"count": str(total), "avg_odds": avg_odds, "high_confidence": f"{high}/{total}"}

def card(p: Dict[str, Any]) -> Dict[str, Any]:
    """Prediction plus the derived fields a card renders."""
    return {
        **p,
        "odds_display": f"{float(p.get('odds') or 0):.2f}",
        "confidence_label": confidence_label(p.get("confidence")),
        "outcome": prediction_type(p.get("prediction")),
        "league_emoji": league_emoji(p.get("league")),
        "date_display": format_match_date(p.get("match_date") or ""),
    }
