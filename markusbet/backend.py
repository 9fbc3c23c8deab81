"""
Backend actor: the remote object behind every prediction query.

The client layer only ever talks to an actor through the operations below, so
any object exposing them can be plugged in with the ``MARKUSBET_ACTOR``
setting. ``OrmActor`` is the default and keeps everything in the Django
database.
"""
import json
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.utils import timezone
from django.utils.crypto import constant_time_compare, get_random_string
from django.utils.module_loading import import_string

from . import football_data
from .exceptions import ActorUnavailableError
from .log import log_err, log_info
from .models import CATEGORY_CHOICES, AdminSession, Prediction

# Prediction.odds holds at most five digits before the point.
MAX_ODDS_EXPONENT = 4
REQUIRED_TEXT_FIELDS = ("home_team", "away_team", "match_date", "league", "prediction")
VALID_CATEGORIES = {value for value, _ in CATEGORY_CHOICES}

SEED_PREDICTIONS = [
    {
        "home_team": "Arsenal", "away_team": "Chelsea", "match_date": "2025-03-01T15:00",
        "league": "Premier League", "prediction": "Home Win", "odds": "1.85", "confidence": 78,
        "analysis": "Arsenal unbeaten in eight at home, Chelsea missing two starting centre-backs.",
    },
    {
        "home_team": "Real Madrid", "away_team": "Sevilla", "match_date": "2025-03-02T20:00",
        "league": "La Liga", "prediction": "Over 2.5 Goals", "odds": "1.70", "confidence": 72,
        "analysis": "Both sides average over three goals a game in their last five meetings.",
    },
    {
        "home_team": "Bayern Munich", "away_team": "Borussia Dortmund", "match_date": "2025-03-08T18:30",
        "league": "Bundesliga", "prediction": "Both Teams To Score", "odds": "1.60", "confidence": 65,
        "analysis": "Der Klassiker has seen both teams score in nine of the last ten.",
    },
    {
        "home_team": "Inter", "away_team": "Juventus", "match_date": "2025-03-09T20:45",
        "league": "Serie A", "prediction": "Draw", "odds": "3.20", "confidence": 40,
        "analysis": "Tight title race, both managers set up not to lose.",
    },
]


def get_actor():
    """Build the configured actor, or raise ``ActorUnavailableError``."""
    path = getattr(settings, "MARKUSBET_ACTOR", "")
    if not path:
        raise ActorUnavailableError()
    try:
        actor_cls = import_string(path)
    except ImportError as e:
        log_err("actor import failed", path=path, error=str(e))
        raise ActorUnavailableError() from e
    return actor_cls()


def _clean_fields(home_team, away_team, match_date, league, prediction, odds, confidence,
                  analysis, category) -> Optional[Dict[str, Any]]:
    """Required-field validation; ``None`` means the record is rejected."""
    text = {
        "home_team": home_team, "away_team": away_team, "match_date": match_date,
        "league": league, "prediction": prediction,
    }
    cleaned: Dict[str, Any] = {}
    for name in REQUIRED_TEXT_FIELDS:
        value = (text[name] or "").strip() if isinstance(text[name], str) else ""
        if not value:
            return None
        cleaned[name] = value
    try:
        odds = Decimal(str(odds)).quantize(Decimal("0.01"))
        confidence = int(confidence)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not odds.is_finite() or odds < 1 or odds.adjusted() > MAX_ODDS_EXPONENT or not 0 <= confidence <= 100:
        return None
    if category is not None and category not in VALID_CATEGORIES:
        return None
    cleaned.update(odds=odds, confidence=confidence, analysis=analysis or "")
    if category is not None:
        cleaned["category"] = category
    return cleaned


class OrmActor:
    """Actor backed by the ``Prediction`` and ``AdminSession`` tables."""

    supports_category = True

    # ---------- public reads ----------
    def get_predictions(self) -> List[Dict[str, Any]]:
        return [p.as_dict() for p in Prediction.objects.all()]

    def seed_initial_data(self) -> None:
        if Prediction.objects.exists():
            return
        Prediction.objects.bulk_create(Prediction(**row) for row in SEED_PREDICTIONS)
        log_info("seeded initial predictions", count=len(SEED_PREDICTIONS))

    # ---------- auth ----------
    def admin_login(self, password: str) -> Optional[str]:
        expected = getattr(settings, "MARKUSBET_ADMIN_PASSWORD", "")
        if not expected:
            log_err("admin password is not configured")
            return None
        if not constant_time_compare(password or "", expected):
            log_info("admin login rejected")
            return None
        ttl = getattr(settings, "MARKUSBET_TOKEN_TTL", 86400)
        session = AdminSession.objects.create(
            token=get_random_string(48),
            expires_at=timezone.now() + timedelta(seconds=ttl),
        )
        log_info("admin login", session_id=session.id)
        return session.token

    def admin_logout(self, token: str) -> bool:
        if not token:
            return False
        deleted, _ = AdminSession.objects.filter(token=token).delete()
        return deleted > 0

    def is_admin_authenticated(self, token: str) -> bool:
        if not token:
            return False
        session = AdminSession.objects.filter(token=token).first()
        if session is None:
            return False
        if session.expires_at <= timezone.now():
            session.delete()
            return False
        return True

    # ---------- admin mutations ----------
    def add_prediction_as_admin(self, token, home_team, away_team, match_date, league, prediction,
                                odds, confidence, analysis, category=None) -> Optional[int]:
        if not self.is_admin_authenticated(token):
            return None
        fields = _clean_fields(home_team, away_team, match_date, league, prediction, odds,
                               confidence, analysis, category)
        if fields is None:
            return None
        row = Prediction.objects.create(**fields)
        log_info("prediction added", id=row.id)
        return row.id

    def update_prediction_as_admin(self, token, id, home_team, away_team, match_date, league,
                                   prediction, odds, confidence, analysis, category=None) -> bool:
        if not self.is_admin_authenticated(token):
            return False
        fields = _clean_fields(home_team, away_team, match_date, league, prediction, odds,
                               confidence, analysis, category)
        if fields is None:
            return False
        updated = Prediction.objects.filter(pk=id).update(**fields)
        if updated:
            log_info("prediction updated", id=id)
        return updated > 0

    def delete_prediction_as_admin(self, token, id) -> bool:
        if not self.is_admin_authenticated(token):
            return False
        deleted, _ = Prediction.objects.filter(pk=id).delete()
        if deleted:
            log_info("prediction deleted", id=id)
        return deleted > 0

    # ---------- football-data proxy ----------
    def fetch_football_matches(self, token: str) -> str:
        if not self.is_admin_authenticated(token):
            return json.dumps({"message": "Unauthorized"})
        return football_data.get_matches()

    def fetch_matches_by_competition(self, token: str, code: str) -> str:
        if not self.is_admin_authenticated(token):
            return json.dumps({"message": "Unauthorized"})
        return football_data.get_competition_matches(code)
