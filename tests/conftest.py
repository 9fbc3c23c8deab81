"""
Pytest configuration and shared fixtures for MarkusBet tests.
"""

import pytest

from markusbet import football_data, queries
from markusbet.backend import OrmActor
from markusbet.categories import CategoryStore


class LegacyActor:
    """In-memory actor for the backend variant without a category field."""

    supports_category = False

    def __init__(self, rows=None, seed_rows=None):
        self.rows = {r["id"]: dict(r) for r in (rows or [])}
        self.seed_rows = seed_rows or []
        self.tokens = {"good-token"}
        self.matches_text = '{"matches": []}'
        self.calls = []

    def _next_id(self):
        return max(self.rows, default=0) + 1

    def get_predictions(self):
        self.calls.append("get_predictions")
        return [dict(r) for r in self.rows.values()]

    def seed_initial_data(self):
        self.calls.append("seed_initial_data")
        if self.rows:
            return
        for row in self.seed_rows:
            self.rows[row["id"]] = dict(row)

    def admin_login(self, password):
        return "good-token" if password == "pw" else None

    def admin_logout(self, token):
        return token in self.tokens

    def is_admin_authenticated(self, token):
        return token in self.tokens

    def add_prediction_as_admin(self, token, home_team, away_team, match_date, league,
                                prediction, odds, confidence, analysis):
        self.calls.append("add")
        if token not in self.tokens:
            return None
        new_id = self._next_id()
        self.rows[new_id] = make_row(new_id, home_team=home_team, away_team=away_team,
                                     match_date=match_date, league=league, prediction=prediction,
                                     odds=odds, confidence=confidence, analysis=analysis)
        return new_id

    def update_prediction_as_admin(self, token, id, home_team, away_team, match_date, league,
                                   prediction, odds, confidence, analysis):
        self.calls.append("update")
        if token not in self.tokens or id not in self.rows:
            return False
        self.rows[id] = make_row(id, home_team=home_team, away_team=away_team,
                                 match_date=match_date, league=league, prediction=prediction,
                                 odds=odds, confidence=confidence, analysis=analysis)
        return True

    def delete_prediction_as_admin(self, token, id):
        self.calls.append("delete")
        if token not in self.tokens:
            return False
        return self.rows.pop(id, None) is not None

    def fetch_football_matches(self, token):
        return self.matches_text

    def fetch_matches_by_competition(self, token, code):
        self.calls.append(("fetch_matches", code))
        return self.matches_text


def make_row(id, **overrides):
    row = {
        "id": id,
        "home_team": "Arsenal",
        "away_team": "Chelsea",
        "match_date": "2025-03-01T15:00",
        "league": "Premier League",
        "prediction": "Home Win",
        "odds": 1.85,
        "confidence": 75,
        "analysis": "",
    }
    row.update(overrides)
    return row


def prediction_fields(**overrides):
    fields = {
        "home_team": "Liverpool",
        "away_team": "Everton",
        "match_date": "2025-04-05T12:30",
        "league": "Premier League",
        "prediction": "Home Win",
        "odds": 1.55,
        "confidence": 80,
        "analysis": "Merseyside derby at Anfield.",
        "category": "single",
    }
    fields.update(overrides)
    return fields


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture(autouse=True)
def clean_caches():
    queries._default_cache = None
    football_data.clear_cache()
    yield
    queries._default_cache = None
    football_data.clear_cache()


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def store(storage):
    return CategoryStore(storage)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return queries.QueryCache(ttl=300, clock=clock)


@pytest.fixture
def legacy_actor():
    return LegacyActor(rows=[make_row(1), make_row(2, home_team="Milan"), make_row(3, home_team="Porto")])


@pytest.fixture
def orm_actor(db):
    return OrmActor()


@pytest.fixture
def token(orm_actor):
    return orm_actor.admin_login("letmein")


@pytest.fixture
def logged_in_client(client, db):
    response = client.post("/admin/login", {"password": "letmein"})
    assert response.status_code == 302
    return client
