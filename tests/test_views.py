"""Tests for the public page, the admin panel and the JSON API."""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import OperationalError
from django.test import override_settings
from django.utils import timezone

from markusbet.backend import OrmActor
from markusbet.exceptions import ActorUnavailableError
from markusbet.models import AdminSession, Prediction
from markusbet.views import ADMIN_TOKEN_KEY

from .conftest import prediction_fields

pytestmark = pytest.mark.django_db

FORM = {
    "home_team": "Arsenal",
    "away_team": "Chelsea",
    "match_date": "2025-03-01T15:00",
    "league": "Premier League",
    "prediction": "Home Win",
    "odds": "1.85",
    "confidence": "75",
    "analysis": "",
    "category": "parlay",
}


def _create(**overrides):
    fields = prediction_fields(**overrides)
    fields["odds"] = str(fields["odds"])
    return Prediction.objects.create(**fields)


class TestPublicPage:

    def test_seeds_empty_store(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert Prediction.objects.exists()
        assert b"Arsenal" in response.content

    def test_tabs_partition(self, client):
        _create(home_team="Singleton FC", category="single")
        _create(home_team="Parlay United", category="parlay")
        single = client.get("/")
        parlay = client.get("/?tab=parlay")
        assert b"Singleton FC" in single.content and b"Parlay United" not in single.content
        assert b"Parlay United" in parlay.content and b"Singleton FC" not in parlay.content
        assert single.context["single_count"] == 1
        assert single.context["parlay_count"] == 1

    def test_unknown_tab_falls_back_to_single(self, client):
        _create(home_team="Singleton FC")
        assert client.get("/?tab=treble").context["tab"] == "single"

    def test_tab_switch_does_not_refetch(self, client):
        rows = [{**prediction_fields(category="parlay"), "id": 1}]
        with patch.object(OrmActor, "get_predictions", autospec=True, return_value=rows) as get:
            client.get("/")
            client.get("/?tab=parlay")
            client.get("/?tab=single&today=1")
        assert get.call_count == 1

    def test_today_only(self, client):
        today = timezone.localdate()
        _create(home_team="Today Town", match_date=f"{today.isoformat()}T20:00")
        _create(home_team="Yesterday Rovers", match_date=f"{(today - timedelta(days=1)).isoformat()}T20:00")
        _create(home_team="Undated Athletic", match_date="TBC")
        response = client.get("/?today=1")
        assert b"Today Town" in response.content
        assert b"Undated Athletic" in response.content
        assert b"Yesterday Rovers" not in response.content

    def test_backend_failure_shows_error(self, client):
        with patch.object(OrmActor, "get_predictions", side_effect=RuntimeError("db down")):
            response = client.get("/")
        assert response.status_code == 200
        assert response.context["error"] == "Failed to load predictions."

    @override_settings(MARKUSBET_ACTOR="")
    def test_no_actor_shows_error(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.context["error"] == "Failed to load predictions."


class TestAdminSession:

    def test_login_form_without_token(self, client):
        response = client.get("/admin/")
        assert response.templates[0].name == "markusbet/admin_login.html"

    def test_wrong_password(self, client):
        response = client.post("/admin/login", {"password": "guess"})
        assert response.status_code == 200
        assert response.context["error"] == "Incorrect password. Please try again."
        assert ADMIN_TOKEN_KEY not in client.session

    def test_login_failure_on_actor_error(self, client):
        with patch.object(OrmActor, "admin_login", side_effect=RuntimeError("down")):
            response = client.post("/admin/login", {"password": "letmein"})
        assert response.context["error"] == "Login failed. Please try again."

    def test_login_stores_token_and_shows_dashboard(self, client):
        response = client.post("/admin/login", {"password": "letmein"}, follow=True)
        assert client.session[ADMIN_TOKEN_KEY] == AdminSession.objects.get().token
        assert response.templates[0].name == "markusbet/admin_dashboard.html"
        assert b"Logged in successfully." in response.content

    def test_expired_token_cleared(self, logged_in_client):
        AdminSession.objects.update(expires_at=timezone.now() - timedelta(seconds=1))
        response = logged_in_client.get("/admin/")
        assert response.templates[0].name == "markusbet/admin_login.html"
        assert ADMIN_TOKEN_KEY not in logged_in_client.session

    def test_token_kept_when_check_fails(self, logged_in_client):
        with patch.object(OrmActor, "is_admin_authenticated", side_effect=ActorUnavailableError()):
            response = logged_in_client.get("/admin/")
        assert response.templates[0].name == "markusbet/admin_login.html"
        assert ADMIN_TOKEN_KEY in logged_in_client.session

    def test_token_kept_when_database_fails(self, logged_in_client):
        with patch.object(OrmActor, "is_admin_authenticated", side_effect=OperationalError("locked")):
            response = logged_in_client.get("/admin/")
        assert response.status_code == 200
        assert response.templates[0].name == "markusbet/admin_login.html"
        assert ADMIN_TOKEN_KEY in logged_in_client.session

    def test_logout_clears_token_even_if_server_fails(self, logged_in_client):
        with patch.object(OrmActor, "admin_logout", side_effect=RuntimeError("down")):
            response = logged_in_client.post("/admin/logout", follow=True)
        assert ADMIN_TOKEN_KEY not in logged_in_client.session
        assert b"Logged out." in response.content

    def test_logout_invalidates_server_side(self, logged_in_client):
        logged_in_client.post("/admin/logout")
        assert not AdminSession.objects.exists()

    def test_mutations_require_login(self, client):
        response = client.post("/admin/predictions/new", FORM)
        assert response.status_code == 302
        assert not Prediction.objects.exists()


class TestAdminPredictions:

    def test_dashboard_lists_predictions(self, logged_in_client):
        _create(home_team="Listed FC", category="parlay")
        response = logged_in_client.get("/admin/")
        assert b"Listed FC" in response.content
        assert b"PARLAY" in response.content

    def test_add(self, logged_in_client):
        response = logged_in_client.post("/admin/predictions/new", FORM, follow=True)
        row = Prediction.objects.get()
        assert (row.home_team, row.category, row.confidence) == ("Arsenal", "parlay", 75)
        assert b"Prediction added!" in response.content
        assert client_category(logged_in_client, row.id) == "parlay"

    @pytest.mark.parametrize("field,value", [
        ("home_team", ""), ("away_team", ""), ("match_date", ""), ("league", ""), ("prediction", ""),
        ("odds", ""), ("odds", "abc"), ("odds", "123456789"), ("confidence", ""), ("confidence", "high"),
    ])
    def test_add_validation_blocks_network(self, logged_in_client, field, value):
        with patch.object(OrmActor, "add_prediction_as_admin") as add:
            response = logged_in_client.post("/admin/predictions/new", {**FORM, field: value})
        assert response.status_code == 400
        assert b"Please fill in all required fields." in response.content
        add.assert_not_called()

    def test_add_rejected_by_backend(self, logged_in_client):
        with patch.object(OrmActor, "add_prediction_as_admin", return_value=None):
            response = logged_in_client.post("/admin/predictions/new", FORM)
        assert b"Failed to add prediction." in response.content

    def test_add_exception_is_generic_error(self, logged_in_client):
        with patch.object(OrmActor, "add_prediction_as_admin", side_effect=RuntimeError("boom")):
            response = logged_in_client.post("/admin/predictions/new", FORM)
        assert b"An error occurred. Please try again." in response.content

    def test_edit_form_prefilled(self, logged_in_client):
        row = _create(odds=2.4, confidence=61, category="parlay")
        response = logged_in_client.get(f"/admin/predictions/{row.id}/edit")
        initial = response.context["form"].initial
        assert initial["odds"] == "2.4"
        assert initial["confidence"] == "61"
        assert initial["category"] == "parlay"

    def test_edit(self, logged_in_client):
        row = _create()
        response = logged_in_client.post(f"/admin/predictions/{row.id}/edit", {**FORM, "prediction": "Draw"}, follow=True)
        row.refresh_from_db()
        assert row.prediction == "Draw"
        assert b"Prediction updated!" in response.content

    def test_edit_validation_blocks_network(self, logged_in_client):
        row = _create()
        with patch.object(OrmActor, "update_prediction_as_admin") as update:
            response = logged_in_client.post(f"/admin/predictions/{row.id}/edit", {**FORM, "odds": "x"})
        assert response.status_code == 400
        update.assert_not_called()

    def test_edit_missing(self, logged_in_client):
        _create()
        assert logged_in_client.get("/admin/predictions/999/edit").status_code == 404

    def test_delete(self, logged_in_client):
        logged_in_client.post("/admin/predictions/new", FORM)
        row = Prediction.objects.get()
        response = logged_in_client.post(f"/admin/predictions/{row.id}/delete", follow=True)
        assert not Prediction.objects.exists()
        assert b"Prediction deleted." in response.content
        assert client_category(logged_in_client, row.id) is None

    def test_delete_requires_post(self, logged_in_client):
        row = _create()
        assert logged_in_client.get(f"/admin/predictions/{row.id}/delete").status_code == 405


def client_category(client, id):
    raw = client.session.get("markusbet_categories")
    return json.loads(raw).get(str(id)) if raw else None


MATCHES = json.dumps({"matches": [{
    "id": 1,
    "utcDate": "2025-03-01T15:00:00Z",
    "homeTeam": {"name": "Arsenal"},
    "awayTeam": {"name": "Chelsea"},
    "competition": {"name": "Premier League"},
}]})


class TestImport:

    def test_idle_tab(self, logged_in_client):
        response = logged_in_client.get("/admin/?tab=import")
        assert response.context["fetched"] is False
        assert b"SELECT A COMPETITION AND CLICK FETCH" in response.content

    def test_fetch_and_create_prediction(self, logged_in_client):
        with patch("markusbet.backend.football_data.get_competition_matches", return_value=MATCHES) as fetch:
            response = logged_in_client.get("/admin/?tab=import&competition=PL")
        fetch.assert_called_once_with("PL")
        [row] = response.context["rows"]
        assert row["display_date"] == "1 Mar 2025, 15:00 UTC"

        form_page = logged_in_client.get("/admin/predictions/new?" + row["prefill_query"])
        initial = form_page.context["form"].initial
        assert initial["home_team"] == "Arsenal"
        assert initial["away_team"] == "Chelsea"
        assert initial["match_date"] == "2025-03-01T15:00"
        assert initial["league"] == "Premier League"
        assert initial["prediction"] == ""
        assert initial["odds"] == ""
        assert initial["analysis"] == ""

    def test_upstream_error_message(self, logged_in_client):
        body = '{"message": "The resource you are looking for is restricted.", "errorCode": 403}'
        with patch("markusbet.backend.football_data.get_competition_matches", return_value=body):
            response = logged_in_client.get("/admin/?tab=import&competition=PPL")
        assert response.context["import_error"] == "The resource you are looking for is restricted."

    def test_malformed_response(self, logged_in_client):
        with patch("markusbet.backend.football_data.get_competition_matches", return_value="<html>"):
            response = logged_in_client.get("/admin/?tab=import&competition=PL")
        assert response.context["import_error"] == "Unexpected response from server."

    def test_unknown_competition_makes_no_call(self, logged_in_client):
        with patch("markusbet.backend.football_data.get_competition_matches") as fetch:
            response = logged_in_client.get("/admin/?tab=import&competition=MLS")
        fetch.assert_not_called()
        assert response.context["import_error"] == "Unknown competition."


class TestApi:

    def test_list_and_filter(self, client):
        _create(home_team="Singleton FC", category="single")
        _create(home_team="Parlay United", category="parlay")
        everything = client.get("/api/predictions").json()["predictions"]
        parlays = client.get("/api/predictions?category=parlay").json()["predictions"]
        singles = client.get("/api/predictions?category=single").json()["predictions"]
        assert len(everything) == 2
        assert [p["home_team"] for p in parlays] == ["Parlay United"]
        assert [p["home_team"] for p in singles] == ["Singleton FC"]

    def test_unknown_category(self, client):
        assert client.get("/api/predictions?category=treble").status_code == 400

    @override_settings(MARKUSBET_ACTOR="")
    def test_no_actor(self, client):
        response = client.get("/api/predictions")
        assert response.status_code == 503
        assert response.json() == {"error": "No actor"}

    def test_backend_failure(self, client):
        with patch.object(OrmActor, "get_predictions", side_effect=RuntimeError("db down")):
            response = client.get("/api/predictions")
        assert response.status_code == 503
        assert response.json() == {"error": "Failed to load predictions."}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
