from functools import wraps
from urllib.parse import urlencode

from django.contrib import messages
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .categories import CATEGORIES
from .exceptions import ActorUnavailableError, UpstreamAPIError
from .filters import card, partition, stats, today_only
from .forms import REQUIRED_MESSAGE, ImportForm, LoginForm, PredictionForm
from .imports import (
    ALL_LEAGUES, COMPETITION_NAMES, DEFAULT_COMPETITION, DEFAULT_CONFIDENCE, competition_name,
    filter_by_league, format_display_date, parse_api_error, parse_matches, prefill_from_match,
    unique_leagues,
)
from .log import log_err, log_info
from .models import CATEGORY_PARLAY, CATEGORY_SINGLE
from .queries import queries_for

ADMIN_TOKEN_KEY = "markusbet_admin_token"
GENERIC_ERROR = "An error occurred. Please try again."
ADMIN_TABS = ("predictions", "import")

# ---------- session helpers ----------
def _verified_token(request, queries):
    """Re-validate the stored admin token; invalid or expired ones are cleared."""
    token = request.session.get(ADMIN_TOKEN_KEY)
    if not token:
        return None
    try:
        if queries.is_authenticated(token):
            return token
    except Exception as e:
        # can't tell either way, keep the token for the next load
        log_err("session check failed", error=str(e))
        messages.error(request, str(e))
        return None
    log_info("admin token rejected, clearing")
    request.session.pop(ADMIN_TOKEN_KEY, None)
    return None

def admin_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        queries = queries_for(request)
        token = _verified_token(request, queries)
        if not token:
            return redirect("admin_panel")
        return view(request, queries, token, *args, **kwargs)
    return wrapper

def _read_tab(request, allowed, default):
    tab = request.GET.get("tab", default)
    return tab if tab in allowed else default

# ---------- public page ----------
def index(request):
    tab = _read_tab(request, CATEGORIES, CATEGORY_SINGLE)
    today = request.GET.get("today") == "1"
    error = None
    try:
        predictions = queries_for(request).list()
    except Exception as e:
        log_err("loading predictions failed", error=str(e))
        predictions, error = [], "Failed to load predictions."
    if today:
        predictions = today_only(predictions)
    single, parlay = partition(predictions)
    shown = parlay if tab == CATEGORY_PARLAY else single
    return render(request, "markusbet/index.html", {
        "tab": tab,
        "today": today,
        "error": error,
        "cards": [card(p) for p in shown],
        "stats": stats(shown),
        "single_count": len(single),
        "parlay_count": len(parlay),
    })

# ---------- admin panel ----------
def _import_context(request, queries, token):
    form = ImportForm(request.GET if "competition" in request.GET else None)
    code = DEFAULT_COMPETITION
    matches, error, fetched = [], None, False
    if form.is_bound:
        if form.is_valid():
            code = form.cleaned_data["competition"]
            fetched = True
            try:
                matches = parse_matches(queries.fetch_matches(token, code))
            except UpstreamAPIError as e:
                error = parse_api_error(str(e))
            except Exception as e:
                log_err("fetching matches failed", competition=code, error=str(e))
                error = "Failed to fetch matches. Please try again."
        else:
            error = "Unknown competition."
    league = request.GET.get("league") or ALL_LEAGUES
    rows = [{
        "match": m,
        "league": competition_name(m, code),
        "display_date": format_display_date(m.get("utcDate") or ""),
        "prefill_query": urlencode(prefill_from_match(m, code)),
    } for m in filter_by_league(matches, league, code)]
    return {
        "import_form": form,
        "competition": code,
        "competition_name": COMPETITION_NAMES.get(code, code),
        "fetched": fetched,
        "import_error": error,
        "match_count": len(matches),
        "leagues": unique_leagues(matches, code),
        "league": league,
        "rows": rows,
    }

def admin_panel(request):
    queries = queries_for(request)
    token = _verified_token(request, queries)
    if not token:
        return render(request, "markusbet/admin_login.html", {"form": LoginForm()})
    tab = _read_tab(request, ADMIN_TABS, "predictions")
    ctx = {"tab": tab, "predictions": []}
    if tab == "import":
        ctx.update(_import_context(request, queries, token))
    else:
        try:
            ctx["predictions"] = [card(p) for p in queries.list()]
        except Exception as e:
            log_err("loading predictions failed", error=str(e))
            messages.error(request, "Failed to load predictions.")
    return render(request, "markusbet/admin_dashboard.html", ctx)

@require_POST
def admin_login(request):
    form = LoginForm(request.POST)
    error = None
    if not form.is_valid():
        error = "Please enter the admin password."
    else:
        try:
            token = queries_for(request).login(form.cleaned_data["password"])
        except Exception as e:
            log_err("admin login failed", error=str(e))
            token, error = None, "Login failed. Please try again."
        else:
            if not token:
                error = "Incorrect password. Please try again."
        if token:
            request.session[ADMIN_TOKEN_KEY] = token
            messages.success(request, "Logged in successfully.")
            return redirect("admin_panel")
    return render(request, "markusbet/admin_login.html", {"form": LoginForm(), "error": error})

@require_POST
def admin_logout(request):
    token = request.session.pop(ADMIN_TOKEN_KEY, None)
    if token:
        try:
            queries_for(request).logout(token)
        except Exception as e:
            log_err("server-side logout failed", error=str(e))
    messages.success(request, "Logged out.")
    return redirect("admin_panel")

def _render_form(request, form, prediction=None, status_code=200):
    return render(request, "markusbet/prediction_form.html", {
        "form": form,
        "prediction": prediction,
        "editing": prediction is not None,
    }, status=status_code)

@admin_required
def prediction_add(request, queries, token):
    if request.method != "POST":
        initial = {"confidence": DEFAULT_CONFIDENCE, "category": CATEGORY_SINGLE}
        initial.update({k: v for k, v in request.GET.items() if k in PredictionForm.base_fields})
        return _render_form(request, PredictionForm(initial=initial))
    form = PredictionForm(request.POST)
    if not form.is_valid():
        messages.error(request, REQUIRED_MESSAGE)
        return _render_form(request, form, status_code=400)
    try:
        new_id = queries.add(token, form.cleaned_data)
    except Exception as e:
        log_err("adding prediction failed", error=str(e))
        messages.error(request, GENERIC_ERROR)
        return _render_form(request, form)
    if new_id is None:
        messages.error(request, "Failed to add prediction.")
        return _render_form(request, form)
    messages.success(request, "Prediction added!")
    return redirect("admin_panel")

@admin_required
def prediction_edit(request, queries, token, pk):
    try:
        prediction = queries.get(pk)
    except Exception as e:
        log_err("loading prediction failed", id=pk, error=str(e))
        messages.error(request, GENERIC_ERROR)
        return redirect("admin_panel")
    if prediction is None:
        raise Http404("No such prediction")
    if request.method != "POST":
        return _render_form(request, PredictionForm(initial=PredictionForm.initial_from_prediction(prediction)), prediction)
    form = PredictionForm(request.POST)
    if not form.is_valid():
        messages.error(request, REQUIRED_MESSAGE)
        return _render_form(request, form, prediction, status_code=400)
    try:
        ok = queries.update(token, pk, form.cleaned_data)
    except Exception as e:
        log_err("updating prediction failed", id=pk, error=str(e))
        messages.error(request, GENERIC_ERROR)
        return _render_form(request, form, prediction)
    if not ok:
        messages.error(request, "Failed to update prediction.")
        return _render_form(request, form, prediction)
    messages.success(request, "Prediction updated!")
    return redirect("admin_panel")

@require_POST
@admin_required
def prediction_delete(request, queries, token, pk):
    try:
        ok = queries.delete(token, pk)
    except Exception as e:
        log_err("deleting prediction failed", id=pk, error=str(e))
        messages.error(request, GENERIC_ERROR)
    else:
        if ok:
            messages.success(request, "Prediction deleted.")
        else:
            messages.error(request, "Failed to delete prediction.")
    return redirect("admin_panel")

# ---------- REST endpoints ----------
class PredictionsAPI(APIView):
    def get(self, request):
        category = request.query_params.get("category")
        if category and category not in CATEGORIES:
            return Response({"error": f"Unknown category: {category}"}, status=status.HTTP_400_BAD_REQUEST)
        queries = queries_for(request)
        try:
            if category == CATEGORY_PARLAY:
                predictions = queries.list_parlay()
            elif category == CATEGORY_SINGLE:
                predictions = queries.list_single()
            else:
                predictions = queries.list()
        except ActorUnavailableError as e:
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except Exception as e:
            log_err("loading predictions failed", error=str(e))
            return Response({"error": "Failed to load predictions."}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        if request.query_params.get("today") == "1":
            predictions = today_only(predictions)
        return Response({"predictions": predictions})

def health(request):
    return JsonResponse({"status": "ok"})
