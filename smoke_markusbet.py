#!/usr/bin/env python3
"""
MarkusBet live smoke check
Hits a running server over HTTP and prints PASS / FAIL lines.
Usage:
  export BASE_URL=http://127.0.0.1:8000
  export MARKUSBET_ADMIN_PASSWORD=...   (optional, enables the admin checks)
  python smoke_markusbet.py
"""
import os
import re

import requests

BASE = os.getenv("BASE_URL", "http://127.0.0.1:8000").rstrip("/")
PASSWORD = os.getenv("MARKUSBET_ADMIN_PASSWORD")

def p(label, ok, extra=""):
    status = "PASS ✅" if ok else "FAIL ❌"
    print(f"{status}  {label}")
    if extra:
        print(f"   ↳ {extra}")

def get_json(session, path, **params):
    r = session.get(f"{BASE}{path}", params=params, timeout=30)
    r.raise_for_status()
    return r.json()

def csrf_token(session, path):
    r = session.get(f"{BASE}{path}", timeout=30)
    m = re.search(r'name="csrfmiddlewaretoken" value="([^"]+)"', r.text)
    return m.group(1) if m else ""

def main():
    print("== MarkusBet smoke check ==")
    print(f"BASE_URL = {BASE}\n")
    s = requests.Session()

    # 1) Health
    try:
        j = get_json(s, "/health")
        p("Health endpoint", j.get("status") == "ok", str(j))
    except Exception as e:
        p("Health endpoint", False, str(e))

    # 2) Predictions API partitions the full list
    try:
        everything = get_json(s, "/api/predictions")["predictions"]
        singles = get_json(s, "/api/predictions", category="single")["predictions"]
        parlays = get_json(s, "/api/predictions", category="parlay")["predictions"]
        ok = sorted(x["id"] for x in singles + parlays) == sorted(x["id"] for x in everything)
        p("Single/parlay partition", ok, f"{len(singles)} singles, {len(parlays)} parlays")
    except Exception as e:
        p("Single/parlay partition", False, str(e))

    # 3) Public page renders
    try:
        r = s.get(f"{BASE}/", timeout=30)
        p("Public page", r.status_code == 200 and "PREDICTIONS" in r.text)
    except Exception as e:
        p("Public page", False, str(e))

    # 4) Today-only view
    try:
        r = s.get(f"{BASE}/", params={"today": "1"}, timeout=30)
        p("Public page (today only)", r.status_code == 200)
    except Exception as e:
        p("Public page (today only)", False, str(e))

    if not PASSWORD:
        print("\nSkipping admin checks (set MARKUSBET_ADMIN_PASSWORD).")
        return

    # 5) Admin login
    try:
        token = csrf_token(s, "/admin/")
        r = s.post(f"{BASE}/admin/login", data={"password": PASSWORD, "csrfmiddlewaretoken": token},
                   headers={"Referer": f"{BASE}/admin/"}, timeout=30)
        p("Admin login", r.status_code == 200 and "LOG OUT" in r.text)
    except Exception as e:
        p("Admin login", False, str(e))

    # 6) Import tab (needs FOOTBALL_DATA_API_KEY on the server)
    try:
        r = s.get(f"{BASE}/admin/", params={"tab": "import", "competition": "PL"}, timeout=60)
        ok = r.status_code == 200 and ("CREATE PREDICTION" in r.text or "no scheduled matches" in r.text)
        p("Import Premier League matches", ok, "" if ok else "check FOOTBALL_DATA_API_KEY")
    except Exception as e:
        p("Import Premier League matches", False, str(e))

    # 7) Logout
    try:
        token = csrf_token(s, "/admin/")
        r = s.post(f"{BASE}/admin/logout", data={"csrfmiddlewaretoken": token},
                   headers={"Referer": f"{BASE}/admin/"}, timeout=30)
        p("Admin logout", r.status_code == 200 and "Logged out." in r.text)
    except Exception as e:
        p("Admin logout", False, str(e))

    print("\nDone.\n")
    print("If you see connection errors, ensure the Django server is running on BASE_URL.")

if __name__ == "__main__":
    main()
