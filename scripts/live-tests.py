#!/usr/bin/env python3
# This project was developed with assistance from AI tools.
"""Live smoke suite for the Resident Review API.

Exercises the review endpoints, response schemas and error handling
against a running server that is itself connected to a backend.

Prerequisites:
  - API server running on localhost:8000 with AUTH_DISABLED=true
  - BACKEND_BASE_URL pointing at a backend with at least one pending resident
  - A valid operator token for that backend (--token), unless it runs open

Usage:
  ./scripts/live-tests.py                      # read-only checks
  ./scripts/live-tests.py --token "$TOKEN"     # forward an operator token
  ./scripts/live-tests.py --reject 42          # also reject resident 42 (mutates!)
"""

import argparse
import asyncio
import sys

import httpx

BASE = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Test runner
# ---------------------------------------------------------------------------

PASS = 0
FAIL = 0
ERRORS: list[str] = []
SECTION = ""


def section(name: str):
    global SECTION
    SECTION = name
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}\n")


def ok(name: str, passed: bool, detail: str = ""):
    global PASS, FAIL
    if passed:
        PASS += 1
        print(f"  PASS  {name}")
    else:
        FAIL += 1
        msg = f"[{SECTION}] {name}: {detail}" if detail else f"[{SECTION}] {name}"
        ERRORS.append(msg)
        print(f"  FAIL  {name} -- {detail}")


def has_keys(d: dict, *keys: str) -> bool:
    return all(k in d for k in keys)


def is_problem(r: httpx.Response) -> bool:
    try:
        return has_keys(r.json(), "type", "title", "status", "detail", "request_id", "retryable")
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# 1. Health
# ---------------------------------------------------------------------------

async def test_health(c: httpx.AsyncClient):
    section("Health")

    r = await c.get("/health/")
    ok("GET /health/ returns 200", r.status_code == 200)
    ok("status is ok", r.json().get("status") == "ok")


# ---------------------------------------------------------------------------
# 2. Pending queue
# ---------------------------------------------------------------------------

async def test_queue(c: httpx.AsyncClient) -> list[dict]:
    section("Pending queue")

    r = await c.get("/api/residents/pending", params={"refresh": "true"})
    ok("GET pending returns 200", r.status_code == 200, r.text[:120])
    if r.status_code != 200:
        return []
    body = r.json()
    ok("response has data/pagination/today_count",
       has_keys(body, "data", "pagination", "today_count", "total_pending"))
    data = body["data"]
    ok("every application is pending", all(a.get("status") == "pending" for a in data))
    if data:
        a = data[0]
        ok("application has name/address/contact",
           has_keys(a, "id", "first_name", "last_name", "address", "contact"))

    r = await c.get("/api/residents/pending", params={"filter": "today"})
    ok("today filter returns 200", r.status_code == 200)
    today = r.json().get("data", [])
    ok("today filter is a subset", len(today) <= len(data))
    ok("today_count matches filtered list", r.json().get("today_count") == len(today))

    r = await c.get("/api/residents/pending", params={"search": "zzzz-no-match-zzzz"})
    ok("search with no match is empty", r.status_code == 200 and r.json()["data"] == [])
    return data


# ---------------------------------------------------------------------------
# 3. View + documents
# ---------------------------------------------------------------------------

async def test_view_and_documents(c: httpx.AsyncClient, application_id: str):
    section(f"View + documents (resident {application_id})")

    r = await c.get(f"/api/residents/pending/{application_id}")
    ok("view returns 200", r.status_code == 200, r.text[:120])
    if r.status_code == 200:
        body = r.json()
        ok("view includes documents", has_keys(body.get("documents", {}),
                                               "national_id", "ownership_document"))
        ok("view does not change status", body["data"].get("status") == "pending")

    r = await c.get(f"/api/residents/pending/{application_id}/documents")
    ok("documents returns 200", r.status_code == 200)
    body = r.json()
    ok("documents has retry affordances", has_keys(body, "data", "all_failed", "retryable"))
    states = [body["data"]["national_id"]["status"], body["data"]["ownership_document"]["status"]]
    ok("both documents settled", all(s in ("available", "unavailable") for s in states), str(states))

    r = await c.post(f"/api/residents/pending/{application_id}/documents/national_id/retry")
    ok("retry national_id returns 200", r.status_code == 200)

    r = await c.delete(f"/api/residents/pending/{application_id}/documents")
    ok("cancel returns 200", r.status_code == 200)


# ---------------------------------------------------------------------------
# 4. Permissions
# ---------------------------------------------------------------------------

async def test_permissions(c: httpx.AsyncClient):
    section("Permissions")

    r = await c.get("/api/permissions")
    ok("GET permissions returns 200", r.status_code == 200)
    body = r.json()
    ok("state is loaded or error", body.get("state") in ("loaded", "error"), str(body.get("state")))
    ok("capabilities are tri-state",
       all(v in ("checking", "allowed", "denied") for v in body.get("capabilities", {}).values()))

    r = await c.get("/api/permissions/SOME_UNKNOWN_CAPABILITY")
    ok("unknown capability is denied", r.json().get("state") == "denied")

    r = await c.post("/api/permissions/reload")
    ok("reload returns 200", r.status_code == 200)


# ---------------------------------------------------------------------------
# 5. Error handling
# ---------------------------------------------------------------------------

async def test_error_handling(c: httpx.AsyncClient):
    section("Error handling")

    r = await c.get("/api/residents/pending/does-not-exist-0000")
    ok("unknown resident is 4xx/5xx Problem Details", r.status_code >= 400 and is_problem(r),
       f"{r.status_code}")

    r = await c.post("/api/residents/pending/1/decision", json={"decision": "maybe", "reason": "x"})
    ok("bad verdict returns 422", r.status_code == 422)
    ok("422 is Problem Details", is_problem(r))

    r = await c.post("/api/residents/pending/bulk-decision",
                     json={"application_ids": [], "decision": "approved", "reason": "x"})
    ok("empty bulk selection returns 422", r.status_code == 422)

    r = await c.get("/api/residents/pending/1/documents/passport")
    ok("unknown route returns 404 or 405", r.status_code in (404, 405))


# ---------------------------------------------------------------------------
# 6. Decision (opt-in, mutates the backend)
# ---------------------------------------------------------------------------

async def test_reject(c: httpx.AsyncClient, application_id: str):
    section(f"Reject resident {application_id}")

    payload = {"decision": "rejected", "reason": "Live test rejection"}
    r = await c.post(f"/api/residents/pending/{application_id}/decision", json=payload)
    ok("reject returns 200", r.status_code == 200, r.text[:120])
    if r.status_code != 200:
        return
    ok("status is rejected", r.json().get("status") == "rejected")

    r = await c.get("/api/residents/pending")
    ok("resident left the queue", application_id not in {a["id"] for a in r.json()["data"]})

    r = await c.post(f"/api/residents/pending/{application_id}/decision", json=payload)
    ok("second decision is 409", r.status_code == 409)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

async def main():
    parser = argparse.ArgumentParser(description="Live smoke suite for the Resident Review API")
    parser.add_argument("--base", default=BASE, help="API base URL")
    parser.add_argument("--token", help="Operator bearer token forwarded to the backend")
    parser.add_argument("--reject", metavar="ID",
                        help="Also reject this resident (mutates backend state)")
    args = parser.parse_args()

    print("=" * 60)
    print("  LIVE TEST SUITE -- Resident Review API")
    print("=" * 60)

    headers = {"Authorization": f"Bearer {args.token}"} if args.token else {}
    async with httpx.AsyncClient(base_url=args.base, headers=headers, timeout=45) as c:

        # Pre-flight: make sure server is up
        try:
            r = await c.get("/health/")
            if r.status_code != 200:
                print(f"\n  Server returned {r.status_code} on /health/ -- is it running?")
                sys.exit(2)
        except httpx.ConnectError:
            print(f"\n  Cannot connect to server at {args.base} -- is it running?")
            sys.exit(2)

        await test_health(c)
        pending = await test_queue(c)
        if pending:
            await test_view_and_documents(c, pending[0]["id"])
        await test_permissions(c)
        await test_error_handling(c)
        if args.reject:
            await test_reject(c, args.reject)

    # Summary
    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {PASS} passed, {FAIL} failed")
    print(f"{'=' * 60}")

    if ERRORS:
        print("\nFailures:")
        for e in ERRORS:
            print(f"  - {e}")

    sys.exit(0 if FAIL == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
