"""
routers/amybd.py

AmyBD proxy routes. Each route builds one CMND payload and hands it to the
SessionExecutor, which deals with login, the authid header and re-login.

/login             - Force a fresh login
/balance           - Account balance
/airport           - Airport / route lookup by key
/flight/oneway     - One-way search (body passed through)
/flight/roundtrip  - Round-trip search (body passed through)
/flight/combo      - Combo search (body passed through)
/checksession      - Is the cached session still accepted
/pricecombo        - Price a combination of up to two itineraries
/ping              - SignalR hub ping (no session)
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from errors import ValidationError
from providers.amybd import (
    BALANCE_COMMAND,
    CHECK_SESSION_COMMAND,
    FLIGHT_COMBO_COMMAND,
    FLIGHT_SEARCH_COMMAND,
    FLIGHT_SEARCH_OPEN_COMMAND,
    PRICE_COMBO_COMMAND,
    ROUTE_FROM_COMMAND,
    signalr_ping,
)
from services.session_executor import SessionExecutor, get_executor

router = APIRouter()


def _ok(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


# =====================================================================
# SECTION: SESSION ROUTES
# =====================================================================

@router.post("/login")
def login(executor: SessionExecutor = Depends(get_executor)):
    session = executor.authenticator.login()
    return {"success": True, "session": session.model_dump()}


@router.get("/checksession")
def check_session(executor: SessionExecutor = Depends(get_executor)):
    """Upstream success flag only. A second expiry after re-login shows up as false."""
    data = executor.execute({"CMND": CHECK_SESSION_COMMAND})
    success = bool(data.get("success", True)) if isinstance(data, dict) else True
    return {"success": success}


@router.get("/ping")
def ping():
    return _ok(signalr_ping())


# =====================================================================
# SECTION: LOOKUP ROUTES
# =====================================================================

@router.get("/balance")
def balance(executor: SessionExecutor = Depends(get_executor)):
    return _ok(executor.execute({"CMND": BALANCE_COMMAND}))


@router.get("/airport")
def airport(key: Optional[str] = None, executor: SessionExecutor = Depends(get_executor)):
    if not key:
        raise ValidationError("Missing 'key' query param")

    payload = {"CMND": ROUTE_FROM_COMMAND, "dom": 3, "pref": 0, "skey": key}
    return _ok(executor.execute(payload))


# =====================================================================
# SECTION: FLIGHT SEARCH ROUTES
# The request body is opaque; only CMND and is_combo are forced.
# =====================================================================

def _search_payload(command: str, body: Optional[Dict[str, Any]], is_combo: int) -> Dict[str, Any]:
    return {**(body or {}), "CMND": command, "is_combo": is_combo}


@router.post("/flight/oneway")
def flight_oneway(
    body: Optional[Dict[str, Any]] = Body(default=None),
    executor: SessionExecutor = Depends(get_executor),
):
    return _ok(executor.execute(_search_payload(FLIGHT_SEARCH_OPEN_COMMAND, body, 0)))


@router.post("/flight/roundtrip")
def flight_roundtrip(
    body: Optional[Dict[str, Any]] = Body(default=None),
    executor: SessionExecutor = Depends(get_executor),
):
    return _ok(executor.execute(_search_payload(FLIGHT_SEARCH_COMMAND, body, 0)))


@router.post("/flight/combo")
def flight_combo(
    body: Optional[Dict[str, Any]] = Body(default=None),
    executor: SessionExecutor = Depends(get_executor),
):
    return _ok(executor.execute(_search_payload(FLIGHT_COMBO_COMMAND, body, 1)))


# =====================================================================
# SECTION: PRICING ROUTES
# =====================================================================

@router.get("/pricecombo")
def price_combo(
    sid1: Optional[str] = None,
    aid1: Optional[str] = None,
    sid2: Optional[str] = None,
    aid2: str = "",
    disp: Optional[str] = None,
    executor: SessionExecutor = Depends(get_executor),
):
    if not sid1 or not aid1:
        raise ValidationError("Missing required query params: sid1 and aid1")

    payload = {
        "CMND": PRICE_COMBO_COMMAND,
        "sid1": sid1,
        "sid2": sid2 if sid2 is not None else 0,
        "aid1": aid1,
        "aid2": aid2,
        "disp": disp if disp is not None else 1,
    }
    return _ok(executor.execute(payload))
