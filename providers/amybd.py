"""
providers/amybd.py

AmyBD (atapi.aspx) integration:
- Command identifiers (CMND values)
- Low-level HTTP helpers (amybd_post, signalr_ping)
- Authenticator (credential exchange -> SessionRecord)

Every AmyBD operation is a POST of a JSON object to a single endpoint; the
CMND field picks the operation. Authenticated calls carry the session token
in the `authid` header, never in the body.
"""

import logging
import time
from typing import Any, Dict, Optional

import requests

from config import (
    AMY_API_URL,
    AMY_CID,
    AMY_DVID,
    AMY_PASS,
    AMY_PING_URL,
    AMY_TIMEOUT_SECONDS,
    AMY_USER,
)
from errors import AuthError, RequestError
from schemas.session import Credential, SessionRecord

logger = logging.getLogger(__name__)


# =====================================================================
# SECTION: COMMANDS
# =====================================================================

LOGIN_COMMAND = "_LOGINONLY_"
BALANCE_COMMAND = "_GETBALANCE_"
ROUTE_FROM_COMMAND = "_ROUTEFROM_"
FLIGHT_SEARCH_OPEN_COMMAND = "_FLIGHTSEARCHOPEN_"
FLIGHT_SEARCH_COMMAND = "_FLIGHTSEARCH_"
FLIGHT_COMBO_COMMAND = "_FLIGHTCOMBO_"
CHECK_SESSION_COMMAND = "_CHKSESSION_"
PRICE_COMBO_COMMAND = "_PRICECOMBO_"


# =====================================================================
# SECTION: AUTH HELPERS
# =====================================================================

def credential_from_env() -> Credential:
    return Credential(
        user=AMY_USER or "",
        password=AMY_PASS or "",
        device_id=AMY_DVID or "",
        client_id=AMY_CID or "",
    )


def _amybd_headers(authid: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if authid:
        headers["authid"] = authid
    return headers


def _upstream_message(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    msg = data.get("message") or data.get("error")
    return str(msg) if msg else None


# =====================================================================
# SECTION: LOW LEVEL HTTP HELPERS
# =====================================================================

def amybd_post(payload: Dict[str, Any], authid: Optional[str] = None) -> Any:
    """
    POST one command to AmyBD and return the decoded JSON body untouched.

    Raises RequestError for anything that is not a readable JSON answer:
    connection errors, timeouts, HTTP >= 400, non-JSON bodies.
    A success=false body is NOT an error here; callers decide what it means.
    """
    command = payload.get("CMND")
    payload_keys = sorted(k for k in payload.keys() if k not in ("USER", "PASS"))
    logger.info(f"[amybd] POST CMND={command} payload_keys={payload_keys} authed={bool(authid)}")

    try:
        res = requests.post(
            AMY_API_URL,
            json=payload,
            headers=_amybd_headers(authid),
            timeout=AMY_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"[amybd] POST CMND={command} transport failure: {e}")
        raise RequestError(str(e) or "AmyBD request failed") from e

    if res.status_code >= 400:
        try:
            detail = _upstream_message(res.json())
        except ValueError:
            detail = None
        msg = detail or f"AmyBD {command} failed: {res.status_code} {(res.text or '')[:300]}"
        logger.error(f"[amybd] POST CMND={command} status={res.status_code} message={msg}")
        raise RequestError(msg)

    try:
        data = res.json()
    except ValueError as e:
        body_preview = (res.text or "")[:300].replace("\n", "\\n")
        logger.error(f"[amybd] POST CMND={command} non-JSON body={body_preview}")
        raise RequestError(f"AmyBD {command} returned a non-JSON response") from e

    if isinstance(data, dict) and data.get("success") is False:
        logger.info(f"[amybd] POST CMND={command} success=false message={_upstream_message(data)}")

    return data


def signalr_ping() -> Any:
    """
    Direct keep-alive ping against the SignalR hub. Not session based.
    Returns the JSON body, or the raw text when the hub answers with plain text.
    """
    params = {"_": int(time.time() * 1000)}

    try:
        res = requests.get(
            AMY_PING_URL,
            params=params,
            headers=_amybd_headers(),
            timeout=AMY_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"[amybd] ping transport failure: {e}")
        raise RequestError(str(e) or "AmyBD ping failed") from e

    if res.status_code >= 400:
        raise RequestError(f"AmyBD ping failed: {res.status_code} {(res.text or '')[:300]}")

    try:
        return res.json()
    except ValueError:
        return res.text


# =====================================================================
# SECTION: AUTHENTICATOR
# =====================================================================

class Authenticator:
    """
    Exchanges the process credential for a fresh session.

    Always uses the login-only command so authentication never piggybacks on
    a business request. The new record is written to the store before it is
    returned.
    """

    def __init__(self, store, credential: Optional[Credential] = None):
        self.store = store
        self.credential = credential or credential_from_env()

    def login(self) -> SessionRecord:
        if not self.credential.is_complete():
            raise AuthError("Login failed: AmyBD credentials are not configured")

        payload = {**self.credential.to_payload(), "CMND": LOGIN_COMMAND}

        try:
            data = amybd_post(payload)
        except RequestError as e:
            raise AuthError(f"Login failed: {e.message}") from e

        if not isinstance(data, dict):
            raise AuthError("Login failed: unexpected login response")

        if "success" in data and not data["success"]:
            raise AuthError(f"Login failed: {_upstream_message(data) or 'Unknown error'}")

        record = SessionRecord.model_validate(data)
        if not record.is_valid():
            raise AuthError("Login failed: authid not found in login response")

        self.store.save(record)
        logger.info(f"[amybd] login success authid={record.token_preview()}")
        return record
