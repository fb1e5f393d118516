"""
services/session_executor.py

Session-aware request execution against AmyBD:
- Expiry detection (ExpiryPredicate)
- SessionExecutor: load session -> attach authid -> call -> re-login once on expiry
- Startup warm-up (warm_up_session)
- Wiring for the routers (get_executor)

Retry rules:
- Transport failures (RequestError) are never retried. They are not session problems.
- An expiry signal triggers exactly one re-login and one repeat of the call.
  The repeat runs with allow_retry=False, so a second expiry is returned as-is.

Concurrent callers are not coordinated. Two requests that both see a dead
token will both log in; the store keeps whichever record was written last.
"""

import logging
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, Optional

from config import SESSION_FILE, get_expiry_terms
from errors import ProxyError
from providers.amybd import BALANCE_COMMAND, Authenticator, amybd_post, credential_from_env
from services.session_store import SessionStore

logger = logging.getLogger(__name__)


# =====================================================================
# SECTION: EXPIRY DETECTION
# =====================================================================

class ExpiryPredicate:
    """
    True when a response is an explicit failure (success is exactly False)
    whose message mentions one of the expiry terms, case-insensitive.
    """

    def __init__(self, terms: Optional[Iterable[str]] = None):
        source = get_expiry_terms() if terms is None else terms
        self.terms = [str(t).lower() for t in source if str(t).strip()]

    def __call__(self, response: Any) -> bool:
        if not isinstance(response, dict):
            return False
        if response.get("success") is not False:
            return False
        text = str(response.get("message") or response.get("error") or "").lower()
        if not text:
            return False
        return any(term in text for term in self.terms)


# =====================================================================
# SECTION: EXECUTOR
# =====================================================================

class SessionExecutor:
    def __init__(
        self,
        store: SessionStore,
        authenticator: Authenticator,
        is_expired: Optional[Callable[[Any], bool]] = None,
        transport: Callable[..., Any] = amybd_post,
    ):
        self.store = store
        self.authenticator = authenticator
        self.is_expired = is_expired or ExpiryPredicate()
        self.transport = transport

    def execute(self, payload: Dict[str, Any], allow_retry: bool = True) -> Any:
        """
        Run one AmyBD command with the cached session and return the raw body.

        Raises AuthError if a login is needed and fails, RequestError on
        transport failure.
        """
        command = payload.get("CMND")

        session = self.store.load()
        if session is None or not session.is_valid():
            logger.info(f"[session] no saved session, logging in before CMND={command}")
            session = self.authenticator.login()

        response = self.transport(payload, authid=session.authid)

        if not self.is_expired(response):
            return response

        if allow_retry:
            logger.warning(f"[session] session expired on CMND={command}, logging in again")
            self.authenticator.login()
            return self.execute(payload, allow_retry=False)

        logger.warning(
            f"[session] CMND={command} still reports an expired session after re-login, "
            f"returning upstream response as-is"
        )
        return response


# =====================================================================
# SECTION: STARTUP
# =====================================================================

def warm_up_session(executor: SessionExecutor) -> bool:
    """
    Make sure a usable session exists before traffic arrives.

    Validates a stored session with a balance lookup; logs in when there is
    none or it is rejected. Never raises: on failure it logs and returns
    False so the app still starts.
    """
    try:
        session = executor.store.load()
        if session is not None and session.is_valid():
            try:
                response = executor.execute({"CMND": BALANCE_COMMAND}, allow_retry=False)
                if not executor.is_expired(response):
                    logger.info("[startup] Session validated")
                    return True
            except ProxyError as e:
                logger.info(f"[startup] Session check failed: {e.message}")
            logger.info("[startup] Session invalid. Logging in again...")
        else:
            logger.info("[startup] No active session found. Logging in...")

        executor.authenticator.login()
        return True
    except (ProxyError, OSError) as e:
        logger.warning(f"[startup] Failed to initialize session, serving anyway (login required manually): {e}")
        return False


# =====================================================================
# SECTION: WIRING
# =====================================================================

@lru_cache()
def get_executor() -> SessionExecutor:
    store = SessionStore(SESSION_FILE)
    authenticator = Authenticator(store, credential_from_env())
    return SessionExecutor(store, authenticator)
