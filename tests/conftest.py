from typing import Any, Dict, List, Optional

import pytest

from errors import AuthError
from schemas.session import Credential, SessionRecord
from services.session_executor import ExpiryPredicate, SessionExecutor
from services.session_store import SessionStore


_NO_JSON = object()


class FakeResponse:
    """Stand-in for requests.Response: status_code, text and json()."""

    def __init__(self, json_data: Any = _NO_JSON, status_code: int = 200, text: str = ""):
        self._json = json_data
        self.status_code = status_code
        self.text = text

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._json


def no_json(status_code: int = 200, text: str = "<html>oops</html>") -> FakeResponse:
    return FakeResponse(status_code=status_code, text=text)


class FakeUpstream:
    """Transport double: records every call and replays queued results."""

    def __init__(self, results: Optional[List[Any]] = None):
        self.results = list(results or [])
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, payload: Dict[str, Any], authid: Optional[str] = None):
        self.calls.append({"payload": dict(payload), "authid": authid})
        if not self.results:
            return {"success": True}
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeAuthenticator:
    """Writes authid token-1, token-2, ... to the store on each login."""

    def __init__(self, store: SessionStore, fail_with: Optional[Exception] = None):
        self.store = store
        self.fail_with = fail_with
        self.logins = 0

    def login(self) -> SessionRecord:
        if self.fail_with is not None:
            raise self.fail_with
        self.logins += 1
        record = SessionRecord(authid=f"token-{self.logins}", success=True)
        self.store.save(record)
        return record


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(str(tmp_path / "session.json"))


@pytest.fixture
def credential() -> Credential:
    return Credential(user="agent", password="secret", device_id="dev-1", client_id="cid-1")


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def authenticator(store) -> FakeAuthenticator:
    return FakeAuthenticator(store)


@pytest.fixture
def executor(store, authenticator, upstream) -> SessionExecutor:
    return SessionExecutor(
        store,
        authenticator,
        is_expired=ExpiryPredicate(["login", "expired", "unauthorized", "invalid"]),
        transport=upstream,
    )


@pytest.fixture
def failing_authenticator(store) -> FakeAuthenticator:
    return FakeAuthenticator(store, fail_with=AuthError("Login failed: bad password"))
