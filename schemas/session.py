"""schemas/session.py - Pydantic models for the AmyBD credential and cached session."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Credential(BaseModel):
    """
    Process-wide login identity. Read from env once at startup.
    Never written to the session file.
    """
    model_config = ConfigDict(frozen=True)

    user: str = ""
    password: str = Field("", repr=False)
    device_id: str = ""
    client_id: str = ""

    def is_complete(self) -> bool:
        return bool(self.user and self.password and self.device_id and self.client_id)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "USER": self.user,
            "PASS": self.password,
            "DVID": self.device_id,
            "CID": self.client_id,
        }


class SessionRecord(BaseModel):
    """
    Raw upstream login response. Only authid is interpreted; every other
    field the upstream sends is kept as-is so the file mirrors the response.
    """
    model_config = ConfigDict(extra="allow")

    authid: str = ""

    @field_validator("authid", mode="before")
    @classmethod
    def _coerce_authid(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def is_valid(self) -> bool:
        return bool(self.authid)

    def token_preview(self) -> str:
        return f"{self.authid[:6]}..." if self.authid else "<none>"
