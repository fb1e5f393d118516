"""
config.py

Single source of truth for:
- Environment variable reads
- AmyBD credential and endpoint settings
- Session file location
- Expiry detection terms

Nothing here should contain route handlers or business logic beyond config resolution.
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


# =====================================================================
# SECTION: ENV VARS
# =====================================================================

PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# AmyBD
AMY_API_URL = os.getenv("AMY_API_URL", "https://www.amybd.com/atapi.aspx")
AMY_PING_URL = os.getenv("AMY_PING_URL", "https://www.amybd.com/laser/signalr/ping")
AMY_USER = os.getenv("AMY_USER")
AMY_PASS = os.getenv("AMY_PASS")
AMY_DVID = os.getenv("AMY_DVID")
AMY_CID = os.getenv("AMY_CID")
AMY_TIMEOUT_SECONDS = float(os.getenv("AMY_TIMEOUT_SECONDS", "30"))

# Session persistence
SESSION_FILE = os.getenv("SESSION_FILE", "session.json")

if not (AMY_USER and AMY_PASS and AMY_DVID and AMY_CID):
    print("WARNING: AMY_USER / AMY_PASS / AMY_DVID / AMY_CID are not all set, logins will fail")


# =====================================================================
# SECTION: EXPIRY DETECTION
# Upstream does not return a dedicated error code for a dead session, only
# a success=false flag plus free text. These are the substrings we treat
# as "log in again".
# =====================================================================

DEFAULT_EXPIRY_TERMS = ("login", "expired", "unauthorized", "invalid")


def get_expiry_terms() -> List[str]:
    """Read AMY_EXPIRY_TERMS as a comma separated list, falling back to the defaults."""
    raw = os.getenv("AMY_EXPIRY_TERMS")
    if not raw:
        return list(DEFAULT_EXPIRY_TERMS)
    terms = [t.strip().lower() for t in raw.split(",") if t.strip()]
    return terms or list(DEFAULT_EXPIRY_TERMS)
