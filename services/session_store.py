"""
services/session_store.py

Durable single-record storage for the current AmyBD session.

The record lives in one JSON file (SESSION_FILE). Writes go to a temp file in
the same directory and are moved into place with os.replace, so a reader
always sees either the previous record or the new one, never half of each.

No cross-process locking: one process, one writer.
"""

import json
import logging
import os
import tempfile
from typing import Optional

from config import SESSION_FILE
from schemas.session import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path: str = SESSION_FILE):
        self.path = os.path.abspath(path)

    def load(self) -> Optional[SessionRecord]:
        """Return the stored record, or None if there is none or it cannot be parsed."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"[session] ignoring unreadable session file {self.path}: {e}")
            return None

        if not isinstance(raw, dict):
            logger.warning(f"[session] ignoring session file {self.path}: not a JSON object")
            return None

        try:
            return SessionRecord.model_validate(raw)
        except ValueError as e:
            logger.warning(f"[session] ignoring malformed session record: {e}")
            return None

    def save(self, record: SessionRecord) -> None:
        """Atomically replace the stored record. I/O errors propagate."""
        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)

        data = json.dumps(record.model_dump(), indent=2)

        fd, tmp_path = tempfile.mkstemp(
            dir=directory,
            prefix=os.path.basename(self.path) + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

        logger.info(f"[session] saved session authid={record.token_preview()} path={self.path}")
