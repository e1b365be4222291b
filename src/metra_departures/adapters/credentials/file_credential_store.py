"""File-backed storage for the realtime API token."""

import logging
import os
from pathlib import Path

from metra_departures.domain.ports.credential_store import CredentialStore

logger = logging.getLogger(__name__)

TOKEN_FILE_MODE = 0o600


class FileCredentialStore(CredentialStore):
    """Keeps the token in a single file readable only by its owner.

    The file lives outside the schedule cache so clearing the cache never
    removes the token.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    def save(self, token: str) -> bool:
        token = token.strip()
        if not token:
            return False
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, TOKEN_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(token)
            # O_CREAT ignores the mode when the file already exists
            os.chmod(self._path, TOKEN_FILE_MODE)
        except OSError as e:
            logger.error(f"Failed to save API token to {self._path}: {e}")
            return False
        logger.info("API token saved")
        return True

    def load(self) -> str | None:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to read API token from {self._path}: {e}")
            return None
        return token or None

    def delete(self) -> None:
        self._path.unlink(missing_ok=True)
        logger.info("API token deleted")
