import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..api.models import Credential

logger = logging.getLogger(__name__)


class TokenStore:
    def __init__(self, path: Union[str, Path] = "tokens.json"):
        """
        Initialize token store.

        Args:
            path: Location of the JSON credential file
        """
        self.path = Path(path)

    def load(self) -> Optional[Credential]:
        """
        Load the persisted credential.

        Returns:
            Credential, or None if the file is missing or malformed

        Never raises: a broken cache only means re-authenticating.
        """
        if not self.path.exists():
            return None

        try:
            record = json.loads(self.path.read_text(encoding="utf-8"))
            return Credential.model_validate(record)
        except ValidationError:
            logger.warning(f"Ignoring incomplete credential record in {self.path}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading {self.path}: {e}")
        return None

    def save(self, credential: Credential) -> None:
        """
        Persist a credential, replacing the whole record.

        Args:
            credential: Credential to store

        Logic:
        1. Write the record to a temp file beside the target
        2. Atomically rename it over the target
        3. Log and swallow any failure
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(credential.to_record(), handle, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.error(f"Error saving {self.path}: {e}")
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def clear(self) -> None:
        """Remove the persisted credential."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error removing {self.path}: {e}")
