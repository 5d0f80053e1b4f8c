"""Local client storage for the last used identity."""
import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config import STATE_FILE
from .logging_config import configure_logging
from .models import SavedIdentity

STORAGE_KEY = "chatapp_last_user"

logger = configure_logging()


class IdentityStore:
    """JSON file holding ``{"chatapp_last_user": {id, name, lastSeen}}``.

    Every failure is logged and treated as "nothing saved"; callers never see
    an exception from here.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else STATE_FILE

    def _load_state(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as f:
            state = json.load(f)
        return state if isinstance(state, dict) else {}

    def _save_state(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def is_available(self) -> bool:
        """Probe that the state directory accepts writes."""
        probe = self.path.with_name(self.path.name + ".probe")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            probe.write_text("test", encoding="utf-8")
            probe.unlink()
        except OSError:
            return False
        return True

    def save_last_user(self, identity: SavedIdentity) -> None:
        try:
            state = self._load_state()
        except (OSError, ValueError):
            state = {}
        state[STORAGE_KEY] = identity.to_storage()
        try:
            self._save_state(state)
        except OSError as exc:
            logger.warning("IDENTITY_SAVE_FAIL path=%s error=%s", self.path, exc)

    def get_last_user(self) -> Optional[SavedIdentity]:
        try:
            raw = self._load_state().get(STORAGE_KEY)
        except (OSError, ValueError) as exc:
            logger.warning("IDENTITY_LOAD_FAIL path=%s error=%s", self.path, exc)
            return None
        if not isinstance(raw, dict):
            return None
        try:
            return SavedIdentity.model_validate(raw)
        except ValidationError:
            logger.warning("IDENTITY_INVALID path=%s", self.path)
            return None

    def remove_last_user(self) -> None:
        try:
            state = self._load_state()
            if state.pop(STORAGE_KEY, None) is not None:
                self._save_state(state)
        except (OSError, ValueError) as exc:
            logger.warning("IDENTITY_REMOVE_FAIL path=%s error=%s", self.path, exc)
