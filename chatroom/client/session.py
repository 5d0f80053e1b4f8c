"""Client identity/session state machine shared by the console and GUI front ends."""
from enum import Enum
from typing import Callable, List, Optional

from ..shared.errors import InvalidInput
from ..shared.validation import validate_name
from .api import UNEXPECTED_ERROR, APIClient, ChatClientError, GraphQLRequestError
from .logging_config import configure_logging
from .models import SavedIdentity, User
from .storage import IdentityStore

logger = configure_logging()

NAME_REQUIRED = "Please enter your name."
SAVED_IDENTITY_INVALID = "This user no longer exists. Please create a new user."
SAVED_IDENTITY_CHECK_FAILED = "Could not verify the user. Please try again later."


class AppState(str, Enum):
    LOGIN = "login"
    SELECTION = "selection"
    CHAT = "chat"


class SessionController:
    """Tracks which screen the client shows and who the current user is.

    Transitions:

    * ``start``: no usable cache -> LOGIN, saved identity -> SELECTION
    * SELECTION ``use_saved_identity``: revalidate with the server -> CHAT,
      or stay in SELECTION with ``error`` set
    * SELECTION ``create_new`` -> LOGIN; ``delete_saved`` clears cache -> LOGIN
    * LOGIN ``register`` success -> identity saved -> CHAT
    * CHAT ``logout`` -> SELECTION when an identity is saved, else LOGIN

    Failures set ``error`` and leave the state untouched.
    """

    def __init__(self, api: APIClient, store: IdentityStore):
        self.api = api
        self.store = store
        self.state = AppState.LOGIN
        self.current_user: Optional[User] = None
        self.saved_identity: Optional[SavedIdentity] = None
        self.error = ""
        self.busy = False
        self._listeners: List[Callable[["SessionController"], None]] = []

    def add_listener(self, callback: Callable[["SessionController"], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback(self)
            except Exception:
                logger.exception("SESSION_LISTENER_FAIL state=%s", self.state.value)

    def _transition(self, state: AppState) -> None:
        logger.info("SESSION_STATE from=%s to=%s", self.state.value, state.value)
        self.state = state

    def start(self) -> AppState:
        if not self.store.is_available():
            self.saved_identity = None
            self._transition(AppState.LOGIN)
        else:
            self.saved_identity = self.store.get_last_user()
            self._transition(AppState.SELECTION if self.saved_identity else AppState.LOGIN)
        self._notify()
        return self.state

    def use_saved_identity(self) -> bool:
        if self.state is not AppState.SELECTION or not self.saved_identity:
            return False
        self.error = ""
        self.busy = True
        try:
            user = self.api.get_user(self.saved_identity.id)
            if user is None:
                logger.info("IDENTITY_REJECTED user_id=%s", self.saved_identity.id)
                self.error = SAVED_IDENTITY_INVALID
                return False
            user = self.api.update_last_seen(user.id)
        except ChatClientError as exc:
            logger.warning("IDENTITY_CHECK_FAIL user_id=%s error=%s", self.saved_identity.id, exc)
            self.error = SAVED_IDENTITY_CHECK_FAILED
            return False
        except Exception:
            logger.exception("IDENTITY_CHECK_UNEXPECTED user_id=%s", self.saved_identity.id)
            self.error = SAVED_IDENTITY_CHECK_FAILED
            return False
        finally:
            self.busy = False
            self._notify()

        self.current_user = user
        self.saved_identity = SavedIdentity.from_user(user)
        self.store.save_last_user(self.saved_identity)
        self._transition(AppState.CHAT)
        self._notify()
        return True

    def create_new(self) -> None:
        if self.state is not AppState.SELECTION:
            return
        self.error = ""
        self._transition(AppState.LOGIN)
        self._notify()

    def delete_saved(self) -> None:
        if self.state is not AppState.SELECTION:
            return
        self.store.remove_last_user()
        self.saved_identity = None
        self.error = ""
        self._transition(AppState.LOGIN)
        self._notify()

    def register(self, name: str) -> bool:
        if self.state is not AppState.LOGIN:
            return False
        if not name or not name.strip():
            self.error = NAME_REQUIRED
            self._notify()
            return False
        try:
            validated = validate_name(name)
        except InvalidInput as exc:
            self.error = exc.message
            self._notify()
            return False

        self.error = ""
        self.busy = True
        try:
            user = self.api.create_user(validated)
        except GraphQLRequestError as exc:
            self.error = exc.message
            return False
        except ChatClientError as exc:
            logger.warning("REGISTER_FAIL name=%s error=%s", validated, exc)
            self.error = str(exc)
            return False
        except Exception:
            logger.exception("REGISTER_UNEXPECTED name=%s", validated)
            self.error = UNEXPECTED_ERROR
            return False
        finally:
            self.busy = False
            self._notify()

        logger.info("REGISTER_SUCCESS user_id=%s name=%s", user.id, user.name)
        self.saved_identity = SavedIdentity.from_user(user)
        self.store.save_last_user(self.saved_identity)
        self.current_user = user
        self._transition(AppState.CHAT)
        self._notify()
        return True

    def logout(self) -> None:
        if self.state is not AppState.CHAT:
            return
        logger.info("LOGOUT user_id=%s", self.current_user.id if self.current_user else None)
        self.current_user = None
        self._transition(AppState.SELECTION if self.saved_identity else AppState.LOGIN)
        self._notify()
