from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from client.errors import NetworkError, RequestRejected
from client.shop_client import ShopClient
from state.models import Identity
from utils.logger import get_logger
from utils.storage import SESSION_KEY, LocalStorage

_logger = get_logger(__name__)

NETWORK_ERROR = "Network error. Please try again."
MIN_PASSWORD_LENGTH = 6


class SessionState:
    """
    The signed-in identity, mirrored to durable storage.

    Everything here is advisory: the backend has no session and gates admin
    routes on its own, from the request header alone.
    """

    def __init__(self, storage: LocalStorage, client: ShopClient) -> None:
        self._storage = storage
        self._client = client
        self.identity: Optional[Identity] = self._rehydrate()
        self.error: Optional[str] = None
        self.loading = False

    def _rehydrate(self) -> Optional[Identity]:
        raw = self._storage.get_item(SESSION_KEY)
        if not raw:
            return None
        try:
            return Identity.model_validate_json(raw)
        except ValidationError:
            _logger.debug("Discarding unreadable stored session")
            return None

    def _set_identity(self, identity: Optional[Identity]) -> None:
        self.identity = identity
        if identity:
            self._storage.set_item(SESSION_KEY, identity.model_dump_json())
        else:
            self._storage.remove_item(SESSION_KEY)

    @property
    def email(self) -> Optional[str]:
        return self.identity.email if self.identity else None

    @property
    def is_admin(self) -> bool:
        return bool(self.identity and self.identity.is_admin)

    def can_access_dashboard(self) -> bool:
        """Client-side route guard for the admin dashboard."""
        return self.identity is not None and self.identity.is_admin

    async def login(self, email: str, password: str) -> bool:
        """Return True and store the identity on success; else set `error`."""
        self.error = None
        self.loading = True
        try:
            raw = await self._client.login(email, password)
            self._set_identity(Identity.from_login(raw))
            _logger.info(f"Signed in as {self.identity.email}")
            return True
        except RequestRejected as e:
            self.error = e.text or "Invalid email or password"
        except (NetworkError, KeyError, TypeError, ValidationError):
            # an answer we cannot read counts as no answer
            self.error = NETWORK_ERROR
        finally:
            self.loading = False
        return False

    def logout(self) -> None:
        """Forget the identity. Always succeeds."""
        self.identity = None
        self.error = None
        self._storage.remove_item(SESSION_KEY)


class RegistrationForm:
    """Sign-up: validates locally, then creates the account."""

    def __init__(self, client: ShopClient) -> None:
        self._client = client
        self.error: Optional[str] = None
        self.success: Optional[str] = None
        self.loading = False

    @staticmethod
    def validate(name: str, email: str, password: str, confirm: str) -> Optional[str]:
        """Return the first validation message, or None when the input is fine."""
        if not (name or "").strip() or not (email or "").strip() or not password:
            return "Please fill out all required fields."
        if len(password) < MIN_PASSWORD_LENGTH:
            return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        if password != confirm:
            return "Passwords do not match."
        return None

    async def submit(self, name: str, email: str, password: str, confirm: str) -> bool:
        self.error = None
        self.success = None

        invalid = self.validate(name, email, password, confirm)
        if invalid:
            self.error = invalid
            return False

        self.loading = True
        try:
            await self._client.register(name, email, password)
        except RequestRejected as e:
            self.error = e.text or "Registration failed"
            return False
        except NetworkError:
            self.error = NETWORK_ERROR
            return False
        finally:
            self.loading = False

        self.success = "Account created. Redirecting to sign in..."
        return True
