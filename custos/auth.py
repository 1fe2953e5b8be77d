"""Supabase Auth client and the auth gate in front of the dashboard.

The session is persisted in the local key/value table so that a login
survives between CLI invocations.
"""

import json
import logging
import sqlite3
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import requests

from custos.config import SupabaseSettings
from custos.errors import AuthError, ValidationError
from custos.store.schema import get_item, remove_item, set_item

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_session"
SIGN_UP_MESSAGE = "Conta criada! Agora faça login."

# Refresh slightly before the provider's expiry
EXPIRY_MARGIN_SECONDS = 30


class AuthEvent(str, Enum):
    """Session change notifications."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthState(str, Enum):
    """States of the auth gate."""

    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Session:
    """An authenticated session issued by the provider."""

    access_token: str
    refresh_token: str
    expires_at: int
    user_id: str
    email: str | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at - EXPIRY_MARGIN_SECONDS <= now


AuthListener = Callable[[AuthEvent, Session | None], None]


def session_from_token_response(payload: dict[str, Any], now: float) -> Session:
    """Build a session from a /token response.

    Raises:
        AuthError: If the response has no access token.
    """
    if not payload.get("access_token"):
        raise AuthError("Resposta de autenticação sem token")

    user = payload.get("user") or {}
    expires_at = payload.get("expires_at")
    if expires_at is None:
        expires_at = int(now) + int(payload.get("expires_in", 3600))

    return Session(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token", ""),
        expires_at=int(expires_at),
        user_id=str(user.get("id", "")),
        email=user.get("email"),
    )


def provider_message(response: requests.Response) -> str:
    """Get the raw error text returned by the auth provider."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ("msg", "error_description", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return str(payload)


def validate_credentials(email: str, password: str) -> None:
    """Reject credentials the login form would not submit.

    Raises:
        ValidationError: If the email is too short or the password has
            fewer than 6 characters.
    """
    if len(email.strip()) <= 3:
        raise ValidationError("Informe um email válido")
    if len(password) < 6:
        raise ValidationError("A senha precisa ter no mínimo 6 caracteres")


class AuthClient:
    """Email/password auth against Supabase GoTrue."""

    def __init__(
        self,
        settings: SupabaseSettings,
        db_path: Path | None = None,
        http: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings
        self.db_path = db_path
        self.http = http or requests.Session()
        self.clock = clock
        self._listeners: list[AuthListener] = []

    def _post(
        self,
        path: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        headers = {
            "apikey": self.settings.anon_key,
            "Authorization": f"Bearer {token or self.settings.anon_key}",
            "Content-Type": "application/json",
        }
        try:
            response = self.http.post(
                f"{self.settings.url}/auth/v1/{path}",
                params=params,
                json=payload,
                headers=headers,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            raise AuthError(str(e)) from e

        if not response.ok:
            raise AuthError(provider_message(response))

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _emit(self, event: AuthEvent, session: Session | None) -> None:
        logger.debug("Auth event: %s", event.value)
        for listener in list(self._listeners):
            listener(event, session)

    def _store_session(self, session: Session | None) -> None:
        try:
            if session is None:
                remove_item(SESSION_KEY, self.db_path)
            else:
                set_item(SESSION_KEY, json.dumps(asdict(session)), self.db_path)
        except sqlite3.Error as e:
            logger.error("Failed to save session: %s", e)
            raise AuthError(f"Database error: {e}") from e

    def _stored_session(self) -> Session | None:
        try:
            raw = get_item(SESSION_KEY, self.db_path)
        except sqlite3.Error as e:
            raise AuthError(f"Database error: {e}") from e
        if not raw:
            return None
        try:
            return Session(**json.loads(raw))
        except (ValueError, TypeError):
            logger.debug("Discarding unreadable stored session")
            return None

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Subscribe to session changes.

        Returns:
            Function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, email: str, password: str) -> Session:
        """Sign in with email and password.

        Raises:
            ValidationError: If the credentials fail the form checks.
            AuthError: With the provider's message if sign-in is refused.
        """
        validate_credentials(email, password)
        payload = self._post(
            "token",
            {"email": email.strip(), "password": password},
            params={"grant_type": "password"},
        )
        session = session_from_token_response(payload, self.clock())
        self._store_session(session)
        logger.info("Signed in as %s", session.email)
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email: str, password: str) -> str:
        """Create an account. The user still has to sign in afterwards.

        Returns:
            Message telling the user to sign in.

        Raises:
            ValidationError: If the credentials fail the form checks.
            AuthError: With the provider's message if sign-up is refused.
        """
        validate_credentials(email, password)
        self._post("signup", {"email": email.strip(), "password": password})
        logger.info("Account created for %s", email.strip())
        return SIGN_UP_MESSAGE

    def sign_out(self) -> None:
        """Sign out. The local session is cleared even if the provider call fails."""
        session = self._stored_session()
        if session is not None:
            try:
                self._post("logout", {}, token=session.access_token)
            except AuthError as e:
                logger.warning("Logout request failed: %s", e)
        self._store_session(None)
        self._emit(AuthEvent.SIGNED_OUT, None)

    def refresh_session(self, session: Session) -> Session:
        """Exchange the refresh token for a new session.

        Raises:
            AuthError: If the provider refuses the refresh token.
        """
        payload = self._post(
            "token",
            {"refresh_token": session.refresh_token},
            params={"grant_type": "refresh_token"},
        )
        refreshed = session_from_token_response(payload, self.clock())
        self._store_session(refreshed)
        self._emit(AuthEvent.TOKEN_REFRESHED, refreshed)
        return refreshed

    def get_session(self) -> Session | None:
        """Return the current session, refreshing it if it expired.

        A session that cannot be refreshed is dropped, which signs the
        user out.

        Raises:
            AuthError: If the stored session cannot be read.
        """
        session = self._stored_session()
        if session is None or not session.is_expired(self.clock()):
            return session

        try:
            return self.refresh_session(session)
        except AuthError as e:
            logger.warning("Session refresh failed: %s", e)
            self._store_session(None)
            self._emit(AuthEvent.SIGNED_OUT, None)
            return None


class AuthGate:
    """Decides whether the dashboard or the login form is shown.

    Starts in LOADING, resolves with the initial session lookup and then
    follows every session change for as long as it is started.
    """

    def __init__(self, client: AuthClient) -> None:
        self.client = client
        self.session: Session | None = None
        self.state = AuthState.LOADING
        self._unsubscribe: Callable[[], None] | None = None

    def _set_session(self, session: Session | None) -> None:
        self.session = session
        self.state = AuthState.AUTHENTICATED if session else AuthState.UNAUTHENTICATED

    def _on_change(self, event: AuthEvent, session: Session | None) -> None:
        self._set_session(session)

    def start(self) -> AuthState:
        """Look up the current session and follow later changes."""
        if self._unsubscribe is None:
            self._unsubscribe = self.client.on_auth_state_change(self._on_change)
        self._set_session(self.client.get_session())
        return self.state

    def stop(self) -> None:
        """Stop following session changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    def sign_in(self, email: str, password: str) -> Session:
        return self.client.sign_in(email, password)

    def sign_up(self, email: str, password: str) -> str:
        return self.client.sign_up(email, password)

    def sign_out(self) -> None:
        self.client.sign_out()
