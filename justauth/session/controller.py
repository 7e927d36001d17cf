# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Session state machine for JustAuth.

The session controller is what an application (or its UI binding) talks
to: it logs in and out, restores a stored session at startup, reacts to
terminal authentication failures, and publishes a read-only snapshot of
the session whenever it changes.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..common.utils import maybe_await
from ..core.config import AuthConfig
from ..core.types import (
    Identity,
    LoginResponse,
    Request,
    SessionSnapshot,
    SessionState,
    SessionStatus,
)
from ..client.gateway import RequestGateway
from ..client.transport import Transport
from ..errors import AuthenticationError, JustAuthError, ResponseError, TransportError
from ..refresh.coordinator import RenewalCoordinator
from ..tokenstore.credentials import CredentialStore

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], Union[None, Awaitable[None]]]

# Used when a stored session is trusted but no user record was persisted
PLACEHOLDER_IDENTITY_ID = "user"


class SessionController:
    """
    Tracks who is logged in.

    Use SessionController.new() to build a controller together with its
    credential store, renewal coordinator and request gateway.

    Example:
        session = SessionController.new(AuthConfig(
            login_url="/api/auth/login",
            refresh_url="/api/auth/refresh",
            base_url="https://api.example.com",
        ))
        await session.initialize()
        await session.login({"email": "user@example.com", "password": "secret"})
        response = await session.gateway.get("/api/me")
    """

    def __init__(self,
                 config: AuthConfig,
                 store: CredentialStore,
                 gateway: RequestGateway):
        """
        Initialize session controller.

        The gateway's terminal-failure callback is taken over by the
        controller, which resets the session and then forwards the error
        to the callback the gateway had (``config.on_auth_error`` unless
        one was passed to the gateway).

        Args:
            config: Session configuration
            store: Credential store
            gateway: Request gateway sharing the same store
        """
        self.config = config
        self.store = store
        self.gateway = gateway
        self._forward_auth_error = gateway.on_auth_error
        self.gateway.on_auth_error = self._on_session_expired
        self._state = SessionState()
        self._listeners: List[SessionListener] = []

    @classmethod
    def new(cls, config: AuthConfig, transport: Optional[Transport] = None) -> "SessionController":
        """
        Create a session controller and everything it depends on.

        Args:
            config: Session configuration
            transport: Optional HTTP transport (defaults to AiohttpTransport)

        Returns:
            SessionController instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config.validate()
        store = CredentialStore(
            config.storage,
            access_token_key=config.access_token_key,
            refresh_token_key=config.refresh_token_key,
        )
        gateway = RequestGateway(config, store, RenewalCoordinator(), transport=transport)
        return cls(config, store, gateway)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def user(self) -> Optional[Identity]:
        return self._state.identity

    @property
    def error(self) -> Optional[Exception]:
        return self._state.last_error

    @property
    def loading(self) -> bool:
        return self._state.status is SessionStatus.LOADING or self._state.authenticating

    async def is_authenticated(self) -> bool:
        """Check a user is set and an access token is stored."""
        if self._state.identity is None:
            return False
        return bool(await self.store.get_access())

    async def get_access_token(self) -> Optional[str]:
        """Get current access token."""
        return await self.store.get_access()

    async def snapshot(self) -> SessionSnapshot:
        """Get a read-only view of the session."""
        return SessionSnapshot(
            user=self._state.identity,
            is_authenticated=await self.is_authenticated(),
            loading=self.loading,
            error=self._state.last_error,
            status=self._state.status,
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener called with a fresh snapshot after every change.

        Returns:
            Function removing the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self) -> None:
        if not self._listeners:
            return

        snapshot = await self.snapshot()
        for listener in list(self._listeners):
            try:
                await maybe_await(listener(snapshot))
            except Exception as e:
                logger.error(f"Error in session listener: {e}")

    def _set_status(self, status: SessionStatus) -> None:
        if status is not self._state.status:
            logger.info(f"Session {self._state.status.value} -> {status.value}")
            self._state.status = status

    async def initialize(self) -> SessionStatus:
        """
        Restore the session from stored credentials.

        With ``validate_on_init`` the stored credentials are checked against
        the identity endpoint; otherwise they are trusted as they are. If
        the identity endpoint cannot be reached the session stays
        unauthenticated but the credentials are kept.

        Returns:
            The resulting status
        """
        self._set_status(SessionStatus.LOADING)
        await self._notify()

        try:
            if await self.store.has_pair():
                if self.config.validate_on_init:
                    identity = await self._fetch_identity()
                else:
                    identity = await self._load_identity()
                self._state.identity = identity
                self._set_status(SessionStatus.AUTHENTICATED)
            else:
                self._state.identity = None
                self._set_status(SessionStatus.UNAUTHENTICATED)
        except TransportError as e:
            # Credentials are kept so a later initialize() can try again
            logger.warning(f"Identity endpoint unreachable, session not restored: {e}")
            self._state.identity = None
            self._state.last_error = e
            self._set_status(SessionStatus.UNAUTHENTICATED)
        except JustAuthError as e:
            logger.error(f"Auth initialization error: {e}")
            await self._discard_credentials()
            self._state.identity = None
            self._set_status(SessionStatus.UNAUTHENTICATED)

        await self._notify()
        return self._state.status

    async def _fetch_identity(self) -> Identity:
        response = await self.gateway.get(self.config.identity_url)
        response.raise_for_status()
        try:
            identity = Identity.from_dict(response.json())
        except ValueError as e:
            raise ResponseError(f"Malformed identity response: {e}", status=response.status)
        await self._save_identity(identity)
        return identity

    async def _load_identity(self) -> Identity:
        raw = await maybe_await(self.config.storage.get(self.config.identity_key))
        if raw:
            try:
                return Identity.from_dict(json.loads(raw))
            except ValueError:
                logger.warning("Stored user record is unreadable, using a placeholder")
        return Identity(id=PLACEHOLDER_IDENTITY_ID)

    async def _save_identity(self, identity: Identity) -> None:
        await maybe_await(self.config.storage.set(self.config.identity_key,
                                                  json.dumps(identity.to_dict())))

    async def _discard_credentials(self) -> None:
        try:
            await self.store.clear()
            await maybe_await(self.config.storage.clear(self.config.identity_key))
        except JustAuthError as e:
            logger.error(f"Failed to clear stored credentials: {e}")

    async def login(self, payload: Dict[str, Any]) -> Identity:
        """
        Log in with an application-defined payload.

        Args:
            payload: Body posted to the login endpoint, e.g. email and password

        Returns:
            The logged in user

        Raises:
            ResponseError: The login endpoint refused or answered garbage
            TransportError: Network failure or timeout
            StorageError: The credentials could not be stored
        """
        self._state.authenticating = True
        self._state.last_error = None
        await self._notify()

        try:
            response = await self.gateway.execute(Request(
                method="POST",
                url=self.config.login_url,
                json=payload,
                anonymous=True,
            ))
            response.raise_for_status()
            result = LoginResponse.from_dict(response.json())

            await self.store.set_pair(result.access_token, result.refresh_token)
            await self._save_identity(result.user)

            self._state.identity = result.user
            self._set_status(SessionStatus.AUTHENTICATED)
            logger.info(f"User {result.user.id} logged in")
            return result.user
        except Exception as e:
            self._state.last_error = e
            if self._state.identity is None:
                self._set_status(SessionStatus.UNAUTHENTICATED)
            logger.info(f"Login failed: {e}")
            raise
        finally:
            self._state.authenticating = False
            await self._notify()

    async def logout(self) -> None:
        """
        Log out.

        The session is reset before any storage call, so the state change
        is visible immediately; no request is sent.
        """
        self._reset()
        await self._discard_credentials()
        await self._notify()

    def _reset(self, error: Optional[Exception] = None) -> None:
        self._state.identity = None
        self._state.last_error = error
        self._set_status(SessionStatus.UNAUTHENTICATED)

    async def _on_session_expired(self, error: AuthenticationError) -> None:
        """Forced logout after a terminal authentication failure."""
        self._reset(error)
        try:
            await maybe_await(self.config.storage.clear(self.config.identity_key))
        except JustAuthError as e:
            logger.error(f"Failed to clear stored user record: {e}")
        await self._notify()

        if self._forward_auth_error is not None:
            await maybe_await(self._forward_auth_error(error))

    async def close(self) -> None:
        """Close the gateway and its transport."""
        await self.gateway.close()

    async def __aenter__(self) -> "SessionController":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
