"""
Tests for the session state machine.
"""

import asyncio
import json

import pytest

from justauth import (
    AuthConfig,
    AuthenticationError,
    ConfigurationError,
    CredentialStore,
    Identity,
    RenewalCoordinator,
    ResponseError,
    SessionController,
    SessionStatus,
    TransportError,
)
from justauth.client import RequestGateway

from conftest import FakeAuthServer, FakeTransport

DATA_URL = FakeAuthServer.DATA_URL
REFRESH_URL = FakeAuthServer.REFRESH_URL
LOGIN_URL = FakeAuthServer.LOGIN_URL


@pytest.fixture
def session(config, transport):
    return SessionController.new(config, transport=transport)


class TestInitialize:
    """Test restoring a session at startup"""

    @pytest.mark.asyncio
    async def test_empty_store_is_unauthenticated(self, session):
        assert session.status is SessionStatus.UNINITIALIZED
        assert await session.store.has_pair() is False

        status = await session.initialize()

        assert status is SessionStatus.UNAUTHENTICATED
        snapshot = await session.snapshot()
        assert snapshot.user is None
        assert snapshot.is_authenticated is False
        assert snapshot.loading is False
        assert snapshot.error is None

    @pytest.mark.asyncio
    async def test_passes_through_loading(self, session):
        seen = []
        session.subscribe(lambda snapshot: seen.append((snapshot.status, snapshot.loading)))

        await session.initialize()

        assert seen[0] == (SessionStatus.LOADING, True)
        assert seen[-1] == (SessionStatus.UNAUTHENTICATED, False)

    @pytest.mark.asyncio
    async def test_trusts_stored_credentials(self, session, storage, transport):
        storage.set("auth_access_token", "A1")
        storage.set("auth_refresh_token", "R1")

        status = await session.initialize()

        assert status is SessionStatus.AUTHENTICATED
        assert session.user == Identity(id="user")
        assert (await session.snapshot()).is_authenticated is True
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_restores_persisted_identity(self, session, storage):
        storage.set("auth_access_token", "A1")
        storage.set("auth_refresh_token", "R1")
        storage.set("auth_user", json.dumps({"id": "42", "name": "Ada"}))

        await session.initialize()

        assert session.user.id == "42"
        assert session.user.get("name") == "Ada"

    @pytest.mark.asyncio
    async def test_validate_on_init(self, storage, transport, server):
        config = AuthConfig(
            login_url=LOGIN_URL,
            refresh_url=REFRESH_URL,
            storage=storage,
            validate_on_init=True,
            identity_url=FakeAuthServer.ME_URL,
        )
        session = SessionController.new(config, transport=transport)
        storage.set("auth_access_token", "A1")
        storage.set("auth_refresh_token", "R1")

        status = await session.initialize()

        assert status is SessionStatus.AUTHENTICATED
        assert session.user.get("email") == "user@example.com"
        assert transport.requests[0].url == FakeAuthServer.ME_URL

    @pytest.mark.asyncio
    async def test_validate_on_init_rejected(self, storage, transport, server):
        config = AuthConfig(
            login_url=LOGIN_URL,
            refresh_url=REFRESH_URL,
            storage=storage,
            validate_on_init=True,
            identity_url=FakeAuthServer.ME_URL,
        )
        session = SessionController.new(config, transport=transport)
        storage.set("auth_access_token", "A1")
        storage.set("auth_refresh_token", "R1")
        server.valid_access = set()
        server.refresh_results = [401]

        status = await session.initialize()

        assert status is SessionStatus.UNAUTHENTICATED
        assert await session.store.has_pair() is False
        assert isinstance(session.error, AuthenticationError)

    @pytest.mark.asyncio
    async def test_validate_on_init_unreachable(self, storage, server):
        def handler(request):
            if request.url == FakeAuthServer.ME_URL:
                raise TransportError("connection refused", method="GET", url=request.url)
            return server(request)

        config = AuthConfig(
            login_url=LOGIN_URL,
            refresh_url=REFRESH_URL,
            storage=storage,
            validate_on_init=True,
            identity_url=FakeAuthServer.ME_URL,
        )
        session = SessionController.new(config, transport=FakeTransport(handler))
        storage.set("auth_access_token", "A1")
        storage.set("auth_refresh_token", "R1")

        status = await session.initialize()

        assert status is SessionStatus.UNAUTHENTICATED
        assert isinstance(session.error, TransportError)
        assert await session.store.has_pair() is True


class TestLogin:
    """Test login"""

    @pytest.mark.asyncio
    async def test_login_success(self, session, transport):
        await session.initialize()

        user = await session.login({"email": "user@example.com", "password": "secret"})

        assert user.id == "1"
        assert session.status is SessionStatus.AUTHENTICATED
        assert await session.store.get_access() == "A1"
        assert await session.store.get_renewal() == "R1"
        assert await session.get_access_token() == "A1"

        snapshot = await session.snapshot()
        assert snapshot.is_authenticated is True
        assert snapshot.loading is False
        assert snapshot.user.id == "1"

        login_request = transport.sent_to(LOGIN_URL)[0]
        assert login_request.method == "POST"
        assert login_request.json == {"email": "user@example.com", "password": "secret"}

    @pytest.mark.asyncio
    async def test_authenticating_while_login_runs(self, session):
        seen = []
        session.subscribe(lambda snapshot: seen.append(snapshot.loading))

        await session.login({"email": "user@example.com", "password": "secret"})

        assert seen[0] is True
        assert seen[-1] is False
        assert session.state.authenticating is False

    @pytest.mark.asyncio
    async def test_login_rejected(self, session, server, auth_errors):
        await session.initialize()
        server.login_status = 401

        with pytest.raises(ResponseError) as exc_info:
            await session.login({"email": "user@example.com", "password": "wrong"})

        assert exc_info.value.status == 401
        assert session.status is SessionStatus.UNAUTHENTICATED
        assert session.error is exc_info.value
        assert session.state.authenticating is False
        assert auth_errors == []

    @pytest.mark.asyncio
    async def test_login_malformed_response(self, session, server):
        server.login_body = {"accessToken": "A1", "user": {"id": "1"}}

        with pytest.raises(ResponseError):
            await session.login({"email": "user@example.com"})

        assert await session.store.has_pair() is False

    @pytest.mark.asyncio
    async def test_login_clears_previous_error(self, session, server):
        server.login_status = 500
        with pytest.raises(ResponseError):
            await session.login({})

        server.login_status = 200
        await session.login({})

        assert session.error is None


class TestLogout:
    """Test logout and forced logout"""

    @pytest.mark.asyncio
    async def test_logout(self, session, transport, storage):
        await session.login({"email": "user@example.com", "password": "secret"})
        sent = len(transport.requests)

        await session.logout()

        assert len(transport.requests) == sent
        assert session.user is None
        assert session.status is SessionStatus.UNAUTHENTICATED
        assert await session.store.has_pair() is False
        assert storage.keys() == []

    @pytest.mark.asyncio
    async def test_logout_resets_state_before_storage(self, session):
        await session.login({})

        pending = session.logout()
        # Coroutine not started yet; state changes as soon as it runs
        assert session.user is not None
        await pending
        assert session.user is None

    @pytest.mark.asyncio
    async def test_forced_logout(self, session, server, auth_errors):
        await session.login({"email": "user@example.com", "password": "secret"})
        server.valid_access = set()
        server.refresh_results = [401]

        with pytest.raises(AuthenticationError) as exc_info:
            await session.gateway.get(DATA_URL)

        assert session.status is SessionStatus.UNAUTHENTICATED
        assert session.user is None
        assert session.error is exc_info.value
        assert auth_errors == [exc_info.value]

        snapshot = await session.snapshot()
        assert snapshot.is_authenticated is False
        assert snapshot.error is exc_info.value

    @pytest.mark.parametrize("renewal", [
        {"accessToken": "A2"},
        {"accessToken": "A2", "refreshToken": "R2"},
    ])
    @pytest.mark.asyncio
    async def test_logout_during_renewal(self, session, server, storage, auth_errors, renewal):
        await session.login({"email": "user@example.com", "password": "secret"})
        server.valid_access = set()
        server.refresh_results = [renewal]
        server.refresh_delay = 0.05

        pending = asyncio.ensure_future(session.gateway.get(DATA_URL))
        while not session.gateway.coordinator.is_refreshing:
            await asyncio.sleep(0)

        await session.logout()

        with pytest.raises(AuthenticationError):
            await pending

        assert await session.store.get_access() is None
        assert await session.store.get_renewal() is None
        assert storage.keys() == []
        assert session.status is SessionStatus.UNAUTHENTICATED
        assert session.error is None
        assert auth_errors == []

    @pytest.mark.asyncio
    async def test_forced_logout_uses_gateway_callback(self, config, storage, transport, server,
                                                       auth_errors):
        received = []
        store = CredentialStore(storage)
        gateway = RequestGateway(config, store, RenewalCoordinator(), transport=transport,
                                 on_auth_error=received.append)
        session = SessionController(config, store, gateway)
        await session.login({})
        server.valid_access = set()
        server.refresh_results = [401]

        with pytest.raises(AuthenticationError) as exc_info:
            await gateway.get(DATA_URL)

        assert received == [exc_info.value]
        assert auth_errors == []
        assert session.status is SessionStatus.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_renewal_keeps_session(self, session, server):
        await session.login({})
        server.valid_access = set()
        server.refresh_results = [{"accessToken": "A2"}]

        response = await session.gateway.get(DATA_URL)

        assert response.status == 200
        assert session.status is SessionStatus.AUTHENTICATED
        assert await session.get_access_token() == "A2"


class TestSubscriptions:
    """Test session listeners"""

    @pytest.mark.asyncio
    async def test_unsubscribe(self, session):
        seen = []
        unsubscribe = session.subscribe(seen.append)
        unsubscribe()

        await session.initialize()

        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_is_skipped(self, session):
        seen = []

        def broken(snapshot):
            raise RuntimeError("listener bug")

        async def recording(snapshot):
            seen.append(snapshot)

        session.subscribe(broken)
        session.subscribe(recording)

        await session.initialize()

        assert seen[-1].status is SessionStatus.UNAUTHENTICATED


class TestConstruction:
    """Test building a controller"""

    def test_new_validates_config(self, storage):
        with pytest.raises(ConfigurationError):
            SessionController.new(AuthConfig(login_url="", refresh_url="/refresh"))

    @pytest.mark.asyncio
    async def test_context_manager_closes_transport(self, session, transport):
        async with session:
            pass
        assert transport.closed

    def test_snapshot_to_dict(self):
        from justauth.core.types import SessionSnapshot

        snapshot = SessionSnapshot(user=Identity(id="1"), is_authenticated=True,
                                   loading=False, error=None,
                                   status=SessionStatus.AUTHENTICATED)

        assert snapshot.to_dict() == {
            "user": {"id": "1"},
            "isAuthenticated": True,
            "loading": False,
            "error": None,
            "status": "authenticated",
        }
