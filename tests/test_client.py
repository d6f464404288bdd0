"""
Tests for the async API client
"""
import httpx
import pytest
from httpx import ASGITransport

from insight_pulse.client import ApiError, AuthError, InsightPulseClient, ServerUnreachable
from insight_pulse.main import app

BASE_URL = 'http://testserver'


@pytest.fixture
async def api(override_db):
    async with InsightPulseClient(BASE_URL, transport=ASGITransport(app=app)) as api_client:
        yield api_client


def unreachable_client() -> InsightPulseClient:
    def refuse(request: httpx.Request):
        raise httpx.ConnectError('Connection refused', request=request)

    return InsightPulseClient(BASE_URL, transport=httpx.MockTransport(refuse))


@pytest.mark.asyncio
async def test_login_then_refresh(api: InsightPulseClient, rep_user):
    user = await api.login(rep_user.username, 'testpassword123')

    assert user['username'] == rep_user.username
    assert api.is_authenticated
    assert (await api.refresh_auth())['id'] == rep_user.id


@pytest.mark.asyncio
async def test_refresh_without_session_clears_user(api: InsightPulseClient):
    api.user = {'id': 99, 'username': 'cached'}

    assert await api.refresh_auth() is None
    assert not api.is_authenticated


@pytest.mark.asyncio
async def test_bad_credentials(api: InsightPulseClient, rep_user):
    with pytest.raises(AuthError) as excinfo:
        await api.login(rep_user.username, 'wrong-password')

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == 'Invalid username or password'
    assert api.user is None


@pytest.mark.asyncio
async def test_departments_and_logout(api: InsightPulseClient, rep_user):
    await api.login(rep_user.username, 'testpassword123')

    departments = await api.refresh_departments()
    assert [d['name'] for d in departments] == ['Administration', 'HR', 'IT']
    assert api.departments == departments

    assert await api.logout() is True
    assert api.user is None
    with pytest.raises(ApiError) as excinfo:
        await api.refresh_departments()
    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == 'Authentication required'


@pytest.mark.asyncio
async def test_unreachable_server_is_distinct_from_rejection():
    api = unreachable_client()
    api.user = {'id': 1}

    with pytest.raises(ServerUnreachable):
        await api.login('someone', 'password')
    assert api.user is None

    with pytest.raises(ServerUnreachable):
        await api.refresh_auth()
    await api.aclose()


@pytest.mark.asyncio
async def test_logout_clears_user_when_server_unreachable():
    api = unreachable_client()
    api.user = {'id': 1}

    with pytest.raises(ServerUnreachable):
        await api.logout()

    assert api.user is None
    await api.aclose()


@pytest.mark.asyncio
async def test_login_rejects_incomplete_user_payload():
    def handler(request: httpx.Request):
        return httpx.Response(200, json={'id': 1, 'username': 'half'})

    api = InsightPulseClient(BASE_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(ApiError) as excinfo:
        await api.login('half', 'password')

    assert excinfo.value.detail == 'Invalid user data received from server'
    assert not api.is_authenticated
    await api.aclose()
