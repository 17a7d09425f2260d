try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from votes_gateway.api.routes import USER_COOKIE
from votes_gateway.core.config import AppSettings
from votes_gateway.exceptions import AuthExchangeError, RatingSubmitError, TokenStoreError
from votes_gateway.main import app
from votes_gateway.models import CredentialRecord, ItemType
from votes_gateway.services import CredentialManager, RatingsService

pytestmark = pytest.mark.anyio

NOW = 1_700_000_000


class FakeTokenStore:
    def __init__(self) -> None:
        self.records: dict[str, CredentialRecord] = {}
        self.fail_writes = False

    async def save(self, user_id: str, record: CredentialRecord) -> None:
        if self.fail_writes:
            raise TokenStoreError("redis is down")
        self.records[user_id] = record

    async def get(self, user_id: str) -> CredentialRecord | None:
        return self.records.get(user_id)

    async def delete(self, user_id: str) -> None:
        if self.fail_writes:
            raise TokenStoreError("redis is down")
        self.records.pop(user_id, None)


class DummyOAuthClient:
    is_configured = True

    def __init__(self) -> None:
        self.states: list[str] = []
        self.codes: list[str] = []
        self.reject_codes = False

    def build_authorization_url(self, state: str) -> str:
        self.states.append(state)
        return f"https://trakt.example.com/oauth/authorize?state={state}"

    async def exchange_authorization_code(self, code: str) -> dict:
        self.codes.append(code)
        if self.reject_codes:
            raise AuthExchangeError("internal upstream detail")
        return {"access_token": "access", "refresh_token": "refresh", "expires_in": 7776000}

    async def refresh_token(self, refresh_token: str) -> dict:
        return {"access_token": "fresh", "refresh_token": "fresh-r", "expires_in": 3600}


class FakeTraktAPI:
    def __init__(self) -> None:
        self.writes: list[dict] = []
        self.items: list[dict] = []
        self.reject_with = None

    async def add_ratings(self, access_token: str, payload: dict) -> dict:
        if self.reject_with is not None:
            raise RatingSubmitError(self.reject_with, status_code=400)
        self.writes.append(payload)
        return {"added": {"movies": 1, "shows": 0}}

    async def list_ratings(self, access_token: str, item_type: ItemType):
        return self.items


class Harness:
    def __init__(self) -> None:
        self.store = FakeTokenStore()
        self.oauth = DummyOAuthClient()
        self.api = FakeTraktAPI()
        self.credentials = CredentialManager(
            store=self.store, oauth_client=self.oauth, clock=lambda: NOW
        )
        self.ratings = RatingsService(credentials=self.credentials, api_client=self.api)
        self.settings = AppSettings(ADDON_BASE_URL="https://votes.example.com")

    def connect(self, user_id: str, expires_in: int = 3600) -> None:
        self.store.records[user_id] = CredentialRecord(
            access_token="access", refresh_token="refresh", expires_at_unix=NOW + expires_in
        )


@pytest.fixture()
def harness():
    from votes_gateway import dependencies

    harness = Harness()
    app.dependency_overrides.update(
        {
            dependencies.get_app_settings: lambda: harness.settings,
            dependencies.get_trakt_oauth_client: lambda: harness.oauth,
            dependencies.get_credential_manager: lambda: harness.credentials,
            dependencies.get_ratings_service: lambda: harness.ratings,
        }
    )

    yield harness

    app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


async def test_start_generates_identifier_and_redirects(harness) -> None:
    async with _client() as client:
        response = await client.get("/start", params={"redirect": "/authorize"})

    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    assert location.path == "/authorize"
    user_id = parse_qs(location.query)["user"][0]
    assert len(user_id) == 32
    assert f"{USER_COOKIE}={user_id}" in response.headers["set-cookie"]


async def test_start_reuses_cookie_and_keeps_target_query(harness) -> None:
    async with _client() as client:
        response = await client.get(
            "/start",
            params={"redirect": "/view/tt1?type=movie"},
            headers={"cookie": f"{USER_COOKIE}=known-user"},
        )

    assert response.headers["location"] == "/view/tt1?type=movie&user=known-user"


async def test_start_ignores_external_redirects(harness) -> None:
    async with _client() as client:
        response = await client.get(
            "/start", params={"redirect": "//evil.example.com", "user": "u1"}
        )

    assert response.headers["location"] == "/?user=u1"


async def test_authorize_redirects_with_user_as_state(harness) -> None:
    async with _client() as client:
        response = await client.get("/authorize", params={"user": "u1"})

    assert response.status_code == 307
    assert response.headers["location"].startswith("https://trakt.example.com/oauth/authorize")
    assert harness.oauth.states == ["u1"]


async def test_authorize_reports_missing_configuration(harness) -> None:
    harness.oauth.is_configured = False

    async with _client() as client:
        response = await client.get("/authorize", params={"user": "u1"})

    assert response.status_code == 503
    assert harness.oauth.states == []


async def test_callback_exchanges_code_for_state_user(harness) -> None:
    async with _client() as client:
        response = await client.get("/callback", params={"code": "abc", "state": "u1"})

    assert response.status_code == 200
    assert response.json() == {"status": "connected", "user": "u1"}
    assert harness.oauth.codes == ["abc"]
    assert harness.store.records["u1"].expires_at_unix == NOW + 7776000


async def test_callback_without_code_is_rejected(harness) -> None:
    async with _client() as client:
        response = await client.get("/callback", params={"state": "u1"})

    assert response.status_code == 400
    assert harness.oauth.codes == []


async def test_callback_hides_upstream_exchange_error(harness) -> None:
    harness.oauth.reject_codes = True

    async with _client() as client:
        response = await client.get(
            "/callback",
            params={"code": "abc", "state": "u1"},
            headers={"accept": "text/html"},
        )

    assert response.status_code == 502
    assert "internal upstream detail" not in response.text
    assert "u1" not in harness.store.records


async def test_callback_reports_store_failure(harness) -> None:
    harness.store.fail_writes = True

    async with _client() as client:
        response = await client.get("/callback", params={"code": "abc", "state": "u1"})

    assert response.status_code == 503


async def test_vote_without_credential_reports_not_connected(harness) -> None:
    async with _client() as client:
        response = await client.get("/vote/movie/tt123/8", params={"user": "u1"})

    assert response.status_code == 401
    assert response.json()["status"] == "not_connected"
    assert harness.api.writes == []


async def test_vote_records_rating_for_connected_user(harness) -> None:
    harness.connect("u1")

    async with _client() as client:
        response = await client.get("/vote/movie/tt0000001/8", params={"user": "u1"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "rated"
    assert data["trakt"] == {"added": {"movies": 1, "shows": 0}}
    assert harness.api.writes == [
        {"movies": [{"ids": {"imdb": "tt0000001"}, "rating": 8}]}
    ]


async def test_vote_resolves_user_from_cookie(harness) -> None:
    harness.connect("cookie-user")

    async with _client() as client:
        response = await client.get(
            "/vote/show/tt0944947/5",
            headers={"cookie": f"{USER_COOKIE}=cookie-user", "accept": "text/html"},
        )

    assert response.status_code == 200
    assert "Vote recorded" in response.text
    assert harness.api.writes == [{"shows": [{"ids": {"imdb": "tt0944947"}, "rating": 5}]}]


@pytest.mark.parametrize("path", ["/vote/movie/tt1/11", "/vote/movie/tt1/0", "/vote/book/tt1/5"])
async def test_vote_validation_happens_before_any_call(harness, path: str) -> None:
    harness.connect("u1")

    async with _client() as client:
        response = await client.get(path, params={"user": "u1"})

    assert response.status_code == 400
    assert harness.api.writes == []


async def test_vote_surfaces_upstream_rejection_detail(harness) -> None:
    harness.connect("u1")
    harness.api.reject_with = {"error": "invalid rating"}

    async with _client() as client:
        response = await client.get("/vote/movie/tt1/8", params={"user": "u1"})

    assert response.status_code == 502
    assert response.json()["detail"] == {"error": "invalid rating"}


async def test_view_shows_current_rating_and_vote_links(harness) -> None:
    harness.connect("u1")
    harness.api.items = [{"rating": 8, "movie": {"ids": {"imdb": "tt123"}}}]

    async with _client() as client:
        response = await client.get("/view/tt123", params={"user": "u1"})

    data = response.json()
    assert data["rating"] == 8
    assert data["connected"] is True
    assert [vote["score"] for vote in data["votes"]] == [8, 5, 2]
    assert data["votes"][0]["url"] == "https://votes.example.com/vote/movie/tt123/8?user=u1"


async def test_view_for_unknown_user_shows_no_rating(harness) -> None:
    async with _client() as client:
        response = await client.get("/view/tt123", params={"user": "ghost", "type": "series"})

    data = response.json()
    assert data["rating"] is None
    assert data["connected"] is False
    assert data["item_type"] == "show"


async def test_logout_deletes_record_and_is_idempotent(harness) -> None:
    harness.connect("u1")

    async with _client() as client:
        first = await client.get("/logout", params={"user": "u1"})
        second = await client.get("/logout", params={"user": "u1"})

    assert first.status_code == 200
    assert second.status_code == 200
    assert "u1" not in harness.store.records


async def test_logout_does_not_mask_store_failure(harness) -> None:
    harness.connect("u1")
    harness.store.fail_writes = True

    async with _client() as client:
        response = await client.get("/logout", params={"user": "u1"})

    assert response.status_code == 503
    assert "u1" in harness.store.records


async def test_view_reports_store_failure_when_refresh_cannot_be_saved(harness) -> None:
    harness.connect("u1", expires_in=5)
    harness.store.fail_writes = True

    async with _client() as client:
        response = await client.get("/view/tt123", params={"user": "u1"})

    assert response.status_code == 503
    assert response.json()["status"] == "error"
    assert harness.store.records["u1"].access_token == "access"


async def test_vote_with_empty_id_names_the_field(harness) -> None:
    harness.connect("u1")

    async with _client() as client:
        response = await client.get("/vote/movie/:1/8", params={"user": "u1"})

    assert response.status_code == 400
    assert "external_id" in response.json()["detail"]
    assert "score" not in response.json()["detail"]
    assert harness.api.writes == []
