import json
from datetime import datetime, timezone

import httpx
import pytest

from feed_engine.config import Settings
from feed_engine.errors import StoreError
from feed_engine.sources import FileStore, PostgrestStore, build_store


def make_store(handler, **kwargs):
    return PostgrestStore(
        "https://example.supabase.co/",
        "anon-key",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_postgrest_fetch_postings_query():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["apikey"] = request.headers.get("apikey")
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json=[{"id": "p-1", "likes_count": 1, "created_at": "2024-05-01T00:00:00Z"}])

    rows = make_store(handler).fetch_postings(city_id=7)

    assert rows[0]["id"] == "p-1"
    assert seen["path"] == "/rest/v1/job_posts"
    assert seen["params"]["status"] == "eq.active"
    assert seen["params"]["order"] == "created_at.desc"
    assert seen["params"]["city_id"] == "eq.7"
    assert seen["apikey"] == "anon-key"
    assert seen["auth"] == "Bearer anon-key"


def test_postgrest_fetch_profile_missing():
    store = make_store(lambda request: httpx.Response(200, json=[]))
    assert store.fetch_profile("nobody") is None


def test_postgrest_engagement():
    tables = {
        "post_likes": [{"post_id": "p-1"}, {"post_id": None}],
        "saved_jobs": [{"post_id": 2}],
        "job_applications": [{"job_id": "p-1", "created_at": "2024-05-01T08:00:00Z"}, {"job_id": None}],
    }

    def handler(request):
        assert request.url.params["user_id"] == "eq.u-1"
        return httpx.Response(200, json=tables[request.url.path.rsplit("/", 1)[-1]])

    engagement = make_store(handler).fetch_engagement("u-1")

    assert engagement.liked == {"p-1"}
    assert engagement.saved == {"2"}
    assert engagement.applied == {"p-1": datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)}


def test_postgrest_retries_rate_limit(monkeypatch):
    sleeps = []
    monkeypatch.setattr("feed_engine.sources.postgrest.time.sleep", sleeps.append)
    responses = iter([httpx.Response(429), httpx.Response(429), httpx.Response(200, json=[])])

    store = make_store(lambda request: next(responses), backoff_s=0.5)
    assert store.fetch_postings() == []
    assert sleeps == [0.5, 1.0]


def test_postgrest_gives_up_after_max_retries(monkeypatch):
    monkeypatch.setattr("feed_engine.sources.postgrest.time.sleep", lambda s: None)
    store = make_store(lambda request: httpx.Response(429), max_retries=2)
    with pytest.raises(StoreError):
        store.fetch_postings()


def test_postgrest_http_error_is_store_error():
    store = make_store(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(StoreError):
        store.fetch_profile("u-1")


def test_postgrest_rejects_non_list_payload():
    store = make_store(lambda request: httpx.Response(200, json={"message": "nope"}))
    with pytest.raises(StoreError):
        store.fetch_postings()


@pytest.fixture
def fixture_path(tmp_path):
    data = {
        "job_posts": [
            {"id": "a", "likes_count": 1, "created_at": "2024-04-30T10:00:00Z", "city_id": 1},
            {"id": "b", "likes_count": 1, "created_at": "2024-05-01T10:00:00Z", "city_id": 2},
            {"id": "c", "likes_count": 1, "created_at": "2024-05-01T11:00:00Z", "status": "paused"},
        ],
        "profiles": [{"id": "u-1", "full_name": "Ana"}],
        "post_likes": [{"user_id": "u-1", "post_id": "a"}, {"user_id": "u-2", "post_id": "b"}],
        "cities": [{"id": 1, "name": "Campinas", "state": "SP"}],
    }
    path = tmp_path / "store.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_file_store_postings(fixture_path):
    store = FileStore(fixture_path)
    assert [r["id"] for r in store.fetch_postings()] == ["b", "a"]
    assert [r["id"] for r in store.fetch_postings(city_id=1)] == ["a"]


def test_file_store_profile_engagement_and_city(fixture_path):
    store = FileStore(fixture_path)
    assert store.fetch_profile("u-1")["full_name"] == "Ana"
    assert store.fetch_profile("u-9") is None
    engagement = store.fetch_engagement("u-1")
    assert engagement.liked == {"a"}
    assert engagement.saved == set()
    assert store.fetch_city(1)["name"] == "Campinas"
    assert store.fetch_city(5) is None


def test_file_store_unreadable(tmp_path):
    with pytest.raises(StoreError):
        FileStore(tmp_path / "missing.json").fetch_postings()
    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StoreError):
        FileStore(bad).fetch_postings()


def test_build_store_prefers_url(tmp_path):
    assert isinstance(build_store(Settings(store_url="https://x.supabase.co", store_key="k")), PostgrestStore)
    assert isinstance(build_store(Settings(fixture_path=tmp_path / "s.json")), FileStore)
    with pytest.raises(StoreError):
        build_store(Settings())


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FEED_STORE_URL", " https://x.supabase.co/ ")
    monkeypatch.setenv("FEED_STORE_TIMEOUT", "5")
    monkeypatch.setenv("FEED_FIXTURE_PATH", str(tmp_path / "f.json"))
    s = Settings.from_env()
    assert s.store_url == "https://x.supabase.co"
    assert s.timeout_s == 5.0
    assert s.fixture_path == tmp_path / "f.json"
