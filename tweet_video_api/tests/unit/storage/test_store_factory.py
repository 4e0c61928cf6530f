from tweet_video_api.config.settings import Settings
from tweet_video_api.storage.factory import build_store
from tweet_video_api.storage.hosted_store import HostedStore
from tweet_video_api.storage.memory_store import MemoryStore
from tweet_video_api.storage.sql_store import SQLStore


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_auto_without_database_url_is_memory():
    store = build_store(make_settings(STORE_BACKEND="auto", DATABASE_URL=None, REQUEST_LOG_RETENTION=7))
    assert isinstance(store, MemoryStore)
    assert store.request_retention == 7


def test_sqlite_backend_creates_data_directory(tmp_path):
    db_path = tmp_path / "nested" / "api.db"
    store = build_store(make_settings(STORE_BACKEND="sqlite", DATABASE_URL=None, SQLITE_PATH=str(db_path)))

    assert isinstance(store, SQLStore)
    assert store.backend_name == "sqlite"
    assert db_path.parent.is_dir()


def test_postgres_without_url_falls_back_to_memory(caplog):
    store = build_store(make_settings(STORE_BACKEND="postgres", DATABASE_URL=None))
    assert isinstance(store, MemoryStore)
    assert "falling back" in caplog.text


def test_hosted_backend():
    store = build_store(make_settings(STORE_BACKEND="hosted", HOSTED_URL="https://p.supabase.co", HOSTED_KEY="k"))
    assert isinstance(store, HostedStore)
    assert store.rest_url == "https://p.supabase.co/rest/v1"


def test_hosted_without_credentials_falls_back_to_memory():
    assert isinstance(build_store(make_settings(STORE_BACKEND="hosted", HOSTED_URL=None, HOSTED_KEY=None)), MemoryStore)
