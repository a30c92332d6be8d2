import pytest

from shopadmin import Client, ConfigStore, ConfigurationError, FileSessionStore, client_from_config
from shopadmin.config import KEY_ENV, URL_ENV


def test_set_then_get_round_trip(tmp_path):
    store = ConfigStore(tmp_path / "config.json", environ={})
    store.set_supabase_config("https://a.supabase.co", "key-a")
    config = ConfigStore(tmp_path / "config.json", environ={}).get_supabase_config()
    assert (config.url, config.key) == ("https://a.supabase.co", "key-a")
    assert config.is_configured


def test_environment_fallback(tmp_path):
    environ = {URL_ENV: "https://env.supabase.co", KEY_ENV: "env-key"}
    config = ConfigStore(tmp_path / "config.json", environ=environ).get_supabase_config()
    assert config.url == "https://env.supabase.co"
    assert config.key == "env-key"


def test_stored_values_win(tmp_path):
    environ = {URL_ENV: "https://env.supabase.co", KEY_ENV: "env-key"}
    store = ConfigStore(tmp_path / "config.json", environ=environ)
    store.set_supabase_config("https://stored.supabase.co", "stored-key")
    assert store.get_supabase_config().url == "https://stored.supabase.co"


def test_unconfigured(tmp_path):
    store = ConfigStore(tmp_path / "config.json", environ={})
    config = store.get_supabase_config()
    assert not config.is_configured
    with pytest.raises(ConfigurationError):
        client_from_config(store)


def test_malformed_file_is_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert not ConfigStore(path, environ={}).get_supabase_config().is_configured


def test_repr_hides_key(tmp_path):
    config = ConfigStore(tmp_path / "c.json", environ={}).set_supabase_config("https://a.co", "hidden-key")
    assert "hidden-key" not in repr(config)


def test_client_from_config(tmp_path):
    store = ConfigStore(tmp_path / "config.json", environ={})
    store.set_supabase_config("https://a.supabase.co/", "key-a")
    client = client_from_config(store, session_store=FileSessionStore(tmp_path / "state"))
    assert isinstance(client, Client)
    assert client.url == "https://a.supabase.co"
