import pytest

from shopadmin import Client, ConfigurationError, FileSessionStore, MemorySessionStore, create_client
from shopadmin.session_store import SESSION_SLOT

from .conftest import KEY, respond


@pytest.mark.parametrize("url, key", [("", "k"), ("https://a.co", ""), ("  ", "k"), (None, "k")])
def test_requires_url_and_key(url, key):
    with pytest.raises(ConfigurationError):
        Client(url, key, session_store=MemorySessionStore())


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        create_client("", "")


def test_repr_hides_key():
    client = Client("https://a.supabase.co/", "secret-key", session_store=MemorySessionStore())
    assert client.url == "https://a.supabase.co"
    assert "secret-key" not in repr(client)


def test_from_requires_table(client):
    with pytest.raises(ValueError):
        client.from_("")
    assert client.table("orders").path == "/rest/v1/orders"


@pytest.mark.asyncio
async def test_check_connection(client, service):
    service.route("HEAD", "/rest/v1/products", respond(headers={"Content-Range": "0-0/12"}))
    result = await client.check_connection()
    assert result.ok
    assert result.count == 12
    assert service.requests[0].headers["apikey"] == KEY


@pytest.mark.asyncio
async def test_context_manager_closes_owned_client():
    async with Client("https://a.supabase.co", "k", session_store=MemorySessionStore()) as client:
        assert not client._client.is_closed
    assert client._client.is_closed


class TestFileSessionStore:
    def test_save_load_remove(self, tmp_path):
        store = FileSessionStore(tmp_path)
        assert store.load(SESSION_SLOT) is None
        store.save(SESSION_SLOT, {"access_token": "t"})
        assert store.load(SESSION_SLOT) == {"access_token": "t"}
        assert [p.name for p in tmp_path.iterdir()] == [f"{SESSION_SLOT}.json"]
        store.remove(SESSION_SLOT)
        store.remove(SESSION_SLOT)
        assert store.load(SESSION_SLOT) is None

    def test_corrupt_slot_reads_as_empty(self, tmp_path):
        (tmp_path / f"{SESSION_SLOT}.json").write_text("{oops")
        assert FileSessionStore(tmp_path).load(SESSION_SLOT) is None

    def test_home_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SHOPADMIN_HOME", str(tmp_path))
        assert FileSessionStore().directory == tmp_path
