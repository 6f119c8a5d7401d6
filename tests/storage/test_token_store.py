"""Tests for TokenStore, DeviceTokenStore and the key-value backends."""

import orjson
import pytest

from noise.storage import (
    AUTH_TOKEN_KEY,
    DEVICE_TOKEN_KEY,
    DeviceTokenStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    TokenStore,
)


@pytest.fixture(params=["memory", "file"])
def backing_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return JsonFileKeyValueStore(tmp_path / "state" / "state.json")


class TestTokenStore:
    def test_save_then_load(self, backing_store):
        store = TokenStore(backing_store)

        store.save("abc")

        assert store.load() == "abc"

    def test_clear_then_load(self, backing_store):
        store = TokenStore(backing_store)
        store.save("abc")

        store.clear()

        assert store.load() is None

    def test_load_without_save(self, backing_store):
        assert TokenStore(backing_store).load() is None

    def test_clear_is_idempotent(self, backing_store):
        store = TokenStore(backing_store)

        store.clear()
        store.clear()

        assert store.load() is None

    def test_save_replaces_previous_token(self, backing_store):
        store = TokenStore(backing_store)
        store.save("first")

        store.save("second")

        assert store.load() == "second"


class TestJsonFileKeyValueStore:
    def test_token_survives_new_instance(self, tmp_path):
        path = tmp_path / "state.json"
        TokenStore(JsonFileKeyValueStore(path)).save("persisted")

        assert TokenStore(JsonFileKeyValueStore(path)).load() == "persisted"

    def test_file_layout(self, tmp_path):
        path = tmp_path / "state.json"
        kv = JsonFileKeyValueStore(path)

        TokenStore(kv).save("tok")
        DeviceTokenStore(kv).save_device_token(b"\x01\xab")

        assert orjson.loads(path.read_bytes()) == {AUTH_TOKEN_KEY: "tok", DEVICE_TOKEN_KEY: "01ab"}
        assert not (tmp_path / ".state.json.tmp").exists()

    def test_clear_keeps_other_keys(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "state.json")
        TokenStore(kv).save("tok")
        DeviceTokenStore(kv).save_device_token(b"\x02")

        TokenStore(kv).clear()

        assert kv.get(AUTH_TOKEN_KEY) is None
        assert kv.get(DEVICE_TOKEN_KEY) == "02"

    @pytest.mark.parametrize("content", [b"", b"{not json", b"[1, 2]"])
    def test_unreadable_file_reads_as_empty(self, tmp_path, content):
        path = tmp_path / "state.json"
        path.write_bytes(content)

        assert TokenStore(JsonFileKeyValueStore(path)).load() is None

    def test_non_string_values_are_ignored(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_bytes(orjson.dumps({AUTH_TOKEN_KEY: 42}))

        assert TokenStore(JsonFileKeyValueStore(path)).load() is None


class TestDeviceTokenStore:
    def test_hex_encoding(self):
        store = DeviceTokenStore(InMemoryKeyValueStore())

        hex_token = store.save_device_token(bytes([0x00, 0x0F, 0xA0, 0xFF]))

        assert hex_token == "000fa0ff"
        assert store.get_device_token() == "000fa0ff"

    def test_clear(self):
        store = DeviceTokenStore(InMemoryKeyValueStore())
        store.save_device_token(b"\x01")

        store.clear_device_token()

        assert store.get_device_token() is None
