from noise.storage.key_value import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from noise.storage.token_store import AUTH_TOKEN_KEY, DEVICE_TOKEN_KEY, DeviceTokenStore, TokenStore

__all__ = [
    "AUTH_TOKEN_KEY",
    "DEVICE_TOKEN_KEY",
    "DeviceTokenStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "TokenStore",
]
