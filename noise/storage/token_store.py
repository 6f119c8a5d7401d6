from __future__ import annotations

from noise.storage.key_value import KeyValueStore

AUTH_TOKEN_KEY = "authToken"
DEVICE_TOKEN_KEY = "APNsDeviceTokenKey"


class TokenStore:
    """Persists the single session token. No validation, no expiry tracking."""

    def __init__(self, store: KeyValueStore, key: str = AUTH_TOKEN_KEY):
        self._store = store
        self._key = key

    def load(self) -> str | None:
        return self._store.get(self._key)

    def save(self, token: str) -> None:
        self._store.set(self._key, token)

    def clear(self) -> None:
        self._store.remove(self._key)


class DeviceTokenStore:
    """Persists the push-notification device token as a lowercase hex string."""

    def __init__(self, store: KeyValueStore, key: str = DEVICE_TOKEN_KEY):
        self._store = store
        self._key = key

    def save_device_token(self, device_token: bytes) -> str:
        hex_token = device_token.hex()
        self._store.set(self._key, hex_token)
        return hex_token

    def get_device_token(self) -> str | None:
        return self._store.get(self._key)

    def clear_device_token(self) -> None:
        self._store.remove(self._key)
