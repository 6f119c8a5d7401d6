from pathlib import Path

from pydantic import BaseModel

from noise.config import config

DEFAULT_API_BASE_URL = "https://makenoise.app/api/v1/"


class NoiseEnvironConfig(BaseModel):
    DEBUG: bool = (config.get("DEBUG") or "false").strip().lower() == "true"

    # Backend API root, versioned; every endpoint path is relative to it.
    NOISE_API_BASE_URL: str = (
        (config.get("NOISE_API_BASE_URL") or "").strip() or DEFAULT_API_BASE_URL
    )
    HTTP_TIMEOUT_SECONDS: float = config.get_positive_float("HTTP_TIMEOUT_SECONDS", 30.0)

    # Local app-scoped storage for the session and device tokens
    NOISE_DATA_DIR: Path = Path(
        (config.get("NOISE_DATA_DIR") or "").strip() or "~/.noise"
    ).expanduser()
    NOISE_STATE_FILENAME: str = (config.get("NOISE_STATE_FILENAME") or "").strip() or "state.json"

    # Live video transport
    AGORA_APP_ID: str | None = (config.get("AGORA_APP_ID") or "").strip() or None
    LIVE_JOIN_TIMEOUT_SECONDS: float = config.get_positive_float("LIVE_JOIN_TIMEOUT_SECONDS", 15.0)

    # Push notifications
    PUSH_PLATFORM: str = (config.get("PUSH_PLATFORM") or "").strip() or "ios"

    @property
    def state_path(self) -> Path:
        return self.NOISE_DATA_DIR / self.NOISE_STATE_FILENAME


_noise_environ_config = NoiseEnvironConfig()


def get_noise_environ_config() -> NoiseEnvironConfig:
    return _noise_environ_config
