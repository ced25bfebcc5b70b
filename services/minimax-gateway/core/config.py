import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "MiniMax Gateway"
    LOG_LEVEL: str = "INFO"

    # Upstream provider
    MINIMAX_BASE_URL: str = "https://api.minimax.io"
    ROUTE_PREFIX: str = "/functions/v1"
    HTTP_TIMEOUT: float = 60.0  # seconds, per outbound call

    # Model identifiers
    CHAT_MODEL: str = "MiniMax-M2"
    SPEECH_MODEL: str = "speech-01-hd"
    DEFAULT_VOICE_ID: str = "male-qn-qingse"
    IMAGE_MODEL: str = "image-generation-01"
    VIDEO_MODEL: str = "video-01"

    # Async job polling
    POLLING_INTERVAL: float = 5.0  # seconds
    IMAGE_MAX_POLL_ATTEMPTS: int = 30  # 2.5 minutes
    VIDEO_MAX_POLL_ATTEMPTS: int = 60  # 5 minutes

    TELEMETRY_ENABLED: bool = False

    model_config = SettingsConfigDict()


class LocalSettings(Settings):
    ENV: str = "dev"


class ProductionSettings(Settings):
    ENV: str = "production"
    TELEMETRY_ENABLED: bool = True


# Factory to choose the right config
def get_settings() -> Settings:
    env = os.getenv("ENV", "local")
    if env == "production":
        return ProductionSettings()
    return LocalSettings()


settings = get_settings()
