from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "local"
    app_name: str = "bookingpass-api"
    api_version: str = "v1"
    api_cors_allowed_origins: str = "http://localhost:5173,http://localhost:3000"
    api_cors_allow_credentials: bool = True

    # Shared with every scanner out of band. Never defaulted.
    qr_signing_secret: str = ""
    qr_validity_window_ms: int = 24 * 60 * 60 * 1000
    qr_clock_skew_ms: int = 30_000
    qr_digest_algorithm: str = "sha256"
    qr_allow_weak_digest: bool = True
    qr_single_use: bool = False

    qr_box_size: int = 10
    qr_border: int = 1
    qr_fill_color: str = "#000000"
    qr_back_color: str = "#FFFFFF"
    qr_min_contrast_ratio: float = 4.5


settings = Settings()
