"""Application configuration"""

from dataclasses import dataclass, field
from os import getenv
from pathlib import Path


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    secret_key: str | None = field(default=getenv("FLOCKA_SECRET_KEY", ""))

    app_name: str = "flocka"
    app_version: str = "1.0.0"

    # base url used to build share links, e.g. https://api.flocka.net
    api_url: str = field(default=getenv("FLOCKA_API_URL", "http://localhost:8000"))

    # Optional database URL for Postgres or other databases
    database_url_env: str | None = field(default=getenv("FLOCKA_DATABASE_URL", None))

    # transactional mail (MailChannels)
    mailchannels_api_key: str | None = field(
        default=getenv("FLOCKA_MAILCHANNELS_API_KEY", "")
    )
    mail_from: str = field(default=getenv("FLOCKA_MAIL_FROM", "noreply@flocka.net"))

    # S3 compatible object storage (Cloudflare R2, MinIO, AWS)
    s3_endpoint_url: str | None = field(default=getenv("FLOCKA_S3_ENDPOINT_URL", None))
    s3_bucket: str = field(default=getenv("FLOCKA_S3_BUCKET", "flocka-storage"))
    s3_access_key_id: str | None = field(default=getenv("FLOCKA_S3_ACCESS_KEY_ID", None))
    s3_secret_access_key: str | None = field(
        default=getenv("FLOCKA_S3_SECRET_ACCESS_KEY", None)
    )

    bcrypt_rounds: int = field(default=int(getenv("FLOCKA_BCRYPT_ROUNDS", "12")))
    session_ttl_days: int = 7
    email_verification_ttl_hours: int = 24

    qr_token_ttl_minutes: int = 30
    share_token_ttl_hours: int = 24
    exchange_request_ttl_minutes: int = 30

    # when enabled, a credential is deleted by the first successful redeem
    single_use_credentials: bool = field(
        default=getenv("FLOCKA_SINGLE_USE_CREDENTIALS", "").lower() in ("1", "true")
    )

    # keys accepted by /cleanup endpoints (cron callers)
    cleanup_api_keys: list[str] = field(
        default_factory=lambda: _split(getenv("FLOCKA_CLEANUP_API_KEYS", ""))
    )
    # 0 disables the in-process sweep loop
    cleanup_interval_minutes: int = field(
        default=int(getenv("FLOCKA_CLEANUP_INTERVAL_MINUTES", "0"))
    )

    @property
    def database_path(self) -> Path:
        return Path("./data/") / Path(f"{self.app_name}.db")

    @property
    def database_url(self) -> str:
        # Use provided DATABASE_URL if available, else fall back to SQLite file
        if self.database_url_env:
            return self.database_url_env
        return f"sqlite:///{self.database_path}"


def get_config():
    return Config()
