"""Application settings loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # PreferredPictures account
    preferred_pictures_identity: str = ""
    preferred_pictures_secret_key: str = ""
    preferred_pictures_endpoint: str = "https://api.preferred-pictures.com/"
    preferred_pictures_max_choices: int = 35

    # Defaults applied when a request leaves them out
    default_ttl: int = 600  # Seconds an action can be attributed to a choice
    default_expiration_ttl: int = 3600  # Seconds a signed URL stays valid

    # Signing service authentication
    # Comma-separated list of keys allowed to request signed URLs
    service_api_keys: str = ""
    # Lets /v1/choose/redirect sign without a key, for <img src> embedding
    allow_anonymous_redirect: bool = False

    # Logging
    log_level: str = "INFO"
    audit_log_file: str = ""  # Empty = stdout only

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def api_keys_list(self) -> list[str]:
        return [k.strip() for k in self.service_api_keys.split(",") if k.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
