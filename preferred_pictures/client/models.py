"""Client configuration and per-call request models."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from preferred_pictures.config.settings import Settings, get_settings

DEFAULT_ENDPOINT = "https://api.preferred-pictures.com/"
DEFAULT_MAX_CHOICES = 35
DEFAULT_TTL = 600
DEFAULT_EXPIRATION_TTL = 3600


@dataclass(frozen=True)
class ClientConfig:
    identity: str
    secret_key: str = field(repr=False)  # HMAC key, never sent over the wire
    endpoint: str = DEFAULT_ENDPOINT  # must end with "/"
    max_choices: int = DEFAULT_MAX_CHOICES

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ClientConfig":
        settings = settings or get_settings()
        return cls(
            identity=settings.preferred_pictures_identity,
            secret_key=settings.preferred_pictures_secret_key,
            endpoint=settings.preferred_pictures_endpoint,
            max_choices=settings.preferred_pictures_max_choices,
        )


@dataclass
class ChooseRequest:
    """Parameters of a single call to /choose."""

    choices: Sequence[str]
    tournament: str
    ttl: int = DEFAULT_TTL
    expiration_ttl: int = DEFAULT_EXPIRATION_TTL
    choices_prefix: str | None = None
    choices_suffix: str | None = None
    destinations: Sequence[str] | None = None  # paired positionally with choices
    destinations_prefix: str | None = None
    destinations_suffix: str | None = None
    go: bool = False  # redirect straight to a previously recorded choice
    json: bool = False  # JSON response instead of an HTTP redirect
    uid: str | None = None  # generated when not supplied


@dataclass
class LegacyChooseRequest:
    """Parameters of a single call to the older /choose-url shape.

    prefix and suffix are sent once and apply to the comma-joined
    choices string, not to each choice.
    """

    choices: Sequence[str]
    tournament: str
    ttl: int = DEFAULT_TTL
    expiration_ttl: int = DEFAULT_EXPIRATION_TTL
    prefix: str | None = None
    suffix: str | None = None
    uid: str | None = None
