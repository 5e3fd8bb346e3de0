"""Signed URL construction for the PreferredPictures API.

Two call shapes are supported and kept separate, since each has its own
wire format and signing order that deployed signatures depend on:

- /choose: choices and destinations sent as repeated `name[]` params.
- /choose-url: the older shape, choices sent as one comma-joined value.
"""

import hmac
import time
from collections.abc import Callable, Sequence
from urllib.parse import parse_qsl, urlsplit

from preferred_pictures.client.errors import TooManyChoicesError
from preferred_pictures.client.models import (
    DEFAULT_ENDPOINT,
    DEFAULT_EXPIRATION_TTL,
    DEFAULT_MAX_CHOICES,
    DEFAULT_TTL,
    ChooseRequest,
    ClientConfig,
    LegacyChooseRequest,
)
from preferred_pictures.config.settings import Settings, get_settings
from preferred_pictures.signing.params import (
    CHOOSE_SIGNING_ORDER,
    LEGACY_SIGNING_ORDER,
    UNSIGNED_FIELDS,
    SignedParams,
    build_signing_string,
    encode_query,
    sign,
)
from preferred_pictures.signing.random_source import RandomSource, generate_correlation_id


def _check_choice_count(config: ClientConfig, choices: Sequence[str]) -> None:
    if len(choices) > config.max_choices:
        raise TooManyChoicesError(len(choices), config.max_choices)


def _now() -> int:
    return int(time.time())


def _sign_and_encode(
    config: ClientConfig, params: SignedParams, order: Sequence[str]
) -> str:
    signature = sign(config.secret_key, build_signing_string(params, order))
    params.add("identity", config.identity)
    params.add("signature", signature)
    return encode_query(params)


def build_choose_url(
    config: ClientConfig,
    request: ChooseRequest,
    *,
    now: int | None = None,
    random_source: RandomSource | None = None,
) -> str:
    """Build a signed URL for a call to /choose.

    Args:
        config: Account identity, secret and endpoint.
        request: Choices, tournament and options for this call.
        now: Unix timestamp the expiration is counted from. Defaults to
            the current time.
        random_source: Source used when a uid has to be generated.

    Raises:
        TooManyChoicesError: More choices than config.max_choices.
    """
    _check_choice_count(config, request.choices)

    timestamp = _now() if now is None else now
    params = SignedParams()
    params.add("choices", request.choices)
    params.add("expiration", timestamp + request.expiration_ttl)
    params.add("tournament", request.tournament)
    params.add("uid", request.uid or generate_correlation_id(source=random_source))
    params.add("ttl", request.ttl)

    params.add_optional("choices_prefix", request.choices_prefix)
    params.add_optional("choices_suffix", request.choices_suffix)
    params.add_optional("destinations", request.destinations)
    params.add_optional("destinations_prefix", request.destinations_prefix)
    params.add_optional("destinations_suffix", request.destinations_suffix)
    params.add_flag("go", request.go)
    params.add_flag("json", request.json)

    query = _sign_and_encode(config, params, CHOOSE_SIGNING_ORDER)
    return f"{config.endpoint}choose?{query}"


def build_choose_url_legacy(
    config: ClientConfig,
    request: LegacyChooseRequest,
    *,
    now: int | None = None,
    random_source: RandomSource | None = None,
) -> str:
    """Build a signed URL for the older /choose-url call shape."""
    _check_choice_count(config, request.choices)

    timestamp = _now() if now is None else now
    params = SignedParams()
    params.add("choices", ",".join(request.choices))
    params.add("expiration", timestamp + request.expiration_ttl)
    params.add("tournament", request.tournament)
    params.add("uid", request.uid or generate_correlation_id(source=random_source))
    params.add("ttl", request.ttl)

    params.add_optional("prefix", request.prefix)
    params.add_optional("suffix", request.suffix)

    query = _sign_and_encode(config, params, LEGACY_SIGNING_ORDER)
    return f"{config.endpoint}choose-url?{query}"


def verify_signature(config: ClientConfig, url: str, *, legacy: bool = False) -> bool:
    """Check a signed URL (or its bare query string) against config's secret.

    Rebuilds the signing string the way the API does. Expiration is not
    checked here.
    """
    query = urlsplit(url).query if "?" in url else url

    scalars: dict[str, str] = {}
    arrays: dict[str, list[str]] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key.endswith("[]"):
            arrays.setdefault(key[:-2], []).append(value)
        else:
            scalars[key] = value

    # A field sent both as `name` and `name[]` was not built by this library
    if scalars.keys() & arrays.keys():
        return False

    signature = scalars.get("signature")
    if signature is None:
        return False

    params = SignedParams()
    for name, value in [*scalars.items(), *arrays.items()]:
        if name not in UNSIGNED_FIELDS:
            params.add(name, value)
    # Empty choices are signed but leave no trace in the query string
    if "choices" not in params:
        params.add("choices", "" if legacy else ())

    order = LEGACY_SIGNING_ORDER if legacy else CHOOSE_SIGNING_ORDER
    expected = sign(config.secret_key, build_signing_string(params, order))
    return hmac.compare_digest(expected, signature)


class Client:
    """PreferredPictures client holding the account config.

    The config is frozen, so one Client can be shared between threads.
    """

    def __init__(
        self,
        identity: str,
        secret_key: str,
        max_choices: int = DEFAULT_MAX_CHOICES,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        random_source: RandomSource | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = ClientConfig(
            identity=identity,
            secret_key=secret_key,
            endpoint=endpoint,
            max_choices=max_choices,
        )
        self._random_source = random_source
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> "Client":
        config = ClientConfig.from_settings(settings or get_settings())
        return cls(
            identity=config.identity,
            secret_key=config.secret_key,
            max_choices=config.max_choices,
            endpoint=config.endpoint,
            **kwargs,
        )

    @property
    def identity(self) -> str:
        return self.config.identity

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def max_choices(self) -> int:
        return self.config.max_choices

    def build_choose_url(
        self,
        choices: Sequence[str],
        tournament: str,
        ttl: int = DEFAULT_TTL,
        expiration_ttl: int = DEFAULT_EXPIRATION_TTL,
        choices_prefix: str | None = None,
        choices_suffix: str | None = None,
        destinations: Sequence[str] | None = None,
        destinations_prefix: str | None = None,
        destinations_suffix: str | None = None,
        go: bool = False,
        json: bool = False,
        uid: str | None = None,
    ) -> str:
        request = ChooseRequest(
            choices=choices,
            tournament=tournament,
            ttl=ttl,
            expiration_ttl=expiration_ttl,
            choices_prefix=choices_prefix,
            choices_suffix=choices_suffix,
            destinations=destinations,
            destinations_prefix=destinations_prefix,
            destinations_suffix=destinations_suffix,
            go=go,
            json=json,
            uid=uid,
        )
        return build_choose_url(
            self.config,
            request,
            now=int(self._clock()),
            random_source=self._random_source,
        )

    def build_choose_url_legacy(
        self,
        choices: Sequence[str],
        tournament: str,
        ttl: int = DEFAULT_TTL,
        expiration_ttl: int = DEFAULT_EXPIRATION_TTL,
        prefix: str | None = None,
        suffix: str | None = None,
        uid: str | None = None,
    ) -> str:
        request = LegacyChooseRequest(
            choices=choices,
            tournament=tournament,
            ttl=ttl,
            expiration_ttl=expiration_ttl,
            prefix=prefix,
            suffix=suffix,
            uid=uid,
        )
        return build_choose_url_legacy(
            self.config,
            request,
            now=int(self._clock()),
            random_source=self._random_source,
        )

    def verify_signature(self, url: str, *, legacy: bool = False) -> bool:
        return verify_signature(self.config, url, legacy=legacy)
