"""Request parameter assembly, signing and query encoding.

The PreferredPictures API verifies a request by rebuilding a signing
string from a fixed field order and comparing HMAC-SHA256 digests.
Field order in the signing string is independent of the order in which
parameters appear in the query string.
"""

import hashlib
import hmac
from collections.abc import Iterable, Iterator, Sequence
from urllib.parse import urlencode

ParamValue = str | tuple[str, ...]

# Canonical signing orders, one per API call shape
CHOOSE_SIGNING_ORDER = (
    "choices_prefix",
    "choices_suffix",
    "choices",
    "destinations_prefix",
    "destinations_suffix",
    "destinations",
    "expiration",
    "go",
    "json",
    "tournament",
    "ttl",
    "uid",
)

LEGACY_SIGNING_ORDER = (
    "choices",
    "expiration",
    "prefix",
    "suffix",
    "tournament",
    "ttl",
    "uid",
)

# Appended after signing, never part of the signing string
UNSIGNED_FIELDS = ("identity", "signature")


class SignedParams:
    """Ordered (name, value) pairs holding only the fields actually present."""

    def __init__(self):
        self._pairs: list[tuple[str, ParamValue]] = []

    def add(self, name: str, value: str | int | Sequence[str]) -> "SignedParams":
        if name in self:
            raise KeyError(f"Duplicate request parameter: {name}")
        if isinstance(value, (str, int)):
            self._pairs.append((name, str(value)))
        else:
            self._pairs.append((name, tuple(value)))
        return self

    def add_optional(self, name: str, value: str | Sequence[str] | None) -> "SignedParams":
        """Add the field only when it carries a non-empty value."""
        if value:
            self.add(name, value)
        return self

    def add_flag(self, name: str, enabled: bool) -> "SignedParams":
        """Flags travel as the literal "true" and are left out when false."""
        if enabled:
            self.add(name, "true")
        return self

    def get(self, name: str) -> ParamValue | None:
        for key, value in self._pairs:
            if key == name:
                return value
        return None

    def items(self) -> list[tuple[str, ParamValue]]:
        return list(self._pairs)

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)


def _render(value: ParamValue) -> str:
    if isinstance(value, tuple):
        return ",".join(value)
    return value


def build_signing_string(params: SignedParams, order: Iterable[str]) -> str:
    """Join the present fields, in canonical order, with "/"."""
    return "/".join(_render(params.get(name)) for name in order if name in params)


def sign(secret_key: str, message: str) -> str:
    """Lowercase hex HMAC-SHA256 of `message`."""
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def encode_query(params: SignedParams) -> str:
    """Form-encode params, emitting sequences as repeated `name[]` keys."""
    pairs: list[tuple[str, str]] = []
    for name, value in params.items():
        if isinstance(value, tuple):
            pairs.extend((f"{name}[]", item) for item in value)
        else:
            pairs.append((name, value))
    return urlencode(pairs)
