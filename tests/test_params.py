"""Tests for preferred_pictures/signing/params.py: builder, signing, encoding."""

import hashlib
import hmac

import pytest

from preferred_pictures.signing.params import (
    CHOOSE_SIGNING_ORDER,
    LEGACY_SIGNING_ORDER,
    SignedParams,
    build_signing_string,
    encode_query,
    sign,
)


class TestSignedParams:

    def test_preserves_insertion_order(self):
        params = SignedParams().add("b", "2").add("a", "1")
        assert list(params) == ["b", "a"]

    def test_ints_become_strings(self):
        params = SignedParams().add("ttl", 300)
        assert params.get("ttl") == "300"

    def test_sequences_become_tuples(self):
        params = SignedParams().add("choices", ["red", "green"])
        assert params.get("choices") == ("red", "green")

    def test_duplicate_rejected(self):
        params = SignedParams().add("uid", "x")
        with pytest.raises(KeyError):
            params.add("uid", "y")

    def test_add_optional_skips_none_and_empty(self):
        params = SignedParams()
        params.add_optional("choices_prefix", None)
        params.add_optional("choices_suffix", "")
        params.add_optional("destinations", [])
        assert len(params) == 0

    def test_add_optional_keeps_values(self):
        params = SignedParams()
        params.add_optional("choices_prefix", "https://x/")
        params.add_optional("destinations", ["a"])
        assert params.get("choices_prefix") == "https://x/"
        assert params.get("destinations") == ("a",)

    def test_add_flag(self):
        params = SignedParams().add_flag("go", True).add_flag("json", False)
        assert params.get("go") == "true"
        assert "json" not in params

    def test_get_missing_is_none(self):
        assert SignedParams().get("nope") is None


class TestBuildSigningString:

    def test_worked_example(self):
        params = (
            SignedParams()
            .add("choices", ["red", "green", "blue"])
            .add("expiration", 1000000)
            .add("tournament", "test-tournament")
            .add("uid", "U")
            .add("ttl", 300)
        )
        assert (
            build_signing_string(params, CHOOSE_SIGNING_ORDER)
            == "red,green,blue/1000000/test-tournament/300/U"
        )

    def test_order_independent_of_insertion(self):
        params = (
            SignedParams()
            .add("uid", "U")
            .add("json", "true")
            .add("choices_prefix", "p")
            .add("choices", ["a"])
        )
        assert build_signing_string(params, CHOOSE_SIGNING_ORDER) == "p/a/true/U"

    def test_unsigned_fields_ignored(self):
        params = SignedParams().add("choices", ["a"]).add("identity", "me")
        assert build_signing_string(params, CHOOSE_SIGNING_ORDER) == "a"

    def test_legacy_order(self):
        params = (
            SignedParams()
            .add("choices", "a,b")
            .add("expiration", 5)
            .add("tournament", "t")
            .add("uid", "U")
            .add("ttl", 1)
            .add("suffix", ".jpg")
        )
        assert build_signing_string(params, LEGACY_SIGNING_ORDER) == "a,b/5/.jpg/t/1/U"

    def test_empty_choices_leave_empty_segment(self):
        params = SignedParams().add("choices", []).add("uid", "U")
        assert build_signing_string(params, CHOOSE_SIGNING_ORDER) == "/U"


class TestSign:

    def test_matches_hmac_sha256(self):
        expected = hmac.new(b"k", b"msg", hashlib.sha256).hexdigest()
        assert sign("k", "msg") == expected

    def test_known_vector(self):
        assert (
            sign("secret123456", "red,green,blue/1000000/test-tournament/300/U")
            == "c088b8f651f14064908f35767ca7ecadb08836a8b50c77e8cec27fadf1c2ffca"
        )

    def test_lowercase_hex(self):
        digest = sign("k", "m")
        assert digest == digest.lower()
        assert len(digest) == 64


class TestEncodeQuery:

    def test_arrays_use_empty_brackets(self):
        params = SignedParams().add("choices", ["red", "green"])
        assert encode_query(params) == "choices%5B%5D=red&choices%5B%5D=green"

    def test_never_indexed(self):
        params = SignedParams().add("destinations", ["a", "b", "c"])
        assert "%5B0%5D" not in encode_query(params)

    def test_form_encoding(self):
        params = SignedParams().add("choices_prefix", "https://x.com/a b")
        assert encode_query(params) == "choices_prefix=https%3A%2F%2Fx.com%2Fa+b"

    def test_empty_sequence_emits_nothing(self):
        params = SignedParams().add("choices", []).add("uid", "U")
        assert encode_query(params) == "uid=U"
