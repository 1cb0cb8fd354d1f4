"""Tests for qr.uri."""

import pytest

from core.errors import InvalidArgument
from qr.uri import KeyUriOptions, build_key_uri, build_qr_url

SECRET = "MEP3EYVA6XNFNVNM"


# ── Key URI ───────────────────────────────────────────────────────────────────

def test_build_basic_totp() -> None:
    assert (
        build_key_uri("totp", "user@host.com", SECRET)
        == "otpauth://totp/user@host.com?secret=MEP3EYVA6XNFNVNM"
    )


def test_build_hotp_with_counter() -> None:
    assert (
        build_key_uri("hotp", "user@host.com", SECRET, 1234)
        == "otpauth://hotp/user@host.com?secret=MEP3EYVA6XNFNVNM&counter=1234"
    )


def test_build_counter_zero() -> None:
    assert build_key_uri("hotp", "bob", SECRET, 0).endswith("&counter=0")


def test_build_totp_ignores_counter() -> None:
    assert build_key_uri("totp", "bob", SECRET, 5) == f"otpauth://totp/bob?secret={SECRET}"


def test_build_issuer_in_label() -> None:
    assert (
        build_key_uri("hotp", "issuer:user@host.com", SECRET, 1234)
        == "otpauth://hotp/issuer%3Auser@host.com?secret=MEP3EYVA6XNFNVNM&counter=1234"
    )


def test_build_label_with_spaces() -> None:
    assert (
        build_key_uri("hotp", "an issuer: user@host.com", SECRET, 1234)
        == "otpauth://hotp/an%20issuer%3A%20user@host.com"
        "?secret=MEP3EYVA6XNFNVNM&counter=1234"
    )


def test_build_issuer_option() -> None:
    assert (
        build_key_uri(
            "hotp", "an issuer:user@host.com", SECRET, 1234, {"issuer": "an issuer"}
        )
        == "otpauth://hotp/an%20issuer%3Auser@host.com"
        "?secret=MEP3EYVA6XNFNVNM&counter=1234&issuer=an%20issuer"
    )


def test_build_algorithm_option() -> None:
    assert (
        build_key_uri("hotp", "user@host.com", "secret", 123, {"algorithm": "SHA2"})
        == "otpauth://hotp/user@host.com?secret=secret&counter=123&algorithm=SHA2"
    )


@pytest.mark.parametrize("digits", [8, "8", 6])
def test_build_valid_digits_emitted(digits: object) -> None:
    uri = build_key_uri("hotp", "user@host.com", "secret", 123, {"digits": digits})
    assert uri == f"otpauth://hotp/user@host.com?secret=secret&counter=123&digits={digits}"


def test_build_period_option() -> None:
    assert (
        build_key_uri("totp", "user@host.com", "secret", None, {"period": 20})
        == "otpauth://totp/user@host.com?secret=secret&period=20"
    )


def test_build_image_option() -> None:
    assert (
        build_key_uri("totp", "user@host.com", "secret", None, {"image": "the_image"})
        == "otpauth://totp/user@host.com?secret=secret&image=the_image"
    )


def test_build_preserves_caller_order() -> None:
    options = {"period": 20, "issuer": "Acme Co", "color": "a/b", "digits": 8}
    assert (
        build_key_uri("totp", "Acme Co:alice", "secret", None, options)
        == "otpauth://totp/Acme%20Co%3Aalice?secret=secret"
        "&period=20&issuer=Acme%20Co&color=a%2Fb&digits=8"
    )


def test_build_options_from_pairs() -> None:
    pairs = [("foo", "1"), ("issuer", "X"), ("bar", "2")]
    assert build_key_uri("totp", "a", "s", None, pairs).endswith("?secret=s&foo=1&issuer=X&bar=2")


def test_build_options_dataclass_field_order() -> None:
    options = KeyUriOptions(digits=6, issuer="Acme", extra=(("foo", "bar"),))
    assert build_key_uri("totp", "a", "s", None, options) == (
        "otpauth://totp/a?secret=s&issuer=Acme&digits=6&foo=bar"
    )


def test_build_never_emits_size() -> None:
    uri = build_key_uri("totp", "a", "s", None, {"width": 300, "issuer": "X", "height": 300})
    assert uri == "otpauth://totp/a?secret=s&issuer=X"


def test_options_from_mapping_splits_fields() -> None:
    options = KeyUriOptions.from_mapping({"issuer": "X", "foo": "bar"})
    assert options.issuer == "X"
    assert options.extra == (("foo", "bar"),)
    assert options.order == ("issuer", "foo")


# ── Validation ────────────────────────────────────────────────────────────────

def test_build_invalid_type() -> None:
    with pytest.raises(InvalidArgument, match="Type has to be of allowed types list"):
        build_key_uri("error_type", "user@host.com", "secret")


def test_build_empty_label() -> None:
    with pytest.raises(InvalidArgument, match="Label has to be one or more printable characters"):
        build_key_uri("hotp", "", "secret")


def test_build_non_printable_label() -> None:
    with pytest.raises(InvalidArgument, match="printable"):
        build_key_uri("totp", "bad\nlabel", "secret")


def test_build_label_with_colons() -> None:
    with pytest.raises(InvalidArgument, match="illegal colon characters"):
        build_key_uri("hotp", "illegal:char1:char2:char3:char4", "secret")


def test_build_label_with_two_colons() -> None:
    with pytest.raises(InvalidArgument, match="illegal colon characters"):
        build_key_uri("totp", "a:b:c", "secret")


def test_build_empty_secret() -> None:
    with pytest.raises(InvalidArgument, match="No secret present"):
        build_key_uri("hotp", "user@host.com", "")


def test_build_hotp_without_counter() -> None:
    with pytest.raises(InvalidArgument, match="Counter required for hotp"):
        build_key_uri("hotp", "user@host.com", "secret")


def test_build_hotp_negative_counter() -> None:
    with pytest.raises(InvalidArgument, match="counter"):
        build_key_uri("hotp", "user@host.com", "secret", -1)


def test_build_invalid_digits() -> None:
    with pytest.raises(InvalidArgument, match="Digits can only have the values 6 or 8, 100 given"):
        build_key_uri("hotp", "user@host.com", "secret", 123, {"digits": 100})


def test_validation_order() -> None:
    # Type is checked before label, label before secret.
    with pytest.raises(InvalidArgument, match="Type"):
        build_key_uri("steam", "", "")
    with pytest.raises(InvalidArgument, match="Label"):
        build_key_uri("totp", "", "")
    with pytest.raises(InvalidArgument, match="secret"):
        build_key_uri("hotp", "a", "", None, {"digits": 100})


# ── QR URL ────────────────────────────────────────────────────────────────────

def test_qr_url_totp() -> None:
    assert build_qr_url("totp", "user@host.com", SECRET) == (
        "https://chart.googleapis.com/chart?chs=200x200&cht=qr&chld=M|0"
        "&chl=otpauth%3A%2F%2Ftotp%2Fuser%40host.com%3Fsecret%3DMEP3EYVA6XNFNVNM"
    )


def test_qr_url_hotp() -> None:
    assert build_qr_url("hotp", "user@host.com", SECRET, 1234) == (
        "https://chart.googleapis.com/chart?chs=200x200&cht=qr&chld=M|0"
        "&chl=otpauth%3A%2F%2Fhotp%2Fuser%40host.com%3Fsecret%3DMEP3EYVA6XNFNVNM"
        "%26counter%3D1234"
    )


def test_qr_url_custom_size() -> None:
    assert build_qr_url(
        "totp", "user@host.com", SECRET, None, {"height": 300, "width": 300}
    ) == (
        "https://chart.googleapis.com/chart?chs=300x300&cht=qr&chld=M|0"
        "&chl=otpauth%3A%2F%2Ftotp%2Fuser%40host.com%3Fsecret%3DMEP3EYVA6XNFNVNM"
    )


def test_qr_url_forwards_other_options() -> None:
    url = build_qr_url("totp", "a", "s", None, {"width": 100, "issuer": "A B"})
    assert url.startswith("https://chart.googleapis.com/chart?chs=100x200&")
    assert url.endswith("&chl=otpauth%3A%2F%2Ftotp%2Fa%3Fsecret%3Ds%26issuer%3DA%2520B")


def test_qr_url_invalid_size() -> None:
    with pytest.raises(InvalidArgument, match="width"):
        build_qr_url("totp", "a", "s", None, {"width": 0})


def test_qr_url_propagates_uri_errors() -> None:
    with pytest.raises(InvalidArgument, match="Counter required"):
        build_qr_url("hotp", "a", "s")


# ── Option edge cases ─────────────────────────────────────────────────────────

def test_build_repeated_extra_keys_kept_in_order() -> None:
    pairs = [("foo", "1"), ("bar", "x"), ("foo", "2")]
    assert build_key_uri("totp", "a", "s", None, pairs) == (
        "otpauth://totp/a?secret=s&foo=1&bar=x&foo=2"
    )


def test_options_dataclass_repeated_extra_keys() -> None:
    options = KeyUriOptions(extra=(("foo", "1"), ("foo", "2")))
    assert build_key_uri("totp", "a", "s", None, options).endswith("?secret=s&foo=1&foo=2")


def test_options_extra_cannot_shadow_field() -> None:
    with pytest.raises(InvalidArgument, match="issuer"):
        KeyUriOptions(extra=(("issuer", "X"),))


def test_options_duplicate_field_rejected() -> None:
    with pytest.raises(InvalidArgument, match="Duplicate option 'issuer'"):
        build_key_uri("totp", "a", "s", None, [("issuer", "A"), ("issuer", "B")])


def test_build_non_ascii_bytes_secret() -> None:
    with pytest.raises(InvalidArgument, match="Secret must be ASCII"):
        build_key_uri("totp", "a", b"\xff\xfe")


def test_build_ascii_bytes_secret() -> None:
    assert build_key_uri("totp", "a", b"MEP3") == "otpauth://totp/a?secret=MEP3"


def test_build_secret_is_percent_encoded() -> None:
    assert build_key_uri("totp", "a", "ab&issuer=Evil") == (
        "otpauth://totp/a?secret=ab%26issuer%3DEvil"
    )


def test_build_float_digits_emitted_as_int() -> None:
    uri = build_key_uri("totp", "a", "s", None, {"digits": 8.0})
    assert uri == "otpauth://totp/a?secret=s&digits=8"


def test_build_fractional_digits_rejected() -> None:
    with pytest.raises(InvalidArgument, match="8.5 given"):
        build_key_uri("totp", "a", "s", None, {"digits": 8.5})
