#Description: Request signing against Kraken's published example and secret decoding.

import base64

import pytest

from utils.security import decode_secret, sign_request

# Example from Kraken's REST authentication docs.
DOC_SECRET = "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="
DOC_PATH = "/0/private/AddOrder"
DOC_NONCE = "1616492376594"
DOC_BODY = "nonce=1616492376594&ordertype=limit&pair=XBTUSD&price=37500&type=buy&volume=1.25"
DOC_SIGNATURE = "4/dpxb3iT4tp/ZCVEwSnEsLxx0bqyhLpdfOpc6fn7OR8+UClSV5n9E6aSS8MPtnRfp32bAb0nmbRn6H8ndwLUQ=="


def test_golden_vector():
    assert sign_request(decode_secret(DOC_SECRET), DOC_PATH, DOC_NONCE, DOC_BODY) == DOC_SIGNATURE


def test_signing_is_deterministic():
    secret = decode_secret(DOC_SECRET)
    first = sign_request(secret, DOC_PATH, "42", "nonce=42&pair=XBTUSD")
    assert all(sign_request(secret, DOC_PATH, "42", "nonce=42&pair=XBTUSD") == first for _ in range(5))


def test_signature_depends_on_every_input():
    secret = decode_secret(DOC_SECRET)
    base = sign_request(secret, DOC_PATH, DOC_NONCE, DOC_BODY)
    assert sign_request(secret, "/0/private/Balance", DOC_NONCE, DOC_BODY) != base
    assert sign_request(secret, DOC_PATH, "1616492376595", DOC_BODY) != base
    assert sign_request(secret, DOC_PATH, DOC_NONCE, DOC_BODY + "&validate=true") != base
    assert sign_request(b"other", DOC_PATH, DOC_NONCE, DOC_BODY) != base


def test_signature_is_base64_sha512():
    sig = sign_request(decode_secret(DOC_SECRET), DOC_PATH, DOC_NONCE, DOC_BODY)
    assert len(base64.b64decode(sig)) == 64


@pytest.mark.parametrize("bad", ["", "not base64!!", "abc"])
def test_decode_secret_rejects_invalid(bad):
    with pytest.raises(ValueError):
        decode_secret(bad)
