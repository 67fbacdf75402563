#Description: Kraken private API request signing (API-Sign header).

import base64
import binascii
import hashlib
import hmac


def decode_secret(secret: str) -> bytes:
    """Decode the base64 API secret handed out by Kraken.

    Done once when the adapter is built; the decoded bytes are what gets kept.
    """
    if not secret:
        raise ValueError("API secret cannot be empty")
    try:
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 API secret: {e}") from e


def sign_request(secret: bytes, path: str, nonce: str, encoded_body: str) -> str:
    """Compute the API-Sign value for one private request.

    HMAC-SHA512 keyed with the decoded secret over ``path + SHA256(nonce + body)``,
    base64 encoded. ``nonce`` must be the same value sent in the form body.
    """
    digest = hashlib.sha256((nonce + encoded_body).encode()).digest()
    mac = hmac.new(secret, path.encode() + digest, hashlib.sha512)
    return base64.b64encode(mac.digest()).decode()
