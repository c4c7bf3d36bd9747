import base64
import hashlib
import hmac
import json
import time

from exceptions import Unauthorized


def _b64url_decode(segment: str) -> bytes:
    """Base64url decode, restoring the stripped padding."""
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _b64url(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _sign_hs256(signing_input: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return _b64url(digest)


def extract_token(authorization: str | None) -> str:
    """Accept both `Bearer <token>` and a bare token in the Authorization header."""
    if not authorization or not authorization.strip():
        raise Unauthorized("No token")
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer" and rest.strip():
        return rest.strip()
    return value


def verify_token(token: str, secret: str, now: float | None = None) -> str:
    """Check an HS256 JWT and return the user id from its `id` claim.

    Tokens are issued by the auth service; this side only verifies them.
    """
    if not secret:
        raise Unauthorized("Token verification is not configured")
    try:
        header_b64, claims_b64, signature = token.split(".")
        header = json.loads(_b64url_decode(header_b64))
        claims = json.loads(_b64url_decode(claims_b64))
    except ValueError as e:
        raise Unauthorized("Invalid token") from e

    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise Unauthorized("Invalid token")

    expected = _sign_hs256(f"{header_b64}.{claims_b64}".encode(), secret)
    if not hmac.compare_digest(expected, signature):
        raise Unauthorized("Invalid token")

    if not isinstance(claims, dict):
        raise Unauthorized("Invalid token")
    exp = claims.get("exp")
    if exp is not None and not isinstance(exp, (int, float)):
        raise Unauthorized("Invalid token")
    if exp is not None and (now if now is not None else time.time()) >= exp:
        raise Unauthorized("Token expired")

    user_id = claims.get("id")
    if not user_id:
        raise Unauthorized("Invalid token")
    return str(user_id)


def make_token(user_id: str, secret: str, ttl_seconds: int = 3600, now: float | None = None) -> str:
    """Sign a token the way the auth service does. Used by fixtures and local tooling."""
    issued = int(now if now is not None else time.time())
    header = _b64url(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
    claims = _b64url(json.dumps({"id": user_id, "iat": issued, "exp": issued + ttl_seconds}).encode())
    signing_input = f"{header}.{claims}"
    return f"{signing_input}.{_sign_hs256(signing_input.encode(), secret)}"
