from datetime import UTC, datetime, timedelta

from jose import jwt

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME = timedelta(hours=1)


def create_service_account_assertion(
    client_email: str,
    private_key: str,
    scopes: list[str],
    subject: str | None = None,
    private_key_id: str | None = None,
    audience: str = GOOGLE_TOKEN_URL,
    now: datetime | None = None,
) -> str:
    """Signed RS256 assertion for the OAuth JWT-bearer grant."""
    issued = now or datetime.now(UTC)
    claims = {
        "iss": client_email,
        "scope": " ".join(scopes),
        "aud": audience,
        "iat": int(issued.timestamp()),
        "exp": int((issued + ASSERTION_LIFETIME).timestamp()),
    }
    if subject:
        claims["sub"] = subject
    headers = {"kid": private_key_id} if private_key_id else None
    return jwt.encode(claims, private_key, algorithm="RS256", headers=headers)

