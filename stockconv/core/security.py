from datetime import datetime, timedelta, timezone

from jose import jwt

from stockconv.core.config import settings


def create_access_token(
    subject: str,
    role: str,
    depot_id: int | None = None,
    expires_minutes: int = 60,
) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": subject, "role": role, "type": "access", "iss": settings.issuer, "exp": expires_at}
    if depot_id is not None:
        payload["depot_id"] = depot_id
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm], issuer=settings.issuer)
