from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

import jwt

from inventory_ledger.config import get_settings
from inventory_ledger.core.constants import (
    ADMIN_ACTIONS,
    ROLE_ADMIN,
    ROLE_STAFF,
    ROLE_VIEWER,
    VIEW_INVENTORY,
)
from inventory_ledger.core.errors import AuthorizationError


@dataclass(frozen=True)
class Actor:
    id: str
    role: str = ROLE_STAFF


def _load_api_keys() -> dict[str, str]:
    """API key -> role. The admin key is the only one granted the admin role."""
    settings = get_settings()
    keys = {}
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys[value] = ROLE_STAFF
    if settings.ADMIN_API_KEY:
        keys[settings.ADMIN_API_KEY.strip()] = ROLE_ADMIN
    return keys


def _key_fingerprint(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:12]


def _match_api_key(api_key: str, keys: dict[str, str]) -> Optional[str]:
    for known, role in keys.items():
        if hmac.compare_digest(api_key, known):
            return role
    return None


def _get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_jwt(token: str) -> dict:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise AuthorizationError("JWT auth is not configured")

    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except jwt.PyJWTError as exc:
        raise AuthorizationError("Invalid JWT") from exc


def authenticate_request(
    api_key: Optional[str],
    authorization: Optional[str],
) -> Optional[Actor]:
    """Resolve request credentials to an actor, or ``None`` when anonymous."""
    settings = get_settings()
    keys = _load_api_keys()

    if api_key and not settings.JWT_REQUIRED:
        role = _match_api_key(api_key, keys)
        if role:
            return Actor(id="api-key:{}".format(_key_fingerprint(api_key)), role=role)

    token = _get_bearer_token(authorization)
    if token:
        try:
            payload = _decode_jwt(token)
        except AuthorizationError:
            if settings.JWT_REQUIRED:
                raise
            return None
        subject = payload.get("sub")
        if not subject:
            raise AuthorizationError("JWT is missing a subject")
        return Actor(id=str(subject), role=str(payload.get("role") or ROLE_STAFF))

    return None


def authorize(actor: Optional[Actor], action: str) -> None:
    if actor is None:
        raise AuthorizationError("Authentication required")
    if actor.role == ROLE_ADMIN:
        return
    if action in ADMIN_ACTIONS:
        raise AuthorizationError("Insufficient permissions for {}".format(action))
    if actor.role == ROLE_VIEWER and action != VIEW_INVENTORY:
        raise AuthorizationError("Insufficient permissions for {}".format(action))


__all__ = ["Actor", "authenticate_request", "authorize"]
