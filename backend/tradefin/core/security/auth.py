from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import jwt
from jwt import PyJWKClient
from sqlalchemy import select
from starlette.requests import Request

from tradefin.core.config import settings
from tradefin.core.db.models import User
from tradefin.core.db.session import get_session_local
from tradefin.shared.enums import Env, Role


@dataclass(frozen=True)
class Actor:
    username: str
    role: Role
    full_name: str | None = None
    email: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.OFFICER, Role.RISK)


def _parse_dev_actor_header(raw: str) -> Actor:
    """
    DEV ONLY: X-DEV-ACTOR header payload as JSON.

    Example:
      {"username":"jdoe","role":"CUSTOMER","full_name":"Jane Doe","email":"jane@corp.test"}
    """
    payload = json.loads(raw)
    return Actor(
        username=str(payload["username"]),
        role=Role(str(payload.get("role", Role.CUSTOMER.value)).upper()),
        full_name=payload.get("full_name"),
        email=payload.get("email"),
    )


def _get_bearer_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if not auth:
        return None
    if not auth.lower().startswith("bearer "):
        return None
    return auth.split(" ", 1)[1].strip()


def _verify_jwt(token: str) -> dict[str, Any]:
    if not settings.oidc_jwks_url:
        raise NotImplementedError("OIDC JWKS URL is not configured")
    jwk_client = PyJWKClient(str(settings.oidc_jwks_url))
    signing_key = jwk_client.get_signing_key_from_jwt(token)

    options = {"verify_aud": bool(settings.oidc_audience), "verify_iss": bool(settings.oidc_issuer)}
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["RS256"],
        audience=settings.oidc_audience,
        issuer=settings.oidc_issuer,
        options=options,
    )


def _extract_claim_role(claims: dict[str, Any]) -> Role | None:
    for value in claims.get("roles") or []:
        try:
            return Role(str(value).upper())
        except ValueError:
            continue
    return None


def _load_user(username: str) -> User | None:
    session = get_session_local()()
    try:
        return session.execute(select(User).where(User.username == username, User.is_active.is_(True))).scalar_one_or_none()
    finally:
        session.close()


def actor_from_request(request: Request) -> Actor:
    if settings.env == Env.dev:
        raw = request.headers.get(settings.dev_actor_header)
        if raw:
            return _parse_dev_actor_header(raw)

    token = _get_bearer_token(request)
    if not token:
        raise PermissionError("Missing bearer token")

    claims = _verify_jwt(token)
    username = str(claims.get("preferred_username") or claims.get("upn") or claims.get("sub") or "")
    if not username:
        raise PermissionError("Token carries no username")

    user = _load_user(username)
    role = _extract_claim_role(claims)
    if role is None and user is not None:
        role = Role(user.role)

    return Actor(
        username=username,
        role=role or Role.CUSTOMER,
        full_name=claims.get("name") or (user.full_name if user else None),
        email=claims.get("email") or (user.email if user else None),
    )
