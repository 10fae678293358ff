"""Authentication dependency helpers for FastAPI routes.

`require_api_key` guards administrative routes; `current_actor` builds the
actor from headers set by the upstream gateway.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from api.auth import parse_actor_roles, verify_api_key
from viewaccess.config import get_settings
from viewaccess.schemas import ActorModel

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(api_key: Optional[str] = Security(api_key_header)) -> bool:
    if not verify_api_key(api_key):
        raise HTTPException(status_code=403, detail="Invalid API Key")
    return True


def current_actor(request: Request) -> ActorModel:
    header = get_settings().actor_roles_header
    return ActorModel(
        id=request.headers.get("X-Actor-Id"),
        roles=parse_actor_roles(request.headers.get(header)),
    )
