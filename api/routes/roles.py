"""Role administration routes."""
from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_access_manager
from api.middleware.auth import current_actor, require_api_key
from api.schemas import RoleRequest
from viewaccess.manager import DisplayAccessManager
from viewaccess.schemas import ActorModel

router = APIRouter(prefix="/api/roles", dependencies=[Depends(require_api_key)])


@router.get("", response_model=Dict[str, str])
def list_roles(manager: DisplayAccessManager = Depends(get_access_manager)):
    """Role id to label, in the order the role checkboxes are offered."""
    return manager.role_options()


@router.put("/{role_id}")
def put_role(
    role_id: str,
    body: RoleRequest,
    actor: ActorModel = Depends(current_actor),
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    try:
        record = manager.save_role(role_id, body.label, body.weight, user=actor.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return record.model_dump()


@router.delete("/{role_id}")
def delete_role(
    role_id: str,
    actor: ActorModel = Depends(current_actor),
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    if not manager.delete_role(role_id, user=actor.id):
        raise HTTPException(status_code=404, detail="Role not found")
    return {"deleted": True}
