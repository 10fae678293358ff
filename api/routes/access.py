"""Administrative routes for display access configuration."""
from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger

from api.dependencies import get_access_manager
from api.middleware.auth import current_actor, require_api_key
from api.schemas import AccessConfigRequest, AccessConfigResponse
from viewaccess.exceptions import StaleRoleReferenceError, UnknownAccessPluginError
from viewaccess.manager import DisplayAccessManager
from viewaccess.registry import plugin_definitions
from viewaccess.schemas import ActorModel, PluginDefinition

router = APIRouter(prefix="/api", dependencies=[Depends(require_api_key)])


def _describe(
    manager: DisplayAccessManager, view_id: str, display_id: str
) -> AccessConfigResponse:
    policy = manager.get_policy(view_id, display_id)
    try:
        summary = policy.summary_label(manager.role_store)
    except StaleRoleReferenceError as e:
        logger.warning(f"Summary unavailable for {view_id}:{display_id}: {e}")
        summary = None
    return AccessConfigResponse(
        view_id=view_id,
        display_id=display_id,
        type=policy.plugin_id,
        options=policy.to_options(),
        summary=summary,
        route_requirement=policy.to_route_requirement(),
    )


@router.get("/access/plugins", response_model=List[PluginDefinition])
def list_plugins():
    return plugin_definitions()


@router.get(
    "/displays/{view_id}/{display_id}/access", response_model=AccessConfigResponse
)
def get_access(
    view_id: str,
    display_id: str,
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    return _describe(manager, view_id, display_id)


@router.put(
    "/displays/{view_id}/{display_id}/access", response_model=AccessConfigResponse
)
def put_access(
    view_id: str,
    display_id: str,
    body: AccessConfigRequest,
    actor: ActorModel = Depends(current_actor),
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    try:
        result = manager.configure(
            view_id, display_id, body.type, body.options, user=actor.id
        )
    except UnknownAccessPluginError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not result.valid:
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Invalid access configuration",
                "errors": result.errors,
                "value": result.value,
            },
        )
    return _describe(manager, view_id, display_id)


@router.delete("/displays/{view_id}/{display_id}/access")
def delete_access(
    view_id: str,
    display_id: str,
    actor: ActorModel = Depends(current_actor),
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    if not manager.remove(view_id, display_id, user=actor.id):
        raise HTTPException(status_code=404, detail="No access configuration")
    return {"deleted": True}


@router.get("/displays/{view_id}/{display_id}/access/summary")
def get_summary(
    view_id: str,
    display_id: str,
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    try:
        return {"summary": manager.summary(view_id, display_id)}
    except StaleRoleReferenceError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get(
    "/displays/{view_id}/{display_id}/dependencies",
    response_model=Dict[str, List[str]],
)
def get_dependencies(
    view_id: str,
    display_id: str,
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    return manager.dependencies(view_id, display_id)


@router.post("/displays/{view_id}/{display_id}/access/check")
def check_access(
    view_id: str,
    display_id: str,
    actor: ActorModel,
    manager: DisplayAccessManager = Depends(get_access_manager),
):
    return {"granted": manager.check_access(view_id, display_id, actor)}
