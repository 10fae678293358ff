"""Dispatch-time enforcement of a display's route requirement."""
from __future__ import annotations

from fastapi import Depends, HTTPException
from loguru import logger

from api.dependencies import get_access_manager
from api.middleware.auth import current_actor
from viewaccess.manager import DisplayAccessManager
from viewaccess.metrics import ACCESS_CHECK_COUNTER
from viewaccess.requirements import role_requirement_allows
from viewaccess.schemas import ActorModel


def require_display_access(
    view_id: str,
    display_id: str,
    actor: ActorModel = Depends(current_actor),
    manager: DisplayAccessManager = Depends(get_access_manager),
) -> ActorModel:
    """Allow the request only if the actor satisfies the display's policy.

    The stored policy contributes a `_role` requirement string that is matched
    here; a policy without a requirement falls back to its own evaluation.
    """
    policy = manager.get_policy(view_id, display_id)
    requirement = policy.to_route_requirement()
    if requirement is None:
        granted = policy.evaluate(actor)
    else:
        granted = role_requirement_allows(requirement, actor.roles)

    ACCESS_CHECK_COUNTER.labels(
        plugin=policy.plugin_id, result="granted" if granted else "denied"
    ).inc()
    if not granted:
        logger.info(f"Denied {view_id}:{display_id} to actor {actor.id or 'anonymous'}")
        raise HTTPException(status_code=403, detail="Access denied")
    return actor
