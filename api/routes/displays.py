"""Display routes guarded by their configured access policy."""
from fastapi import APIRouter, Depends

from api.middleware.access import require_display_access
from viewaccess.schemas import ActorModel

router = APIRouter()


@router.get("/displays/{view_id}/{display_id}")
def show_display(
    view_id: str,
    display_id: str,
    actor: ActorModel = Depends(require_display_access),
):
    return {"view_id": view_id, "display_id": display_id, "actor": actor.id}
