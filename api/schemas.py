from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class AccessConfigRequest(BaseModel):
    type: str = "none"
    options: Dict[str, Any] = Field(default_factory=dict)


class AccessConfigResponse(BaseModel):
    view_id: str
    display_id: str
    type: str
    options: Dict[str, Any]
    summary: Optional[str] = None
    route_requirement: Optional[str] = None


class RoleRequest(BaseModel):
    label: str
    weight: int = 0
