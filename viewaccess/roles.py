"""Role records and the stores that resolve them."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from viewaccess.models import DatabaseManager, Role

ROLE_DEPENDENCY_KEY = "config"


class RoleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    weight: int = 0

    @property
    def dependency_key(self) -> str:
        return ROLE_DEPENDENCY_KEY

    @property
    def dependency_name(self) -> str:
        return f"user.role.{self.id}"


@runtime_checkable
class RoleStore(Protocol):
    def load(self, role_id: str) -> Optional[RoleRecord]: ...


@runtime_checkable
class RoleNameLookup(Protocol):
    def names_by_id(self) -> Mapping[str, str]: ...


class InMemoryRoleStore:
    """Dict-backed role store, also usable as a name lookup."""

    def __init__(self, roles: Iterable[RoleRecord] = ()):
        self._roles: Dict[str, RoleRecord] = {r.id: r for r in roles}

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> "InMemoryRoleStore":
        return cls(
            RoleRecord(id=rid, label=label, weight=i)
            for i, (rid, label) in enumerate(labels.items())
        )

    def add(self, record: RoleRecord) -> None:
        self._roles[record.id] = record

    def load(self, role_id: str) -> Optional[RoleRecord]:
        return self._roles.get(role_id)

    def names_by_id(self) -> Dict[str, str]:
        ordered = sorted(self._roles.values(), key=lambda r: (r.weight, r.id))
        return {r.id: r.label for r in ordered}


class SqlRoleStore:
    """Role store over the ``roles`` table."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def load(self, role_id: str) -> Optional[RoleRecord]:
        with self.db.get_session_context() as session:
            row = session.get(Role, role_id)
            if row is None:
                return None
            return RoleRecord(id=row.id, label=row.label, weight=row.weight or 0)

    def names_by_id(self) -> Dict[str, str]:
        with self.db.get_session_context() as session:
            rows = session.query(Role).order_by(Role.weight, Role.id).all()
            return {row.id: row.label for row in rows}

    def save(self, role_id: str, label: str, weight: int = 0) -> RoleRecord:
        with self.db.get_session_context() as session:
            row = session.get(Role, role_id)
            if row is None:
                row = Role(id=role_id, label=label, weight=weight)
                session.add(row)
            else:
                row.label = label
                row.weight = weight
        return RoleRecord(id=role_id, label=label, weight=weight)

    def delete(self, role_id: str) -> bool:
        with self.db.get_session_context() as session:
            row = session.get(Role, role_id)
            if row is None:
                return False
            session.delete(row)
        return True
