"""Per-display access configuration backed by the database."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from viewaccess.exceptions import StaleRoleReferenceError
from viewaccess.metrics import (
    ACCESS_CHECK_COUNTER,
    STALE_ROLE_COUNTER,
    VALIDATION_FAILURE_COUNTER,
)
from viewaccess.models import AuditLog, DatabaseManager, DisplayAccess
from viewaccess.policy import (
    AccessPolicy,
    Actor,
    UnrestrictedPolicy,
    is_valid_role_id,
)
from viewaccess.registry import build_policy, get_plugin, validate_options
from viewaccess.roles import RoleRecord, RoleStore, SqlRoleStore
from viewaccess.schemas import ValidationResult


class _MissTrackingStore:
    def __init__(self, store: RoleStore):
        self.store = store
        self.missing: List[str] = []

    def load(self, role_id: str) -> Optional[RoleRecord]:
        record = self.store.load(role_id)
        if record is None:
            self.missing.append(role_id)
        return record


class DisplayAccessManager:
    def __init__(self, db: DatabaseManager, role_store: Optional[SqlRoleStore] = None):
        self.db = db
        self.role_store = role_store or SqlRoleStore(db)

    # -------------------------
    # POLICIES
    # -------------------------
    def _load_row(self, session, view_id: str, display_id: str) -> Optional[DisplayAccess]:
        return (
            session.query(DisplayAccess)
            .filter_by(view_id=view_id, display_id=display_id)
            .one_or_none()
        )

    def get_policy(self, view_id: str, display_id: str) -> AccessPolicy:
        with self.db.get_session_context() as session:
            row = self._load_row(session, view_id, display_id)
            if row is None:
                return UnrestrictedPolicy()
            return build_policy(row.access_type, row.options)

    def configure(
        self,
        view_id: str,
        display_id: str,
        access_type: str,
        options: Optional[Mapping[str, Any]] = None,
        user: Optional[str] = None,
    ) -> ValidationResult:
        """Validate and store the access plugin for a display.

        Nothing is written when validation fails; the result still carries the
        filtered selection so the caller can redisplay it.
        """
        plugin = get_plugin(access_type)
        result = validate_options(access_type, options)
        resource_id = f"{view_id}:{display_id}"

        if not result.valid:
            VALIDATION_FAILURE_COUNTER.labels(plugin=access_type).inc()
            logger.warning(f"Rejected {access_type} access for {resource_id}: {result.errors}")
            self._audit(
                "access.configure",
                resource_id,
                user,
                details={"type": access_type, "value": result.value},
                error=json.dumps(result.errors),
            )
            return result

        stored = plugin.options_from_value(result.value)
        with self.db.get_session_context() as session:
            row = self._load_row(session, view_id, display_id)
            if row is None:
                row = DisplayAccess(view_id=view_id, display_id=display_id)
                session.add(row)
            row.access_type = access_type
            row.options = stored

        logger.info(f"Configured {access_type} access for {resource_id}")
        self._audit(
            "access.configure",
            resource_id,
            user,
            details={"type": access_type, "options": stored},
        )
        return result

    def remove(self, view_id: str, display_id: str, user: Optional[str] = None) -> bool:
        resource_id = f"{view_id}:{display_id}"
        with self.db.get_session_context() as session:
            row = self._load_row(session, view_id, display_id)
            if row is None:
                return False
            session.delete(row)
        logger.info(f"Removed access configuration for {resource_id}")
        self._audit("access.remove", resource_id, user)
        return True

    def check_access(self, view_id: str, display_id: str, actor: Actor) -> bool:
        policy = self.get_policy(view_id, display_id)
        granted = policy.evaluate(actor)
        ACCESS_CHECK_COUNTER.labels(
            plugin=policy.plugin_id, result="granted" if granted else "denied"
        ).inc()
        logger.debug(
            f"Access to {view_id}:{display_id} {'granted' if granted else 'denied'} "
            f"for roles {sorted(actor.roles)}"
        )
        return granted

    def assert_access(self, view_id: str, display_id: str, actor: Actor) -> None:
        if not self.check_access(view_id, display_id, actor):
            raise PermissionError("Access denied")

    def route_requirement(self, view_id: str, display_id: str) -> Optional[str]:
        return self.get_policy(view_id, display_id).to_route_requirement()

    def summary(self, view_id: str, display_id: str) -> str:
        policy = self.get_policy(view_id, display_id)
        try:
            return policy.summary_label(self.role_store)
        except StaleRoleReferenceError as e:
            STALE_ROLE_COUNTER.inc()
            logger.error(f"Access summary for {view_id}:{display_id} failed: {e}")
            raise

    def dependencies(self, view_id: str, display_id: str) -> Dict[str, List[str]]:
        policy = self.get_policy(view_id, display_id)
        tracking = _MissTrackingStore(self.role_store)
        dependencies = policy.calculate_dependencies(tracking)
        if tracking.missing:
            STALE_ROLE_COUNTER.inc(len(tracking.missing))
            logger.debug(
                f"Skipped missing roles {tracking.missing} for {view_id}:{display_id}"
            )
        return dependencies

    # -------------------------
    # ROLES
    # -------------------------
    def role_options(self) -> Dict[str, str]:
        return self.role_store.names_by_id()

    def save_role(
        self, role_id: str, label: str, weight: int = 0, user: Optional[str] = None
    ) -> RoleRecord:
        if not is_valid_role_id(role_id):
            raise ValueError(f"Invalid role id: {role_id!r}")
        record = self.role_store.save(role_id, label, weight)
        self._audit("role.save", role_id, user, details={"label": label, "weight": weight})
        return record

    def delete_role(self, role_id: str, user: Optional[str] = None) -> bool:
        deleted = self.role_store.delete(role_id)
        if deleted:
            logger.info(f"Deleted role {role_id}")
            self._audit("role.delete", role_id, user)
        return deleted

    # -------------------------
    # AUDIT
    # -------------------------
    def _audit(
        self,
        action: str,
        resource_id: str,
        user: Optional[str],
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        resource_type = action.split(".", 1)[0]
        try:
            with self.db.get_session_context() as session:
                session.add(
                    AuditLog(
                        action=action,
                        resource_type=resource_type,
                        resource_id=resource_id,
                        user=user,
                        details=json.dumps(details) if details is not None else None,
                        success=error is None,
                        error_message=error,
                    )
                )
        except Exception as e:
            logger.warning(f"Failed to write audit log for {action}: {e}")
