#!/usr/bin/env python3
# scripts/seed_roles.py
"""Load role definitions from a JSON file into the database.

The file holds either an object mapping role id to label, or a list of
objects with ``id``, ``label`` and an optional ``weight``.
"""
import json
import sys
from pathlib import Path

from loguru import logger

from viewaccess.manager import DisplayAccessManager
from viewaccess.models import get_db_manager


def load_definitions(path: Path) -> list[dict]:
    data = json.loads(path.read_text())
    if isinstance(data, dict):
        return [
            {"id": role_id, "label": label, "weight": weight}
            for weight, (role_id, label) in enumerate(data.items())
        ]
    if isinstance(data, list):
        return [
            {"id": item["id"], "label": item.get("label", item["id"]), "weight": item.get("weight", 0)}
            for item in data
        ]
    raise ValueError(f"{path}: expected a JSON object or list")


def seed(manager: DisplayAccessManager, definitions: list[dict]) -> int:
    for definition in definitions:
        manager.save_role(
            definition["id"], definition["label"], definition["weight"], user="seed_roles"
        )
    return len(definitions)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        logger.error("Usage: seed_roles.py <roles.json>")
        return 1

    path = Path(argv[0])
    if not path.exists():
        logger.error(f"Path {path} does not exist")
        return 1

    try:
        definitions = load_definitions(path)
        count = seed(DisplayAccessManager(get_db_manager()), definitions)
    except (KeyError, ValueError) as e:
        logger.error(f"Invalid role definitions: {e}")
        return 1

    logger.success(f"Seeded {count} role(s) from {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
