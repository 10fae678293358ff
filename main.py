import sys
from pathlib import Path

from loguru import logger

from viewaccess.config import get_settings

USAGE = (
    "Usage: python main.py serve [host] [port]\n"
    "       python main.py check <view_id> <display_id> <role,role,...>\n"
    "       python main.py summary <view_id> <display_id>\n"
    "       python main.py seed-roles <roles.json>"
)


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _manager():
    from viewaccess.manager import DisplayAccessManager
    from viewaccess.models import get_db_manager

    return DisplayAccessManager(get_db_manager())


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    import uvicorn

    logger.info(f"Serving viewaccess API on {host}:{port}")
    uvicorn.run("api.server:app", host=host, port=port)


def check(view_id: str, display_id: str, roles: str) -> bool:
    from api.auth import parse_actor_roles
    from viewaccess.schemas import ActorModel

    actor = ActorModel(roles=parse_actor_roles(roles))
    granted = _manager().check_access(view_id, display_id, actor)
    if granted:
        logger.success(f"Access to {view_id}:{display_id} granted for {sorted(actor.roles)}")
    else:
        logger.warning(f"Access to {view_id}:{display_id} denied for {sorted(actor.roles)}")
    return granted


def summary(view_id: str, display_id: str) -> str:
    manager = _manager()
    label = manager.summary(view_id, display_id)
    requirement = manager.route_requirement(view_id, display_id)
    logger.info(f"{view_id}:{display_id}: {label} (route requirement: {requirement or 'none'})")
    return label


def seed_roles(path: str) -> int:
    from scripts.seed_roles import load_definitions, seed

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Path {source} does not exist")
    count = seed(_manager(), load_definitions(source))
    logger.success(f"Seeded {count} role(s) from {source}")
    return count


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    _configure_logging(settings.log_level)

    if not argv:
        logger.error(USAGE)
        sys.exit(1)

    command, args = argv[0], argv[1:]
    try:
        if command == "serve":
            host = args[0] if args else "127.0.0.1"
            port = int(args[1]) if len(args) > 1 else 8000
            serve(host, port)
        elif command == "check" and len(args) == 3:
            if not check(*args):
                sys.exit(1)
        elif command == "summary" and len(args) == 2:
            summary(*args)
        elif command == "seed-roles" and len(args) == 1:
            seed_roles(args[0])
        else:
            logger.error(USAGE)
            sys.exit(1)
    except (LookupError, OSError, ValueError) as e:
        logger.error(str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Fatal error during execution: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
