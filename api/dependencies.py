from viewaccess.manager import DisplayAccessManager
from viewaccess.models import get_db_manager


def get_access_manager() -> DisplayAccessManager:
    return DisplayAccessManager(get_db_manager())
