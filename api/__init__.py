# api/__init__.py
import importlib
from typing import Any

__all__ = ["server"]


def __getattr__(name: str) -> Any:
    """
    Lazy import submodules on attribute access, e.g. `from api import server`.
    Avoids building the app while the package itself is being imported.
    """
    if name in ("server", "auth", "schemas", "dependencies"):
        mod = importlib.import_module(f"api.{name}")
        globals()[name] = mod
        return mod
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
