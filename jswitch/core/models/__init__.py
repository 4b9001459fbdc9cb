"""
Domain models — Pydantic types for jswitch.

All models are re-exported here for convenient access:

    from jswitch.core.models import Installation, Catalogue, Settings, OperationResult
"""

from jswitch.core.models.catalogue import Catalogue
from jswitch.core.models.installation import Installation, normalize_path, same_path
from jswitch.core.models.operation import OperationResult
from jswitch.core.models.settings import Settings, default_executable

__all__ = [
    # catalogue.py
    "Catalogue",
    # installation.py
    "Installation",
    "normalize_path",
    "same_path",
    # operation.py
    "OperationResult",
    # settings.py
    "Settings",
    "default_executable",
]
