"""
Catalogue persistence — atomic read/write of catalogue.json.

The whole catalogue is read and written as one JSON document. Writes
go to a temp file in the same directory and are then renamed over
the target, so a crash mid-write never leaves a truncated catalogue.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from jswitch.core.config.loader import user_config_dir
from jswitch.core.errors import PersistenceError
from jswitch.core.models.catalogue import Catalogue
from jswitch.core.models.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE_FILE = "catalogue.json"


def default_catalogue_path() -> Path:
    """Catalogue location when the settings don't name one."""
    return user_config_dir() / DEFAULT_CATALOGUE_FILE


def resolve_catalogue_path(settings: Settings) -> Path:
    """Catalogue path from settings, falling back to the user config dir."""
    if settings.catalogue_path:
        return Path(settings.catalogue_path).expanduser()
    return default_catalogue_path()


def load_catalogue(path: Path) -> Catalogue:
    """Load the catalogue from a JSON file.

    Args:
        path: Path to catalogue.json.

    Returns:
        Catalogue model. A missing, unreadable or corrupt file yields
        an empty catalogue rather than an error.
    """
    if not path.is_file():
        logger.info("No catalogue at %s, starting empty", path)
        return Catalogue()

    try:
        raw = path.read_text(encoding="utf-8")
        catalogue = Catalogue.model_validate(json.loads(raw))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Corrupt catalogue %s: %s (starting empty)", path, e)
        return Catalogue()
    except ValidationError as e:
        logger.warning("Invalid catalogue %s: %s (starting empty)", path, e)
        return Catalogue()
    except OSError as e:
        logger.warning("Cannot read catalogue %s: %s (starting empty)", path, e)
        return Catalogue()

    logger.debug(
        "Loaded %d installation(s) from %s (updated_at=%s)",
        len(catalogue.installations),
        path,
        catalogue.updated_at,
    )
    return catalogue


def save_catalogue(catalogue: Catalogue, path: Path) -> None:
    """Save the full catalogue (atomic write).

    Args:
        catalogue: The catalogue to save.
        path: Target path for catalogue.json.

    Raises:
        PersistenceError: If the directory can't be created or the
            file can't be written.
    """
    catalogue.touch()
    content = json.dumps(catalogue.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=".catalogue_",
            suffix=".tmp",
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            tmp.replace(path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to save catalogue to %s: %s", path, e)
        raise PersistenceError(f"Failed to save catalogue: {e}") from e

    logger.debug("Catalogue saved to %s (%d installation(s))", path, len(catalogue.installations))
