"""Item store - Central path configuration."""

import os
from pathlib import Path

USER_HOME = Path.home()
ITEM_STORE_HOME = Path(os.environ.get("ITEM_STORE_HOME") or USER_HOME / ".item_store")

PACKAGE_DIR = Path(__file__).resolve().parent.parent
TEMPLATES_DIR = PACKAGE_DIR / "item_store" / "templates"

REPO_PATH = Path(os.environ.get("ITEM_STORE_REPO") or ITEM_STORE_HOME / "repo")
LOG_FILE = ITEM_STORE_HOME / "item_store.log"
LOG_LEVEL = os.environ.get("ITEM_STORE_LOG_LEVEL", "info")

# Staging area for batch flushes, relative to the repository root
PENDING_DIR_NAME = ".pending"
MANIFEST_NAME = "manifest.json"


def get_repo_path(override: str | Path | None = None) -> Path:
    """Return the repository root, creating it if it doesn't exist.

    Resolution order: explicit override, ``ITEM_STORE_REPO``, then
    ``~/.item_store/repo``.
    """
    repo = Path(override) if override else REPO_PATH
    repo.mkdir(parents=True, exist_ok=True)
    return repo
