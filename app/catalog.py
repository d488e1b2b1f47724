"""
Player name catalog loaded from a JSON side file.

The file holds either a list of names used for both sides, or an object
with "teamA" and "teamB" lists.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from app.config import settings

TEAM_KEYS = ("teamA", "teamB")

logger = logging.getLogger(__name__)


def _unique_names(raw) -> List[str]:
    names = []
    for item in raw or []:
        if not isinstance(item, str):
            continue
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return names


def normalize_catalog(raw) -> Dict[str, List[str]]:
    """Shape any accepted catalog layout into {"teamA": [...], "teamB": [...]}"""
    if isinstance(raw, list):
        names = _unique_names(raw)
        return {key: list(names) for key in TEAM_KEYS}
    if isinstance(raw, dict):
        return {key: _unique_names(raw.get(key)) for key in TEAM_KEYS}
    return {key: [] for key in TEAM_KEYS}


def load_catalog(path: Optional[str] = None) -> Dict[str, List[str]]:
    """Read the catalog file. A missing or broken file gives empty rosters."""
    catalog_path = Path(path or settings.PLAYER_CATALOG_PATH)
    if not catalog_path.exists():
        logger.warning("Player catalog %s not found, rosters will be empty", catalog_path)
        return normalize_catalog(None)

    try:
        raw = json.loads(catalog_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read player catalog %s: %s", catalog_path, e)
        return normalize_catalog(None)

    catalog = normalize_catalog(raw)
    logger.info(
        "Loaded player catalog from %s (%d / %d names)",
        catalog_path, len(catalog["teamA"]), len(catalog["teamB"]),
    )
    return catalog
