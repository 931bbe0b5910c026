# services/extractor/config_loader.py
"""
Loads the extraction profiles from ``configs/extraction.yaml`` and validates
them with Pydantic models.  The file can contain a top‑level ``profiles`` key
or just the mapping of profile names → config dictionaries.

Public API:
* ``get_profile_config(name)`` – returns a validated ``ExtractionProfile`` or
  raises ``ProfileNotFoundError``.
* ``list_available_profiles()`` – convenience helper for scripts.
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class ExtractionProfile(BaseModel):
    """Which tags to drop and where to look for the main content."""
    exclude_tags: List[str] = Field(default_factory=list)
    content_selectors: List[str] = Field(default_factory=list)

    @field_validator("exclude_tags")
    @classmethod
    def _lowercase_tags(cls, tags: List[str]) -> List[str]:
        return [t.strip().lower() for t in tags if t and t.strip()]


class AllProfiles(BaseModel):
    """Top‑level container – maps profile name → its config."""
    profiles: Dict[str, ExtractionProfile]


# ----------------------------------------------------------------------
# Internal helpers & caching
# ----------------------------------------------------------------------
# Two levels up from this file → project root
CONFIG_PATH = (
    Path(__file__).resolve().parents[2] / "configs" / "extraction.yaml"
)

# Keyed by path so tests can point the loader at a temporary file
_cache: Dict[Path, AllProfiles] = {}


def _load_yaml(path: Path) -> dict:
    """Read the YAML file and return the inner ``profiles`` mapping."""
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
        return raw.get("profiles", raw)


def _load_all(path: Optional[Path] = None) -> AllProfiles:
    """
    Parse the entire YAML, validate it against ``AllProfiles`` and cache the
    result.  Any validation problem raises ``pydantic.ValidationError``.
    """
    path = path or CONFIG_PATH
    if path not in _cache:
        _cache[path] = AllProfiles(profiles=_load_yaml(path))
    return _cache[path]


class ProfileNotFoundError(KeyError):
    """Raised when a requested profile does not exist in extraction.yaml."""

    def __init__(self, profile_name: str):
        super().__init__(f"Extraction profile '{profile_name}' not found.")
        self.profile_name = profile_name


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
def get_profile_config(profile_name: str, path: Optional[Path] = None) -> ExtractionProfile:
    """
    Return a **validated** ``ExtractionProfile`` for the requested name.

    Raises
    ------
    ProfileNotFoundError
        If the profile name is not present in the YAML.
    pydantic.ValidationError
        If the YAML exists but does not conform to the schema.
    """
    all_cfg = _load_all(path)
    try:
        return all_cfg.profiles[profile_name]
    except KeyError as exc:
        raise ProfileNotFoundError(profile_name) from exc


def list_available_profiles(path: Optional[Path] = None) -> List[str]:
    return list(_load_all(path).profiles.keys())
