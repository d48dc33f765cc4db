"""
ThreatRank scoring profiles - reusable weight/threshold sets.

Profiles are YAML files that define:
- name / description: what the profile is tuned for
- weights: the seven scoring coefficients (missing keys keep defaults)
- thresholds: recommendation policy constants (missing keys keep defaults)
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProfileError
from .models import PolicyThresholds, Weights

PROFILE_ENV_VAR = "THREATRANK_PROFILE"


class ScoringProfile(BaseModel):
    """Weights and thresholds for one run. Immutable once built."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(default="default", min_length=1)
    description: str = Field(default="")
    weights: Weights = Field(default_factory=Weights)
    thresholds: PolicyThresholds = Field(default_factory=PolicyThresholds)


def default_profile() -> ScoringProfile:
    """The built-in profile."""
    return ScoringProfile(description="Built-in default weights and thresholds")


def load_profile(path: Path) -> ScoringProfile:
    """Load a profile from YAML.

    Args:
        path: Profile file path.

    Returns:
        The validated ScoringProfile.

    Raises:
        ProfileError: If the file is missing, unreadable or invalid.
    """
    if not path.exists():
        raise ProfileError(f"Profile not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ProfileError(f"Could not read profile {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {path} must be a mapping")

    data.setdefault("name", path.stem)

    try:
        return ScoringProfile(**data)
    except ValidationError as e:
        raise ProfileError(f"Invalid profile {path}: {e}") from e


def save_profile(profile: ScoringProfile, path: Path) -> Path:
    """Write a profile to YAML.

    Args:
        profile: The profile to save.
        path: Destination file.

    Returns:
        Path to the saved file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = profile.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return path


def resolve_profile(path: Path | None = None) -> ScoringProfile:
    """Pick the profile for a run: explicit path, then $THREATRANK_PROFILE, then default."""
    if path is None:
        env_path = os.getenv(PROFILE_ENV_VAR)
        if env_path:
            path = Path(env_path)

    if path is None:
        return default_profile()
    return load_profile(path)
