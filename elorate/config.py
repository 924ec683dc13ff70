"""Loading rating preferences from JSON files.

This is a helper for host applications that keep their K-factor table on
disk. The rating functions in ``elorate.elo`` never read files themselves;
they take a ``KFactorConfig`` value from the caller.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .elo import DEFAULT_K_FACTOR_CONFIG, DEFAULT_SCALING_FACTOR, EloRank
from .models import KFactorConfig


logger = logging.getLogger("elorate:config")


class Prefs(BaseModel):
    """Preferences for rating calculations.

    Keys follow the camelCase JSON layout::

        {
          "scalingFactor": 400,
          "kFactor": {
            "default": 20,
            "rules": [{"value": 40, "conditions": {"maxGames": 30}}]
          }
        }

    Both keys are optional.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    scaling_factor: float = Field(
        default=DEFAULT_SCALING_FACTOR, alias="scalingFactor", gt=0
    )
    k_factor: KFactorConfig = Field(
        default=DEFAULT_K_FACTOR_CONFIG, alias="kFactor"
    )


def load_k_factor_config(path: Path) -> KFactorConfig:
    """Load a K-factor table from a JSON file.

    Args:
        path: File holding a ``{"default": ..., "rules": [...]}`` document

    Returns:
        Parsed K-factor configuration

    Raises:
        FileNotFoundError: If path does not exist
        pydantic.ValidationError: If the document is malformed
    """
    config = KFactorConfig.model_validate_json(path.read_text())
    logger.info(f"Loaded {len(config.rules)} K-factor rules from {path}")
    return config


def load_prefs(path: Path) -> Prefs:
    """Load rating preferences from a JSON file.

    Args:
        path: Preferences file

    Returns:
        Parsed preferences, with defaults for missing keys

    Raises:
        FileNotFoundError: If path does not exist
        pydantic.ValidationError: If the document is malformed
    """
    prefs = Prefs.model_validate_json(path.read_text())
    logger.info(
        f"Loaded preferences from {path}: scaling factor {prefs.scaling_factor}, "
        f"{len(prefs.k_factor.rules)} K-factor rules"
    )
    return prefs


def create_rank(prefs: Prefs) -> EloRank:
    """Create a ranking system from preferences.

    Args:
        prefs: Preferences holding the K-factor table and scaling factor

    Returns:
        EloRank instance
    """
    return EloRank(prefs.k_factor, prefs.scaling_factor)
