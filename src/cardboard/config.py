"""Runtime configuration loaded from YAML."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV = "CARDBOARD_CONFIG"


@dataclass
class Config:
    """Settings for the cardboard CLI."""

    db_path: str = "cardboard.db"
    theme: str = "light"
    log_level: str = "WARNING"
    backup_prefix: str = "cardboard-backup"

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """Load config from YAML, falling back to defaults.

        ``path`` defaults to $CARDBOARD_CONFIG. Unknown keys are ignored.
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV)
        if not path:
            return cls()

        cfg_path = Path(path).expanduser()
        if not cfg_path.exists():
            return cls()

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
            return cls()
        if not isinstance(data, dict):
            return cls()

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
