# Task board: configuration
# Override via taskboard.yaml, TASKBOARD_DB, or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

CONFIG_PATH = Path("taskboard.yaml")


@dataclass
class Config:
    """Runtime configuration for the task board server."""

    # Storage ("" = ~/.local/share/taskboard/board.db)
    db_path: str = ""

    # HTTP
    host: str = "127.0.0.1"
    port: int = 3000

    # Session refresh (seconds)
    refresh_interval: float = 5.0
    refresh_threshold: float = 5.0

    log_level: str = "INFO"

    def resolve_paths(self):
        """Apply the TASKBOARD_DB override and expand ~."""
        env = os.environ.get("TASKBOARD_DB")
        if env:
            self.db_path = env
        if self.db_path:
            self.db_path = str(Path(self.db_path).expanduser())

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path) if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except (OSError, yaml.YAMLError, TypeError, AttributeError):
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg
