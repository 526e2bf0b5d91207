from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "auditlog"


@dataclass(frozen=True, slots=True)
class CliPaths:
    config_dir: Path
    log_dir: Path

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.toml"

    @property
    def log_file(self) -> Path:
        return self.log_dir / "auditlog.log"


def get_paths() -> CliPaths:
    dirs = PlatformDirs(APP_NAME, appauthor=False)
    return CliPaths(
        config_dir=Path(dirs.user_config_dir),
        log_dir=Path(dirs.user_log_dir),
    )
