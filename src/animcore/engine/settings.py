from __future__ import annotations
from pathlib import Path
from typing import Literal, Optional
import logging
from pydantic import BaseModel, Field

SETTINGS_PATH = Path.home() / ".animcore" / "settings.json"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

class Settings(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    schema_dir: str = "docs/schemas"  # export-schemas default output
    json_indent: int = Field(2, ge=0)

    def effective_log_level(self, verbose: bool = False) -> int:
        return logging.DEBUG if verbose else logging.getLevelName(self.log_level)

def configure_logging(settings: Settings, verbose: bool = False) -> int:
    """Route animcore loggers to stderr at the configured level; returns the level applied."""
    level = settings.effective_log_level(verbose)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("animcore").setLevel(level)
    return level

def load_settings(path: Optional[Path] = None) -> Settings:
    path = path or SETTINGS_PATH
    if not path.exists():
        settings = Settings()
        save_settings(settings, path)
        return settings
    return Settings.model_validate_json(path.read_text(encoding="utf-8"))

def save_settings(settings: Settings, path: Optional[Path] = None) -> None:
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
