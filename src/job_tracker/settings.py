import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict
from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "..")

CONFIG_PATH = os.environ.get("JT_CONFIG", os.path.join(ROOT_DIR, "config.yaml"))

DEFAULT_DATA_FILE = os.path.join(ROOT_DIR, "data", "applications.json")
DEFAULT_EXPORT_DIR = os.path.join(ROOT_DIR, "exports")
DEFAULT_MAX_ATTACHMENT_BYTES = 5 * 1024 * 1024
DEFAULT_REMINDER_WINDOW_DAYS = 7

@dataclass
class Settings:
    app: Dict[str, Any] = field(default_factory=dict)
    attachments: Dict[str, Any] = field(default_factory=dict)
    reminders: Dict[str, Any] = field(default_factory=dict)

    @property
    def timezone(self) -> str:
        return self.app.get("timezone", "UTC")

    @property
    def data_file(self) -> str:
        return os.environ.get("JT_DATA") or self.app.get("data_file") or DEFAULT_DATA_FILE

    @property
    def export_dir(self) -> str:
        return self.app.get("export_dir") or DEFAULT_EXPORT_DIR

    @property
    def max_attachment_bytes(self) -> int:
        return int(self.attachments.get("max_bytes", DEFAULT_MAX_ATTACHMENT_BYTES))

    @property
    def reminder_window_days(self) -> int:
        return int(self.reminders.get("window_days", DEFAULT_REMINDER_WINDOW_DAYS))

def load_settings(path: str | None = None) -> Settings:
    path = path or CONFIG_PATH
    if not os.path.exists(path):
        return Settings()
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    # optional blocks may be missing or left empty in the yaml
    for block in ("app", "attachments", "reminders"):
        cfg[block] = cfg.get(block) or {}
    return Settings(**{k: cfg[k] for k in ("app", "attachments", "reminders")})
