import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".linebyline"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MASK_PLACEHOLDER = "____"


def _as_bool(value: Any) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> Dict[str, Any]:
    """Load config from ~/.linebyline/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # .env may set LINEBYLINE_* overrides
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    database_cfg = config.get("database", {})
    config["database"] = {
        "path": os.getenv("LINEBYLINE_DB_PATH", database_cfg.get("path") or None),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("LINEBYLINE_HOST", server_cfg.get("host", DEFAULT_HOST)),
        "port": int(os.getenv("LINEBYLINE_PORT", server_cfg.get("port", DEFAULT_PORT))),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("LINEBYLINE_LOG_LEVEL", logging_cfg.get("level", DEFAULT_LOG_LEVEL)).upper(),
    }
    review_cfg = config.get("review", {})
    config["review"] = {
        "auto_unlock": _as_bool(os.getenv("LINEBYLINE_AUTO_UNLOCK", review_cfg.get("auto_unlock", True))),
        "mask_placeholder": os.getenv(
            "LINEBYLINE_MASK_PLACEHOLDER",
            review_cfg.get("mask_placeholder", DEFAULT_MASK_PLACEHOLDER),
        ),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('review', 'auto_unlock')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value if value is not None else default
