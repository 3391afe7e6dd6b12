# app/config.py
"""Application configuration."""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Base directory
BASE_DIR = Path(__file__).parent.parent


def env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean toggle; "0", "false", "no" and "off" switch it off."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/data/blog.db")

# Environment: anything but "production" is strict (build failures surface)
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()
IS_PRODUCTION = APP_ENV == "production"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Content directory (one markup file per article)
CONTENT_DIR = Path(os.getenv("CONTENT_DIR", str(BASE_DIR / "posts")))
CONTENT_EXTENSION = ".mdx"
CONTENT_TEMPLATE_NAME = "model.mdx"

# Toggles
CONTENT_FS_SYNC = env_flag("CONTENT_FS_SYNC", True)
CONTENT_AUTO_BUILD = env_flag("CONTENT_AUTO_BUILD", True)

# Static content build command
BUILD_TOOL = os.getenv("BUILD_TOOL", "contentlayer")
BUILD_ARGS = tuple(os.getenv("BUILD_ARGS", "build").split())
BUILD_RUNNER = tuple(os.getenv("BUILD_RUNNER", "npx -y").split())
BUILD_CWD = Path(os.getenv("BUILD_CWD", str(BASE_DIR)))

# Public assets
ASSET_SCHEME = "asset://"
ASSETS_DIR = Path(os.getenv("ASSETS_DIR", str(BASE_DIR / "public" / "assets")))
DEFAULT_COVER = "/assets/logo/default-cover.png"
DEFAULT_AUTHOR = os.getenv("DEFAULT_AUTHOR", "Editorial Team")

TEMPLATES_DIR = BASE_DIR / "templates"
