"""Configuration and API key management for Fridge Forage."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "fridge-forage"
CONFIG_DIR = Path(os.getenv("FRIDGE_FORAGE_HOME", Path.home() / f".{APP_NAME}"))
CREDENTIALS_FILE = CONFIG_DIR / "credentials.json"
DATA_DIR = CONFIG_DIR / "data"  # One JSON file per collection

# Ensure config directory exists
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Storage keys, one per persisted collection
INGREDIENTS_KEY = "ingredients"
RECIPES_KEY = "recipes"
SHOPPING_KEY = "shopping"
STORES_KEY = "stores"

# Generative text service
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"
LLM_TIMEOUT = 60.0


def get_model() -> str:
    """Get the Gemini model name, overridable from the environment."""
    return os.getenv("FRIDGE_FORAGE_MODEL") or DEFAULT_MODEL


def get_api_key() -> str | None:
    """Get the Gemini API key from environment or config file."""
    api_key = os.getenv("GEMINI_API_KEY")
    if api_key:
        return api_key

    # Try reading from credentials file
    if CREDENTIALS_FILE.exists():
        import json

        try:
            with open(CREDENTIALS_FILE) as f:
                return json.load(f).get("api_key")
        except (OSError, json.JSONDecodeError):
            pass

    return None


def save_api_key(api_key: str) -> None:
    """Save the API key to the config file."""
    import json

    CREDENTIALS_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(CREDENTIALS_FILE, "w") as f:
        json.dump({"api_key": api_key}, f)
    # Set restrictive permissions
    CREDENTIALS_FILE.chmod(0o600)


def clear_api_key() -> None:
    """Remove the saved API key."""
    if CREDENTIALS_FILE.exists():
        CREDENTIALS_FILE.unlink()
