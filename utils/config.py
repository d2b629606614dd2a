"""
Configuration module for SmartNotes
Handles API key lookup, paths, storage keys and environment settings
"""

import json
import os
from pathlib import Path
from typing import Optional, Dict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Constants
APP_NAME = "smartnotes"
CONFIG_DIR = Path.home() / f".{APP_NAME}"
CONFIG_FILE = CONFIG_DIR / ".env.json"
DB_PATH = CONFIG_DIR / f"{APP_NAME}.db"

# Provider settings
DEFAULT_PROVIDER = "openai"
SUPPORTED_PROVIDERS = ["openai", "openrouter"]

# Model configurations per provider
PROVIDER_MODELS = {
    "openai": {
        "vision": "gpt-4o-mini",
        "analysis": "gpt-4o-mini",
        "evaluation": "gpt-4o-mini",
        "chat": "gpt-4o-mini",
        "base_url": None,  # Use default OpenAI base URL
    },
    "openrouter": {
        "vision": "google/gemini-2.5-flash",
        "analysis": "google/gemini-2.5-flash",
        "evaluation": "google/gemini-2.5-flash",
        "chat": "google/gemini-2.5-flash",
        "base_url": "https://openrouter.ai/api/v1",
    }
}

# Keys in the blob store. These match the data written by earlier releases.
ACTIVE_USER_KEY = "smart-study-current-user"
USERS_KEY = "smart-study-users"
NOTES_KEY_PREFIX = "smart-study-notes-"

# App Attribution settings for OpenRouter
APP_TITLE = "SmartNotes"
APP_URL = "https://github.com/smartnotes/smartnotes"


def notes_key(user_id: str) -> str:
    """Blob store key holding one user's note collection"""
    return f"{NOTES_KEY_PREFIX}{user_id}"


def load_config() -> Dict:
    """Load configuration from config file"""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            pass

    return {}


def load_api_key(provider: str = None) -> Optional[str]:
    """Load API key for a provider from the config file, falling back to the environment"""
    config = load_config()

    if provider is None:
        provider = config.get("provider", DEFAULT_PROVIDER)

    api_key = config.get(f"{provider}_api_key")
    if not api_key:
        api_key = os.environ.get(f"{provider.upper()}_API_KEY")

    return api_key


def get_current_provider() -> str:
    """Get the currently configured provider"""
    config = load_config()
    return config.get("provider", DEFAULT_PROVIDER)


def get_provider_config(provider: str = None) -> Dict:
    """Get model configuration for a specific provider"""
    if provider is None:
        provider = get_current_provider()

    if provider not in PROVIDER_MODELS:
        raise ValueError(f"No configuration found for provider: {provider}")

    return PROVIDER_MODELS[provider]
