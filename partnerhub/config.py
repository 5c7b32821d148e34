"""
PartnerHub Configuration
Loads settings from environment variables with sensible defaults.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).parent.parent

# Load .env file
env_path = _PROJECT_ROOT / '.env'
load_dotenv(env_path)


class Config:
    """Application configuration."""

    # Storage backend: json (default), postgres, memory
    STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'json').lower()
    STORAGE_KEY = os.getenv('STORAGE_KEY', 'partner_hub_v2_cos')
    DATA_FILE = Path(os.getenv('DATA_FILE', str(_PROJECT_ROOT / 'data' / 'partnerhub.json')))

    # Database: only needed for the postgres backend; never hardcode credentials here
    DATABASE_URL = os.getenv('DATABASE_URL')
    if STORAGE_BACKEND == 'postgres' and not DATABASE_URL:
        _logger.critical("STORAGE_BACKEND=postgres but DATABASE_URL is not set. Cannot start.")
        raise ValueError("DATABASE_URL environment variable is not set. Copy .env.example to .env and configure it.")

    # Application mode: 'register' exposes only the public self-registration form
    APP_MODE = os.getenv('PARTNERHUB_MODE', '').lower()
    PUBLIC_MODE_OWNER = os.getenv('PUBLIC_MODE_OWNER', 'Auto-Cadastro')

    # Dashboard
    UPCOMING_CONTACTS_LIMIT = int(os.getenv('UPCOMING_CONTACTS_LIMIT', '5'))
    NEARBY_RADIUS_METERS = float(os.getenv('NEARBY_RADIUS_METERS', '2000'))
    DEFAULT_COMMISSION_RATE = float(os.getenv('DEFAULT_COMMISSION_RATE', '5'))

    # External lookups
    BRASILAPI_BASE_URL = os.getenv('BRASILAPI_BASE_URL', 'https://brasilapi.com.br/api')
    VIACEP_BASE_URL = os.getenv('VIACEP_BASE_URL', 'https://viacep.com.br/ws')
    NOMINATIM_BASE_URL = os.getenv('NOMINATIM_BASE_URL', 'https://nominatim.openstreetmap.org')
    HTTP_TIMEOUT_SECONDS = float(os.getenv('HTTP_TIMEOUT_SECONDS', '10'))
    HTTP_USER_AGENT = os.getenv('HTTP_USER_AGENT', 'PartnerHub/1.0')

    # AI Configuration
    # DeepSeek (routine summaries)
    DEEPSEEK_API_KEY = os.getenv('DEEPSEEK_API_KEY', '')
    DEEPSEEK_BASE_URL = os.getenv('DEEPSEEK_BASE_URL', 'https://api.deepseek.com')
    DEFAULT_AI_MODEL = os.getenv('DEFAULT_AI_MODEL', 'deepseek-chat')
    # Claude
    ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY', '')
    CLAUDE_MODEL = os.getenv('CLAUDE_MODEL', 'claude-3-5-sonnet-20241022')

    # Exports
    EXPORT_DIR = Path(os.getenv('EXPORT_DIR', str(_PROJECT_ROOT / 'data' / 'exports')))


# Singleton instance
config = Config()
