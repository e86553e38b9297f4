# BIZMANAGER/backend/app/config.py

import os
import logging
from dotenv import load_dotenv
from pathlib import Path

logger = logging.getLogger(__name__)

# Dossier app/ : le fichier .env est cherché à côté de ce module
BASE_DIR = Path(__file__).parent.absolute()
env_path = BASE_DIR / '.env'

if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    logger.info(f"✅ Fichier .env chargé depuis: {env_path}")
else:
    logger.info(f"Pas de fichier .env à: {env_path}, variables du processus utilisées")

# ============================================
# ENVIRONMENT
# ============================================
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# ============================================
# DATA STORE
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    if ENVIRONMENT == "production":
        raise ValueError("DATABASE_URL must be set in production")
    DATABASE_URL = "sqlite:///./bizmanager.db"
    logger.warning("⚠️  DATABASE_URL non définie, base SQLite locale utilisée")

# ============================================
# IDENTITY / SESSION TOKENS
# ============================================
SECRET_KEY = os.getenv("SECRET_KEY", "change_this_secret_key_in_production")
if SECRET_KEY == "change_this_secret_key_in_production" and ENVIRONMENT == "production":
    raise ValueError("SECRET_KEY must be changed in production")

ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24h

# ============================================
# VIEWS
# ============================================
DEFAULT_HISTORY_LIMIT = int(os.getenv("DEFAULT_HISTORY_LIMIT", "20"))
DEFAULT_EXPENSE_LIMIT = int(os.getenv("DEFAULT_EXPENSE_LIMIT", "10"))

# ============================================
# CORS (Frontend)
# ============================================
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

# ============================================
# LOGGING
# ============================================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def is_production():
    """Vérifie si on est en production"""
    return ENVIRONMENT == "production"


def is_development():
    """Vérifie si on est en développement"""
    return ENVIRONMENT == "development"
