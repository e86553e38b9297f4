# BIZMANAGER/backend/app/database.py

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import DATABASE_URL
import logging

logger = logging.getLogger(__name__)

# SQLite (dev, tests) refuse par défaut le partage de connexion entre threads
engine_kwargs = {
    "pool_pre_ping": True,  # Vérifie que la connexion est vivante avant utilisation
    "echo": False,  # Met à True pour voir les requêtes SQL dans la console
}
if DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs["pool_size"] = 5
    engine_kwargs["max_overflow"] = 10

try:
    engine = create_engine(DATABASE_URL, **engine_kwargs)
    logger.info("✅ Moteur de base de données initialisé")
except Exception as e:
    logger.error(f"❌ Erreur de configuration de la base de données: {e}")
    raise

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()


def get_db():
    """
    Dépendance FastAPI pour obtenir une session de base de données.
    À utiliser dans les routes avec: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Crée toutes les tables définies dans les modèles"""
    # Import pour enregistrer les modèles sur Base.metadata
    from app.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("✅ Tables créées/vérifiées avec succès")


def check_connection():
    """Vérifie que la connexion à la base fonctionne"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"❌ Erreur de connexion: {e}")
        return False
