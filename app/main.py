# BIZMANAGER/backend/app/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import ALLOWED_ORIGINS, ENVIRONMENT, LOG_LEVEL
from app.database import check_connection, create_tables
from app.errors import AppError, AuthError, ValidationError
from app.routes import admin, employee, users
import logging
import datetime
import sys
import fastapi
import sqlalchemy

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Démarrage de l'API BizManager...")

    if check_connection():
        logger.info("✅ Connexion à la base de données établie")
        # En production le schéma appartient au store externe
        create_tables()
    else:
        logger.error("❌ Impossible de se connecter à la base de données")

    yield

    logger.info("👋 Arrêt de l'API BizManager")


app = FastAPI(
    title="BizManager API",
    description="Gestion multi-entreprises : ventes, dépenses, employés et commissions",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "users",
            "description": "Connexion et résolution de session"
        },
        {
            "name": "admin",
            "description": "Entreprises, employés et rapports de l'administrateur"
        },
        {
            "name": "employee",
            "description": "Saisie des ventes et dépenses, historique et commission"
        }
    ]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Échec du Session Gate : le client redirige, pas de message inline"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.message, "redirect": exc.redirect},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Validation, introuvable, store : message littéral affiché inline"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Type invalide (texte au lieu d'un nombre...) : même format qu'une ValidationError"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    fields = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    label = fields[-1].replace("_", " ").capitalize() if fields else None
    message = first.get("msg", "Invalid request")
    logger.warning(f"⚠️ Requête rejetée sur {request.url.path}: {errors}")
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"success": False, "detail": f"{label}: {message}" if label else message},
    )


app.include_router(users.router)
app.include_router(admin.router)
app.include_router(employee.router)


@app.get("/")
def root():
    """
    Racine de l'API - Informations générales
    """
    return {
        "success": True,
        "message": "BizManager backend opérationnel 🚀",
        "version": app.version,
        "environment": ENVIRONMENT,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc"
        },
        "endpoints": {
            "users": "/users",
            "admin": "/admin",
            "employee": "/employee",
            "docs": "/docs"
        },
        "health_check": "/health"
    }


@app.get("/health")
def health_check():
    """
    Endpoint de santé pour le monitoring
    """
    db_status = check_connection()

    return {
        "status": "healthy" if db_status else "unhealthy",
        "database": "connected" if db_status else "disconnected",
        "version": app.version,
        "timestamp": datetime.datetime.now().isoformat()
    }


@app.get("/info")
def info():
    """
    Informations détaillées sur l'API
    """
    return {
        "name": app.title,
        "description": app.description,
        "version": app.version,
        "python_version": sys.version,
        "fastapi_version": fastapi.__version__,
        "sqlalchemy_version": sqlalchemy.__version__,
        "environment": ENVIRONMENT
    }
