# BIZMANAGER/backend/app/auth.py : fournisseur d'identité + Session Gate

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, SECRET_KEY
from app.constants import (
    DEFAULT_LOW_PRIVILEGE_ROUTE,
    LANDING_ROUTES,
    LOGIN_ROUTE,
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
    ROLES,
)
from app.database import get_db
from app.errors import AuthError, RemoteError, ValidationError
from app.models import models
from app.schemas.schemas import SessionContext, Token

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False : l'absence de token est traitée par le gate (redirection), pas par FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

NOT_SET_UP_MESSAGE = "Account not properly set up. Please contact admin."
ROLE_LOOKUP_FAILED_MESSAGE = "Unable to verify your account right now. Please sign in again."


# ---------- MOTS DE PASSE / TOKENS ----------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Crée un token signé ; "sub" porte l'identifiant stable de l'identité"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


# ---------- FOURNISSEUR D'IDENTITÉ ----------
def add_identity(db: Session, email: str, password: str, role: str) -> models.User:
    """Ajoute identité + enregistrement de rôle à la session, sans commit.

    L'appelant décide de la transaction (création d'employé atomique).
    """
    email = (email or "").strip().lower()
    if not email or not password:
        raise ValidationError("Email and password are required")
    if role not in ROLES:
        raise ValidationError(f"Unknown role '{role}'")

    existing = db.query(models.Identity).filter(models.Identity.email == email).first()
    if existing:
        raise ValidationError("Email already registered")

    identity = models.Identity(email=email, password_hash=hash_password(password))
    db.add(identity)
    db.flush()

    user = models.User(id=identity.id, email=email, role=role)
    db.add(user)
    db.flush()
    return user


def sign_up(db: Session, email: str, password: str, role: str = ROLE_ADMIN) -> models.User:
    """Inscription : identité + rôle dans une seule transaction"""
    try:
        user = add_identity(db, email, password, role)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email already registered") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Échec de l'inscription de {email}: {e}")
        raise RemoteError(str(e)) from e
    except ValidationError:
        db.rollback()
        raise
    db.refresh(user)
    logger.info(f"👤 Compte {user.role} créé: {user.email}")
    return user


def sign_in(db: Session, email: str, password: str) -> Token:
    email = (email or "").strip().lower()
    identity = db.query(models.Identity).filter(models.Identity.email == email).first()
    if not identity or not verify_password(password, identity.password_hash):
        raise AuthError("Invalid email or password")

    user = db.query(models.User).filter(models.User.id == identity.id).first()
    token = create_access_token({"sub": str(identity.id)})
    if user is None:
        # Connexion valide mais rôle absent : le client ne sait pas où aller
        return Token(access_token=token, token_type="bearer", redirect=LOGIN_ROUTE)
    return Token(
        access_token=token,
        token_type="bearer",
        role=user.role,
        redirect=LANDING_ROUTES.get(user.role, DEFAULT_LOW_PRIVILEGE_ROUTE),
    )


# ---------- SESSION GATE ----------
def resolve_session(db: Session, token: Optional[str]) -> SessionContext:
    """Token opaque -> {authenticated, role?, user_id?}.

    Pas de retry : un échec du store pendant la lecture du rôle est remonté
    tout de suite comme AuthError (fail-closed).
    """
    payload = decode_token(token) if token else None
    if not payload or payload.get("sub") is None:
        return SessionContext(authenticated=False)

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return SessionContext(authenticated=False)

    try:
        identity = db.query(models.Identity).filter(models.Identity.id == user_id).first()
        user = db.query(models.User).filter(models.User.id == user_id).first() if identity else None
    except SQLAlchemyError as e:
        logger.error(f"❌ Lecture du rôle impossible pour {user_id}: {e}")
        raise AuthError(ROLE_LOOKUP_FAILED_MESSAGE, redirect=LOGIN_ROUTE, status_code=403) from e

    if identity is None:
        return SessionContext(authenticated=False)
    if user is None:
        return SessionContext(authenticated=True, user_id=user_id)
    return SessionContext(authenticated=True, role=user.role, user_id=user_id)


def get_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> SessionContext:
    token = credentials.credentials if credentials else None
    return resolve_session(db, token)


def require_authenticated(session: SessionContext = Depends(get_session)) -> SessionContext:
    if not session.authenticated:
        logger.warning("🔒 Accès refusé : session absente ou invalide")
        raise AuthError("Not authenticated", redirect=LOGIN_ROUTE, status_code=401)
    return session


def require_admin(session: SessionContext = Depends(require_authenticated)) -> SessionContext:
    if session.role != ROLE_ADMIN:
        logger.warning(f"🔒 Utilisateur {session.user_id} (rôle {session.role}) refusé sur la vue admin")
        raise AuthError("Admin role required", redirect=DEFAULT_LOW_PRIVILEGE_ROUTE, status_code=403)
    return session


def require_employee(session: SessionContext = Depends(require_authenticated)) -> SessionContext:
    if session.role == ROLE_EMPLOYEE:
        return session
    logger.warning(f"🔒 Utilisateur {session.user_id} (rôle {session.role}) refusé sur la vue employé")
    if session.role is None:
        raise AuthError(NOT_SET_UP_MESSAGE, redirect=LOGIN_ROUTE, status_code=403)
    raise AuthError("Employee role required", redirect=LANDING_ROUTES.get(session.role, LOGIN_ROUTE), status_code=403)
