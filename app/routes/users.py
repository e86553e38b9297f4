
# BIZMANAGER/backend/app/routes/users.py : frontière du fournisseur d'identité

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app import auth
from app.constants import ROLE_ADMIN
from app.database import get_db
from app.schemas.schemas import Credentials, SessionContext, Token, UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=UserOut)
def register(user: Credentials, db: Session = Depends(get_db)):
    """Inscription d'un administrateur (les employés sont créés par leur admin)"""
    return auth.sign_up(db, user.email, user.password, ROLE_ADMIN)


@router.post("/login", response_model=Token)
def login(user: Credentials, db: Session = Depends(get_db)):
    """Email + mot de passe -> token et page d'atterrissage selon le rôle"""
    return auth.sign_in(db, user.email, user.password)


@router.get("/session", response_model=SessionContext)
def current_session(session: SessionContext = Depends(auth.get_session)):
    """Identité et rôle résolus pour le token fourni (jamais d'erreur)"""
    return session
