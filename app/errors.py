# BIZMANAGER/backend/app/errors.py : taxonomie des erreurs métier

from typing import Optional


class AppError(Exception):
    """Erreur de base : porte le message littéral affiché à l'utilisateur"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(AppError):
    """Session absente/invalide ou mauvais rôle.

    Les échecs du Session Gate portent une cible de redirection au lieu
    d'un message inline.
    """

    status_code = 401

    def __init__(self, message: str, redirect: Optional[str] = None, status_code: int = 401):
        super().__init__(message)
        self.redirect = redirect
        self.status_code = status_code


class ValidationError(AppError):
    """Champ requis manquant ou hors bornes (validation côté client)"""

    status_code = 400


class NotFoundError(AppError):
    """Enregistrement référencé absent alors qu'il est requis"""

    status_code = 404


class RemoteError(AppError):
    """Échec remonté par le store externe : opaque, jamais rejoué"""

    status_code = 502
