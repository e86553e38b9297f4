# BIZMANAGER/backend/app/services/forms.py : validation des formulaires de saisie

import math
from typing import Any, Dict

from app.constants import MAX_COMMISSION_RATE, MIN_COMMISSION_RATE
from app.errors import ValidationError


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(**fields: Any) -> None:
    """Lève ValidationError pour le premier champ requis vide"""
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        labels = ", ".join(name.replace("_", " ") for name in missing)
        raise ValidationError(f"Missing required field(s): {labels}")


def require_non_negative(name: str, value: Any) -> float:
    if is_blank(value):
        raise ValidationError(f"Missing required field(s): {name.replace('_', ' ')}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name.replace('_', ' ').capitalize()} must be a number")
    if not math.isfinite(number) or number < 0:
        raise ValidationError(f"{name.replace('_', ' ').capitalize()} must be zero or positive")
    return number


def require_count(name: str, value: Any) -> int:
    number = require_non_negative(name, value)
    if number != int(number):
        raise ValidationError(f"{name.replace('_', ' ').capitalize()} must be a whole number")
    return int(number)


def require_commission_rate(value: Any) -> float:
    rate = require_non_negative("commission_rate", value)
    if not MIN_COMMISSION_RATE <= rate <= MAX_COMMISSION_RATE:
        raise ValidationError(
            f"Commission rate must be between {MIN_COMMISSION_RATE:g} and {MAX_COMMISSION_RATE:g}"
        )
    return rate


def form_success(message: str, record: Any = None) -> Dict:
    """Réponse d'un formulaire réussi ; la vue relit ensuite depuis le store"""
    if record is not None and hasattr(record, "model_dump"):
        record = record.model_dump(mode="json")
    return {"success": True, "message": message, "record": record}
