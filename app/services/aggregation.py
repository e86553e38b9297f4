# BIZMANAGER/backend/app/services/aggregation.py : le moteur d'agrégation

"""Réductions pures des ventes/dépenses en indicateurs de synthèse.

Aucune I/O ici : les fonctions reçoivent des collections déjà chargées
(enregistrements typés, lignes ORM ou simples dicts) et sont totales, une
collection vide donne des totaux nuls et des regroupements vides.
"""

import math
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.constants import (
    BUSINESS_TYPE_COLORS,
    FALLBACK_COLOR,
    OTHER_TYPE,
    RECENT_TRANSACTIONS_LIMIT,
    REPORT_PERIODS,
    TOP_EMPLOYEES_LIMIT,
    UNKNOWN_EMPLOYEE,
)


def _get(item: Any, name: str, default: Any = None) -> Any:
    """Lit un champ sur un dict ou un objet"""
    if item is None:
        return default
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def to_amount(value: Any) -> float:
    """Coercion numérique tolérante : None, texte illisible, NaN -> 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def _percentage(part: float, total: float) -> float:
    return round(part / total * 100, 2) if total > 0 else 0


def total_revenue(sales: Iterable[Any]) -> float:
    return sum(to_amount(_get(s, "total_sales")) for s in sales)


def total_expenses(expenses: Iterable[Any]) -> float:
    return sum(to_amount(_get(e, "amount")) for e in expenses)


def total_services(sales: Iterable[Any]) -> int:
    return sum(int(to_amount(_get(s, "service_count"))) for s in sales)


def net_profit(revenue: float, expenses: float) -> float:
    return to_amount(revenue) - to_amount(expenses)


def profit_margin(revenue: float, profit: float) -> float:
    """Marge en pourcentage, 0 si aucun revenu"""
    return _percentage(profit, revenue)


def business_distribution(businesses: Iterable[Any]) -> List[Dict]:
    """Nombre d'entreprises par type déclaré.

    Les types vides ou absents tombent dans "Other". L'ordre suit la
    première apparition de chaque type ; la couleur est fixe pour les types
    connus, avec une couleur de repli pour les autres.
    """
    counts: Dict[str, int] = {}
    for biz in businesses:
        biz_type = _get(biz, "business_type")
        if biz_type is None:
            biz_type = _get(biz, "type")
        biz_type = ("" if biz_type is None else str(biz_type)).strip() or OTHER_TYPE
        counts[biz_type] = counts.get(biz_type, 0) + 1

    total = sum(counts.values())
    return [
        {
            "type": biz_type,
            "count": count,
            "color": BUSINESS_TYPE_COLORS.get(biz_type, FALLBACK_COLOR),
            "percentage": _percentage(count, total),
        }
        for biz_type, count in counts.items()
    ]


def _employee_name(sale: Any) -> str:
    name = _get(sale, "employee_name")
    if not name:
        # Forme jointe : sale.employee.name (ORM) ou sale["employees"]["name"]
        nested = _get(sale, "employee") or _get(sale, "employees")
        name = _get(nested, "name")
    return name or UNKNOWN_EMPLOYEE


def top_employees(sales: Iterable[Any], n: int = TOP_EMPLOYEES_LIMIT) -> List[Dict]:
    """Top n des employés par total des ventes.

    Tri décroissant stable : à total égal, l'ordre de première apparition
    est conservé.
    """
    if n <= 0:
        return []
    totals: Dict[str, float] = {}
    for sale in sales:
        name = _employee_name(sale)
        totals[name] = totals.get(name, 0.0) + to_amount(_get(sale, "total_sales"))

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [{"name": name, "total": total} for name, total in ranked[:n]]


def recent_transactions(sales: List[Any], n: int = RECENT_TRANSACTIONS_LIMIT) -> List[Any]:
    """Les n premières ventes (l'entrée est déjà triée par date décroissante)"""
    if n <= 0:
        return []
    return list(sales)[:n]


def _day_key(value: Any) -> str:
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def daily_totals(sales: Iterable[Any], expenses: Iterable[Any]) -> List[Dict]:
    """Revenus, dépenses et profit par jour, triés par date croissante"""
    data_by_date: Dict[str, Dict] = {}

    def _bucket(day: str) -> Dict:
        if day not in data_by_date:
            data_by_date[day] = {"date": day, "revenue": 0.0, "expenses": 0.0, "profit": 0.0}
        return data_by_date[day]

    for sale in sales:
        bucket = _bucket(_day_key(_get(sale, "sale_date")))
        bucket["revenue"] += to_amount(_get(sale, "total_sales"))

    for expense in expenses:
        bucket = _bucket(_day_key(_get(expense, "expense_date")))
        bucket["expenses"] += to_amount(_get(expense, "amount"))

    for bucket in data_by_date.values():
        bucket["profit"] = bucket["revenue"] - bucket["expenses"]

    return sorted(data_by_date.values(), key=lambda x: x["date"])


def period_range(period: str, today: date) -> Optional[Tuple[date, date]]:
    """Bornes (incluses) d'une période de rapport, None pour "all" """
    days = REPORT_PERIODS.get(period)
    if not days:
        return None
    return today - timedelta(days=days - 1), today


def business_summary(sales: List[Any], expenses: List[Any], employee_count: int) -> Dict:
    """Statistiques affichées dans le détail d'une entreprise"""
    revenue = total_revenue(sales)
    spent = total_expenses(expenses)
    return {
        "employees": employee_count,
        "revenue": revenue,
        "expenses": spent,
        "profit": net_profit(revenue, spent),
        "sales_count": len(sales),
    }


def build_report(
    sales: List[Any],
    expenses: List[Any],
    top_n: int = TOP_EMPLOYEES_LIMIT,
    recent_n: int = RECENT_TRANSACTIONS_LIMIT,
) -> Dict:
    """Rapport complet : totaux, top employés, ventes récentes, tendance"""
    revenue = total_revenue(sales)
    spent = total_expenses(expenses)
    profit = net_profit(revenue, spent)
    return {
        "total_revenue": revenue,
        "total_expenses": spent,
        "net_profit": profit,
        "profit_margin": profit_margin(revenue, profit),
        "total_services": total_services(sales),
        "top_employees": top_employees(sales, top_n),
        "recent_sales": recent_transactions(sales, recent_n),
        "daily_totals": daily_totals(sales, expenses),
    }
