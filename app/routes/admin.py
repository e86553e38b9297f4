# BIZMANAGER/backend/app/routes/admin.py : vue administrateur

from datetime import date
from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import require_admin
from app.database import get_db
from app.schemas import schemas
from app.services import aggregation
from app.services.forms import form_success
from app.services.repository import DomainRepository

router = APIRouter(prefix="/admin", tags=["admin"])

NO_BUSINESS_PROMPT = "No businesses yet. Create your first business to get started."


def get_repository(
    db: Session = Depends(get_db),
    session: schemas.SessionContext = Depends(require_admin)
) -> DomainRepository:
    return DomainRepository(db, session)


@router.get("/overview", response_model=schemas.AdminOverview)
def overview(repo: DomainRepository = Depends(get_repository)):
    """KPI globaux : revenu, nombre d'entreprises et d'employés, répartition par type"""
    businesses = repo.list_businesses(repo.user_id)
    business_ids = [b.id for b in businesses]

    employees = repo.count_employees(business_ids)
    sales = repo.list_sales_by_business(business_ids)

    return {
        "stats": {
            "revenue": aggregation.total_revenue(sales),
            "businesses": len(businesses),
            "employees": employees,
        },
        "distribution": aggregation.business_distribution(businesses),
        "has_data": len(businesses) > 0,
        "empty_state": None if businesses else NO_BUSINESS_PROMPT,
    }


# ---------- BUSINESSES ----------
@router.get("/businesses", response_model=List[schemas.BusinessOut])
def list_businesses(repo: DomainRepository = Depends(get_repository)):
    return repo.list_businesses(repo.user_id)


@router.post("/businesses", response_model=schemas.FormResult)
def create_business(
    business: schemas.BusinessCreate,
    repo: DomainRepository = Depends(get_repository)
):
    """Créer une entreprise pour l'admin connecté"""
    created = repo.create_business(
        repo.user_id,
        business.name,
        business.business_type,
        business.location,
        business.description
    )
    return form_success("Business created successfully!", created)


@router.get("/businesses/{business_id}", response_model=schemas.BusinessDetails)
def business_details(business_id: int, repo: DomainRepository = Depends(get_repository)):
    """Détail d'une entreprise : stats + employés"""
    business = repo.get_business(business_id)
    employees = repo.list_employees(business_id)
    sales = repo.list_sales_by_business([business_id])
    expenses = repo.list_expenses_by_business([business_id])

    return {
        "business": business,
        "stats": aggregation.business_summary(sales, expenses, len(employees)),
        "employees": employees,
    }


@router.delete("/businesses/{business_id}", response_model=List[schemas.BusinessOut])
def delete_business(business_id: int, repo: DomainRepository = Depends(get_repository)):
    """Supprime puis renvoie la liste relue depuis le store"""
    repo.delete_business(business_id)
    return repo.list_businesses(repo.user_id)


# ---------- EMPLOYEES ----------
@router.get("/businesses/{business_id}/employees", response_model=List[schemas.EmployeeOut])
def list_employees(business_id: int, repo: DomainRepository = Depends(get_repository)):
    return repo.list_employees(business_id)


@router.post("/employees", response_model=schemas.FormResult)
def create_employee(
    employee: schemas.EmployeeCreate,
    repo: DomainRepository = Depends(get_repository)
):
    created = repo.create_employee(
        employee.business_id,
        employee.name,
        employee.email,
        employee.password,
        employee.commission_rate,
        employee.position
    )
    return form_success(
        "Employee created successfully! They can now login with their email and password.",
        created
    )


@router.delete("/employees/{employee_id}", response_model=List[schemas.EmployeeOut])
def delete_employee(employee_id: int, repo: DomainRepository = Depends(get_repository)):
    """Supprime puis relit les employés de l'entreprise concernée"""
    business_id = repo.delete_employee(employee_id)
    if business_id is None:
        return []
    return repo.list_employees(business_id)


# ---------- REPORTS ----------
@router.get("/reports", response_model=schemas.Report)
def report(
    period: Literal["all", "daily", "weekly", "monthly"] = Query("all", description="Période du rapport"),
    repo: DomainRepository = Depends(get_repository)
):
    """Rapport revenus/dépenses sur toutes les entreprises de l'admin"""
    date_range = aggregation.period_range(period, date.today())
    business_ids = [b.id for b in repo.list_businesses(repo.user_id)]

    sales = repo.list_sales_by_business(business_ids, date_range)
    expenses = repo.list_expenses_by_business(business_ids, date_range)

    return {
        "period": period,
        "start_date": date_range[0] if date_range else None,
        "end_date": date_range[1] if date_range else None,
        **aggregation.build_report(sales, expenses),
    }
