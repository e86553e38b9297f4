# BIZMANAGER/backend/app/routes/employee.py : vue employé

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth import require_employee
from app.config import DEFAULT_EXPENSE_LIMIT, DEFAULT_HISTORY_LIMIT
from app.database import get_db
from app.schemas import schemas
from app.services import aggregation
from app.services.forms import form_success
from app.services.repository import DomainRepository

router = APIRouter(prefix="/employee", tags=["employee"])


def get_repository(
    db: Session = Depends(get_db),
    session: schemas.SessionContext = Depends(require_employee)
) -> DomainRepository:
    return DomainRepository(db, session)


def current_employee(repo: DomainRepository = Depends(get_repository)) -> schemas.EmployeeOut:
    """Fiche employé de l'utilisateur connecté (NotFoundError sinon)"""
    return repo.get_employee_for_user(repo.user_id)


@router.get("/me", response_model=schemas.EmployeeOut)
def me(employee: schemas.EmployeeOut = Depends(current_employee)):
    return employee


@router.get("/home", response_model=schemas.EmployeeHomeStats)
def home(
    employee: schemas.EmployeeOut = Depends(current_employee),
    repo: DomainRepository = Depends(get_repository)
):
    """Ventes et clients du jour, commission en attente"""
    today_sales = repo.list_sales_for_day(employee.id, date.today())
    commission = repo.get_pending_commission(employee.id)

    return {
        "sales": aggregation.total_revenue(today_sales),
        "customers": aggregation.total_services(today_sales),
        "commission": commission.commission_amount if commission else 0,
    }


# ---------- SALES ----------
@router.post("/sales", response_model=schemas.FormResult)
def submit_sale(
    sale: schemas.SaleCreate,
    employee: schemas.EmployeeOut = Depends(current_employee),
    repo: DomainRepository = Depends(get_repository)
):
    created = repo.create_sale(
        employee.id,
        employee.business_id,
        sale.sale_date or date.today(),
        sale.service_count,
        sale.total_sales
    )
    return form_success("Sales submitted successfully!", created)


@router.get("/sales", response_model=List[schemas.DailySaleOut])
def sales_history(
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=365),
    employee: schemas.EmployeeOut = Depends(current_employee),
    repo: DomainRepository = Depends(get_repository)
):
    return repo.list_sales_by_employee(employee.id, limit)


# ---------- EXPENSES ----------
@router.post("/expenses", response_model=schemas.FormResult)
def submit_expense(
    expense: schemas.ExpenseCreate,
    employee: schemas.EmployeeOut = Depends(current_employee),
    repo: DomainRepository = Depends(get_repository)
):
    created = repo.create_expense(
        employee.id,
        employee.business_id,
        expense.amount,
        expense.category,
        expense.description,
        expense.expense_date or date.today()
    )
    return form_success("Expense logged successfully", created)


@router.get("/expenses", response_model=List[schemas.ExpenseOut])
def recent_expenses(
    limit: int = Query(DEFAULT_EXPENSE_LIMIT, ge=1, le=100),
    employee: schemas.EmployeeOut = Depends(current_employee),
    repo: DomainRepository = Depends(get_repository)
):
    return repo.list_expenses(employee.id, limit)
