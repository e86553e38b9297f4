# BIZMANAGER/backend/app/services/repository.py : accès typé aux données du store

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.auth import add_identity
from app.config import DEFAULT_EXPENSE_LIMIT, DEFAULT_HISTORY_LIMIT
from app.constants import COMMISSION_PENDING, ROLE_EMPLOYEE, SALE_PENDING
from app.errors import AppError, AuthError, NotFoundError, RemoteError
from app.models import models
from app.schemas import schemas
from app.services import forms

logger = logging.getLogger(__name__)

EMPLOYEE_NOT_FOUND = "Employee record not found. Please contact admin."


def _columns(row) -> dict:
    return {c.name: getattr(row, c.name) for c in row.__table__.columns}


class DomainRepository:
    """Une méthode par couple (entité, opération).

    Le contexte de session est fourni une fois au constructeur puis utilisé
    pour filtrer chaque lecture et suppression : une ligne que l'appelant ne
    peut pas voir se comporte comme une ligne absente. Pas de cache, chaque
    appel va au store.
    """

    def __init__(self, db: Session, session: schemas.SessionContext):
        self.db = db
        self.session = session
        self.user_id = session.user_id

    @contextmanager
    def _remote(self, operation: str):
        """Annule la transaction en cours et traduit les erreurs du store"""
        try:
            yield
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ {operation} a échoué: {e}")
            raise RemoteError(str(e)) from e

    # ---------- RECORDS ----------
    @staticmethod
    def _employee_record(employee: models.Employee) -> schemas.EmployeeOut:
        data = _columns(employee)
        data["email"] = employee.user.email if employee.user else None
        data["business_name"] = employee.business.name if employee.business else None
        return schemas.EmployeeOut.model_validate(data)

    @staticmethod
    def _sale_record(sale: models.DailySale) -> schemas.DailySaleOut:
        data = _columns(sale)
        data["employee_name"] = sale.employee.name if sale.employee else None
        data["business_name"] = sale.business.name if sale.business else None
        return schemas.DailySaleOut.model_validate(data)

    # ---------- SCOPES ----------
    def _owned_business_ids(self, business_ids: Iterable[int]) -> List[int]:
        ids = [b for b in business_ids if b is not None]
        if not ids:
            return []
        rows = self.db.query(models.Business.id).filter(
            models.Business.id.in_(ids),
            models.Business.admin_id == self.user_id
        ).all()
        return [r[0] for r in rows]

    def _visible_employee(self, employee_id: int) -> Optional[models.Employee]:
        """L'employé lui-même ou l'admin propriétaire de son entreprise"""
        return self.db.query(models.Employee).join(models.Business).filter(
            models.Employee.id == employee_id,
            or_(
                models.Employee.user_id == self.user_id,
                models.Business.admin_id == self.user_id
            )
        ).first()

    def _own_employee(self, employee_id: int) -> models.Employee:
        employee = self.db.query(models.Employee).filter(
            models.Employee.id == employee_id,
            models.Employee.user_id == self.user_id
        ).first()
        if not employee:
            raise NotFoundError(EMPLOYEE_NOT_FOUND)
        return employee

    # ---------- BUSINESSES ----------
    def list_businesses(self, admin_id: int) -> List[schemas.BusinessOut]:
        if admin_id != self.user_id:
            return []
        with self._remote("list_businesses"):
            rows = self.db.query(models.Business).filter(
                models.Business.admin_id == admin_id
            ).order_by(models.Business.created_at, models.Business.id).all()
            return [schemas.BusinessOut.model_validate(b) for b in rows]

    def get_business(self, business_id: int) -> schemas.BusinessOut:
        with self._remote("get_business"):
            business = self.db.query(models.Business).filter(
                models.Business.id == business_id,
                models.Business.admin_id == self.user_id
            ).first()
            if not business:
                raise NotFoundError("Business not found")
            return schemas.BusinessOut.model_validate(business)

    def create_business(
        self,
        admin_id: int,
        name: str,
        business_type: str,
        location: str,
        description: Optional[str] = None,
    ) -> schemas.BusinessOut:
        forms.require_fields(name=name, business_type=business_type, location=location)
        if admin_id is None or admin_id != self.user_id:
            raise AuthError("Cannot create a business for another admin", status_code=403)

        with self._remote("create_business"):
            business = models.Business(
                admin_id=admin_id,
                name=name.strip(),
                business_type=business_type.strip(),
                location=location.strip(),
                description=(description or "").strip() or None
            )
            self.db.add(business)
            self.db.commit()
            self.db.refresh(business)
        logger.info(f"🏢 Entreprise {business.id} créée par l'admin {admin_id}")
        return schemas.BusinessOut.model_validate(business)

    def delete_business(self, business_id: int) -> None:
        """Suppression idempotente : une entreprise absente n'est pas une erreur"""
        with self._remote("delete_business"):
            business = self.db.query(models.Business).filter(
                models.Business.id == business_id,
                models.Business.admin_id == self.user_id
            ).first()
            if not business:
                logger.info(f"Entreprise {business_id} déjà absente, rien à supprimer")
                return
            self.db.delete(business)
            self.db.commit()
        logger.info(f"🗑️ Entreprise {business_id} supprimée (employés, ventes, dépenses en cascade)")

    # ---------- EMPLOYEES ----------
    def list_employees(self, business_id: int) -> List[schemas.EmployeeOut]:
        with self._remote("list_employees"):
            rows = self.db.query(models.Employee).join(models.Business).options(
                joinedload(models.Employee.user),
                joinedload(models.Employee.business)
            ).filter(
                models.Employee.business_id == business_id,
                models.Business.admin_id == self.user_id
            ).order_by(models.Employee.created_at, models.Employee.id).all()
            return [self._employee_record(e) for e in rows]

    def count_employees(self, business_ids: Iterable[int]) -> int:
        with self._remote("count_employees"):
            ids = self._owned_business_ids(business_ids)
            if not ids:
                return 0
            return self.db.query(models.Employee).filter(
                models.Employee.business_id.in_(ids)
            ).count()

    def create_employee(
        self,
        business_id: int,
        name: str,
        email: str,
        password: str,
        commission_rate: float,
        position: Optional[str] = None,
    ) -> schemas.EmployeeOut:
        """Identité, rôle et fiche employé dans une seule transaction.

        Un échec à n'importe quelle étape annule les trois écritures : aucune
        identité orpheline ne peut rester.
        """
        forms.require_fields(business=business_id, name=name, email=email, password=password)
        rate = forms.require_commission_rate(commission_rate)

        with self._remote("create_employee"):
            if not self._owned_business_ids([business_id]):
                raise NotFoundError("Business not found")

            user = add_identity(self.db, email, password, ROLE_EMPLOYEE)
            employee = models.Employee(
                user_id=user.id,
                business_id=business_id,
                name=name.strip(),
                commission_rate=rate,
                position=(position or "").strip() or None
            )
            self.db.add(employee)
            self.db.flush()
            self.db.commit()
            self.db.refresh(employee)
            record = self._employee_record(employee)
        logger.info(f"👤 Employé {record.id} ({record.email}) ajouté à l'entreprise {business_id}")
        return record

    def delete_employee(self, employee_id: int) -> Optional[int]:
        """Suppression idempotente ; renvoie l'entreprise concernée pour la relecture"""
        with self._remote("delete_employee"):
            employee = self.db.query(models.Employee).join(models.Business).filter(
                models.Employee.id == employee_id,
                models.Business.admin_id == self.user_id
            ).first()
            if not employee:
                logger.info(f"Employé {employee_id} déjà absent, rien à supprimer")
                return None
            business_id = employee.business_id
            self.db.delete(employee)
            self.db.commit()
        logger.info(f"🗑️ Employé {employee_id} retiré de l'entreprise {business_id}")
        return business_id

    def get_employee_for_user(self, user_id: int) -> schemas.EmployeeOut:
        with self._remote("get_employee_for_user"):
            employee = None
            if user_id == self.user_id:
                employee = self.db.query(models.Employee).options(
                    joinedload(models.Employee.user),
                    joinedload(models.Employee.business)
                ).filter(models.Employee.user_id == user_id).first()
            if not employee:
                raise NotFoundError(EMPLOYEE_NOT_FOUND)
            return self._employee_record(employee)

    # ---------- DAILY SALES ----------
    def _sales_query(self):
        return self.db.query(models.DailySale).options(
            joinedload(models.DailySale.employee),
            joinedload(models.DailySale.business)
        ).order_by(models.DailySale.sale_date.desc(), models.DailySale.id.desc())

    def list_sales_by_business(
        self,
        business_ids: Iterable[int],
        date_range: Optional[Tuple[date, date]] = None,
    ) -> List[schemas.DailySaleOut]:
        """Ventes des entreprises de l'admin, triées par date décroissante"""
        with self._remote("list_sales_by_business"):
            ids = self._owned_business_ids(business_ids)
            if not ids:
                return []
            query = self._sales_query().filter(models.DailySale.business_id.in_(ids))
            if date_range:
                start, end = date_range
                query = query.filter(
                    models.DailySale.sale_date >= start,
                    models.DailySale.sale_date <= end
                )
            return [self._sale_record(s) for s in query.all()]

    def list_sales_by_employee(self, employee_id: int, limit: int = DEFAULT_HISTORY_LIMIT) -> List[schemas.DailySaleOut]:
        with self._remote("list_sales_by_employee"):
            if not self._visible_employee(employee_id):
                return []
            rows = self._sales_query().filter(
                models.DailySale.employee_id == employee_id
            ).limit(limit).all()
            return [self._sale_record(s) for s in rows]

    def list_sales_for_day(self, employee_id: int, day: date) -> List[schemas.DailySaleOut]:
        with self._remote("list_sales_for_day"):
            if not self._visible_employee(employee_id):
                return []
            rows = self._sales_query().filter(
                models.DailySale.employee_id == employee_id,
                models.DailySale.sale_date == day
            ).all()
            return [self._sale_record(s) for s in rows]

    def create_sale(
        self,
        employee_id: int,
        business_id: int,
        sale_date: date,
        service_count: int,
        total_sales: float,
    ) -> schemas.DailySaleOut:
        """Enregistre une vente du jour ; le statut démarre toujours à pending"""
        amount = forms.require_non_negative("total_sales", total_sales)
        count = forms.require_count("service_count", service_count)
        forms.require_fields(sale_date=sale_date)

        with self._remote("create_sale"):
            employee = self._own_employee(employee_id)
            if employee.business_id != business_id:
                raise AuthError("Employee does not belong to this business", status_code=403)

            sale = models.DailySale(
                employee_id=employee.id,
                business_id=business_id,
                sale_date=sale_date,
                service_count=count,
                total_sales=amount,
                status=SALE_PENDING
            )
            self.db.add(sale)
            self.db.commit()
            self.db.refresh(sale)
            record = self._sale_record(sale)
        logger.info(f"💰 Vente {record.id} de {amount} enregistrée par l'employé {employee_id}")
        return record

    # ---------- EXPENSES ----------
    def list_expenses(self, owner_id: int, limit: int = DEFAULT_EXPENSE_LIMIT) -> List[schemas.ExpenseOut]:
        """Dernières dépenses soumises par un employé"""
        with self._remote("list_expenses"):
            if not self._visible_employee(owner_id):
                return []
            rows = self.db.query(models.Expense).filter(
                models.Expense.employee_id == owner_id
            ).order_by(models.Expense.expense_date.desc(), models.Expense.id.desc()).limit(limit).all()
            return [schemas.ExpenseOut.model_validate(e) for e in rows]

    def list_expenses_by_business(
        self,
        business_ids: Iterable[int],
        date_range: Optional[Tuple[date, date]] = None,
    ) -> List[schemas.ExpenseOut]:
        with self._remote("list_expenses_by_business"):
            ids = self._owned_business_ids(business_ids)
            if not ids:
                return []
            query = self.db.query(models.Expense).filter(models.Expense.business_id.in_(ids))
            if date_range:
                start, end = date_range
                query = query.filter(
                    models.Expense.expense_date >= start,
                    models.Expense.expense_date <= end
                )
            rows = query.order_by(models.Expense.expense_date.desc(), models.Expense.id.desc()).all()
            return [schemas.ExpenseOut.model_validate(e) for e in rows]

    def create_expense(
        self,
        employee_id: int,
        business_id: int,
        amount: float,
        category: str,
        description: Optional[str],
        expense_date: date,
    ) -> schemas.ExpenseOut:
        value = forms.require_non_negative("amount", amount)
        forms.require_fields(category=category, expense_date=expense_date)

        with self._remote("create_expense"):
            employee = self._own_employee(employee_id)
            if employee.business_id != business_id:
                raise AuthError("Employee does not belong to this business", status_code=403)

            expense = models.Expense(
                business_id=business_id,
                employee_id=employee.id,
                amount=value,
                category=category.strip(),
                description=description or "",
                expense_date=expense_date,
                is_approved=False
            )
            self.db.add(expense)
            self.db.commit()
            self.db.refresh(expense)
        logger.info(f"🧾 Dépense {expense.id} de {value} enregistrée par l'employé {employee_id}")
        return schemas.ExpenseOut.model_validate(expense)

    # ---------- COMMISSIONS ----------
    def get_pending_commission(self, employee_id: int) -> Optional[schemas.MonthlyCommissionOut]:
        with self._remote("get_pending_commission"):
            if not self._visible_employee(employee_id):
                return None
            commission = self.db.query(models.MonthlyCommission).filter(
                models.MonthlyCommission.employee_id == employee_id,
                models.MonthlyCommission.status == COMMISSION_PENDING
            ).order_by(models.MonthlyCommission.month.desc(), models.MonthlyCommission.id.desc()).first()
            return schemas.MonthlyCommissionOut.model_validate(commission) if commission else None
