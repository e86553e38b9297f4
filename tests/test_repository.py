
# BIZMANAGER/backend/tests/test_repository.py : contrats du Domain Repository

from datetime import date, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.auth import sign_up
from app.errors import AuthError, NotFoundError, RemoteError, ValidationError
from app.models import models
from app.schemas.schemas import SessionContext
from app.services import aggregation
from app.services import repository as repository_module
from app.services.repository import DomainRepository


def _repo(db, user):
    return DomainRepository(db, SessionContext(authenticated=True, role=user.role, user_id=user.id))


class TestRepository:
    @pytest.fixture(autouse=True)
    def setup_repository(self, db_session):
        self.db = db_session
        self.admin = sign_up(db_session, "owner@test.com", "Test123!")
        self.repo = _repo(db_session, self.admin)

    def _create_business(self, name="Main Street Cuts", business_type="Barbershop"):
        return self.repo.create_business(self.admin.id, name, business_type, "Downtown", "")

    def _create_employee(self, business_id, email="ana@test.com", name="Ana"):
        return self.repo.create_employee(business_id, name, email, "secret1", 10)

    def _employee_repo(self, employee):
        user = self.db.query(models.User).filter(models.User.id == employee.user_id).one()
        return _repo(self.db, user)

    # ========== BUSINESSES ==========

    def test_create_business(self):
        business = self._create_business()
        assert business.id > 0
        assert business.admin_id == self.admin.id
        assert business.business_type == "Barbershop"
        assert [b.id for b in self.repo.list_businesses(self.admin.id)] == [business.id]

    def test_create_business_empty_name_issues_no_write(self):
        with pytest.raises(ValidationError):
            self.repo.create_business(self.admin.id, "", "Retail", "Harbor", "")
        with pytest.raises(ValidationError):
            self.repo.create_business(self.admin.id, "Shop", "  ", "Harbor", "")
        assert self.db.query(models.Business).count() == 0

    def test_create_business_for_other_admin(self):
        other = sign_up(self.db, "other@test.com", "Test123!")
        with pytest.raises(AuthError):
            self.repo.create_business(other.id, "Shop", "Retail", "Harbor", "")
        assert self.db.query(models.Business).count() == 0

    def test_delete_missing_business_is_not_an_error(self):
        self.repo.delete_business(99999)

    def test_delete_business_cascades(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        emp_repo.create_sale(employee.id, business.id, date.today(), 2, 80)
        emp_repo.create_expense(employee.id, business.id, 15, "Supplies", "Razors", date.today())

        self.repo.delete_business(business.id)

        assert self.repo.list_businesses(self.admin.id) == []
        assert self.db.query(models.Employee).count() == 0
        assert self.db.query(models.DailySale).count() == 0
        assert self.db.query(models.Expense).count() == 0

    def test_other_admin_cannot_see_or_delete(self):
        business = self._create_business()
        other = sign_up(self.db, "other@test.com", "Test123!")
        other_repo = _repo(self.db, other)

        assert other_repo.list_businesses(other.id) == []
        with pytest.raises(NotFoundError):
            other_repo.get_business(business.id)
        other_repo.delete_business(business.id)
        assert len(self.repo.list_businesses(self.admin.id)) == 1

    # ========== EMPLOYEES ==========

    def test_create_employee(self):
        business = self._create_business()
        employee = self._create_employee(business.id)

        assert employee.email == "ana@test.com"
        assert employee.business_name == "Main Street Cuts"
        assert employee.commission_rate == 10
        user = self.db.query(models.User).filter(models.User.id == employee.user_id).one()
        assert user.role == "employee"
        assert self.repo.count_employees([business.id]) == 1

    def test_create_employee_rejects_rate_out_of_range(self):
        business = self._create_business()
        with pytest.raises(ValidationError):
            self.repo.create_employee(business.id, "Ana", "ana@test.com", "secret1", 150)
        assert self.db.query(models.Identity).count() == 1

    def test_create_employee_duplicate_email(self):
        business = self._create_business()
        self._create_employee(business.id)
        with pytest.raises(ValidationError):
            self._create_employee(business.id, name="Ana Bis")
        assert self.repo.count_employees([business.id]) == 1

    def test_create_employee_unknown_business(self):
        with pytest.raises(NotFoundError):
            self._create_employee(4242)
        assert self.db.query(models.Identity).count() == 1

    def test_create_employee_failure_leaves_no_orphan(self, monkeypatch):
        business = self._create_business()

        class BrokenEmployee:
            def __init__(self, **kwargs):
                raise SQLAlchemyError("employee insert failed")

        monkeypatch.setattr(repository_module.models, "Employee", BrokenEmployee)
        with pytest.raises(RemoteError):
            self._create_employee(business.id)
        monkeypatch.undo()

        assert self.db.query(models.Identity).filter(models.Identity.email == "ana@test.com").count() == 0
        assert self.db.query(models.User).count() == 1
        assert self.db.query(models.Employee).count() == 0

    def test_delete_employee_detaches_sales(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        self._employee_repo(employee).create_sale(employee.id, business.id, date.today(), 1, 40)

        assert self.repo.delete_employee(employee.id) == business.id
        assert self.repo.delete_employee(employee.id) is None
        assert self.repo.list_employees(business.id) == []

        sales = self.repo.list_sales_by_business([business.id])
        assert len(sales) == 1
        assert sales[0].employee_id is None
        assert aggregation.top_employees(sales) == [{"name": "Unknown", "total": 40}]

    def test_get_employee_for_user(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)

        assert emp_repo.get_employee_for_user(employee.user_id).id == employee.id
        with pytest.raises(NotFoundError):
            self.repo.get_employee_for_user(self.admin.id)

    # ========== SALES ==========

    def test_create_sale_starts_pending(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        sale = self._employee_repo(employee).create_sale(employee.id, business.id, date.today(), 3, 150.50)

        assert sale.status == "pending"
        assert sale.total_sales == 150.50
        assert sale.service_count == 3
        assert sale.employee_name == "Ana"

    def test_create_sale_without_employee_record(self):
        loner = sign_up(self.db, "loner@test.com", "Test123!", role="employee")
        business = self._create_business()
        with pytest.raises(NotFoundError) as exc:
            _repo(self.db, loner).create_sale(12345, business.id, date.today(), 1, 10)
        assert "Employee record not found" in exc.value.message
        assert self.db.query(models.DailySale).count() == 0

    def test_create_sale_validates_amount(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        with pytest.raises(ValidationError):
            emp_repo.create_sale(employee.id, business.id, date.today(), 1, None)
        with pytest.raises(ValidationError):
            emp_repo.create_sale(employee.id, business.id, date.today(), 1, -5)
        for amount in [float("inf"), float("-inf"), float("nan")]:
            with pytest.raises(ValidationError):
                emp_repo.create_sale(employee.id, business.id, date.today(), 1, amount)
            with pytest.raises(ValidationError):
                emp_repo.create_expense(employee.id, business.id, amount, "Supplies", "", date.today())
        assert self.db.query(models.DailySale).count() == 0
        assert self.db.query(models.Expense).count() == 0

    def test_list_sales_sorted_and_filtered(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        today = date.today()
        for days_ago in [3, 0, 10]:
            emp_repo.create_sale(employee.id, business.id, today - timedelta(days=days_ago), 1, 10)

        sales = self.repo.list_sales_by_business([business.id])
        assert [s.sale_date for s in sales] == [
            today, today - timedelta(days=3), today - timedelta(days=10)
        ]
        assert sales[0].business_name == "Main Street Cuts"

        recent = self.repo.list_sales_by_business([business.id], (today - timedelta(days=6), today))
        assert len(recent) == 2
        assert self.repo.list_sales_by_business([]) == []

    def test_list_sales_by_employee_limit(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        for days_ago in range(5):
            emp_repo.create_sale(employee.id, business.id, date.today() - timedelta(days=days_ago), 1, 10)

        assert len(emp_repo.list_sales_by_employee(employee.id, limit=3)) == 3
        assert len(emp_repo.list_sales_for_day(employee.id, date.today())) == 1

    # ========== EXPENSES / COMMISSIONS ==========

    def test_expenses(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        for days_ago in range(12):
            emp_repo.create_expense(
                employee.id, business.id, 5 + days_ago, "Supplies", "", date.today() - timedelta(days=days_ago)
            )

        latest = emp_repo.list_expenses(employee.id, limit=10)
        assert len(latest) == 10
        assert latest[0].expense_date == date.today()
        assert latest[0].is_approved is False
        assert len(self.repo.list_expenses_by_business([business.id])) == 12

    def test_pending_commission(self):
        business = self._create_business()
        employee = self._create_employee(business.id)
        emp_repo = self._employee_repo(employee)
        assert emp_repo.get_pending_commission(employee.id) is None

        self.db.add_all([
            models.MonthlyCommission(employee_id=employee.id, month=date(2024, 4, 1), commission_amount=80, status="paid"),
            models.MonthlyCommission(employee_id=employee.id, month=date(2024, 5, 1), commission_amount=120.5, status="pending"),
        ])
        self.db.commit()

        commission = emp_repo.get_pending_commission(employee.id)
        assert commission.commission_amount == 120.5
        assert commission.status == "pending"
