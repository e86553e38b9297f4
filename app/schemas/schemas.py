# BIZMANAGER/backend/app/schemas/schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from typing import Optional, List
from datetime import date, datetime

from app.constants import DEFAULT_COMMISSION_RATE, DEFAULT_EXPENSE_CATEGORY, SALE_PENDING
from app.services.aggregation import to_amount


def _lenient_amount(value):
    """Coercion à la frontière du repository : montant illisible -> 0"""
    return to_amount(value)


def _lenient_count(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


# ---------- IDENTITY / SESSION SCHEMAS ----------
class Credentials(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
    role: Optional[str] = None
    redirect: Optional[str] = None


class SessionContext(BaseModel):
    """Identité authentifiée + rôle, passée explicitement à chaque appel"""
    authenticated: bool
    role: Optional[str] = None
    user_id: Optional[int] = None


class UserOut(BaseModel):
    id: int
    email: str
    role: str

    model_config = ConfigDict(from_attributes=True)


# ---------- BUSINESS SCHEMAS ----------
class BusinessCreate(BaseModel):
    name: str = ""
    business_type: str = ""
    location: str = ""
    description: Optional[str] = ""


class BusinessOut(BaseModel):
    id: int
    admin_id: int
    name: str
    business_type: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


# ---------- EMPLOYEE SCHEMAS ----------
class EmployeeCreate(BaseModel):
    business_id: Optional[int] = None
    name: str = ""
    email: str = ""
    password: str = ""
    commission_rate: float = DEFAULT_COMMISSION_RATE
    position: Optional[str] = None


class EmployeeOut(BaseModel):
    id: int
    user_id: int
    business_id: int
    name: str
    email: Optional[str] = None
    business_name: Optional[str] = None
    commission_rate: float = 0
    position: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('commission_rate', mode='before')
    @classmethod
    def coerce_rate(cls, value):
        return _lenient_amount(value)

    @field_serializer('created_at')
    def serialize_datetime(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


# ---------- DAILY SALE SCHEMAS ----------
class SaleCreate(BaseModel):
    total_sales: Optional[float] = None
    service_count: Optional[int] = None
    sale_date: Optional[date] = None  # Aujourd'hui par défaut


class DailySaleOut(BaseModel):
    id: int
    employee_id: Optional[int] = None
    business_id: int
    sale_date: date
    service_count: int = 0
    total_sales: float = 0
    status: str = SALE_PENDING
    employee_name: Optional[str] = None
    business_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator('total_sales', mode='before')
    @classmethod
    def coerce_total(cls, value):
        return _lenient_amount(value)

    @field_validator('service_count', mode='before')
    @classmethod
    def coerce_count(cls, value):
        return _lenient_count(value)


# ---------- EXPENSE SCHEMAS ----------
class ExpenseCreate(BaseModel):
    amount: Optional[float] = None
    category: str = DEFAULT_EXPENSE_CATEGORY
    description: Optional[str] = ""
    expense_date: Optional[date] = None


class ExpenseOut(BaseModel):
    id: int
    business_id: int
    employee_id: Optional[int] = None
    amount: float = 0
    category: str
    description: Optional[str] = ""
    expense_date: date
    is_approved: bool = False

    model_config = ConfigDict(from_attributes=True)

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, value):
        return _lenient_amount(value)


# ---------- COMMISSION SCHEMAS ----------
class MonthlyCommissionOut(BaseModel):
    id: int
    employee_id: int
    month: date
    commission_amount: float = 0
    status: str

    model_config = ConfigDict(from_attributes=True)

    @field_validator('commission_amount', mode='before')
    @classmethod
    def coerce_amount(cls, value):
        return _lenient_amount(value)


# ---------- FORM RESULT ----------
class FormResult(BaseModel):
    success: bool = True
    message: str
    record: Optional[dict] = None


# ---------- REPORT SCHEMAS ----------
class DistributionSlice(BaseModel):
    type: str
    count: int
    color: str
    percentage: float


class TopEmployee(BaseModel):
    name: str
    total: float


class DailyTotal(BaseModel):
    date: str
    revenue: float
    expenses: float
    profit: float


class AdminStats(BaseModel):
    revenue: float = 0
    businesses: int = 0
    employees: int = 0


class AdminOverview(BaseModel):
    stats: AdminStats
    distribution: List[DistributionSlice]
    has_data: bool
    empty_state: Optional[str] = None


class BusinessStats(BaseModel):
    employees: int = 0
    revenue: float = 0
    expenses: float = 0
    profit: float = 0
    sales_count: int = 0


class BusinessDetails(BaseModel):
    business: BusinessOut
    stats: BusinessStats
    employees: List[EmployeeOut]


class Report(BaseModel):
    period: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_revenue: float = 0
    total_expenses: float = 0
    net_profit: float = 0
    profit_margin: float = 0
    total_services: int = 0
    top_employees: List[TopEmployee] = Field(default_factory=list)
    recent_sales: List[DailySaleOut] = Field(default_factory=list)
    daily_totals: List[DailyTotal] = Field(default_factory=list)


class EmployeeHomeStats(BaseModel):
    sales: float = 0
    customers: int = 0
    commission: float = 0
