
# BIZMANAGER/backend/app/models/models.py

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Date, Boolean, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.constants import COMMISSION_PENDING, SALE_PENDING
from app.database import Base


class Identity(Base):
    """Compte du fournisseur d'identité (email + mot de passe)"""
    __tablename__ = "identities"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class User(Base):
    """Enregistrement applicatif du rôle, indexé par l'id de l'identité"""
    __tablename__ = "users"
    id = Column(Integer, ForeignKey("identities.id"), primary_key=True)
    email = Column(String, nullable=False)
    role = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    businesses = relationship("Business", back_populates="admin", cascade="all, delete-orphan")
    employee = relationship("Employee", back_populates="user", uselist=False)


class Business(Base):
    __tablename__ = "businesses"
    id = Column(Integer, primary_key=True, index=True)
    admin_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    business_type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    admin = relationship("User", back_populates="businesses")
    employees = relationship("Employee", back_populates="business", cascade="all, delete-orphan")
    sales = relationship("DailySale", back_populates="business", cascade="all, delete-orphan")
    expenses = relationship("Expense", back_populates="business", cascade="all, delete-orphan")


class Employee(Base):
    __tablename__ = "employees"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    commission_rate = Column(Float, nullable=False, default=10.0)
    position = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="employee")
    business = relationship("Business", back_populates="employees")
    # Pas de cascade : la suppression d'un employé détache ses ventes/dépenses (employee_id -> NULL)
    sales = relationship("DailySale", back_populates="employee")
    expenses = relationship("Expense", back_populates="employee")
    commissions = relationship("MonthlyCommission", back_populates="employee", cascade="all, delete-orphan")


class DailySale(Base):
    __tablename__ = "daily_sales"
    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    sale_date = Column(Date, nullable=False, index=True)
    service_count = Column(Integer, nullable=False, default=0)
    total_sales = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default=SALE_PENDING)
    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Employee", back_populates="sales")
    business = relationship("Business", back_populates="sales")


class Expense(Base):
    __tablename__ = "expenses"
    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    amount = Column(Float, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String)
    expense_date = Column(Date, nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    business = relationship("Business", back_populates="expenses")
    employee = relationship("Employee", back_populates="expenses")


class MonthlyCommission(Base):
    """Produit par un traitement batch externe ; lecture seule ici"""
    __tablename__ = "monthly_commissions"
    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    month = Column(Date, nullable=False)
    commission_amount = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default=COMMISSION_PENDING)
    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Employee", back_populates="commissions")
