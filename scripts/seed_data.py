#!/usr/bin/env python
# BIZMANAGER/backend/scripts/seed_data.py : compte admin + données de démo

"""Crée un administrateur et, en option, des données de démo réalistes

Usage: python scripts/seed_data.py [email] [password] [--demo]
"""

import random
import sys
import os
from datetime import date, timedelta
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.auth import sign_up
from app.constants import (
    BUSINESS_TYPES,
    COMMISSION_PAID,
    COMMISSION_PENDING,
    EXPENSE_CATEGORIES,
    ROLE_ADMIN,
    ROLE_EMPLOYEE,
)
from app.database import SessionLocal, create_tables
from app.models import models
from app.schemas.schemas import SessionContext
from app.services.repository import DomainRepository


def generate_demo_data(db, admin_id):
    """Trois entreprises, deux employés chacune, 30 jours de ventes"""
    admin_repo = DomainRepository(db, SessionContext(authenticated=True, role=ROLE_ADMIN, user_id=admin_id))

    for i in range(3):
        business = admin_repo.create_business(
            admin_id,
            f"Business {i + 1}",
            random.choice(BUSINESS_TYPES),
            random.choice(["Downtown", "Harbor", "Uptown"]),
            "Demo business"
        )
        for j in range(2):
            employee = admin_repo.create_employee(
                business.id,
                f"Employee {i + 1}.{j + 1}",
                f"employee{i + 1}{j + 1}@bizmanager.demo",
                "demo123",
                random.choice([5, 10, 15])
            )
            # Les ventes passent par le compte de l'employé (lignes visibles par lui seul)
            employee_repo = DomainRepository(
                db, SessionContext(authenticated=True, role=ROLE_EMPLOYEE, user_id=employee.user_id)
            )
            for days_ago in range(30):
                employee_repo.create_sale(
                    employee.id,
                    business.id,
                    date.today() - timedelta(days=days_ago),
                    random.randint(1, 12),
                    round(random.uniform(50, 900), 2)
                )
                if random.random() < 0.3:
                    employee_repo.create_expense(
                        employee.id,
                        business.id,
                        round(random.uniform(10, 150), 2),
                        random.choice(EXPENSE_CATEGORIES),
                        "Demo expense",
                        date.today() - timedelta(days=days_ago)
                    )

            # Normalement produit par le batch externe : mois précédent payé, mois courant en attente
            current_month = date.today().replace(day=1)
            previous_month = (current_month - timedelta(days=1)).replace(day=1)
            db.add_all([
                models.MonthlyCommission(
                    employee_id=employee.id,
                    month=previous_month,
                    commission_amount=round(random.uniform(100, 600), 2),
                    status=COMMISSION_PAID
                ),
                models.MonthlyCommission(
                    employee_id=employee.id,
                    month=current_month,
                    commission_amount=round(random.uniform(100, 600), 2),
                    status=COMMISSION_PENDING
                ),
            ])
    db.commit()


def main(argv):
    args = [a for a in argv if not a.startswith("--")]
    email = args[0] if len(args) > 0 else "admin@bizmanager.demo"
    password = args[1] if len(args) > 1 else "admin123"

    create_tables()
    db = SessionLocal()
    try:
        admin = sign_up(db, email, password, ROLE_ADMIN)
        if "--demo" in argv:
            generate_demo_data(db, admin.id)
            print("✅ Données de démo générées avec succès!")
        print(f"👤 Administrateur: {email} / {password}")
    finally:
        db.close()


if __name__ == "__main__":
    main(sys.argv[1:])
