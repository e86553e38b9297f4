
# BIZMANAGER/backend/tests/test_auth.py : test pour l'authentification et le Session Gate

from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.auth import (
    NOT_SET_UP_MESSAGE,
    ROLE_LOOKUP_FAILED_MESSAGE,
    create_access_token,
    hash_password,
    resolve_session,
)
from app.errors import AuthError
from app.models import models
from conftest import login_headers, register_and_login


class BrokenDB:
    """Session dont chaque requête échoue côté store"""

    def query(self, *args, **kwargs):
        raise SQLAlchemyError("connection reset")


class TestAuth:
    @pytest.fixture(autouse=True)
    def setup_client(self, client, db_session):
        self.client = client
        self.db = db_session
        self.test_email = "test@example.com"
        self.test_password = "Test123!"

    def _create_employee(self, admin_headers, email="ana@test.com"):
        business = self.client.post("/admin/businesses", json={
            "name": "Main Street Cuts",
            "business_type": "Barbershop",
            "location": "Downtown"
        }, headers=admin_headers).json()["record"]
        response = self.client.post("/admin/employees", json={
            "business_id": business["id"],
            "name": "Ana",
            "email": email,
            "password": "secret1",
            "commission_rate": 10
        }, headers=admin_headers)
        assert response.status_code == 200
        return login_headers(self.client, email, "secret1")

    def _identity_without_role(self, email="ghost@test.com", password="Test123!"):
        """Identité valide sans enregistrement dans users"""
        self.db.add(models.Identity(email=email, password_hash=hash_password(password)))
        self.db.commit()
        return login_headers(self.client, email, password)

    # ========== FOURNISSEUR D'IDENTITÉ ==========

    def test_register_user(self):
        """Test d'inscription administrateur"""
        response = self.client.post("/users/register", json={
            "email": "Owner@Test.com",
            "password": self.test_password
        })
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "owner@test.com"
        assert data["role"] == "admin"
        assert "id" in data

    def test_register_duplicate_email(self):
        """Test d'inscription avec email déjà utilisé"""
        payload = {"email": self.test_email, "password": self.test_password}
        assert self.client.post("/users/register", json=payload).status_code == 200

        response = self.client.post("/users/register", json=payload)
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_register_missing_password(self):
        response = self.client.post("/users/register", json={"email": self.test_email, "password": ""})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_login_admin_lands_on_admin(self):
        """Test de connexion réussie"""
        self.client.post("/users/register", json={
            "email": self.test_email,
            "password": self.test_password
        })
        response = self.client.post("/users/login", json={
            "email": self.test_email,
            "password": self.test_password
        })
        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["role"] == "admin"
        assert data["redirect"] == "/admin"

    def test_login_employee_lands_on_employee(self):
        admin_headers = register_and_login(self.client, self.test_email)
        self._create_employee(admin_headers)

        data = self.client.post("/users/login", json={"email": "ana@test.com", "password": "secret1"}).json()
        assert data["role"] == "employee"
        assert data["redirect"] == "/employee"

    def test_login_wrong_password(self):
        """Test de connexion avec mauvais mot de passe"""
        self.client.post("/users/register", json={
            "email": self.test_email,
            "password": self.test_password
        })
        response = self.client.post("/users/login", json={
            "email": self.test_email,
            "password": "wrongpassword"
        })
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_nonexistent_user(self):
        response = self.client.post("/users/login", json={
            "email": "nonexistent@test.com",
            "password": "password123"
        })
        assert response.status_code == 401

    # ========== SESSION ==========

    def test_session_without_token(self):
        response = self.client.get("/users/session")
        assert response.status_code == 200
        assert response.json() == {"authenticated": False, "role": None, "user_id": None}

    def test_session_for_admin(self):
        headers = register_and_login(self.client, self.test_email)
        data = self.client.get("/users/session", headers=headers).json()
        assert data["authenticated"] is True
        assert data["role"] == "admin"
        assert data["user_id"] is not None

    def test_session_expired_token(self):
        headers = register_and_login(self.client, self.test_email)
        user_id = self.client.get("/users/session", headers=headers).json()["user_id"]

        expired = create_access_token({"sub": str(user_id)}, timedelta(minutes=-5))
        response = self.client.get("/users/session", headers={"Authorization": f"Bearer {expired}"})
        assert response.json()["authenticated"] is False

        response = self.client.get("/admin/overview", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401
        assert response.json()["redirect"] == "/login"

    def test_session_store_failure_is_fail_closed(self):
        token = create_access_token({"sub": "1"})
        with pytest.raises(AuthError) as exc:
            resolve_session(BrokenDB(), token)
        assert exc.value.status_code == 403
        assert exc.value.redirect == "/login"
        assert exc.value.message == ROLE_LOOKUP_FAILED_MESSAGE
        assert exc.value.message != NOT_SET_UP_MESSAGE

    def test_session_unknown_identity(self):
        token = create_access_token({"sub": "9999"})
        assert resolve_session(self.db, token).authenticated is False

    # ========== GATES ==========

    def test_protected_route_without_token(self):
        """Test d'accès à une route protégée sans token"""
        response = self.client.get("/admin/businesses")
        assert response.status_code == 401
        assert response.json()["redirect"] == "/login"

    def test_protected_route_with_invalid_token(self):
        """Test d'accès à une route protégée avec token invalide"""
        headers = {"Authorization": "Bearer invalid_token"}
        response = self.client.get("/employee/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["redirect"] == "/login"

    def test_protected_route_with_valid_token(self):
        headers = register_and_login(self.client, self.test_email)
        response = self.client.get("/admin/businesses", headers=headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_employee_redirected_from_admin_view(self):
        admin_headers = register_and_login(self.client, self.test_email)
        employee_headers = self._create_employee(admin_headers)

        response = self.client.get("/admin/overview", headers=employee_headers)
        assert response.status_code == 403
        assert response.json()["redirect"] == "/employee"

    def test_admin_redirected_from_employee_view(self):
        headers = register_and_login(self.client, self.test_email)
        response = self.client.get("/employee/home", headers=headers)
        assert response.status_code == 403
        assert response.json()["redirect"] == "/admin"

    def test_identity_without_role_record(self):
        headers = self._identity_without_role()

        session = self.client.get("/users/session", headers=headers).json()
        assert session["authenticated"] is True
        assert session["role"] is None

        admin_view = self.client.get("/admin/overview", headers=headers)
        assert admin_view.status_code == 403
        assert admin_view.json()["redirect"] == "/employee"

        employee_view = self.client.get("/employee/me", headers=headers)
        assert employee_view.status_code == 403
        assert employee_view.json()["redirect"] == "/login"
        assert employee_view.json()["detail"] == NOT_SET_UP_MESSAGE

    def test_login_without_role_record(self):
        self._identity_without_role()
        data = self.client.post("/users/login", json={"email": "ghost@test.com", "password": "Test123!"}).json()
        assert data["role"] is None
        assert data["redirect"] == "/login"
