# BIZMANAGER/backend/app/constants.py

# Rôles applicatifs (stockés dans la table users, pas chez le fournisseur d'identité)
ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLES = [ROLE_ADMIN, ROLE_EMPLOYEE]

# Pages d'atterrissage par rôle (utilisées pour les redirections du Session Gate)
LOGIN_ROUTE = "/login"
LANDING_ROUTES = {
    ROLE_ADMIN: "/admin",
    ROLE_EMPLOYEE: "/employee",
}
# Vue par défaut pour un utilisateur connecté sans droit admin
DEFAULT_LOW_PRIVILEGE_ROUTE = LANDING_ROUTES[ROLE_EMPLOYEE]

# Statuts
SALE_PENDING = "pending"
COMMISSION_PENDING = "pending"
COMMISSION_PAID = "paid"

# Types d'entreprise et couleurs associées pour la répartition
OTHER_TYPE = "Other"
BUSINESS_TYPES = ["Barbershop", "Retail", "Restaurant", "Service", OTHER_TYPE]
BUSINESS_TYPE_COLORS = {
    "Barbershop": "#3b82f6",
    "Retail": "#8b5cf6",
    "Restaurant": "#ec4899",
    "Service": "#14b8a6",
    OTHER_TYPE: "#64748b",
}
FALLBACK_COLOR = "#64748b"

# Catégories de dépenses proposées dans le formulaire employé
EXPENSE_CATEGORIES = ["Supplies", "Equipment", "Marketing", "Travel", "Other"]
DEFAULT_EXPENSE_CATEGORY = "Supplies"

UNKNOWN_EMPLOYEE = "Unknown"

# Commission (%)
DEFAULT_COMMISSION_RATE = 10.0
MIN_COMMISSION_RATE = 0.0
MAX_COMMISSION_RATE = 100.0

# Rapports
REPORT_PERIODS = {
    "all": None,
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
}
TOP_EMPLOYEES_LIMIT = 5
RECENT_TRANSACTIONS_LIMIT = 10
