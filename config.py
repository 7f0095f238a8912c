import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# --- DATABASE ---
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///" + os.path.join(BASE_DIR, "portal.db"))

# --- AUTH (JWT) ---
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours

# --- OBJECT STORAGE ---
STORAGE_DIR = os.environ.get("STORAGE_DIR", os.path.join(BASE_DIR, "static", "storage"))
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://127.0.0.1:8000").rstrip("/")

CORS_ORIGINS = [
    o.strip()
    for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

# --- GENERATIVE ANALYSIS ---
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "60"))

# --- ADMIN BOOTSTRAP ---
# Password has no default: bootstrap reports failure until one is configured.
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@ece.edu")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")
ADMIN_NAME = os.environ.get("ADMIN_NAME", "Portal Admin")

BULK_MARK_WORKERS = int(os.environ.get("BULK_MARK_WORKERS", "8"))

SEMESTERS = ["1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th"]
