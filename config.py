import os

DEFAULT_DB_PATH = "diabetes_risk.db" if os.name == "nt" else "/tmp/diabetes_risk.db"
DB_PATH = os.environ.get("DB_PATH", DEFAULT_DB_PATH)

SECRET_KEY = os.environ.get("SECRET_KEY", "diabetes-risk-dev-secret")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
PORT = int(os.environ.get("PORT", 5000))
