import os
from pathlib import Path
from dotenv import load_dotenv

from .envcrypt import load_encrypted_env

root_dir = Path(__file__).resolve().parents[1]
root_env = root_dir / ".env"
root_env_enc = root_dir / ".env.enc"
if root_env.exists():
    load_dotenv(root_env)
elif root_env_enc.exists() and os.getenv("ENV_PASSPHRASE"):
    # Encrypted env produced by `flask env encrypt`; plaintext .env wins when both exist.
    load_encrypted_env(root_env_enc, os.environ["ENV_PASSPHRASE"])


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SERVER = os.getenv("DB_SERVER", "OPSPrdAppDB")
    DATABASE = os.getenv("DB_NAME", "OPSDESK")
    DRIVER = os.getenv("ODBC_DRIVER", "ODBC+Driver+17+for+SQL+Server")
    TRUSTED = os.getenv("DB_TRUSTED", "yes")
    # Local store (synced copies + audit log). Integrated Security by default.
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        f"mssql+pyodbc://{SERVER}/{DATABASE}?trusted_connection={TRUSTED}&driver={DRIVER}" if os.name == "nt" else f"mssql+pyodbc://{SERVER}/{DATABASE}?Trusted_Connection={TRUSTED}&driver={DRIVER}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # -------------------------------------------
    #            Legacy ERP (JDE) connection
    # -------------------------------------------
    JDE_DB_HOST = os.getenv("JDE_DB_HOST", "localhost")
    JDE_DB_PORT = int(os.getenv("JDE_DB_PORT", "1521"))
    JDE_DB_SERVICE = os.getenv("JDE_DB_SERVICE", "JDE")
    JDE_DB_USER = os.getenv("JDE_DB_USER", "jde_user")
    JDE_DB_PASSWORD = os.getenv("JDE_DB_PASSWORD", "jde_password")
    # Full SQLAlchemy URL override (e.g. a read replica or a sqlite fixture)
    JDE_DATABASE_URL = os.getenv("JDE_DATABASE_URL")

    # AIS REST server; reserved, the connector only talks to the database
    JDE_AIS_SERVER = os.getenv("JDE_AIS_SERVER", "localhost")
    JDE_AIS_PORT = int(os.getenv("JDE_AIS_PORT", "9999"))
    JDE_AIS_USER = os.getenv("JDE_AIS_USER", "ais_user")
    JDE_AIS_PASSWORD = os.getenv("JDE_AIS_PASSWORD", "ais_password")

    # -------------------------------------------
    #            Program Parameters
    # -------------------------------------------
    ERP_POOL_SIZE = int(os.getenv("ERP_POOL_SIZE", "4"))
    ERP_POOL_TIMEOUT = int(os.getenv("ERP_POOL_TIMEOUT", "30"))  # seconds waiting for a free pooled connection
    ERP_CALL_TIMEOUT_MS = int(os.getenv("ERP_CALL_TIMEOUT_MS", "30000"))  # per round-trip, 0 disables
    ERP_DEFAULT_COMPANY = os.getenv("ERP_DEFAULT_COMPANY", "00001")
    ERP_ITEM_ROW_CAP = int(os.getenv("ERP_ITEM_ROW_CAP", "100"))  # unfiltered item master listing
    INVENTORY_CACHE_SECONDS = int(os.getenv("INVENTORY_CACHE_SECONDS", "300"))

    @classmethod
    def validate(cls):
        missing = [k for k in ["JDE_DB_HOST", "JDE_DB_SERVICE", "JDE_DB_USER", "JDE_DB_PASSWORD"] if not getattr(cls, k)]
        if missing and not cls.JDE_DATABASE_URL:
            raise ValueError(f"Missing required environment variables for the JDE connection: {', '.join(missing)}")


class DevelopmentConfig(Config):
    DEBUG = True
    ENVIRONMENT = "development"
    # Allow override to SQLite for quick dev (set USE_SQLITE=1)
    if os.getenv("USE_SQLITE") == "1":
        SQLALCHEMY_DATABASE_URI = "sqlite:///opsdesk_dev.db"


class ProductionConfig(Config):
    DEBUG = False
    ENVIRONMENT = "production"


class TestingConfig(Config):
    TESTING = True
    ENVIRONMENT = "development"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JDE_DATABASE_URL = "sqlite://"
    ERP_CALL_TIMEOUT_MS = 0


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
