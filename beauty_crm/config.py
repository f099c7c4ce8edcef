import os


def _env_flag(name, default=""):
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    """Base configuration. Shared across all environments."""

    # --- Required ---
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Handle DATABASE_URL: some PaaS providers (Railway, Heroku) use
    # "postgres://" which SQLAlchemy 1.4+ doesn't accept.
    _db_url = os.environ.get("DATABASE_URL", "")
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url or None

    # Bearer token for service-to-service calls (importers, Fiori frontend proxy)
    CRM_API_KEY = os.environ.get("CRM_API_KEY")

    # --- CRM defaults ---
    CRM_DEFAULT_CURRENCY = os.environ.get("CRM_DEFAULT_CURRENCY", "MYR")
    CRM_DEFAULT_COUNTRY = os.environ.get("CRM_DEFAULT_COUNTRY", "Malaysia")
    CRM_CLOSE_DATE_DAYS = int(os.environ.get("CRM_CLOSE_DATE_DAYS", 90))

    # When True, read endpoints fill follow-up / pending-items / assignee
    # columns with stable placeholder values picked from the record id.
    CRM_DEMO_MODE = _env_flag("CRM_DEMO_MODE")

    # ";"-separated file of "<uuid>;<about text>" rows used by generate-about.
    CRM_ABOUT_LOOKUP_PATH = os.environ.get(
        "CRM_ABOUT_LOOKUP_PATH",
        os.path.join(os.path.dirname(__file__), "data", "about_lookup.csv"),
    )

    # --- Rate limits ---
    CRM_IMPORT_RATE_LIMIT = os.environ.get("CRM_IMPORT_RATE_LIMIT", "30 per hour")

    # --- SQLAlchemy ---
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # --- Session / cookies ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = "Lax"

    @staticmethod
    def validate():
        """Fail fast if required env vars are missing."""
        required = [
            "SECRET_KEY",
            "DATABASE_URL",
            "CRM_API_KEY",
        ]
        missing = [v for v in required if not os.environ.get(v)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or "sqlite:///beauty_crm.db"
    CRM_DEMO_MODE = _env_flag("CRM_DEMO_MODE", "true")
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False


class TestConfig(Config):
    """Testing: in-memory SQLite, rate limiting off."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-not-for-production"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    CRM_API_KEY = "test-api-key"
    CRM_DEMO_MODE = False  # override per-test as needed
    RATELIMIT_ENABLED = False
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False
    SERVER_NAME = "localhost"

    @staticmethod
    def validate():
        """Skip validation in test mode, everything is hardcoded."""
        pass


class ProdConfig(Config):
    """Production."""

    DEBUG = False
    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
