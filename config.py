import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # Database: use DATABASE_URL from environment (PostgreSQL in production), fallback to SQLite for local dev
    _db_url = os.environ.get("DATABASE_URL", f"sqlite:///{os.path.join(basedir, 'instance', 'teses.db')}")
    # Heroku-style URLs give postgres:// but SQLAlchemy requires postgresql://
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # PostgreSQL connection pooling
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,       # verify connections before using
        "pool_recycle": 300,         # recycle connections every 5 min
        "pool_size": 5,
        "max_overflow": 10,
    } if "DATABASE_URL" in os.environ else {}

    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB JSON bodies

    # LLM advisory feedback
    ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929")
    ADVISOR_MAX_TOKENS = int(os.environ.get("ADVISOR_MAX_TOKENS", "2000"))
    ADVISOR_TIMEOUT = float(os.environ.get("ADVISOR_TIMEOUT", "90"))

    PREFERRED_URL_SCHEME = "https" if os.environ.get("BEHIND_PROXY", "") else "http"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
