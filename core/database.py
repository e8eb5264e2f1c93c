from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from config.settings import settings

def build_engine():
    """Create the process-wide engine from settings"""
    config = settings.get_database_config()
    url = config.pop("url")

    if settings.is_sqlite:
        config["connect_args"] = {"check_same_thread": False}
        # In-memory databases live on a single connection
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            config["poolclass"] = StaticPool

    return create_engine(url, **config)

# Create engine
engine = build_engine()

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create Base class
Base = declarative_base()

# Dependency to get database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
