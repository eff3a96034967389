from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from proctorview.core.config import settings

engine = create_engine(settings.DATABASE_URL, future=True)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()


def init_db(bind=None):
    # Import models so their tables are registered on Base.metadata
    from proctorview.models import (  # noqa: F401
        evaluation,
        event,
        interview,
        profile,
        response,
        session,
    )

    Base.metadata.create_all(bind=bind or engine)
