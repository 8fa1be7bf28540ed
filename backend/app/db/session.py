# backend/app/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from backend.app.core.config import DATABASE_URL, SQL_ECHO

# pool_pre_ping replaces connections the server dropped while the collector slept
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# FastAPI dependency for the query app
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
