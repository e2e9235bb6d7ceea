from typing import Generator
from sqlalchemy.orm import Session
from gasrefill.db.session import get_session


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session"""
    with get_session() as db:
        yield db
