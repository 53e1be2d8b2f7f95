"""Base SQLAlchemy declarative base for all models"""

from uuid import uuid4

from sqlalchemy.orm import declarative_base


def generate_id() -> str:
    """Primary key default for all survey tables.

    Ids are stored as text: survey ids travel through reply addresses and
    subject lines as opaque hex-and-hyphen tokens.
    """
    return str(uuid4())


Base = declarative_base()
