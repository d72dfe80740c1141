# app/models/identity.py
from sqlalchemy import Column, String, DateTime
from app.database import Base
from app.models.user import new_id, utcnow


class Identity(Base):
    """Credential record owned by the identity provider, separate from the user directory"""

    __tablename__ = "identities"

    uid = Column(String(32), primary_key=True, index=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
