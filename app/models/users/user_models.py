from sqlalchemy import Column, Integer, String, Boolean
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Operator account. Owned by the auth service; read here for actor lookups."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(190), unique=True, nullable=False, index=True)
    name = Column(String(120), nullable=True)
    role = Column(String(50), nullable=False, default="viewer")
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
