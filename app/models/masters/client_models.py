from sqlalchemy import Column, Integer, String
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class Client(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True)
    client_code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Client id={self.id} code={self.client_code}>"
