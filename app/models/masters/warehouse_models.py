from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class Warehouse(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Warehouse id={self.id} code={self.code}>"


class WarehouseLocation(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "warehouse_locations"

    id = Column(Integer, primary_key=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    location_code = Column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("warehouse_id", "location_code", name="uq_warehouse_location_code"),)

    def __repr__(self):
        return f"<WarehouseLocation id={self.id} code={self.location_code}>"
