from sqlalchemy import Column, Integer, String, Date, ForeignKey, Index, UniqueConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class Product(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    sku_code = Column(String(80), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    volume_ml = Column(Integer, nullable=True)

    __table_args__ = (UniqueConstraint("client_id", "sku_code", name="uq_product_client_sku"),)

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku_code}>"


class ProductLot(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "product_lots"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    lot_no = Column(String(80), nullable=False)
    expiry_date = Column(Date, nullable=True)

    __table_args__ = (Index("ix_product_lot_product_lot_no", "product_id", "lot_no"),)

    def __repr__(self):
        return f"<ProductLot id={self.id} product_id={self.product_id} lot_no={self.lot_no}>"
