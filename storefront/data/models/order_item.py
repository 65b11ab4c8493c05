from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(40), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # bez FK na products: pozycja zamowienia nie zalezy od pozniejszych zmian katalogu
    product_id = Column(Integer, nullable=False)

    product_name = Column(String, nullable=False)
    product_sku = Column(String, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    order = relationship("OrderModel", back_populates="items")
