"""
Storefront models (customers, products, orders)

These tables are owned by the CRUD services. The analytics engine only reads
them, so only the columns used in aggregation are mapped.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from backoffice.models.base import Base


class Customer(Base):
    """Store customer"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    email = Column(String, index=True)
    location = Column(String, index=True, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer {self.id}: {self.email}>"


class Product(Base):
    """Catalog product with on-hand stock"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, index=True, nullable=True)
    category = Column(String, index=True, nullable=True)
    price = Column(Float, default=0.0, nullable=False)
    stock = Column(Integer, default=0, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Product {self.id}: {self.name} stock={self.stock}>"


class Order(Base):
    """Customer order header"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), index=True, nullable=True)
    status = Column(String, index=True, default="pending")
    total = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")

    def __repr__(self):
        return f"<Order {self.id}: ${self.total}>"


class OrderItem(Base):
    """Order line"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    price = Column(Float, default=0.0, nullable=False)
    total = Column(Float, default=0.0, nullable=False)  # quantity * price after discounts

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
