"""
Database Models - Merchant Platform Schema

This module defines the relational models read by the analytics API:

- Merchant: restaurant account, supplies the currency of its orders
- Customer: registered diner
- Order: placed order with status, type and amounts
- OrderItem: menu line of an order
- Payment: settlement of an order, carries the payment method

The order lifecycle is owned by the ordering subsystem; these models are only
read here (the demo seeder is the sole writer).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# SQLite only auto-increments INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OrderType(str, Enum):
    """Order type enumeration"""
    DINE_IN = "DINE_IN"
    TAKEAWAY = "TAKEAWAY"
    DELIVERY = "DELIVERY"


class PaymentMethod(str, Enum):
    """Payment method enumeration"""
    CASH_ON_COUNTER = "CASH_ON_COUNTER"
    CARD_ON_COUNTER = "CARD_ON_COUNTER"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"


class Currency(str, Enum):
    """Merchant currency enumeration"""
    IDR = "IDR"
    AUD = "AUD"


# =============================================================================
# TABLES
# =============================================================================

class Merchant(Base):
    """
    Merchant Table

    A restaurant account. Its currency applies to every order it receives.
    """
    __tablename__ = "merchants"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(200))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    currency: Mapped[Optional[str]] = mapped_column(String(3), default=Currency.AUD.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now()
    )

    orders: Mapped[List["Order"]] = relationship(back_populates="merchant")


class Customer(Base):
    """Customer Table"""
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    orders: Mapped[List["Order"]] = relationship(back_populates="customer")

    __table_args__ = (
        Index("ix_customers_created_at", "created_at"),
    )


class Order(Base):
    """
    Order Table

    One row per placed order. `created_at` drives the dashboard charts,
    `placed_at` drives merchant sales reports.
    """
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    merchant_id: Mapped[int] = mapped_column(
        ForeignKey("merchants.id"), nullable=False
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("customers.id")
    )
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)

    order_type: Mapped[OrderType] = mapped_column(
        SQLEnum(OrderType), default=OrderType.DINE_IN, nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(OrderStatus), default=OrderStatus.PENDING, nullable=False
    )

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    placed_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )

    merchant: Mapped["Merchant"] = relationship(back_populates="orders")
    customer: Mapped[Optional["Customer"]] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")
    payment: Mapped[Optional["Payment"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_created_status", "created_at", "status"),
        Index("ix_orders_merchant_placed", "merchant_id", "placed_at"),
    )


class OrderItem(Base):
    """Order line item with a snapshot of the menu name"""
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id"), nullable=False
    )
    menu_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    menu_name: Mapped[str] = mapped_column(String(200), nullable=False)
    menu_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
    )


class Payment(Base):
    """Payment Table - at most one payment per order"""
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id"), unique=True, nullable=False
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    order: Mapped["Order"] = relationship(back_populates="payment")
