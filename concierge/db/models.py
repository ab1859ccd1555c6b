"""Database models."""
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_guid() -> str:
    return str(uuid.uuid4())


class Hotel(Base):
    """Hotel whose guests place orders."""

    __tablename__ = "hotels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=True)
    address = Column(String, nullable=False, default="")

    restaurants = relationship("Restaurant", back_populates="hotel")


class Restaurant(Base):
    """Restaurant partnered with a hotel."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_guid = Column(String(36), unique=True, index=True, nullable=False, default=_new_guid)
    hotel_id = Column(Integer, ForeignKey("hotels.id"), nullable=True)
    name = Column(String, nullable=False)
    source_url = Column(String, nullable=False, default="")
    status = Column(String, default="approved", nullable=False)  # pending, approved, archived
    delivery_fee = Column(String, default="0.00", nullable=False)
    service_fee_percent = Column(String, default="0", nullable=False)

    hotel = relationship("Hotel", back_populates="restaurants")
    menus = relationship("Menu", back_populates="restaurant", cascade="all, delete-orphan")


class Menu(Base):
    """Menu of a restaurant."""

    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    name = Column(String, nullable=False)
    status = Column(String, default="approved", nullable=False)

    restaurant = relationship("Restaurant", back_populates="menus")
    items = relationship("MenuItem", back_populates="menu", cascade="all, delete-orphan")


class MenuItem(Base):
    """Orderable menu item."""

    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_guid = Column(String(36), unique=True, index=True, nullable=False, default=_new_guid)
    menu_id = Column(Integer, ForeignKey("menus.id"), nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    status = Column(String, default="approved", nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    menu = relationship("Menu", back_populates="items")
    modifier_groups = relationship(
        "ModifierGroup", back_populates="menu_item", cascade="all, delete-orphan"
    )


class ModifierGroup(Base):
    """Named set of options attached to one menu item (e.g. Size)."""

    __tablename__ = "modifier_groups"

    id = Column(Integer, primary_key=True, index=True)
    modifier_group_guid = Column(String(36), unique=True, index=True, nullable=False, default=_new_guid)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False)
    name = Column(String, nullable=False)
    min_selections = Column(Integer, nullable=True)
    max_selections = Column(Integer, nullable=True)
    is_required = Column(Boolean, nullable=True)
    is_multi_select = Column(Boolean, nullable=True)
    status = Column(String, default="approved", nullable=False)

    menu_item = relationship("MenuItem", back_populates="modifier_groups")
    options = relationship(
        "ModifierOption", back_populates="modifier_group", cascade="all, delete-orphan"
    )


class ModifierOption(Base):
    """Selectable option within a modifier group."""

    __tablename__ = "modifier_options"

    id = Column(Integer, primary_key=True, index=True)
    modifier_option_guid = Column(String(36), unique=True, index=True, nullable=False, default=_new_guid)
    modifier_group_id = Column(Integer, ForeignKey("modifier_groups.id"), nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=True)
    status = Column(String, default="approved", nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    modifier_group = relationship("ModifierGroup", back_populates="options")


class Order(Base):
    """Guest order."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id"), nullable=False)
    status = Column(String, default="pending", nullable=False)  # pending, confirmed, failed, cancelled
    room_number = Column(String, nullable=False)
    guest_name = Column(String, nullable=True)
    guest_phone = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    special_instructions = Column(Text, nullable=True)
    total_amount = Column(String, nullable=False, default="0.00")
    # Opaque JSON; holds the canonical artifact under "canonicalOrder"
    order_metadata = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    restaurant = relationship("Restaurant")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """Order item model."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    item_name = Column(String, nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    modifiers = Column(JSON, nullable=True)  # List of option names

    order = relationship("Order", back_populates="items")
