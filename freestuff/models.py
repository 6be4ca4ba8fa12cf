# freestuff/models.py
import enum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Float, DateTime, Boolean, Enum, UniqueConstraint, Index, Text
from datetime import datetime, timezone
from typing import Optional
from freestuff.db import Base

class Category(str, enum.Enum):
    EVENTS = "Events"
    FOOD = "Food"
    ITEMS = "Items"
    SERVICES = "Services"

class ItemStatus(str, enum.Enum):
    AVAILABLE = "available"
    CLAIMED = "claimed"
    EXPIRED = "expired"

def _enum_values(e: type[enum.Enum]) -> list[str]:
    return [m.value for m in e]

class Listing(Base):
    __tablename__ = "free_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location_lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    location_lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    category: Mapped[Category] = mapped_column(
        Enum(Category, name="item_category", values_callable=_enum_values),
        default=Category.ITEMS,
    )
    available_from: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    available_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    time_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "" stands in for "no source" so the natural key stays comparable
    source: Mapped[str] = mapped_column(String(50), default="", server_default="", index=True)
    last_verified: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # user submissions only; never written by the scrapers
    location_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    posted_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    edit_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=True)
    interest_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[ItemStatus] = mapped_column(
        Enum(ItemStatus, name="item_status", values_callable=_enum_values),
        default=ItemStatus.AVAILABLE,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("title", "available_from", "source", name="uq_free_items_natural_key"),
        Index("idx_free_items_available_from", "available_from"),
    )
