from sqlalchemy import String, Integer, Float, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from villa_api.database.base import Base


class Villa(Base):
    """
    SQLAlchemy model for a Villa.

    `id` is assigned by the database on insert and never changes afterwards.
    `created_date` is written once at creation; `updated_date` on every create
    and update. Both are stamped by the application (see VillaRepository.create
    and VillaService.update_villa), not by server defaults, so that a freshly
    created row has `created_date == updated_date` on every backend.
    """
    __tablename__ = "villas"

    # Integer surrogate key, generated by the store
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Display name. Indexed for the duplicate-name lookup, but NOT unique:
    # uniqueness is a request-level policy (see VillaService.create_villa).
    name: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False
    )

    details: Mapped[str | None] = mapped_column(
        Text,
        nullable=True
    )

    # Nightly rate
    rate: Mapped[float] = mapped_column(
        Float,
        nullable=False
    )

    sqft: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False
    )

    occupancy: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False
    )

    image_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True
    )

    amenity: Mapped[str | None] = mapped_column(
        Text,
        nullable=True
    )

    created_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False
    )

    updated_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Villa(id={self.id!r}, name={self.name!r})>"
