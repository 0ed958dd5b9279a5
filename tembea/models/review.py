"""
ServiceReview model: customer ratings feeding tier evaluation.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tembea.models.base import BaseModel

if TYPE_CHECKING:
    from tembea.models.service import Service


class ServiceReview(BaseModel):
    """A 1-5 star review of a service."""

    __tablename__ = "service_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
    )

    service_id: Mapped[int] = mapped_column(
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    comment: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Relationships
    service: Mapped["Service"] = relationship(
        "Service",
        back_populates="reviews",
    )

    def __repr__(self) -> str:
        return f"<ServiceReview(id={self.id}, service_id={self.service_id}, rating={self.rating})>"
