"""
Pricing domain errors.

The API layer maps these onto HTTP status codes in tembea.main:
NotFoundError -> 404, PricingValidationError -> 400, StorageError -> 503.
"""

from typing import Optional


class PricingError(Exception):
    """Base class for pricing and tier errors."""


class NotFoundError(PricingError):
    """A referenced record does not exist."""

    entity = "Record"

    def __init__(self, entity_id=None, message: Optional[str] = None):
        self.entity_id = entity_id
        if message is None:
            message = f"{self.entity} not found"
            if entity_id is not None:
                message = f"{self.entity} {entity_id} not found"
        super().__init__(message)


class ServiceNotFoundError(NotFoundError):
    entity = "Service"


class VendorNotFoundError(NotFoundError):
    entity = "Vendor"


class TierNotFoundError(NotFoundError):
    entity = "Tier"


class OverrideNotFoundError(NotFoundError):
    entity = "Override"


class BookingNotFoundError(NotFoundError):
    entity = "Booking"


class PricingValidationError(PricingError):
    """Input rejected before anything was written."""


class StorageError(PricingError):
    """The database failed; the driver's message is kept for operators."""
