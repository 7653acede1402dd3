"""Delivery service - CEP range membership and delivery zone management

A store with no configured ranges delivers everywhere. Otherwise a CEP is
deliverable when it falls inside ANY range, bounds inclusive. CEPs are stored
as zero-padded 8 digit strings, so string comparison orders them numerically.
"""

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from ...models import StoreCepRange
from ...shared.errors import NotFoundError, UnprocessableEntityError
from ...shared.validators import normalize_cep
from ..catalog.repository import CatalogRepository
from .repository import CepRangeRepository

logger = logging.getLogger(__name__)


def is_within_any_range(cep: str, ranges: Sequence) -> bool:
    """
    Check a CEP against a store's delivery ranges.

    Args:
        cep: Raw CEP, masked or not
        ranges: Objects exposing ``cep_start`` and ``cep_end`` (normalized)

    Raises:
        ValueError: If the CEP does not contain exactly 8 digits
    """
    normalized = normalize_cep(cep)
    if not ranges:
        return True
    return any(r.cep_start <= normalized <= r.cep_end for r in ranges)


class DeliveryService:
    """Service layer for delivery zone business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CepRangeRepository()
        self.catalog_repo = CatalogRepository()

    def list_ranges(self, store_id: str) -> list[StoreCepRange]:
        return self.repo.get_ranges(self.db, store_id)

    def add_range(self, store_id: str, cep_start: str, cep_end: str) -> StoreCepRange:
        """Add a delivery range after normalizing both ends"""
        try:
            start = normalize_cep(cep_start)
            end = normalize_cep(cep_end)
        except ValueError as e:
            raise UnprocessableEntityError(str(e)) from e

        if start > end:
            raise UnprocessableEntityError("Start CEP must be less than or equal to end CEP")

        cep_range = self.repo.create_range(self.db, store_id, start, end)
        logger.info(f"Added CEP range {start}-{end} for store {store_id}")
        return cep_range

    def delete_range(self, store_id: str, range_id: str) -> None:
        """Delete a range; absent or foreign ids are a no-op"""
        deleted = self.repo.delete_range(self.db, range_id, store_id)
        if deleted:
            logger.info(f"Deleted CEP range {range_id} for store {store_id}")

    def validate_cep(self, slug: str, cep: str) -> dict:
        """Public eligibility check for a store's catalog page"""
        try:
            normalized = normalize_cep(cep)
        except ValueError as e:
            raise UnprocessableEntityError(str(e)) from e

        store = self.catalog_repo.find_store_by_slug(self.db, slug)
        if not store:
            raise NotFoundError("Store not found")

        ranges = self.repo.get_ranges(self.db, store.id)
        if not ranges:
            return {"valid": True, "unrestricted": True}
        return {"valid": is_within_any_range(normalized, ranges), "unrestricted": False}

    def ensure_deliverable(self, store_id: str, cep: str) -> str:
        """
        Normalize a delivery CEP and require it to be inside the store's zone.

        Returns:
            The normalized 8 digit CEP

        Raises:
            UnprocessableEntityError: If the CEP is malformed or outside every range
        """
        try:
            normalized = normalize_cep(cep)
        except ValueError as e:
            raise UnprocessableEntityError(str(e)) from e

        if not is_within_any_range(normalized, self.repo.get_ranges(self.db, store_id)):
            logger.warning(f"CEP {normalized} outside delivery area of store {store_id}")
            raise UnprocessableEntityError(
                f"The store does not deliver to CEP {normalized[:5]}-{normalized[5:]}"
            )
        return normalized
