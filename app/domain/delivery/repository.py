"""CEP range repository - Database operations for delivery zones"""

from sqlalchemy.orm import Session

from ...models import StoreCepRange


class CepRangeRepository:
    """Repository for store delivery CEP ranges"""

    @staticmethod
    def get_ranges(db: Session, store_id: str) -> list[StoreCepRange]:
        """Get all ranges of a store, lowest start first"""
        return (
            db.query(StoreCepRange)
            .filter(StoreCepRange.store_id == store_id)
            .order_by(StoreCepRange.cep_start.asc(), StoreCepRange.cep_end.asc())
            .all()
        )

    @staticmethod
    def create_range(db: Session, store_id: str, cep_start: str, cep_end: str) -> StoreCepRange:
        cep_range = StoreCepRange(store_id=store_id, cep_start=cep_start, cep_end=cep_end)
        db.add(cep_range)
        db.commit()
        db.refresh(cep_range)
        return cep_range

    @staticmethod
    def delete_range(db: Session, range_id: str, store_id: str) -> int:
        """Delete a range of this store. Returns the number of rows removed (0 or 1)"""
        deleted = (
            db.query(StoreCepRange)
            .filter(StoreCepRange.id == range_id, StoreCepRange.store_id == store_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
