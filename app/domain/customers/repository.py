"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Customer


class CustomerRepository:
    """Repository for customer database operations

    WhatsApp numbers must already be normalized by the caller.
    """

    @staticmethod
    def find_by_whatsapp(db: Session, store_id: str, whatsapp: str) -> Optional[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.store_id == store_id, Customer.whatsapp == whatsapp)
            .first()
        )

    @staticmethod
    def create_customer(db: Session, store_id: str, name: str, whatsapp: str) -> Customer:
        """
        Insert a customer inside a SAVEPOINT of the caller's transaction.

        Raises:
            IntegrityError: If (store_id, whatsapp) already exists. Only the
                savepoint is rolled back; the outer transaction stays usable.
        """
        customer = Customer(store_id=store_id, name=name.strip(), whatsapp=whatsapp)
        with db.begin_nested():
            db.add(customer)
        return customer
