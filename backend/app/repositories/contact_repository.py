from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.contact import Contact


class ContactRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        company_id: UUID,
        source: str | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Contact]:
        query = self.db.query(Contact).filter(Contact.company_id == company_id)
        if source is not None:
            query = query.filter(Contact.source == source)
        query = apply_order_by(query, Contact, order_by)
        return query.offset(skip).limit(limit).all()

    def get_by_natural_key(self, company_id: UUID, natural_key: str, source: str) -> Contact | None:
        return (
            self.db.query(Contact)
            .filter(
                Contact.company_id == company_id,
                Contact.natural_key == natural_key,
                Contact.source == source,
            )
            .first()
        )

    def count(self, company_id: UUID) -> int:
        return self.db.query(Contact).filter(Contact.company_id == company_id).count()

    def create(self, **fields: Any) -> Contact:
        contact = Contact(**fields)
        self.db.add(contact)
        self.db.commit()
        self.db.refresh(contact)
        return contact

    def update(self, contact: Contact, fields: dict[str, Any]) -> Contact:
        for key, value in fields.items():
            setattr(contact, key, value)
        self.db.commit()
        self.db.refresh(contact)
        return contact

    def detach_integration(self, integration_id: UUID) -> int:
        count = (
            self.db.query(Contact)
            .filter(Contact.integration_id == integration_id)
            .update({Contact.integration_id: None}, synchronize_session=False)
        )
        self.db.commit()
        return int(count)
