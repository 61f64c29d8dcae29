"""Reconciliation of externally fetched records into local canonical records.

Every adapter funnels its fetched batches through ``ReconciliationEngine``.
Records are matched on a natural key derived from business fields, never on
the external id, which is not stable across full and partial syncs:

* opportunities: (company, name, source provider)
* contacts: (company, lower-cased email or full name, source provider)
* advertisers and ad spaces: (company, name), merged across providers

Each record is translated and upserted on its own; a failure is appended to
the entity's error list and the batch carries on.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.integration import Integration
from app.models.opportunity import PipelineStage
from app.repositories.ad_space_repository import AdSpaceRepository
from app.repositories.advertiser_repository import AdvertiserRepository
from app.repositories.contact_repository import ContactRepository
from app.repositories.opportunity_repository import OpportunityRepository
from app.services.integrations.base import EntityResult
from app.services.integrations.errors import RecordProcessingError

logger = logging.getLogger(__name__)

Raw = TypeVar("Raw")
Canonical = TypeVar("Canonical")


class StageMapping:
    """Translation table from provider pipeline stages to canonical stages.

    Lookup is case-insensitive. Anything unmapped, including a missing or
    non-string stage, becomes ``default``.
    """

    def __init__(
        self,
        table: dict[str, PipelineStage],
        default: PipelineStage = PipelineStage.NEEDS_ANALYSIS,
    ) -> None:
        self.table = {key.strip().lower(): value for key, value in table.items()}
        self.default = default

    def translate(self, external_stage: Any) -> str:
        if not isinstance(external_stage, str):
            return self.default.value
        return self.table.get(external_stage.strip().lower(), self.default).value


@dataclass
class CanonicalAdvertiser:
    name: str
    external_id: str | None = None
    website: str | None = None


@dataclass
class CanonicalOpportunity:
    name: str
    external_id: str | None = None
    description: str | None = None
    amount_cents: int = 0
    currency: str = "USD"
    stage: str = PipelineStage.NEEDS_ANALYSIS.value
    probability: int = 50
    close_date: date | None = None
    last_activity_at: datetime | None = None
    account: CanonicalAdvertiser | None = None

    @property
    def natural_key(self) -> str:
        return self.name


@dataclass
class CanonicalContact:
    first_name: str = ""
    last_name: str = ""
    email: str | None = None
    external_id: str | None = None
    phone: str | None = None
    job_title: str | None = None
    company_name: str | None = None
    website: str | None = None

    @property
    def natural_key(self) -> str:
        if self.email:
            return self.email.strip().lower()
        full_name = f"{self.first_name} {self.last_name}".strip()
        if not full_name:
            raise RecordProcessingError("Contact has neither an email nor a name")
        return full_name


@dataclass
class CanonicalAdSpace:
    name: str
    size: str | None = None
    location: str | None = None
    type: str = "display"
    base_price_cents: int | None = None
    price_model: str = "cpm"
    currency: str = "USD"
    status: str = "available"


def to_cents(amount: Any) -> int:
    """Convert a provider money amount (number or numeric string) to integer cents."""
    if amount is None or amount == "":
        return 0
    try:
        return round(float(amount) * 100)
    except (TypeError, ValueError) as exc:
        raise RecordProcessingError(f"Invalid amount {amount!r}") from exc


def require(raw: dict[str, Any], field_name: str, entity: str) -> str:
    """Return a non-blank string field of a raw record or raise RecordProcessingError."""
    value = raw.get(field_name)
    if value is None or not str(value).strip():
        ref = raw.get("Id") or raw.get("id") or "?"
        raise RecordProcessingError(f"{entity} {ref} is missing {field_name}")
    return str(value).strip()


def nested(raw: dict[str, Any], field_name: str, entity: str) -> dict[str, Any]:
    """Return a nested object of a raw record, ``{}`` when absent."""
    value = raw.get(field_name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        ref = raw.get("Id") or raw.get("id") or "?"
        raise RecordProcessingError(f"{entity} {ref} has a malformed {field_name}")
    return value


class ReconciliationEngine:
    """Upserts canonical records for one integration."""

    def __init__(self, db: Session, integration: Integration):
        self.db = db
        self.integration = integration
        self.company_id = integration.company_id
        self.integration_id = integration.id
        self.source = str(integration.provider_type)
        self.opportunity_repo = OpportunityRepository(db)
        self.contact_repo = ContactRepository(db)
        self.advertiser_repo = AdvertiserRepository(db)
        self.ad_space_repo = AdSpaceRepository(db)

    def reconcile(
        self,
        entity: str,
        records: Iterable[Raw],
        translate: Callable[[Raw], Canonical],
        upsert: Callable[[Canonical, EntityResult], bool],
    ) -> EntityResult:
        """Translate and upsert each record, isolating per-record failures."""
        batch = list(records)
        result = EntityResult(fetched=len(batch))

        for index, raw in enumerate(batch):
            try:
                canonical = translate(raw)
                created = upsert(canonical, result)
            except (RecordProcessingError, ValueError, TypeError, KeyError) as exc:
                message = exc.message if isinstance(exc, RecordProcessingError) else str(exc)
                logger.warning("Skipping %s record #%d: %s", entity, index, message)
                result.errors.append(f"{entity} record #{index}: {message}")
                continue
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.warning("Failed to store %s record #%d: %s", entity, index, exc)
                result.errors.append(f"{entity} record #{index}: database error: {exc}")
                continue
            except Exception as exc:
                # Malformed payload shapes (a string where an object belongs)
                logger.warning(
                    "Skipping malformed %s record #%d: %s: %s",
                    entity,
                    index,
                    type(exc).__name__,
                    exc,
                )
                result.errors.append(f"{entity} record #{index}: malformed record: {exc}")
                continue

            result.count += 1
            if created:
                result.created += 1
            else:
                result.updated += 1

        logger.info(
            "Reconciled %s for integration %s: %d created, %d updated, %d errors",
            entity,
            self.integration_id,
            result.created,
            result.updated,
            result.error_count,
        )
        return result

    # -- per-entity upserts ------------------------------------------------

    def upsert_opportunity(self, record: CanonicalOpportunity, result: EntityResult) -> bool:
        fields = {
            "name": record.name,
            "external_id": record.external_id,
            "description": record.description,
            "amount_cents": record.amount_cents,
            "currency": record.currency,
            "stage": record.stage,
            "probability": record.probability,
            "close_date": record.close_date,
            "advertiser_name": record.account.name if record.account else None,
            "last_activity_at": record.last_activity_at,
        }
        existing = self.opportunity_repo.get_by_natural_key(
            self.company_id, record.natural_key, self.source
        )
        if existing:
            self.opportunity_repo.update(existing, fields)
            created = False
        else:
            self.opportunity_repo.create(
                company_id=self.company_id,
                integration_id=self.integration_id,
                natural_key=record.natural_key,
                source=self.source,
                **fields,
            )
            created = True

        if record.account is not None:
            # Side record: a failure here does not fail the opportunity
            try:
                self.merge_advertiser(record.account)
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.warning("Failed to merge advertiser %s: %s", record.account.name, exc)
                result.warnings.append(f"advertiser {record.account.name}: {exc}")
        return created

    def upsert_contact(self, record: CanonicalContact, result: EntityResult) -> bool:
        natural_key = record.natural_key
        fields = {
            "first_name": record.first_name,
            "last_name": record.last_name,
            "email": record.email,
            "external_id": record.external_id,
            "phone": record.phone,
            "job_title": record.job_title,
            "company_name": record.company_name,
            "website": record.website,
        }
        existing = self.contact_repo.get_by_natural_key(self.company_id, natural_key, self.source)
        if existing:
            self.contact_repo.update(existing, fields)
            return False
        self.contact_repo.create(
            company_id=self.company_id,
            integration_id=self.integration_id,
            natural_key=natural_key,
            source=self.source,
            **fields,
        )
        return True

    def upsert_advertiser(self, record: CanonicalAdvertiser, result: EntityResult) -> bool:
        return self.merge_advertiser(record)

    def merge_advertiser(self, record: CanonicalAdvertiser) -> bool:
        """Idempotent merge keyed on (company, name). Returns True when a row was created.

        Existing values are only overwritten by non-empty incoming ones, so the
        same account reported by many opportunities converges on one row.
        """
        existing = self.advertiser_repo.get_by_name(self.company_id, record.name)
        if existing:
            changes = {
                key: value
                for key, value in (("external_id", record.external_id), ("website", record.website))
                if value
            }
            if changes:
                self.advertiser_repo.update(existing, changes)
            return False
        self.advertiser_repo.create(
            company_id=self.company_id,
            integration_id=self.integration_id,
            name=record.name,
            source=self.source,
            external_id=record.external_id,
            website=record.website,
        )
        return True

    def upsert_ad_space(self, record: CanonicalAdSpace, result: EntityResult) -> bool:
        fields = {
            "type": record.type,
            "size": record.size,
            "location": record.location,
            "base_price_cents": record.base_price_cents,
            "price_model": record.price_model,
            "currency": record.currency,
            "status": record.status,
        }
        existing = self.ad_space_repo.get_by_name(self.company_id, record.name)
        if existing:
            self.ad_space_repo.update(existing, fields)
            return False
        self.ad_space_repo.create(
            company_id=self.company_id,
            integration_id=self.integration_id,
            name=record.name,
            **fields,
        )
        return True

    # -- convenience wrappers ---------------------------------------------

    def reconcile_opportunities(
        self, records: Iterable[Raw], translate: Callable[[Raw], CanonicalOpportunity]
    ) -> EntityResult:
        return self.reconcile("opportunity", records, translate, self.upsert_opportunity)

    def reconcile_contacts(
        self, records: Iterable[Raw], translate: Callable[[Raw], CanonicalContact]
    ) -> EntityResult:
        return self.reconcile("contact", records, translate, self.upsert_contact)

    def reconcile_advertisers(
        self, records: Iterable[Raw], translate: Callable[[Raw], CanonicalAdvertiser]
    ) -> EntityResult:
        return self.reconcile("advertiser", records, translate, self.upsert_advertiser)

    def reconcile_ad_spaces(
        self, records: Iterable[Raw], translate: Callable[[Raw], CanonicalAdSpace]
    ) -> EntityResult:
        return self.reconcile("ad_space", records, translate, self.upsert_ad_space)
