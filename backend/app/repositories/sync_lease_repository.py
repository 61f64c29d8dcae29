"""Per-integration sync leases."""

import secrets
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.shared import as_utc, utc_now
from app.models.sync_lease import SyncLease


class SyncLeaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, integration_id: UUID) -> SyncLease | None:
        return self.db.query(SyncLease).filter(SyncLease.integration_id == integration_id).first()

    def acquire(self, integration_id: UUID, ttl_seconds: int) -> str | None:
        """Take the lease for an integration.

        Returns the lease token, or None when a live lease is already held.
        An expired lease is taken over.
        """
        now = utc_now()
        token = secrets.token_hex(16)
        lease = self.get(integration_id)

        if lease is not None:
            if as_utc(lease.expires_at) > now:
                return None
            # Conditional takeover: only succeeds if nobody renewed it meanwhile
            taken = (
                self.db.query(SyncLease)
                .filter(SyncLease.id == lease.id, SyncLease.token == lease.token)
                .update(
                    {
                        SyncLease.token: token,
                        SyncLease.acquired_at: now,
                        SyncLease.expires_at: now + timedelta(seconds=ttl_seconds),
                    },
                    synchronize_session=False,
                )
            )
            self.db.commit()
            return token if taken else None

        self.db.add(
            SyncLease(
                integration_id=integration_id,
                token=token,
                acquired_at=now,
                expires_at=now + timedelta(seconds=ttl_seconds),
            )
        )
        try:
            self.db.commit()
        except IntegrityError:
            # Another run inserted the lease first
            self.db.rollback()
            return None
        return token

    def release(self, integration_id: UUID, token: str) -> bool:
        """Release the lease if it is still held under ``token``."""
        count = (
            self.db.query(SyncLease)
            .filter(SyncLease.integration_id == integration_id, SyncLease.token == token)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return bool(count)

    def delete_by_integration(self, integration_id: UUID) -> int:
        count = (
            self.db.query(SyncLease)
            .filter(SyncLease.integration_id == integration_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return int(count)
