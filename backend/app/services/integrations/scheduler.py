"""Periodic auto-sync of every active integration of a provider."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.shared import coerce_uuid
from app.repositories.integration_repository import IntegrationRepository
from app.services.integrations.errors import IntegrationError
from app.services.integrations.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


class AutoSyncScheduler:
    def __init__(self, db: Session, orchestrator: SyncOrchestrator | None = None):
        self.db = db
        self.orchestrator = orchestrator or SyncOrchestrator(db)
        self.integration_repo = IntegrationRepository(db)

    def run_for_provider(self, provider: str) -> dict[str, Any]:
        """Run a full sync for each active integration of ``provider``.

        One integration failing, or being mid-sync elsewhere, never stops the
        remaining ones.
        """
        summary: dict[str, Any] = {
            "provider": provider,
            "integrations_processed": 0,
            "total_synced": 0,
            "total_errors": 0,
            "failures": [],
        }
        integrations = self.integration_repo.get_active_by_provider(provider)
        logger.info("Auto-sync of %s: %d active integrations", provider, len(integrations))

        for integration in integrations:
            integration_id = coerce_uuid(integration.id)
            try:
                result = self.orchestrator.run(integration)
            except IntegrationError as exc:
                logger.warning("Auto-sync of integration %s skipped: %s", integration_id, exc)
                summary["failures"].append(
                    {"integration_id": str(integration_id), "error": exc.code}
                )
                continue
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception("Auto-sync of integration %s hit a database error", integration_id)
                summary["failures"].append(
                    {"integration_id": str(integration_id), "error": f"database error: {exc}"}
                )
                continue
            except Exception as exc:
                logger.exception("Auto-sync of integration %s crashed", integration_id)
                summary["failures"].append(
                    {"integration_id": str(integration_id), "error": str(exc)}
                )
                continue

            summary["integrations_processed"] += 1
            summary["total_synced"] += result.synced
            summary["total_errors"] += result.errors

        logger.info(
            "Auto-sync of %s finished: %d processed, %d synced, %d errors",
            provider,
            summary["integrations_processed"],
            summary["total_synced"],
            summary["total_errors"],
        )
        return summary
