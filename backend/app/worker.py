import logging
from typing import Any

from arq import cron

from app.core.config import settings
from app.core.database import SessionLocal
from app.services.integrations.scheduler import AutoSyncScheduler
from app.tasks import redis_settings

logger = logging.getLogger(__name__)


async def auto_sync_provider_task(ctx: dict[str, Any], provider: str) -> dict[str, Any]:
    """Background task: run a full sync of every active integration of ``provider``.

    Args:
        ctx: ARQ worker context.
        provider: Provider type, e.g. ``"kevel"``.

    Returns:
        The scheduler's summary for the provider.
    """
    db = SessionLocal()
    try:
        return AutoSyncScheduler(db).run_for_provider(provider)
    finally:
        db.close()


async def auto_sync_integrations_task(ctx: dict[str, Any]) -> list[dict[str, Any]]:
    """Background task: auto-sync every provider listed in AUTO_SYNC_PROVIDERS.

    Runs hourly.
    """
    summaries = []
    for provider in settings.auto_sync_providers:
        db = SessionLocal()
        try:
            summaries.append(AutoSyncScheduler(db).run_for_provider(provider))
        finally:
            db.close()

    total = sum(s["integrations_processed"] for s in summaries)
    if total > 0:
        logger.info("Auto-synced %d integrations", total)
    return summaries


class WorkerSettings:
    functions = [
        auto_sync_provider_task,
        auto_sync_integrations_task,
    ]
    cron_jobs = [
        cron(auto_sync_integrations_task, minute={0}),  # hourly
    ]
    redis_settings = redis_settings
