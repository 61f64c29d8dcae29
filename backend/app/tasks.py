"""Enqueueing of background sync work onto the arq worker."""

import logging
from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from arq.jobs import Job

from app.core.config import settings

logger = logging.getLogger(__name__)

redis_settings = RedisSettings.from_dsn(settings.REDIS_URL)


async def get_redis_pool() -> ArqRedis:
    return await create_pool(redis_settings)


async def enqueue_task(
    task_name: str, *args: Any, job_id: str | None = None, **kwargs: Any
) -> Job | None:
    """Enqueue ``task_name`` on the worker.

    With ``job_id`` set, arq refuses a second job under the same id while the
    first is queued or running, and None is returned.
    """
    pool = await get_redis_pool()
    try:
        return await pool.enqueue_job(task_name, *args, _job_id=job_id, **kwargs)
    finally:
        await pool.close()


def auto_sync_job_id(provider: str) -> str:
    return f"auto_sync:{provider}"


async def enqueue_auto_sync(provider: str) -> Job | None:
    """Queue a full sync of every active integration of ``provider``.

    At most one such job per provider is queued at a time.
    """
    job = await enqueue_task(
        "auto_sync_provider_task", provider, job_id=auto_sync_job_id(provider)
    )
    if job is None:
        logger.info("Auto-sync of %s already queued", provider)
    return job
