# services/scheduler.py

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


def create_scheduler(tz=None) -> AsyncIOScheduler:
    if tz is None:
        return AsyncIOScheduler()
    return AsyncIOScheduler(timezone=tz)


def schedule_daily_check(scheduler: AsyncIOScheduler, callback, hour: int = 0, minute: int = 0):
    """Ежедневная проверка в локальную полночь"""
    job = scheduler.add_job(callback, 'cron', hour=hour, minute=minute, id="daily_check",
                            replace_existing=True)
    logger.info(f"⏰ Ежедневная проверка запланирована на {hour:02d}:{minute:02d}")
    return job
