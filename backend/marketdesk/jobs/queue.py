from __future__ import annotations

from redis import Redis
from rq import Queue
from rq.job import Job

from marketdesk.config.settings import settings
from marketdesk.jobs.batch_refresh import run_batch_refresh


def get_redis_connection() -> Redis:
    return Redis.from_url(settings.redis_url)


def get_queue(name: str | None = None) -> Queue:
    queue_name = name or settings.job_queue_name
    return Queue(name=queue_name, connection=get_redis_connection())


def enqueue_batch_refresh(symbols: list[str]) -> Job:
    queue = get_queue()
    return queue.enqueue(run_batch_refresh, symbols=symbols)


def fetch_job(job_id: str) -> Job:
    return Job.fetch(job_id, connection=get_redis_connection())
