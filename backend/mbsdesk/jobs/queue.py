from __future__ import annotations

from redis import Redis
from rq import Queue
from rq.job import Job

from mbsdesk.config.settings import Settings
from mbsdesk.jobs.rate_history import run_rate_history_roll


def get_queue(config: Settings) -> Queue:
    connection = Redis.from_url(config.redis_url)
    return Queue(name=config.jobs_queue_name, connection=connection)


def enqueue_rate_history_roll(config: Settings) -> Job:
    """Queue the roll; the worker resolves its own store settings from its environment."""
    return get_queue(config).enqueue(run_rate_history_roll)
