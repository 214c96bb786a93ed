"""Jobs and CronJobs."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from kubernetes import client

from apicache.cluster import kinds
from apicache.query.types import FIELD_LAST_UPDATE_TIMESTAMP, FIELD_STATUS, FIELD_UPDATE_TIME, Field, Filter
from apicache.resources.interface import MetadataGetter, latest, later, same_instant, typed

JOB_FAILED = "failed"
JOB_COMPLETED = "completed"
JOB_RUNNING = "running"


def job_status(job: client.V1Job) -> str:
    """First terminal condition wins; no terminal condition means still running."""
    conditions = (job.status.conditions if job.status else None) or []
    for condition in conditions:
        if condition.status != "True":
            continue
        if condition.type == "Complete":
            return JOB_COMPLETED
        if condition.type == "Failed":
            return JOB_FAILED
    return JOB_RUNNING


def job_last_update_time(job: client.V1Job) -> Optional[datetime]:
    conditions = (job.status.conditions if job.status else None) or []
    return latest(
        job.metadata.creation_timestamp,
        *(c.last_transition_time for c in conditions),
    )


def cron_job_last_schedule_time(cron_job: client.V1CronJob) -> Optional[datetime]:
    last_schedule = cron_job.status.last_schedule_time if cron_job.status else None
    return latest(cron_job.metadata.creation_timestamp, last_schedule)


class JobGetter(MetadataGetter):
    kind = kinds.JOBS
    model = client.V1Job

    @typed
    def compare(self, left: Any, right: Any, field: Field) -> bool:
        if field in (FIELD_UPDATE_TIME, FIELD_LAST_UPDATE_TIMESTAMP):
            left_time, right_time = job_last_update_time(left), job_last_update_time(right)
            if not same_instant(left_time, right_time):
                return later(left_time, right_time)
        elif field == FIELD_STATUS:
            left_status, right_status = job_status(left), job_status(right)
            if left_status != right_status:
                return left_status > right_status
        # ties fall back to creation time, then name
        return super().compare(left, right, field)

    @typed
    def filter(self, obj: Any, f: Filter) -> bool:
        if f.field == FIELD_STATUS:
            return job_status(obj) == f.value
        return super().filter(obj, f)


class CronJobGetter(MetadataGetter):
    kind = kinds.CRON_JOBS
    model = client.V1CronJob

    @typed
    def compare(self, left: Any, right: Any, field: Field) -> bool:
        if field in (FIELD_UPDATE_TIME, FIELD_LAST_UPDATE_TIMESTAMP):
            left_time, right_time = cron_job_last_schedule_time(left), cron_job_last_schedule_time(right)
            if not same_instant(left_time, right_time):
                return later(left_time, right_time)
        return super().compare(left, right, field)
