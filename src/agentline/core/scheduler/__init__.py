from .scheduler import TTL_SWEEPER_JOB_ID, SchedulerService, sweep_expired_tasks

__all__ = ["SchedulerService", "TTL_SWEEPER_JOB_ID", "sweep_expired_tasks"]
