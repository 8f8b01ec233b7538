import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from diskwatch.config import Settings
from diskwatch.monitor import run_cycle
from diskwatch.schemas import CycleResult


logger = logging.getLogger(__name__)

JOB_ID = "disk_check"


def create_scheduler() -> BlockingScheduler:
    # 单线程执行，同一时刻只有一轮检查
    return BlockingScheduler(
        executors={"default": ThreadPoolExecutor(max_workers=1)},
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": None,
        },
    )


class DiskMonitor:
    """用调度器驱动的磁盘检查循环"""

    def __init__(
        self,
        settings: Settings,
        scheduler: Optional[BlockingScheduler] = None,
        cycle: Callable[[Settings], CycleResult] = run_cycle,
    ):
        self.settings = settings
        self.scheduler = scheduler if scheduler is not None else create_scheduler()
        self._cycle = cycle
        self.error: Optional[BaseException] = None

    def check(self) -> CycleResult:
        """执行一轮检查，并按结果重新安排下一轮"""
        result = self._cycle(self.settings)
        self.scheduler.reschedule_job(
            JOB_ID,
            trigger=IntervalTrigger(seconds=result.next_interval),
        )
        return result

    def _on_job_error(self, event):
        # 任何检查异常都是致命的：停止调度器，由 run() 重新抛出
        self.error = event.exception
        self.scheduler.shutdown(wait=False)

    def run(self) -> None:
        """
        阻塞运行，直到进程被终止或出现致命错误
        
        Raises:
            检查过程中抛出的异常
        """
        self.scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self.scheduler.add_job(
            self.check,
            trigger=IntervalTrigger(seconds=self.settings.TRIGGER_INTERVAL),
            id=JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            replace_existing=True,
        )

        logger.info(
            "Monitor started. Watching [%s], threshold %s%%, trigger interval %ds, warning interval %ds",
            ', '.join(self.settings.watched_filesystems),
            self.settings.THRESHOLD,
            self.settings.TRIGGER_INTERVAL,
            self.settings.WARNING_INTERVAL,
        )
        self.scheduler.start()

        if self.error is not None:
            raise self.error

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
