import logging
from typing import Callable, Iterable, List, Optional

from diskwatch.collector import collect_disk_usage
from diskwatch.config import Settings
from diskwatch.notifier import warn
from diskwatch.schemas import CycleResult, UsageRecord


logger = logging.getLogger(__name__)


def find_over_threshold(
    records: Iterable[UsageRecord],
    watched: Iterable[str],
    threshold: float,
) -> List[UsageRecord]:
    """
    返回 watch-list 中使用率 >= threshold 的记录

    只解析被监控文件系统的 Use%，解析失败抛出 UsageParseError。
    """
    watched = set(watched)
    over = []
    for record in records:
        if record.filesystem not in watched:
            continue
        used = record.used_value()
        if used >= threshold:
            over.append(record)
    return over


def next_interval(triggered: bool, settings: Settings) -> int:
    # 有告警时进入静默期，避免重复通知
    if triggered:
        return settings.WARNING_INTERVAL
    return settings.TRIGGER_INTERVAL


def run_cycle(
    settings: Settings,
    sample: Optional[Callable[[], List[UsageRecord]]] = None,
    notify: Callable[[Settings, str, str], bool] = warn,
) -> CycleResult:
    """执行一轮 采集 -> 过滤 -> 比较 -> 通知"""
    if sample is None:
        sample = lambda: collect_disk_usage(settings.DF_COMMAND)

    records = sample()
    over = find_over_threshold(records, settings.watched_filesystems, settings.THRESHOLD)

    for record in over:
        logger.info(
            "%s used %s (>= %s%%), %.2f GB available",
            record.filesystem, record.used_percent, settings.THRESHOLD, record.available_gb(),
        )

    failed = 0
    for record in over:
        if not notify(settings, record.filesystem, record.used_percent):
            failed += 1

    interval = next_interval(bool(over), settings)
    logger.info(
        "Cycle completed: %d sampled, %d over threshold, %d notifications failed, next check in %ds",
        len(records), len(over), failed, interval,
    )
    return CycleResult(
        records=records,
        over_threshold=over,
        failed_notifications=failed,
        next_interval=interval,
    )
