import re
from typing import List
from pydantic import BaseModel, Field


class UsageParseError(ValueError):
    """Use% 字段无法解析为 [0, 100] 内的数值"""


def parse_size_to_gb(size_str: str) -> float:
    """
    将大小字符串转换为 GB
    支持: 100G, 1.5T, 500M, 1024K, 2,5G
    """
    size_str = size_str.strip().upper().replace(',', '.')
    
    match = re.match(r'^([\d.]+)([KMGTP]?)I?B?$', size_str)
    if not match:
        return 0.0
    
    try:
        value = float(match.group(1))
    except ValueError:
        return 0.0
    unit = match.group(2)
    
    multipliers = {
        'K': 1 / (1024 * 1024),
        'M': 1 / 1024,
        'G': 1,
        'T': 1024,
        'P': 1024 * 1024,
        '': 1 / (1024 * 1024 * 1024),  # bytes
    }
    
    return value * multipliers.get(unit, 1)


# ============ UsageRecord ============

class UsageRecord(BaseModel):
    filesystem: str
    available: str  # df -h 的可读格式，例如 12G
    used_percent: str  # 例如 87%

    def used_value(self) -> float:
        """
        去掉末尾的 % 后解析使用率
        
        Raises:
            UsageParseError: 非数字或超出 [0, 100]
        """
        raw = self.used_percent.strip()
        if raw.endswith('%'):
            raw = raw[:-1]
        try:
            value = float(raw)
        except ValueError:
            raise UsageParseError(
                f"{self.filesystem}: invalid use% value {self.used_percent!r}"
            )
        if not 0 <= value <= 100:
            raise UsageParseError(
                f"{self.filesystem}: use% value {self.used_percent!r} out of range"
            )
        return value

    def available_gb(self) -> float:
        return parse_size_to_gb(self.available)


# ============ CycleResult ============

class CycleResult(BaseModel):
    records: List[UsageRecord] = Field(default_factory=list)
    over_threshold: List[UsageRecord] = Field(default_factory=list)
    failed_notifications: int = 0
    next_interval: int

    @property
    def triggered(self) -> bool:
        return len(self.over_threshold) > 0
