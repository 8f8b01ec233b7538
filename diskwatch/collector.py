import logging
import shlex
import subprocess
from typing import List, Sequence, Union

from diskwatch.schemas import UsageRecord


logger = logging.getLogger(__name__)

DEFAULT_DF_COMMAND = ("df", "-h")
AVAIL_HEADER = "Avail"
USE_PERCENT_HEADER = "Use%"


class SamplerError(RuntimeError):
    """df 输出无法使用"""


def run_df(command: Union[str, Sequence[str]] = DEFAULT_DF_COMMAND) -> str:
    """
    执行 df 并返回 stdout
    
    启动失败（命令不存在等）直接抛出 OSError。
    df 对部分不可访问的挂载点会返回非零退出码，但仍输出其余结果，
    因此只有在 stdout 为空时才视为失败。
    """
    if isinstance(command, str):
        command = shlex.split(command)
    
    proc = subprocess.run(
        list(command),
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )
    
    if proc.returncode != 0:
        if not proc.stdout.strip():
            raise SamplerError(
                f"Failed to execute {' '.join(command)}: {proc.stderr.strip()}"
            )
        logger.warning(
            "%s exited with code %d: %s",
            ' '.join(command), proc.returncode, proc.stderr.strip(),
        )
    
    return proc.stdout


def parse_df_output(text: str) -> List[UsageRecord]:
    """
    解析 df -h 的表格输出
    
    第一行为标题行，按列名定位 Avail 和 Use% 所在列（不依赖固定位置），
    列数不足的行直接跳过。
    
    Raises:
        SamplerError: 输出为空或标题行缺少所需列
    """
    lines = text.strip().split('\n')
    if not lines or not lines[0].strip():
        raise SamplerError("df produced no output")
    
    headers = lines[0].split()
    try:
        avail_index = headers.index(AVAIL_HEADER)
        used_index = headers.index(USE_PERCENT_HEADER)
    except ValueError:
        raise SamplerError(
            f"df header is missing {AVAIL_HEADER!r} or {USE_PERCENT_HEADER!r}: {lines[0]!r}"
        )
    
    min_columns = max(avail_index, used_index) + 1
    records = []
    
    # 跳过标题行
    for line in lines[1:]:
        parts = line.split()
        if len(parts) < min_columns:
            continue
        
        records.append(UsageRecord(
            filesystem=parts[0],
            available=parts[avail_index],
            used_percent=parts[used_index],
        ))
    
    return records


def collect_disk_usage(command: Union[str, Sequence[str]] = DEFAULT_DF_COMMAND) -> List[UsageRecord]:
    """采集当前所有文件系统的使用情况"""
    records = parse_df_output(run_df(command))
    logger.debug("Sampled %d filesystems", len(records))
    return records
