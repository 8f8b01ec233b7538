"""告警通知模块"""
import json
import logging
from typing import Tuple
import urllib.request
import urllib.error

from diskwatch.config import Settings


logger = logging.getLogger(__name__)


def send_webhook_notification(
    url: str,
    text: str,
    timeout: float = 10,
) -> Tuple[bool, str]:
    """
    发送 Webhook 通知
    
    Args:
        url: Webhook 地址
        text: 通知内容，以 {"text": ...} 的 JSON 格式 POST
        timeout: 请求超时（秒）
    
    Returns:
        (success, message) 元组
    """
    if not url:
        return False, "Webhook URL 未配置"
    
    try:
        data = json.dumps({"text": text}).encode("utf-8")
        req = urllib.request.Request(url, data=data, method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("User-Agent", "diskwatch/1.0")
        
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            if 200 <= resp.status < 300:
                return True, "通知发送成功"
            return False, f"HTTP 错误: {resp.status}"
    except urllib.error.HTTPError as e:
        return False, f"HTTP 错误: {e.code}"
    except urllib.error.URLError as e:
        return False, f"网络错误: {e.reason}"
    except Exception as e:
        # 非法 URL、超时、响应格式错误等
        return False, f"发送失败: {str(e)}"


def format_warning(filesystem: str, used_percent: str) -> str:
    return f"WARNING: {filesystem}: used {used_percent}"


def warn(settings: Settings, filesystem: str, used_percent: str) -> bool:
    """发送单个文件系统的告警，失败只记录日志"""
    text = format_warning(filesystem, used_percent)
    success, msg = send_webhook_notification(
        url=settings.API_ENDPOINT,
        text=text,
        timeout=settings.WEBHOOK_TIMEOUT,
    )
    
    if success:
        logger.info("Alert sent: %s", text)
    else:
        logger.error("Alert failed: %s -> %s", text, msg)
    return success
