# -*- coding: utf-8 -*-
"""
HTTP 动作调用实现

功能：
- 通过 POST 请求触发外部服务的刷新 / 同步接口
- 非 2xx 响应和网络错误直接抛出，由分发器记录
"""

import json
import logging
import urllib.request
from typing import Optional

from .interfaces import ActionInvoker

logger = logging.getLogger(__name__)


class HttpActionInvoker(ActionInvoker):
    """
    HTTP webhook 动作调用

    refresh_url / sync_url 为空时对应动作抛出 RuntimeError。
    """

    def __init__(self, refresh_url: Optional[str], sync_url: Optional[str], timeout: float = 30):
        """
        Args:
            refresh_url: 刷新配额接口 URL
            sync_url: 同步账号接口 URL
            timeout: 请求超时（秒）
        """
        self.refresh_url = refresh_url
        self.sync_url = sync_url
        self.timeout = timeout

    def refresh_quotas(self) -> None:
        self._post('refresh_quotas', self.refresh_url)

    def sync_account(self) -> None:
        self._post('sync_account', self.sync_url)

    def get_invoker_type(self) -> str:
        return "http"

    def _post(self, action: str, url: Optional[str]) -> None:
        if not url:
            raise RuntimeError(f"未配置 {action} 的 URL")

        body = json.dumps({'action': action}).encode('utf-8')
        request = urllib.request.Request(
            url,
            data=body,
            headers={'Content-Type': 'application/json'},
            method='POST'
        )

        logger.debug(f"[HTTP] {action} -> POST {url}")
        with urllib.request.urlopen(request, timeout=self.timeout) as response:
            status = response.status
        if status >= 300:
            raise RuntimeError(f"{action} 请求失败: HTTP {status}")
        logger.info(f"[HTTP] {action} 完成: HTTP {status}")
