# -*- coding: utf-8 -*-
"""
动作调用接口定义

功能：
- 定义 ActionInvoker 接口
- 调度器只依赖接口，不关心动作如何实现
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional


class ActionInvoker(ABC):
    """
    动作调用接口

    功能：
    - refresh_quotas: 刷新所有账号的配额
    - sync_account: 从存储同步当前账号
    - 两个动作都有副作用，失败由实现方自己处理或抛出
    """

    @abstractmethod
    def refresh_quotas(self) -> None:
        """刷新配额"""
        pass

    @abstractmethod
    def sync_account(self) -> None:
        """同步当前账号"""
        pass

    @abstractmethod
    def get_invoker_type(self) -> str:
        """
        获取 Invoker 类型（用于日志和标识）

        Returns:
            Invoker 类型名称，如 "callback", "http"
        """
        pass


class CallbackActionInvoker(ActionInvoker):
    """用两个普通函数实现 ActionInvoker（嵌入式使用或测试）"""

    def __init__(self, refresh_func: Callable[[], None], sync_func: Optional[Callable[[], None]] = None):
        self.refresh_func = refresh_func
        self.sync_func = sync_func

    def refresh_quotas(self) -> None:
        self.refresh_func()

    def sync_account(self) -> None:
        if self.sync_func is None:
            raise NotImplementedError("未配置 sync_account 回调")
        self.sync_func()

    def get_invoker_type(self) -> str:
        return "callback"
