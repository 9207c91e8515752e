# -*- coding: utf-8 -*-
"""
动作调用模块

功能：
- 定义 ActionInvoker 接口（refresh_quotas / sync_account）
- 调度器只依赖接口，不关心具体实现
- 动作以 fire-and-forget 方式在线程池中执行
"""

from .interfaces import ActionInvoker, CallbackActionInvoker
from .http_invoker import HttpActionInvoker
from .dispatcher import ActionDispatcher

__all__ = ['ActionInvoker', 'CallbackActionInvoker', 'HttpActionInvoker', 'ActionDispatcher']
