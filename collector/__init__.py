# -*- coding: utf-8 -*-
"""
调度事件收集模块

功能：
- 收集控制器和动作分发器产生的调度事件
- 更新 Prometheus 指标
- 保留最近的事件供 /health 查看
"""

from .collector import EventCollector
from .scheduler_event import SchedulerEvent, EventKind, ADAPTIVE_REFRESH, FIXED_SYNC

__all__ = ['EventCollector', 'SchedulerEvent', 'EventKind', 'ADAPTIVE_REFRESH', 'FIXED_SYNC']
