# -*- coding: utf-8 -*-
"""
定时任务模块

功能：
- 智能刷新：关键时间点附近密集刷新，白天其他时间不刷新，夜间按间隔刷新
- 固定间隔同步：按 sync_interval 周期同步
- 在后台线程中运行，不阻塞主程序
"""

from scheduler.mode import RefreshMode, CriticalTime, ScheduleProfile, classify, SCHEDULE_PRESETS
from scheduler.adaptive import AdaptiveRefreshController, RefreshDecision
from scheduler.fixed import FixedIntervalSyncController
from scheduler.scheduler import RefreshScheduler

__all__ = [
    'RefreshMode',
    'CriticalTime',
    'ScheduleProfile',
    'classify',
    'SCHEDULE_PRESETS',
    'AdaptiveRefreshController',
    'RefreshDecision',
    'FixedIntervalSyncController',
    'RefreshScheduler',
]
