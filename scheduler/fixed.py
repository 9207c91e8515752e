# -*- coding: utf-8 -*-
"""
固定间隔同步控制器

功能：
- 每 sync_interval 秒无条件调用一次同步动作
- sync_interval <= 0 时只在开启时调用一次，不启动周期 tick
"""

import logging
from datetime import datetime
from typing import Optional

from collector.scheduler_event import FIXED_SYNC
from scheduler.controller import ScheduleController

logger = logging.getLogger(__name__)


class FixedIntervalSyncController(ScheduleController):
    """固定间隔同步控制器（interval 为 sync_interval，单位秒）"""

    name = FIXED_SYNC

    def _tick_interval(self) -> Optional[float]:
        if self.interval and self.interval > 0:
            return self.interval
        return None

    def _on_enabled(self, now: datetime):
        self._invoke(now, 'just_enabled')

    def _on_tick(self, now: datetime):
        logger.info("[Scheduler] 自动同步当前账号...")
        self._invoke(now, 'periodic')

    def get_status(self) -> dict:
        status = super().get_status()
        status['sync_interval'] = self.interval
        return status
