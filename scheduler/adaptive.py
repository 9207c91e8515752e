# -*- coding: utf-8 -*-
"""
智能刷新控制器

功能：
- 固定周期（默认 60 秒）tick，每次 tick 判断刷新模式
- dense: 每个 tick 都刷新
- blocked: 不刷新
- normal: 距上次刷新超过 refresh_interval 分钟才刷新

刷新模式按本地时间判定；距上次刷新的时长用单调时钟计算，
本地时间回拨（夏令时结束、校时）不影响 normal 模式的间隔。
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from collector.scheduler_event import EventKind, ADAPTIVE_REFRESH
from scheduler.controller import ScheduleController
from scheduler.mode import RefreshMode, ScheduleProfile, SCHEDULE_PRESETS, DEFAULT_PRESET

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshDecision:
    """一次 tick 的刷新判定结果"""
    should_fire: bool
    mode: RefreshMode
    reason: str


class AdaptiveRefreshController(ScheduleController):
    """
    智能刷新控制器

    interval 为 refresh_interval（分钟）。refresh_interval <= 0 时
    normal 模式下每个 tick 都会刷新。
    """

    name = ADAPTIVE_REFRESH

    def __init__(
        self,
        action,
        profile: Optional[ScheduleProfile] = None,
        time_source: Optional[Callable[[], float]] = None,
        **kwargs
    ):
        """
        Args:
            action: 刷新动作
            profile: 调度形态（默认 standard 预置）
            time_source: 单调时钟（秒），默认 time.monotonic
            **kwargs: 传给 ScheduleController（clock / timer_factory / events）
        """
        super().__init__(action, **kwargs)
        self.profile = profile or SCHEDULE_PRESETS[DEFAULT_PRESET]
        self.time_source = time_source or time.monotonic

        # last_fire 为本地时间，只用于展示；间隔判断使用 _last_fire_at
        self.last_fire: Optional[datetime] = None
        self._last_fire_at: Optional[float] = None

    def decide(self, now: datetime) -> RefreshDecision:
        """
        判断当前 tick 是否需要刷新

        Args:
            now: 当前本地时间（用于判定刷新模式）
        """
        mode = self.profile.classify(now)

        if mode == RefreshMode.DENSE:
            return RefreshDecision(True, mode, 'dense_window')

        if mode == RefreshMode.BLOCKED:
            return RefreshDecision(False, mode, 'blocked_hours')

        if self._last_fire_at is None:
            return RefreshDecision(True, mode, 'never_fired')

        elapsed_minutes = (self.time_source() - self._last_fire_at) / 60
        if elapsed_minutes >= (self.interval or 0):
            return RefreshDecision(True, mode, 'interval_elapsed')
        return RefreshDecision(False, mode, 'interval_not_elapsed')

    def _tick_interval(self) -> float:
        return self.profile.tick_seconds

    def _on_enabled(self, now: datetime):
        self._invoke(now, 'just_enabled', mode=self.profile.classify(now).value)
        self._mark_fired(now)

    def _on_tick(self, now: datetime):
        decision = self.decide(now)
        mode = decision.mode

        if not decision.should_fire:
            self._emit(EventKind.SKIPPED, decision.reason, now, mode=mode.value)
            return

        if mode == RefreshMode.NORMAL:
            logger.info(f"[Scheduler] 智能刷新: NORMAL 模式 ({now:%H:%M:%S}) - 刷新（间隔: {self.interval}min）")
        else:
            logger.info(f"[Scheduler] 智能刷新: DENSE 模式 ({now:%H:%M:%S}) - 刷新")

        self._invoke(now, decision.reason, mode=mode.value)
        self._mark_fired(now)

    def _mark_fired(self, now: datetime):
        self.last_fire = now
        self._last_fire_at = self.time_source()

    def get_status(self) -> dict:
        status = super().get_status()
        now = self.clock()
        status.update({
            'refresh_interval': self.interval,
            'tick_seconds': self.profile.tick_seconds,
            'profile': self.profile.name,
            'mode': self.profile.classify(now).value,
            'last_fire': self.last_fire.isoformat() if self.last_fire else None,
        })
        return status
