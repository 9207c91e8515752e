# -*- coding: utf-8 -*-
"""
调度控制器基类

功能：
- 管理一个控制器的运行状态（跳变检测、定时器句柄、armed 标志）
- start() / stop() 保证同一控制器最多只有一个活动定时器
- 动作调用异常只记录，不影响后续 tick
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from collector.scheduler_event import SchedulerEvent, EventKind
from scheduler.timer import TimerFactory, default_timer_factory
from scheduler.transition import TransitionDetector

logger = logging.getLogger(__name__)


class ScheduleController(ABC):
    """
    控制器基类

    子类实现：
    - _tick_interval(): 周期（秒），返回 None 表示不启动周期 tick
    - _on_enabled(now): 刚开启时的立即调用
    - _on_tick(now): 每个 tick 的处理
    """

    name = "controller"

    def __init__(
        self,
        action: Callable[[], None],
        clock: Optional[Callable[[], datetime]] = None,
        timer_factory: Optional[TimerFactory] = None,
        events: Optional[Callable[[SchedulerEvent], None]] = None
    ):
        """
        Args:
            action: 动作函数（fire-and-forget，通常是 ActionDispatcher.bind 的结果）
            clock: 返回当前本地时间的函数，默认 datetime.now
            timer_factory: 创建并启动定时器的函数，默认 RepeatingTimer
            events: 事件接收函数（如 EventCollector.record）
        """
        self.action = action
        self.clock = clock or datetime.now
        self.timer_factory = timer_factory or default_timer_factory
        self.events = events

        self.transition = TransitionDetector()
        self.interval: Optional[float] = None

        self._armed = False
        self._timer = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def has_timer(self) -> bool:
        return self._timer is not None

    def start(self, enabled: bool, interval: float):
        """
        观察一次配置并（重新）启动

        Args:
            enabled: 开关
            interval: 控制器相关的间隔配置

        Raises:
            定时器创建失败时原样抛出，控制器保持 stopped
        """
        self.stop(reason='restart' if enabled else 'disabled')

        with self._lock:
            now = self.clock()
            just_enabled = self.transition.observe(enabled)
            self.interval = interval

            if just_enabled:
                logger.info(f"[Scheduler] {self.name} 已开启，立即执行一次")
                self._on_enabled(now)

            if not enabled:
                return

            self._generation += 1
            generation = self._generation
            tick_interval = self._tick_interval()

            if tick_interval is not None:
                self._timer = self.timer_factory(
                    tick_interval,
                    lambda: self._tick(generation),
                    f"{self.name}-timer"
                )
                logger.info(f"[Scheduler] {self.name} 启动周期 tick，间隔: {tick_interval} 秒")
            else:
                logger.info(f"[Scheduler] {self.name} 已开启，但不启动周期 tick（interval={interval}）")

            self._armed = True
            self._emit(EventKind.ARMED, 'enabled', now)

    def stop(self, reason: str = 'disabled'):
        """
        停止控制器

        返回后旧定时器不会再触发动作。跳变状态和上次触发时间保留。
        """
        with self._lock:
            timer = self._timer
            was_armed = self._armed
            self._timer = None
            self._armed = False
            self._generation += 1

        # 在锁外等待定时器线程退出，避免与正在执行的 tick 互相等待
        if timer is not None:
            logger.info(f"[Scheduler] 清除 {self.name} 定时器")
            timer.cancel()

        if was_armed:
            self._emit(EventKind.DISARMED, reason, self.clock())

    def _tick(self, generation: int):
        with self._lock:
            if not self._armed or generation != self._generation:
                return
            self._safe_tick()

    def _safe_tick(self):
        try:
            self._on_tick(self.clock())
        except Exception as e:
            # 捕获异常，打印日志，不退出循环
            logger.error(f"[Scheduler] {self.name} tick 异常: {e}", exc_info=True)

    def _invoke(self, now: datetime, reason: str, mode: Optional[str] = None):
        """调用动作（fire-and-forget），异常只记录"""
        self._emit(EventKind.FIRED, reason, now, mode=mode)
        try:
            self.action()
        except Exception as e:
            logger.error(f"[Scheduler] {self.name} 动作调用失败: {e}", exc_info=True)
            self._emit(EventKind.FAILED, 'action_error', now, mode=mode, detail=str(e))

    def _emit(self, kind: EventKind, reason: str, now: datetime,
              mode: Optional[str] = None, detail: Optional[str] = None):
        if self.events is None:
            return
        try:
            self.events(SchedulerEvent(
                controller=self.name,
                kind=kind,
                reason=reason,
                timestamp=now,
                mode=mode,
                detail=detail
            ))
        except Exception as e:
            logger.error(f"[Scheduler] 记录事件失败: {e}", exc_info=True)

    @abstractmethod
    def _tick_interval(self) -> Optional[float]:
        """
        周期 tick 的间隔

        Returns:
            间隔秒数，None 表示不启动周期 tick
        """
        pass

    @abstractmethod
    def _on_enabled(self, now: datetime):
        """开关从关到开时立即执行一次"""
        pass

    @abstractmethod
    def _on_tick(self, now: datetime):
        """处理一次周期 tick"""
        pass

    def get_status(self) -> dict:
        with self._lock:
            return {
                'armed': self._armed,
                'has_timer': self._timer is not None,
                'enabled_previous': self.transition.previous,
                'interval': self.interval,
            }
