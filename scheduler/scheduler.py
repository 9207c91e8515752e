# -*- coding: utf-8 -*-
"""
调度生命周期管理模块

功能：
- 根据配置快照（重新）启动 / 停止两个控制器
- 只在控制器依赖的字段变化时重启对应控制器
- 配置缺失时停止两个控制器
- 只负责"什么时候刷新"，不关心刷新做了什么
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from actions.dispatcher import ActionDispatcher
from actions.interfaces import ActionInvoker
from collector.scheduler_event import SchedulerEvent, EventKind, ADAPTIVE_REFRESH, FIXED_SYNC
from scheduler.adaptive import AdaptiveRefreshController
from scheduler.fixed import FixedIntervalSyncController
from scheduler.mode import ScheduleProfile
from scheduler.timer import TimerFactory

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    刷新调度器

    职责：
    1. 智能刷新：按关键时间点调用 refresh_quotas
    2. 固定间隔同步：按 sync_interval 调用 sync_account
    3. 配置变化时重启受影响的控制器，重复的相同配置不产生任何动作
    """

    def __init__(
        self,
        invoker: ActionInvoker,
        profile: Optional[ScheduleProfile] = None,
        dispatcher: Optional[ActionDispatcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        timer_factory: Optional[TimerFactory] = None,
        events: Optional[Callable[[SchedulerEvent], None]] = None,
        time_source: Optional[Callable[[], float]] = None
    ):
        """
        初始化刷新调度器

        Args:
            invoker: 动作调用实现
            profile: 智能刷新的调度形态（默认 standard 预置）
            dispatcher: 动作分发器（默认创建，线程池执行）
            clock: 返回当前本地时间的函数
            timer_factory: 定时器工厂
            events: 事件接收函数（如 EventCollector.record）
            time_source: 单调时钟（秒），用于智能刷新的间隔计算
        """
        self.invoker = invoker
        self.events = events
        self.clock = clock or datetime.now
        self.dispatcher = dispatcher or ActionDispatcher(events=events)

        controller_kwargs = {
            'clock': self.clock,
            'timer_factory': timer_factory,
            'events': events,
        }
        self.refresh_controller = AdaptiveRefreshController(
            self.dispatcher.bind(ADAPTIVE_REFRESH, 'refresh_quotas', invoker.refresh_quotas),
            profile=profile,
            time_source=time_source,
            **controller_kwargs
        )
        self.sync_controller = FixedIntervalSyncController(
            self.dispatcher.bind(FIXED_SYNC, 'sync_account', invoker.sync_account),
            **controller_kwargs
        )

        # 上一次应用的依赖字段，相同则不重启
        self._refresh_deps = None
        self._sync_deps = None
        self._lock = threading.Lock()

        logger.info(f"RefreshScheduler 初始化完成: invoker={invoker.get_invoker_type()}, "
                    f"schedule={self.refresh_controller.profile.describe()}")

    def apply(self, config):
        """
        应用一个配置快照

        Args:
            config: 含 auto_refresh / refresh_interval / auto_sync / sync_interval 的对象，
                    None 表示配置缺失

        Raises:
            定时器创建失败时抛出第一个异常（对应控制器保持停止，另一个控制器照常应用）
        """
        with self._lock:
            if config is None:
                logger.info("[Scheduler] 配置缺失，停止所有控制器")
                self._stop_all('config_absent')
                return

            errors = []

            refresh_deps = (bool(config.auto_refresh), config.refresh_interval)
            if refresh_deps != self._refresh_deps:
                logger.info(f"[Scheduler] 智能刷新配置变化: auto_refresh={refresh_deps[0]}, "
                            f"refresh_interval={refresh_deps[1]}min")
                self._refresh_deps = None
                try:
                    self.refresh_controller.start(*refresh_deps)
                    self._refresh_deps = refresh_deps
                except Exception as e:
                    logger.error(f"[Scheduler] 智能刷新启动失败: {e}", exc_info=True)
                    errors.append(e)

            sync_deps = (bool(config.auto_sync), config.sync_interval)
            if sync_deps != self._sync_deps:
                logger.info(f"[Scheduler] 自动同步配置变化: auto_sync={sync_deps[0]}, "
                            f"sync_interval={sync_deps[1]}s")
                self._sync_deps = None
                try:
                    self.sync_controller.start(*sync_deps)
                    self._sync_deps = sync_deps
                except Exception as e:
                    logger.error(f"[Scheduler] 自动同步启动失败: {e}", exc_info=True)
                    errors.append(e)

            if errors:
                raise errors[0]

    def stop(self):
        """
        停止两个控制器

        返回后不会再有任何 tick 触发动作。
        """
        with self._lock:
            self._stop_all('shutdown')
        logger.info("刷新调度器已停止")

    def shutdown(self, wait: bool = False):
        """停止控制器并关闭动作线程池"""
        self.stop()
        self.dispatcher.shutdown(wait=wait)

    def trigger_refresh(self):
        """手动触发一次配额刷新（不影响调度状态）"""
        self._trigger(ADAPTIVE_REFRESH, 'refresh_quotas', self.invoker.refresh_quotas)

    def trigger_sync(self):
        """手动触发一次账号同步（不影响调度状态）"""
        self._trigger(FIXED_SYNC, 'sync_account', self.invoker.sync_account)

    def _trigger(self, controller: str, action: str, func):
        logger.info(f"[手动触发] {action}")
        if self.events is not None:
            self.events(SchedulerEvent(
                controller=controller,
                kind=EventKind.FIRED,
                reason='manual',
                timestamp=self.clock()
            ))
        self.dispatcher.submit(controller, action, func)

    def _stop_all(self, reason: str):
        self.refresh_controller.stop(reason=reason)
        self.sync_controller.stop(reason=reason)
        self._refresh_deps = None
        self._sync_deps = None

    def get_status(self) -> dict:
        """
        获取调度状态

        Returns:
            状态信息字典
        """
        return {
            'running': self.refresh_controller.armed or self.sync_controller.armed,
            'adaptive_refresh': self.refresh_controller.get_status(),
            'fixed_sync': self.sync_controller.get_status()
        }
