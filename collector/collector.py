# -*- coding: utf-8 -*-
"""
调度事件收集器实现模块

功能：
- 接收调度事件并打印结构化日志
- 更新 Prometheus 指标
- 提供指标数据供 /metrics 端点使用
"""

import logging
import threading
from collections import deque
from typing import List, Dict, Optional
from prometheus_client import Counter, Gauge, CollectorRegistry, REGISTRY, generate_latest
from collector.scheduler_event import SchedulerEvent, EventKind

logger = logging.getLogger(__name__)


class EventCollector:
    """
    调度事件收集器

    功能：
    - 记录每个状态变化和动作触发
    - 更新 Prometheus 指标
    - 保留最近 history_size 条事件
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None, history_size: int = 200):
        """
        初始化调度事件收集器

        Args:
            registry: Prometheus registry（默认全局 REGISTRY，测试时传入独立 registry）
            history_size: 内存中保留的事件数量
        """
        self.registry = registry if registry is not None else REGISTRY

        # 事件计数
        self.events_total = Counter(
            'quota_scheduler_events_total',
            'Total number of scheduler events',
            ['controller', 'kind', 'reason'],
            registry=self.registry
        )

        # 动作触发计数（按模式）
        self.actions_fired_total = Counter(
            'quota_scheduler_actions_fired_total',
            'Total number of action invocations fired by the scheduler',
            ['controller', 'mode'],
            registry=self.registry
        )

        # 动作失败计数
        self.action_failures_total = Counter(
            'quota_scheduler_action_failures_total',
            'Total number of failed action invocations',
            ['controller'],
            registry=self.registry
        )

        # 控制器是否处于 armed 状态（1/0）
        self.controller_armed = Gauge(
            'quota_scheduler_controller_armed',
            'Whether the controller has an active schedule (1) or not (0)',
            ['controller'],
            registry=self.registry
        )

        # 最近一次触发的时间戳
        self.last_fire_timestamp = Gauge(
            'quota_scheduler_last_fire_timestamp_seconds',
            'Unix timestamp of the last fired action',
            ['controller'],
            registry=self.registry
        )

        self._history = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def record(self, event: SchedulerEvent):
        """
        记录一条调度事件

        Args:
            event: 调度事件
        """
        with self._lock:
            self._history.append(event)

        self.events_total.labels(
            controller=event.controller,
            kind=event.kind.value,
            reason=event.reason
        ).inc()

        if event.kind == EventKind.ARMED:
            self.controller_armed.labels(controller=event.controller).set(1)
        elif event.kind == EventKind.DISARMED:
            self.controller_armed.labels(controller=event.controller).set(0)
        elif event.is_fired():
            self.actions_fired_total.labels(
                controller=event.controller,
                mode=event.mode or 'none'
            ).inc()
            self.last_fire_timestamp.labels(controller=event.controller).set(event.timestamp.timestamp())
        elif event.is_failed():
            self.action_failures_total.labels(controller=event.controller).inc()

        if event.is_failed():
            logger.warning(f"[Event] {event}")
        elif event.is_skipped():
            logger.debug(f"[Event] {event}")
        else:
            logger.info(f"[Event] {event}")

    __call__ = record

    def recent(self, limit: int = 20) -> List[SchedulerEvent]:
        """最近的事件（旧的在前）"""
        with self._lock:
            events = list(self._history)
        return events[-limit:] if limit else events

    def get_summary(self) -> Dict:
        """
        获取事件汇总信息

        Returns:
            汇总信息字典
        """
        with self._lock:
            events = list(self._history)

        by_controller = {}
        for event in events:
            stats = by_controller.setdefault(
                event.controller,
                {'fired': 0, 'skipped': 0, 'failed': 0, 'armed': 0, 'disarmed': 0}
            )
            stats[event.kind.value] += 1

        return {
            'total': len(events),
            'fired': sum(1 for e in events if e.is_fired()),
            'skipped': sum(1 for e in events if e.is_skipped()),
            'failed': sum(1 for e in events if e.is_failed()),
            'by_controller': by_controller
        }

    def get_metrics(self) -> str:
        """
        获取 Prometheus 格式的指标数据

        Returns:
            Prometheus text format 字符串
        """
        return generate_latest(self.registry).decode('utf-8')
