# -*- coding: utf-8 -*-
"""
调度事件数据结构

功能：
- 定义调度器状态变化和动作触发的结构化事件
- 事件内容（模式、时间、原因）供日志和指标使用
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum


class EventKind(Enum):
    """调度事件类型"""
    ARMED = "armed"          # 控制器启动周期 tick
    DISARMED = "disarmed"    # 控制器停止周期 tick
    FIRED = "fired"          # 触发了动作
    SKIPPED = "skipped"      # tick 到了但没有触发（有明确原因）
    FAILED = "failed"        # 动作执行失败


# 控制器名称
ADAPTIVE_REFRESH = "adaptive_refresh"
FIXED_SYNC = "fixed_sync"


@dataclass
class SchedulerEvent:
    """调度事件"""
    controller: str                  # adaptive_refresh / fixed_sync
    kind: EventKind                  # 事件类型
    reason: str                      # 原因，如 just_enabled / dense_window / interval_elapsed
    timestamp: datetime = field(default_factory=datetime.now)
    mode: Optional[str] = None       # 刷新模式（只有 adaptive_refresh 的 tick 有）
    detail: Optional[str] = None     # 附加信息（失败时为错误信息）

    def is_fired(self) -> bool:
        return self.kind == EventKind.FIRED

    def is_skipped(self) -> bool:
        return self.kind == EventKind.SKIPPED

    def is_failed(self) -> bool:
        return self.kind == EventKind.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'controller': self.controller,
            'kind': self.kind.value,
            'reason': self.reason,
            'mode': self.mode,
            'timestamp': self.timestamp.isoformat(),
            'detail': self.detail,
        }

    def __str__(self) -> str:
        mode = f" mode={self.mode}" if self.mode else ""
        detail = f" ({self.detail})" if self.detail else ""
        return f"{self.controller} {self.kind.value}{mode} reason={self.reason}{detail}"
