# -*- coding: utf-8 -*-
"""
刷新模式判定模块

功能：
- 根据当前时刻判断刷新模式（dense / blocked / normal）
- 关键时间点表、窗口大小、白天边界全部作为参数传入
- 纯函数，无副作用，任意时刻可重复推导
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Sequence


class RefreshMode(Enum):
    """刷新模式"""
    DENSE = "dense"        # 关键时间点窗口内：每个 tick 都刷新
    BLOCKED = "blocked"    # 白天窗口外：不刷新
    NORMAL = "normal"      # 夜间：按 refresh_interval 刷新


@dataclass(frozen=True)
class CriticalTime:
    """关键时间点（时:分）"""
    hour: int
    minute: int = 0

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour 必须在 0-23 之间: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute 必须在 0-59 之间: {self.minute}")

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute

    @classmethod
    def parse(cls, text: str) -> 'CriticalTime':
        """解析 "HH:MM" 格式"""
        try:
            hour, minute = str(text).strip().split(':')
            return cls(int(hour), int(minute))
        except (TypeError, ValueError) as e:
            raise ValueError(f"无效的时间点格式（应为 HH:MM）: {text!r} ({e})")

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


DEFAULT_WINDOW_MINUTES = 5
DEFAULT_TICK_SECONDS = 60


def classify(
    now: datetime,
    table: Sequence[CriticalTime],
    window: int = DEFAULT_WINDOW_MINUTES,
    day_start: int = 8,
    day_end: int = 22
) -> RefreshMode:
    """
    判断当前时刻的刷新模式

    Args:
        now: 当前本地时间（只使用时、分）
        table: 关键时间点表
        window: 关键时间点前后的窗口（分钟，含边界）
        day_start: blocked 区间起始小时（含）
        day_end: blocked 区间结束小时（不含）

    Returns:
        RefreshMode
    """
    total_minutes = now.hour * 60 + now.minute

    for point in table:
        if abs(total_minutes - point.total_minutes) <= window:
            return RefreshMode.DENSE

    if day_start <= now.hour < day_end:
        return RefreshMode.BLOCKED

    return RefreshMode.NORMAL


@dataclass(frozen=True)
class ScheduleProfile:
    """
    调度形态配置

    关键时间点表 + 窗口 + 白天边界 + tick 周期，构造后不可变。
    """
    critical_times: tuple
    window_minutes: int = DEFAULT_WINDOW_MINUTES
    day_start_hour: int = 8
    day_end_hour: int = 22
    tick_seconds: float = DEFAULT_TICK_SECONDS
    name: str = field(default="custom", compare=False)

    def __post_init__(self):
        if not self.critical_times:
            raise ValueError("critical_times 不能为空")
        if self.window_minutes < 0:
            raise ValueError("window_minutes 不能为负数")
        if not (0 <= self.day_start_hour <= 24 and 0 <= self.day_end_hour <= 24):
            raise ValueError("day_start_hour / day_end_hour 必须在 0-24 之间")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds 必须大于 0")

    def classify(self, now: datetime) -> RefreshMode:
        return classify(
            now,
            self.critical_times,
            window=self.window_minutes,
            day_start=self.day_start_hour,
            day_end=self.day_end_hour
        )

    def describe(self) -> str:
        points = ', '.join(str(t) for t in self.critical_times)
        return (f"{self.name}: [{points}] ±{self.window_minutes}min, "
                f"blocked {self.day_start_hour:02d}:00-{self.day_end_hour:02d}:00, "
                f"tick {self.tick_seconds}s")


def _times(*pairs) -> tuple:
    return tuple(CriticalTime(h, m) for h, m in pairs)


# 两套已知的关键时间点表（白天边界与各自的首尾时间点一致）
SCHEDULE_PRESETS: Dict[str, ScheduleProfile] = {
    'standard': ScheduleProfile(
        critical_times=_times((8, 0), (13, 0), (18, 0), (22, 0)),
        day_start_hour=8,
        day_end_hour=22,
        name='standard'
    ),
    'early': ScheduleProfile(
        critical_times=_times((7, 0), (11, 0), (16, 0), (21, 0)),
        day_start_hour=7,
        day_end_hour=21,
        name='early'
    ),
}

DEFAULT_PRESET = 'standard'


def get_preset(name: str) -> ScheduleProfile:
    """按名称获取预置调度形态"""
    try:
        return SCHEDULE_PRESETS[name]
    except KeyError:
        raise ValueError(f"未知的 schedule preset: {name}（可选: {', '.join(sorted(SCHEDULE_PRESETS))}）")
