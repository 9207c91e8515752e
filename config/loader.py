# -*- coding: utf-8 -*-
"""
调度配置加载模块

功能：
- 从 YAML 文件加载调度配置
- 定义清晰的数据结构（RuntimeConfig / ActionEndpoints / AppConfig）
- 读取失败时给出明确错误
"""

import yaml
import os
import logging
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from scheduler.mode import (
    CriticalTime, ScheduleProfile, DEFAULT_PRESET,
    get_preset
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeConfig:
    """运行时开关配置（调度器只读）"""
    auto_refresh: bool = False
    refresh_interval: float = 30      # 分钟
    auto_sync: bool = False
    sync_interval: float = 0          # 秒


@dataclass
class ActionEndpoints:
    """动作调用配置"""
    refresh_url: Optional[str] = None
    sync_url: Optional[str] = None
    timeout_seconds: float = 30
    max_workers: int = 2


@dataclass
class AppConfig:
    """配置的根数据结构"""
    runtime: Optional[RuntimeConfig]     # 为 None 表示配置缺失（两个控制器都停止）
    schedule: ScheduleProfile
    actions: ActionEndpoints = field(default_factory=ActionEndpoints)


def load_config(config_path: str) -> AppConfig:
    """
    从 YAML 文件加载调度配置

    Args:
        config_path: 配置文件路径（如 'config/scheduler.yaml'）

    Returns:
        AppConfig 对象

    Raises:
        FileNotFoundError: 文件不存在
        yaml.YAMLError: YAML 解析错误
        ValueError: 配置格式错误
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"调度配置文件不存在: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except IOError as e:
        raise IOError(f"无法读取调度配置文件 {config_path}: {e}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"YAML 解析失败: {e}")

    return parse_config(data)


def parse_config(data: Optional[Dict[str, Any]]) -> AppConfig:
    """
    解析配置字典

    空文件等价于"所有配置缺失"：runtime 为 None，schedule 使用默认预置。
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("配置格式错误: 根节点必须是字典类型")

    runtime = None
    if data.get('settings') is not None:
        runtime = _parse_runtime(data['settings'])

    schedule = _parse_schedule(data.get('schedule') or {})
    actions = _parse_actions(data.get('actions') or {})

    return AppConfig(runtime=runtime, schedule=schedule, actions=actions)


def _parse_runtime(settings: Any) -> RuntimeConfig:
    """
    解析 settings 段

    Raises:
        ValueError: 字段类型错误
    """
    if not isinstance(settings, dict):
        raise ValueError("配置格式错误: 'settings' 必须是字典类型")

    defaults = RuntimeConfig()

    auto_refresh = settings.get('auto_refresh', defaults.auto_refresh)
    auto_sync = settings.get('auto_sync', defaults.auto_sync)
    for key, value in (('auto_refresh', auto_refresh), ('auto_sync', auto_sync)):
        if not isinstance(value, bool):
            raise ValueError(f"配置格式错误: 'settings.{key}' 必须是布尔值")

    refresh_interval = _number(settings, 'refresh_interval', defaults.refresh_interval, 'settings')
    sync_interval = _number(settings, 'sync_interval', defaults.sync_interval, 'settings')

    return RuntimeConfig(
        auto_refresh=auto_refresh,
        refresh_interval=refresh_interval,
        auto_sync=auto_sync,
        sync_interval=sync_interval
    )


def _parse_schedule(schedule: Any) -> ScheduleProfile:
    """
    解析 schedule 段

    先取 preset，再用显式字段覆盖。
    """
    if not isinstance(schedule, dict):
        raise ValueError("配置格式错误: 'schedule' 必须是字典类型")

    preset_name = schedule.get('preset', DEFAULT_PRESET)
    base = get_preset(preset_name)

    critical_times = base.critical_times
    if 'critical_times' in schedule:
        raw_times = schedule['critical_times']
        if not isinstance(raw_times, list) or not raw_times:
            raise ValueError("配置格式错误: 'schedule.critical_times' 必须是非空列表")
        critical_times = tuple(CriticalTime.parse(t) for t in raw_times)

    window_minutes = _integer(schedule, 'window_minutes', base.window_minutes, 'schedule')
    day_start_hour = _integer(schedule, 'day_start_hour', base.day_start_hour, 'schedule')
    day_end_hour = _integer(schedule, 'day_end_hour', base.day_end_hour, 'schedule')
    tick_seconds = _number(schedule, 'tick_seconds', base.tick_seconds, 'schedule')

    customized = any(
        key in schedule
        for key in ('critical_times', 'window_minutes', 'day_start_hour', 'day_end_hour', 'tick_seconds')
    )

    return ScheduleProfile(
        critical_times=critical_times,
        window_minutes=window_minutes,
        day_start_hour=day_start_hour,
        day_end_hour=day_end_hour,
        tick_seconds=tick_seconds,
        name=f"{preset_name}+custom" if customized else preset_name
    )


def _parse_actions(actions: Any) -> ActionEndpoints:
    if not isinstance(actions, dict):
        raise ValueError("配置格式错误: 'actions' 必须是字典类型")

    for key in ('refresh_url', 'sync_url'):
        value = actions.get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"配置格式错误: 'actions.{key}' 必须是字符串")

    return ActionEndpoints(
        refresh_url=actions.get('refresh_url'),
        sync_url=actions.get('sync_url'),
        timeout_seconds=_number(actions, 'timeout_seconds', 30, 'actions'),
        max_workers=_integer(actions, 'max_workers', 2, 'actions')
    )


def _number(section: dict, key: str, default, prefix: str):
    value = section.get(key, default)
    # bool 是 int 的子类，单独排除
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"配置格式错误: '{prefix}.{key}' 必须是数字")
    return value


def _integer(section: dict, key: str, default, prefix: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"配置格式错误: '{prefix}.{key}' 必须是整数")
    return value


def print_app_config(config: AppConfig):
    """
    打印配置结构（用于启动时确认）

    Args:
        config: AppConfig 对象
    """
    logger.info("=" * 60)
    logger.info("调度配置")
    logger.info("=" * 60)
    if config.runtime is None:
        logger.info("settings: 未配置（两个控制器都不启动）")
    else:
        runtime = config.runtime
        logger.info(f"auto_refresh: {runtime.auto_refresh}, refresh_interval: {runtime.refresh_interval} 分钟")
        logger.info(f"auto_sync: {runtime.auto_sync}, sync_interval: {runtime.sync_interval} 秒")
    logger.info(f"schedule: {config.schedule.describe()}")
    logger.info(f"actions: refresh_url={config.actions.refresh_url}, sync_url={config.actions.sync_url}")
    logger.info("=" * 60)
