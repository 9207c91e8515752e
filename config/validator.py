# -*- coding: utf-8 -*-
"""
配置验证模块

功能：
- 验证配置的完整性和正确性
- 检查字段取值范围
- 区分错误（拒绝加载）和警告（可运行但行为退化）
"""

from typing import List, Optional, Tuple

from config.loader import AppConfig


def validate_config(config: AppConfig) -> Tuple[bool, Optional[str]]:
    """
    验证配置对象

    Args:
        config: 配置对象

    Returns:
        (is_valid, error_message) 元组
    """
    errors = collect_errors(config)
    if errors:
        return False, '; '.join(errors)
    return True, None


def collect_errors(config: AppConfig) -> List[str]:
    """返回所有错误"""
    errors = []

    runtime = config.runtime
    if runtime is not None and runtime.sync_interval < 0:
        errors.append(f"sync_interval 不能为负数: {runtime.sync_interval}")

    schedule = config.schedule
    if schedule.day_start_hour > schedule.day_end_hour:
        errors.append(
            f"day_start_hour ({schedule.day_start_hour}) 不能大于 day_end_hour ({schedule.day_end_hour})"
        )

    if config.actions.timeout_seconds <= 0:
        errors.append(f"actions.timeout_seconds 必须大于 0: {config.actions.timeout_seconds}")
    if config.actions.max_workers < 1:
        errors.append(f"actions.max_workers 必须大于等于 1: {config.actions.max_workers}")

    return errors


def collect_warnings(config: AppConfig) -> List[str]:
    """
    返回所有警告

    - refresh_interval <= 0：normal 模式下每个 tick 都会刷新
    - 关键时间点窗口重叠：dense 窗口会连成一片
    - sync_interval == 0 且 auto_sync 开启：只在开启时同步一次
    """
    warnings = []

    runtime = config.runtime
    if runtime is not None:
        if runtime.refresh_interval <= 0:
            warnings.append(
                f"refresh_interval={runtime.refresh_interval}：normal 模式下每个 tick 都会刷新"
            )
        if runtime.auto_sync and runtime.sync_interval == 0:
            warnings.append("sync_interval=0：只在开启 auto_sync 时同步一次，不做周期同步")

    schedule = config.schedule
    points = sorted(t.total_minutes for t in schedule.critical_times)
    for earlier, later in zip(points, points[1:]):
        if later - earlier <= 2 * schedule.window_minutes:
            warnings.append(
                f"关键时间点 {earlier // 60:02d}:{earlier % 60:02d} 与 "
                f"{later // 60:02d}:{later % 60:02d} 的窗口重叠"
            )

    return warnings
