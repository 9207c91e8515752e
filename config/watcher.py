# -*- coding: utf-8 -*-
"""
配置文件监听模块

功能：
- 定时检查配置文件的修改时间
- 文件变化时重新加载并回调
- 文件被删除时回调 None（视为配置缺失）
- 加载失败时打印日志，保留上一次的有效配置
"""

import os
import logging
from typing import Callable, Optional

import yaml

from config.loader import AppConfig, load_config
from config.validator import validate_config, collect_warnings
from scheduler.timer import TimerFactory, default_timer_factory

logger = logging.getLogger(__name__)


class ConfigWatcher:
    """
    配置文件监听器

    只在内容可能变化（mtime 变化 / 文件出现 / 文件消失）时回调。
    """

    def __init__(
        self,
        config_path: str,
        on_change: Callable[[Optional[AppConfig]], None],
        poll_interval: float = 5,
        timer_factory: Optional[TimerFactory] = None
    ):
        """
        Args:
            config_path: 配置文件路径
            on_change: 配置变化回调，参数为新配置或 None
            poll_interval: 检查间隔（秒）
            timer_factory: 定时器工厂（测试时可替换）
        """
        self.config_path = config_path
        self.on_change = on_change
        self.poll_interval = poll_interval
        self.timer_factory = timer_factory or default_timer_factory

        self.current: Optional[AppConfig] = None
        self._last_mtime: Optional[float] = None
        self._missing = False
        self._timer = None

    def start(self):
        """立即检查一次，然后启动定时检查"""
        self.check()
        if self._timer is None:
            self._timer = self.timer_factory(self.poll_interval, self.check, "ConfigWatcher")
            logger.info(f"[Config] 开始监听配置文件: {self.config_path}（间隔 {self.poll_interval} 秒）")

    def stop(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def check(self) -> bool:
        """
        检查一次配置文件

        Returns:
            True 表示触发了回调
        """
        try:
            mtime = os.path.getmtime(self.config_path)
        except OSError:
            if self._missing:
                return False
            self._missing = True
            self._last_mtime = None
            self.current = None
            logger.warning(f"[Config] 配置文件不存在: {self.config_path}，视为配置缺失")
            self.on_change(None)
            return True

        if not self._missing and mtime == self._last_mtime:
            return False

        self._missing = False
        self._last_mtime = mtime

        try:
            config = load_config(self.config_path)
        except (ValueError, yaml.YAMLError, IOError) as e:
            logger.error(f"[Config] 加载配置失败，保留上一次配置: {e}")
            return False

        is_valid, error = validate_config(config)
        if not is_valid:
            logger.error(f"[Config] 配置验证失败，保留上一次配置: {error}")
            return False

        for warning in collect_warnings(config):
            logger.warning(f"[Config] {warning}")

        self.current = config
        logger.info(f"[Config] 配置已加载: {self.config_path}")
        self.on_change(config)
        return True
