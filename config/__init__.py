# -*- coding: utf-8 -*-
"""
调度配置模块

功能：
- 从 YAML 加载配置（loader）
- 验证配置（validator）
- 监听配置文件变化（watcher）
"""

from config.loader import AppConfig, RuntimeConfig, ActionEndpoints, load_config, parse_config
from config.validator import validate_config

__all__ = ['AppConfig', 'RuntimeConfig', 'ActionEndpoints', 'load_config', 'parse_config', 'validate_config']
