# -*- coding: utf-8 -*-
"""
开关跳变检测模块

功能：
- 记录上一次观察到的 enabled 标志
- 只在 False -> True 跳变时返回 True
"""


class TransitionDetector:
    """off -> on 跳变检测器（每个控制器一个）"""

    def __init__(self, initial: bool = False):
        self.previous = initial

    def observe(self, enabled_now: bool) -> bool:
        """
        记录一次观察

        Returns:
            True 表示刚从关闭变为开启
        """
        enabled_now = bool(enabled_now)
        just_enabled = enabled_now and not self.previous
        self.previous = enabled_now
        return just_enabled
