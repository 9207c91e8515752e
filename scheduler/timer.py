# -*- coding: utf-8 -*-
"""
周期定时器模块

功能：
- 在后台线程中按固定间隔调用回调，不阻塞主程序
- cancel() 同步返回：返回后不会再有 tick 触发
- 回调异常只打印日志，不退出线程
"""

import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """
    周期定时器

    每个定时器独占一个 daemon 线程，同一定时器的回调串行执行。
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "RepeatingTimer"):
        """
        Args:
            interval: 间隔（秒），必须大于 0
            callback: 每个 tick 调用的函数
            name: 线程名（用于日志）
        """
        if interval <= 0:
            raise ValueError(f"interval 必须大于 0: {interval}")

        self.interval = interval
        self.callback = callback
        self.name = name

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """
        启动定时器

        线程创建失败（如 RuntimeError: can't start new thread）直接抛出给调用方。
        """
        if self._thread is not None:
            raise RuntimeError(f"定时器 {self.name} 已启动")

        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"[Timer] {self.name} 已启动，间隔: {self.interval} 秒")

    def cancel(self, timeout: Optional[float] = None):
        """
        停止定时器

        设置停止标志并等待线程退出（正在执行的回调会先执行完）。
        在定时器自身线程内调用时不等待。
        """
        self._stop_event.set()

        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return

        if thread.is_alive():
            thread.join(timeout=timeout)
        logger.debug(f"[Timer] {self.name} 已停止")

    @property
    def active(self) -> bool:
        return (self._thread is not None
                and self._thread.is_alive()
                and not self._stop_event.is_set())

    def _run(self):
        # Event.wait 返回 True 表示已被 cancel
        while not self._stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"[Timer] {self.name} 回调异常: {e}", exc_info=True)
        logger.debug(f"[Timer] {self.name} 循环已退出")


TimerFactory = Callable[[float, Callable[[], None], str], RepeatingTimer]


def default_timer_factory(interval: float, callback: Callable[[], None], name: str) -> RepeatingTimer:
    """创建并启动一个 RepeatingTimer"""
    timer = RepeatingTimer(interval, callback, name=name)
    timer.start()
    return timer
