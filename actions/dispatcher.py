# -*- coding: utf-8 -*-
"""
动作分发模块

功能：
- 以 fire-and-forget 方式在线程池中执行动作
- 调用方不等待结果，不阻塞 tick 循环
- 动作异常只记录日志和失败事件，不向上抛出
"""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Optional

from collector.scheduler_event import SchedulerEvent, EventKind

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    动作分发器

    所有控制器共用一个分发器；每个动作提交到线程池后立即返回。
    """

    def __init__(
        self,
        executor: Optional[Executor] = None,
        events: Optional[Callable[[SchedulerEvent], None]] = None,
        max_workers: int = 2
    ):
        """
        Args:
            executor: 执行器（默认创建 ThreadPoolExecutor）
            events: 事件接收函数（如 EventCollector.record）
            max_workers: 默认线程池的线程数
        """
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="ActionWorker"
        )
        self.events = events

    def submit(self, controller: str, action: str, func: Callable[[], None]) -> Optional[Future]:
        """
        提交一个动作

        Args:
            controller: 发起方控制器名称（用于事件）
            action: 动作名称（用于日志）
            func: 要执行的函数

        Returns:
            Future；提交失败时返回 None
        """
        try:
            future = self.executor.submit(func)
        except RuntimeError as e:
            # 线程池已关闭
            logger.error(f"[Dispatcher] 无法提交 {action}: {e}")
            self._emit_failure(controller, action, e)
            return None

        future.add_done_callback(lambda f: self._on_done(controller, action, f))
        return future

    def bind(self, controller: str, action: str, func: Callable[[], None]) -> Callable[[], None]:
        """返回一个无参函数，调用时提交 func"""
        def dispatch():
            self.submit(controller, action, func)
        return dispatch

    def shutdown(self, wait: bool = False):
        """关闭自己创建的线程池"""
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    def _on_done(self, controller: str, action: str, future: Future):
        if future.cancelled():
            logger.warning(f"[Dispatcher] {action} 已取消")
            return

        error = future.exception()
        if error is None:
            logger.debug(f"[Dispatcher] {action} 完成")
            return

        logger.error(f"[Dispatcher] {action} 执行失败: {error}", exc_info=error)
        self._emit_failure(controller, action, error)

    def _emit_failure(self, controller: str, action: str, error: BaseException):
        if self.events is None:
            return
        try:
            self.events(SchedulerEvent(
                controller=controller,
                kind=EventKind.FAILED,
                reason='action_error',
                detail=f"{action}: {error}"
            ))
        except Exception as e:
            logger.error(f"[Dispatcher] 记录失败事件异常: {e}", exc_info=True)
