#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Quota Refresh Scheduler 主程序入口

功能：
- 加载并监听调度配置文件
- 启动智能刷新 / 自动同步调度器
- 启动 Flask HTTP 服务器
- 暴露 /metrics 端点供 Prometheus 抓取
- 暴露 /health 健康检查端点
"""

from flask import Flask, jsonify
from prometheus_client import CONTENT_TYPE_LATEST
import logging
import os
import sys
from typing import Optional

from actions import HttpActionInvoker, ActionDispatcher
from collector import EventCollector
from config.loader import AppConfig, load_config, print_app_config
from config.validator import validate_config
from config.watcher import ConfigWatcher
from scheduler import RefreshScheduler

# 配置日志
logging.basicConfig(
    level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 设置特定模块的日志级别
logging.getLogger('werkzeug').setLevel(logging.WARNING)  # 减少 Flask 日志

DEFAULT_CONFIG_PATH = 'config/scheduler.yaml'


def create_app(scheduler: Optional[RefreshScheduler], event_collector: Optional[EventCollector]) -> Flask:
    """
    创建 Flask 应用

    Args:
        scheduler: 刷新调度器（未初始化时为 None）
        event_collector: 调度事件收集器
    """
    app = Flask(__name__)

    @app.route('/metrics')
    def metrics():
        """
        Prometheus metrics 端点

        格式：Prometheus text format
        """
        if event_collector is None:
            return "# Scheduler not initialized\n", 200, {'Content-Type': CONTENT_TYPE_LATEST}
        return event_collector.get_metrics(), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    @app.route('/health')
    def health():
        """
        健康检查端点

        返回调度器状态和最近的调度事件
        """
        status = {'status': 'healthy'}
        if scheduler is not None:
            status['scheduler'] = scheduler.get_status()
        if event_collector is not None:
            status['events'] = event_collector.get_summary()
            status['recent_events'] = [e.to_dict() for e in event_collector.recent(10)]
        return status, 200

    @app.route('/trigger/refresh', methods=['POST'])
    def trigger_refresh():
        """手动触发配额刷新"""
        if scheduler is None:
            return jsonify({'success': False, 'error': '调度器未初始化'}), 503
        scheduler.trigger_refresh()
        return jsonify({'success': True, 'message': 'refresh_quotas 已提交'}), 202

    @app.route('/trigger/sync', methods=['POST'])
    def trigger_sync():
        """手动触发账号同步"""
        if scheduler is None:
            return jsonify({'success': False, 'error': '调度器未初始化'}), 503
        scheduler.trigger_sync()
        return jsonify({'success': True, 'message': 'sync_account 已提交'}), 202

    return app


def main():
    """
    主函数：启动调度器和 Flask 服务器

    功能：
    1. 加载调度配置文件
    2. 初始化动作调用和事件收集
    3. 启动调度器并监听配置变化
    4. 启动 HTTP 服务器
    """
    logger.info("Starting Quota Refresh Scheduler...")

    # Phase 1: 加载调度配置
    config_path = os.getenv('SCHEDULER_CONFIG', DEFAULT_CONFIG_PATH)
    try:
        logger.info(f"正在加载调度配置: {config_path}")
        app_config = load_config(config_path)
    except FileNotFoundError as e:
        logger.error(f"配置文件不存在: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"加载调度配置失败: {e}")
        sys.exit(1)

    is_valid, error = validate_config(app_config)
    if not is_valid:
        logger.error(f"调度配置验证失败: {error}")
        sys.exit(1)

    print_app_config(app_config)

    # Phase 2: 初始化组件
    event_collector = EventCollector()
    invoker = HttpActionInvoker(
        refresh_url=app_config.actions.refresh_url,
        sync_url=app_config.actions.sync_url,
        timeout=app_config.actions.timeout_seconds
    )
    dispatcher = ActionDispatcher(
        events=event_collector.record,
        max_workers=app_config.actions.max_workers
    )

    # 调度形态在启动时固定，运行中只响应 settings 的变化
    scheduler = RefreshScheduler(
        invoker=invoker,
        profile=app_config.schedule,
        dispatcher=dispatcher,
        events=event_collector.record
    )

    def on_config_change(config: Optional[AppConfig]):
        if config is not None and config.schedule != app_config.schedule:
            logger.warning("[Config] schedule 段的修改需要重启进程才能生效")
        scheduler.apply(config.runtime if config is not None else None)

    # Phase 3: 启动调度器并监听配置
    poll_interval = float(os.getenv('CONFIG_POLL_INTERVAL', '5'))
    watcher = ConfigWatcher(config_path, on_config_change, poll_interval=poll_interval)
    watcher.start()
    logger.info("定时任务已启动，将在后台按配置自动刷新")

    # Phase 4: 启动 Flask 服务器
    port = int(os.getenv('PORT', '8000'))
    app = create_app(scheduler, event_collector)

    logger.info(f"Starting HTTP server on port {port}")
    print(f"\n{'=' * 60}")
    print("Scheduler 已启动")
    print(f"访问 http://localhost:{port}/metrics 查看指标")
    print(f"访问 http://localhost:{port}/health 查看健康状态")
    print(f"{'=' * 60}\n")
    try:
        app.run(host='0.0.0.0', port=port, debug=False)
    finally:
        watcher.stop()
        scheduler.shutdown()


if __name__ == '__main__':
    main()
