"""中断信号处理"""

import signal

_shutdown = False


def is_shutdown() -> bool:
    """检查是否已收到关闭信号"""
    return _shutdown


def request_shutdown() -> None:
    """请求停止：正在运行的编码会完成，不再开始新的编码"""
    global _shutdown
    _shutdown = True


def reset_shutdown() -> None:
    """清除关闭标记（主要用于测试）"""
    global _shutdown
    _shutdown = False


def setup_signal_handlers() -> None:
    """设置信号处理器"""
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def _signal_handler(signum, frame) -> None:
    request_shutdown()
    print("\n⚠️  收到中断信号，正在停止...", flush=True)
