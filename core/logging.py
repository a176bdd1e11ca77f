# core/logging.py
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional
from .config import get_settings


def setup_logging(level_name: Optional[str] = None, log_file: Optional[str] = None):
    """
    控制台 + 可选滚动文件日志。server（main.py）和 viewer CLI 共用这一份配置。
    参数为空时取 settings.LOG_LEVEL / settings.LOG_FILE。
    """
    settings = get_settings()
    level_name = level_name or settings.LOG_LEVEL
    log_file = log_file if log_file is not None else settings.LOG_FILE
    level = getattr(logging, level_name.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)

    # 清理预先存在的 handlers（避免重复）
    for h in list(root.handlers):
        root.removeHandler(h)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    # 每次轮询都会打一条 httpx 请求日志，默认压到 WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
