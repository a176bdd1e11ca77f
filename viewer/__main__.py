"""
轮询资源服务，把每次拿到的新图片写到本地文件：

    python -m viewer --base-url http://127.0.0.1:8000 --output latest.png

未给出的参数取 settings.VIEWER（环境变量 VIEWER__INTERVAL_MS 等）。Ctrl-C 退出。
"""
import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from core.config import get_settings
from core.logging import setup_logging
from .poller import PollingViewer
from .render import FileRenderer

logger = logging.getLogger("viewer")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="viewer", description="Poll the resource endpoint and save the latest image.")
    p.add_argument("--base-url", help="resource server base url")
    p.add_argument("--route", help="resource route, e.g. /resource")
    p.add_argument("--interval-ms", type=int, help="polling interval in milliseconds")
    p.add_argument("--timeout", type=float, help="per-request timeout in seconds")
    p.add_argument("--output", type=Path, help="file the latest image is written to")
    p.add_argument("--log-level", default=None)
    return p


async def run(args: argparse.Namespace) -> None:
    config = get_settings().VIEWER
    overrides = {
        "base_url": args.base_url,
        "resource_route": args.route,
        "interval_ms": args.interval_ms,
        "timeout_s": args.timeout,
        "output_path": args.output,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    viewer = PollingViewer.from_config(config, renderer=FileRenderer(config.output_path))
    task = viewer.activate()
    try:
        await task.wait()
    finally:
        await viewer.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level_name=args.log_level, log_file="")
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("interrupted, viewer stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
