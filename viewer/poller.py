from __future__ import annotations
import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Optional

from core.config import ViewerConfig
from core.errors import ResourceError, NetworkFailure
from connects.resource_client import ResourceClient, FetchedResource
from .handle import DisplayHandle

logger = logging.getLogger(__name__)

Renderer = Callable[[DisplayHandle], None]


class ViewerStatus(str, Enum):
    INACTIVE = "inactive"
    LOADING = "loading"
    DISPLAYING = "displaying"
    ERROR = "error"


class PollTask:
    """
    activate() 返回的轮询任务。持有者负责 cancel()；cancel 可重复调用。
    """

    def __init__(self, viewer: "PollingViewer", generation: int, task: asyncio.Task):
        self._viewer = viewer
        self.generation = generation
        self._task = task
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        # 先让 viewer 作废这一代，再取消 asyncio 任务；之后到达的结果都会被丢弃
        self._viewer._stop(self.generation)
        self._task.cancel()

    async def wait(self) -> None:
        """等待任务结束（被取消或异常退出），不抛 CancelledError。"""
        await asyncio.wait([self._task])


class PollingViewer:
    """
    定时拉取资源并替换当前 DisplayHandle。

    状态：INACTIVE -> LOADING -> {DISPLAYING, ERROR}，任意状态 deactivate 后回到 INACTIVE。
    首次成功之前的失败只记录，不离开 LOADING；之后的失败进入 ERROR，但保留上一次的 handle。
    同一 viewer 同一时刻只有一个 fetch 在进行：fetch 超过间隔时跳过错过的 tick。
    """

    def __init__(self, client: Any, interval_s: float = 10.0, renderer: Optional[Renderer] = None,
                 name: str = "viewer", owns_client: bool = False):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._client = client
        self.interval_s = interval_s
        self._renderer = renderer
        self.name = name
        self._owns_client = owns_client

        self._status = ViewerStatus.INACTIVE
        self._handle: Optional[DisplayHandle] = None
        self._generation = 0
        self._sequence = 0
        self._poll_task: Optional[PollTask] = None
        self.last_error: Optional[ResourceError] = None
        self.fetch_count = 0

    @classmethod
    def from_config(cls, config: ViewerConfig, renderer: Optional[Renderer] = None,
                    name: str = "viewer") -> "PollingViewer":
        client = ResourceClient(config.base_url, route=config.resource_route, timeout_s=config.timeout_s)
        return cls(client, interval_s=config.interval_s, renderer=renderer, name=name, owns_client=True)

    @property
    def status(self) -> ViewerStatus:
        return self._status

    @property
    def handle(self) -> Optional[DisplayHandle]:
        return self._handle

    @property
    def active(self) -> bool:
        return self._status is not ViewerStatus.INACTIVE

    @property
    def showing_placeholder(self) -> bool:
        """激活后尚无任何成功结果时，渲染端应显示 loading 占位。"""
        return self.active and self._handle is None

    # ---------------- lifecycle ----------------
    def activate(self) -> PollTask:
        if self.active:
            raise RuntimeError(f"{self.name} is already active")

        self._generation += 1
        generation = self._generation
        self._status = ViewerStatus.LOADING
        self.last_error = None

        task = asyncio.get_running_loop().create_task(
            self._run(generation), name=f"{self.name}-poll-{generation}"
        )
        poll_task = PollTask(self, generation, task)
        task.add_done_callback(lambda t: self._on_task_done(poll_task, t))
        self._poll_task = poll_task
        logger.info("%s activated (generation=%d, interval=%.3fs)", self.name, generation, self.interval_s)
        return poll_task

    def deactivate(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()

    async def aclose(self) -> None:
        poll_task = self._poll_task
        self.deactivate()
        if poll_task is not None:
            # 等被取消的请求退出后再关闭 client
            await poll_task.wait()
        if self._owns_client:
            await self._client.aclose()

    def _stop(self, generation: int) -> None:
        if generation != self._generation or self._status is ViewerStatus.INACTIVE:
            return
        self._generation += 1
        self._status = ViewerStatus.INACTIVE
        self._poll_task = None
        logger.info("%s deactivated (generation=%d)", self.name, generation)

    def _on_task_done(self, poll_task: PollTask, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s poll task died: %r", self.name, exc, exc_info=exc)
        poll_task.cancel()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation and self._status is not ViewerStatus.INACTIVE

    # ---------------- polling ----------------
    async def _run(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while self._is_current(generation):
            await self._poll_once(generation)
            if not self._is_current(generation):
                return

            next_tick += self.interval_s
            now = loop.time()
            if now > next_tick:
                missed = int((now - next_tick) // self.interval_s) + 1
                next_tick += missed * self.interval_s
                logger.warning("%s: fetch outlasted the interval, skipped %d tick(s)", self.name, missed)
            await asyncio.sleep(next_tick - now)

    async def _poll_once(self, generation: int) -> None:
        self.fetch_count += 1
        try:
            fetched = await self._client.fetch()
        except asyncio.CancelledError:
            logger.debug("%s: in-flight fetch cancelled", self.name)
            raise
        except ResourceError as e:
            if self._is_current(generation):
                self._record_failure(e)
            return
        except Exception as e:
            # 客户端抛出了分类之外的异常，按传输失败处理，下一个 tick 继续
            logger.exception("%s: unexpected fetch error", self.name)
            if self._is_current(generation):
                self._record_failure(NetworkFailure(f"{type(e).__name__}: {e}"))
            return

        if not self._is_current(generation):
            logger.debug("%s: discarding stale result from generation %d", self.name, generation)
            return
        self._display(fetched)

    def _record_failure(self, error: ResourceError) -> None:
        self.last_error = error
        if self._handle is not None:
            self._status = ViewerStatus.ERROR
        logger.warning("%s: fetch failed (%s): %s; status=%s",
                       self.name, type(error).__name__, error, self._status.value)

    def _display(self, fetched: FetchedResource) -> None:
        self._sequence += 1
        handle = DisplayHandle(fetched.content, fetched.media_type, self._sequence)
        previous, self._handle = self._handle, handle
        self._status = ViewerStatus.DISPLAYING
        self.last_error = None

        if self._renderer is not None:
            try:
                self._renderer(handle)
            except Exception:
                logger.exception("%s: renderer failed for %r", self.name, handle)

        if previous is not None:
            previous.release()
        logger.debug("%s: displaying %r", self.name, handle)
