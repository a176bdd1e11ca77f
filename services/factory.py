from __future__ import annotations
import asyncio
from functools import lru_cache
from typing import Callable, Dict, Optional, Any, List

from .base import BaseService
import logging

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    服务注册表：按名字登记构造器，延迟实例化，并统一启动/关闭。

    用法示例:
        factory = get_service_factory()
        factory.register("resource", lambda **kw: ResourceService(resource_path=path, **kw))
        svc = factory.create("resource")                      # 已存在则直接返回
        svc = factory.create("resource", force_new=True, resource_path=other)  # 测试里替换实例
    """

    def __init__(self):
        self._registry: Dict[str, Callable[..., BaseService]] = {}
        self._instances: Dict[str, BaseService] = {}

    def register(self, name: str, ctor: Callable[..., BaseService]) -> None:
        if not callable(ctor):
            raise TypeError("ctor must be callable")
        logger.debug("Register service %s -> %s", name, getattr(ctor, "__name__", str(ctor)))
        self._registry[name] = ctor

    def create(self, name: str, *, force_new: bool = False, **kwargs: Any) -> BaseService:
        """
        - name: 注册时使用的 key，未注册抛 KeyError
        - force_new: True 时重新构造并覆盖旧实例
        - kwargs: 传给构造器，覆盖注册时给定的参数
        """
        if name not in self._registry:
            raise KeyError(f"service '{name}' is not registered")

        if not force_new and name in self._instances:
            return self._instances[name]

        inst = self._registry[name](**kwargs)
        if not isinstance(inst, BaseService):
            raise TypeError("created object is not an instance of BaseService")

        self._instances[name] = inst
        logger.info("Service '%s' instantiated", name)
        return inst

    def get(self, name: str) -> Optional[BaseService]:
        return self._instances.get(name)

    def list_registered(self) -> List[str]:
        return list(self._registry.keys())

    # ---------------- lifecycle ----------------
    async def startup_all(self) -> None:
        """实例化尚未创建的服务，并行调用各自的 startup()。"""
        for name in self.list_registered():
            if name not in self._instances:
                try:
                    self.create(name)
                except Exception:
                    logger.exception("failed to instantiate service %s during startup_all", name)

        coros = [inst.startup() for inst in self._instances.values()]
        if coros:
            await asyncio.gather(*coros)
        logger.info("ServiceFactory: startup_all finished for %s", ", ".join(self._instances.keys()))

    async def shutdown_all(self) -> None:
        """并行调用 shutdown()，单个服务失败不影响其它服务关闭。实例保留。"""
        names = list(self._instances.keys())
        results = await asyncio.gather(
            *(self._instances[n].shutdown() for n in names), return_exceptions=True
        )
        for name, res in zip(names, results):
            if isinstance(res, Exception):
                logger.error("service %s shutdown() failed: %s", name, res)
        logger.info("ServiceFactory: shutdown_all finished for %s", ", ".join(names))

    def info_all(self) -> Dict[str, Dict[str, Any]]:
        out: Dict[str, Dict[str, Any]] = {}
        for name, inst in self._instances.items():
            try:
                out[name] = inst.info()
            except Exception:
                logger.exception("service %s info() failed", name)
                out[name] = {"error": True}
        return out


@lru_cache()
def get_service_factory() -> ServiceFactory:
    return ServiceFactory()
