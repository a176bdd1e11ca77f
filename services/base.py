from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseService(ABC):
    """
    所有注册到 ServiceFactory 的服务的公共接口。
    构造器里不做耗时操作，准备工作放到 startup()。
    """

    name: str = "base"

    @abstractmethod
    async def startup(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def shutdown(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def info(self) -> Dict[str, Any]:
        """健康检查接口（GET /）返回的服务状态。"""
        raise NotImplementedError
