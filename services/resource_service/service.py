import logging
import mimetypes
from pathlib import Path
from typing import Dict, Any, Optional, Union

from core.errors import ResourceNotFound, ResourceInternalError
from services.base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class ResourceService(BaseService):
    """
    ResourceService: 只读地提供固定路径上的单个资源文件（导出的图表图片）。
    文件由外部导出流程随时覆盖，服务端每次请求都重新读取，不做缓存。
    """
    name = "resource"

    def __init__(self, resource_path: Union[str, Path], media_type: Optional[str] = None):
        self.resource_path = Path(resource_path)
        self.media_type = media_type or mimetypes.guess_type(self.resource_path.name)[0] or DEFAULT_MEDIA_TYPE
        self._ready = False

    async def startup(self) -> None:
        if not self.resource_path.exists():
            # 导出可能尚未完成，这不是启动错误
            logger.warning("resource file %s does not exist yet", self.resource_path)
        self._ready = True

    async def shutdown(self) -> None:
        self._ready = False

    def info(self) -> Dict[str, Any]:
        return {
            "name": "ResourceService",
            "ready": self._ready,
            "resource_path": str(self.resource_path),
            "media_type": self.media_type,
            "available": self.resource_path.exists(),
        }

    def _read(self) -> bytes:
        return self.resource_path.read_bytes()

    def get_resource(self) -> bytes:
        """
        返回资源文件的全部字节。
        文件不存在抛 ResourceNotFound；其它读取失败抛 ResourceInternalError。
        """
        if not self.resource_path.exists():
            raise ResourceNotFound(f"resource not found: {self.resource_path}")

        try:
            return self._read()
        except FileNotFoundError as e:
            # 检查与读取之间文件被导出流程删除/替换
            raise ResourceNotFound(f"resource not found: {self.resource_path}") from e
        except OSError as e:
            raise ResourceInternalError(f"failed to read {self.resource_path}: {e}") from e
