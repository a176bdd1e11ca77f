import logging
import os
from pathlib import Path
from typing import Union

from .handle import DisplayHandle

logger = logging.getLogger(__name__)


class FileRenderer:
    """把当前 handle 的字节写到本地文件。先写临时文件再 os.replace，读者不会看到半个文件。"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __call__(self, handle: DisplayHandle) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_bytes(handle.content)
        os.replace(tmp, self.path)
        logger.info("rendered %r to %s", handle, self.path)
