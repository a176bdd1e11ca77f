import base64
from typing import Optional


class DisplayHandle:
    """
    当前显示资源的引用。渲染端通过 content / as_data_uri() 使用它；
    被新 handle 取代后由 viewer 调用 release() 释放字节。
    """

    def __init__(self, content: bytes, media_type: str, sequence: int):
        self._content: Optional[bytes] = content
        self.media_type = media_type
        self.sequence = sequence
        self.size = len(content)

    @property
    def released(self) -> bool:
        return self._content is None

    @property
    def content(self) -> bytes:
        if self._content is None:
            raise RuntimeError(f"display handle #{self.sequence} has been released")
        return self._content

    def as_data_uri(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.media_type};base64,{encoded}"

    def release(self) -> None:
        self._content = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.size} bytes"
        return f"<DisplayHandle #{self.sequence} {self.media_type} {state}>"
