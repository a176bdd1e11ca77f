class ResourceError(Exception):
    """获取资源失败的基类，viewer 每个轮询周期只捕获这一类。"""


class ResourceNotFound(ResourceError):
    """资源文件在读取时不存在（导出可能尚未完成）。"""


class ResourceInternalError(ResourceError):
    """读取资源时的意外失败；HTTP 层表现为 500。"""


class NetworkFailure(ResourceError):
    """客户端传输层错误：连接失败、超时等。"""
