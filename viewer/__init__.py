from .handle import DisplayHandle
from .poller import PollingViewer, PollTask, ViewerStatus
from .render import FileRenderer

__all__ = ["DisplayHandle", "PollingViewer", "PollTask", "ViewerStatus", "FileRenderer"]
