"""Host streaming adapter interface and the local simulated host."""

from scenecoord.streaming.local import LocalStreamingAdapter
from scenecoord.streaming.models import HandleKind, OperationHandle, StreamStatus
from scenecoord.streaming.protocol import StreamingAdapter

__all__ = [
    "StreamingAdapter",
    "LocalStreamingAdapter",
    "OperationHandle",
    "HandleKind",
    "StreamStatus",
]
