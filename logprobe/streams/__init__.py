from .common import SinkEvent, SinkState
from .sink import RecordSink, Subscription, create_sink

__all__ = [
    "RecordSink",
    "Subscription",
    "SinkEvent",
    "SinkState",
    "create_sink",
]
