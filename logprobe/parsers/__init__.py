from .json_lines import LineSplitter, RecordParser

__all__ = [
    "LineSplitter",
    "RecordParser",
]
