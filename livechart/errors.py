from __future__ import annotations


class LivechartError(Exception):
    pass


class PayloadError(LivechartError, ValueError):
    pass


class UnknownLayoutError(PayloadError):
    def __init__(self, layout: object) -> None:
        super().__init__(f"unknown layout kind: {layout!r}")
        self.layout = layout


class FeedError(LivechartError):
    pass
