"""
Sink dispatch (synchronous, fan-out).

Purpose
-------
Forward accepted records to every registered presenter and publisher, in
registration order, on the caller's thread. A slow sink therefore slows the
capture callback; that back-pressure is intended.

Failure isolation
-----------------
A sink that raises is logged with its traceback and skipped; remaining sinks
still run and later frames are unaffected. Sink return values are ignored.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..dto import DetectionRecord, RawFrame
from ..ports import PresenterPort, PublisherPort
from .path_filter import is_http_request, request_method, request_path

logger = logging.getLogger(__name__)


def publish_message(record: DetectionRecord) -> Optional[str]:
    """
    Short message sent to publishers: "METHOD\\tPATH" for HTTP requests.
    Other records are not published.
    """
    if not is_http_request(record):
        return None
    return f"{request_method(record)}\t{request_path(record)}"


class SinkDispatcher:
    """
    Parameters
    ----------
    presenters : list of PresenterPort
        Receive every accepted record (and full frames in dump mode).
    publishers : list of PublisherPort
        Receive `publish_message(record)` when it is not None.
    """

    def __init__(
        self,
        *,
        presenters: Optional[List[PresenterPort]] = None,
        publishers: Optional[List[PublisherPort]] = None,
    ) -> None:
        self._presenters: List[PresenterPort] = list(presenters or [])
        self._publishers: List[PublisherPort] = list(publishers or [])
        self.failures = 0

    def add_presenter(self, presenter: PresenterPort) -> None:
        self._presenters.append(presenter)

    def add_publisher(self, publisher: PublisherPort) -> None:
        self._publishers.append(publisher)

    # --- emission ---

    def dispatch(self, record: DetectionRecord) -> None:
        for presenter in self._presenters:
            try:
                presenter.present(record)
            except Exception:
                self.failures += 1
                logger.exception("Presenter %s failed", type(presenter).__name__)

        message = publish_message(record)
        if message is None:
            return
        for publisher in self._publishers:
            try:
                publisher.publish(message)
            except Exception:
                self.failures += 1
                logger.exception("Publisher %s failed", type(publisher).__name__)

    def dispatch_frame(self, frame: RawFrame) -> None:
        for presenter in self._presenters:
            try:
                presenter.present_frame(frame)
            except Exception:
                self.failures += 1
                logger.exception("Presenter %s failed on frame", type(presenter).__name__)
