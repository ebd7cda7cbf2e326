"""
Wiring between settings, sinks and the payload_router pipeline.

Both entry points (CLI and Flask app) build their pipeline here so that
detector order and sink registration are defined in one place.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from payload_router import (
    DetectorChain,
    FilterConfig,
    PacketPipeline,
    SinkDispatcher,
    SnifferSettings,
    default_chain,
)
from payload_router.ports import PresenterPort, PublisherPort

from ..sinks.rabbit import RabbitPublisher


@dataclass
class PipelineBundle:
    """A ready pipeline plus the sinks that need closing on shutdown."""
    pipeline: PacketPipeline
    presenters: List[PresenterPort] = field(default_factory=list)
    publishers: List[PublisherPort] = field(default_factory=list)

    def close(self) -> None:
        for sink in [*self.presenters, *self.publishers]:
            close = getattr(sink, "close", None)
            if callable(close):
                close()


def build_pipeline(
    settings: SnifferSettings,
    *,
    presenters: Optional[List[PresenterPort]] = None,
    publishers: Optional[List[PublisherPort]] = None,
    filter_cfg: Optional[FilterConfig] = None,
    chain: Optional[DetectorChain] = None,
    dump_frames: bool = False,
    clock: Callable[[], float] = time.time,
) -> PipelineBundle:
    """
    Build a PacketPipeline from settings.

    When `publishers` is None and publishing is enabled in settings, a
    RabbitPublisher is created from the broker settings. Pass an explicit
    list (possibly empty) to override.
    """
    if publishers is None:
        publishers = [RabbitPublisher.from_settings(settings)] if settings.publish_enabled else []
    presenters = list(presenters or [])

    dispatcher = SinkDispatcher(presenters=presenters, publishers=publishers)
    pipeline = PacketPipeline(
        filter_cfg or settings.filter_config(),
        chain or default_chain(clock),
        dispatcher,
        clock=clock,
        dump_frames=dump_frames,
    )
    return PipelineBundle(pipeline=pipeline, presenters=presenters, publishers=list(publishers))
