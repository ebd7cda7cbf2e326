"""
payload_router: detection-and-routing core for a live traffic sniffer.

Public API (stable):
- SnifferSettings, FilterConfig, load_settings   (configuration)
- select_device, describe_device, classify_device (device selection)
- decode_frame                                    (raw frame -> RawFrame)
- DetectorChain, default_chain                    (detector chain)
- JsonDetector, HttpDetector, BinaryDetector      (detectors)
- SinkDispatcher                                  (sink fan-out)
- PacketPipeline                                  (per-frame orchestration)
- Ports: DetectorPort, PresenterPort, PublisherPort, CaptureSourcePort
- DTOs: RawFrame, TransportSegment, DetectionRecord, CaptureDeviceDescriptor

Nothing in here talks to the network or the console; adapters live in
`snifferapp`.
"""

from __future__ import annotations

# Configuration
from .config import FilterConfig, SnifferSettings, load_settings

# Errors
from .errors import (
    CaptureOpenError,
    ConfigError,
    ExtractionError,
    NoDeviceError,
    PayloadRouterError,
)

# Intake
from .intake.device_selector import classify_device, describe_device, select_device
from .intake.frame_decoder import decode_frame

# Detection
from .pipeline.detectors import BinaryDetector, HttpDetector, JsonDetector
from .pipeline.router import DetectorChain, default_chain
from .pipeline.emitter import SinkDispatcher, publish_message

# Orchestration
from .orchestration.runner import PacketPipeline

# Ports
from .ports import CaptureSourcePort, DetectorPort, PresenterPort, PublisherPort

# DTOs
from .dto import (
    CaptureDeviceDescriptor,
    DetectionRecord,
    RawFrame,
    TransportSegment,
)

__all__ = [
    "FilterConfig",
    "SnifferSettings",
    "load_settings",
    "CaptureOpenError",
    "ConfigError",
    "ExtractionError",
    "NoDeviceError",
    "PayloadRouterError",
    "classify_device",
    "describe_device",
    "select_device",
    "decode_frame",
    "BinaryDetector",
    "HttpDetector",
    "JsonDetector",
    "DetectorChain",
    "default_chain",
    "SinkDispatcher",
    "publish_message",
    "PacketPipeline",
    "CaptureSourcePort",
    "DetectorPort",
    "PresenterPort",
    "PublisherPort",
    "CaptureDeviceDescriptor",
    "DetectionRecord",
    "RawFrame",
    "TransportSegment",
]
