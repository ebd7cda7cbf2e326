"""
Thread-safe capture orchestration and status.

This module owns the single capture thread and provides:
- device listing with the automatically selected device,
- start()/stop() control (cooperative shutdown),
- a status snapshot for the API and CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import logging
import threading
import time

from payload_router import SnifferSettings, select_device
from payload_router.dto import CaptureDeviceDescriptor
from payload_router.errors import NoDeviceError
from payload_router.ports import CaptureSourcePort

from ..packet_sniffer import LiveSniffer
from ..utils import utcnow_iso
from .pipeline_bridge import PipelineBundle


@dataclass
class SnifferManager:
    """
    Orchestrates live capture on a background thread and exposes:
      - list_devices() for the device picker,
      - start()/stop() to control capture,
      - status() for live counters.

    Capture design:
      * Device selection and opening happen on the caller's thread, so
        NoDeviceError / CaptureOpenError surface directly to the caller.
      * Frames are processed synchronously on the capture thread.
      * stop() sets the stop flag and waits for the in-flight frame to finish
        before the device is closed.
    """
    logger: logging.Logger
    settings: SnifferSettings
    bundle: PipelineBundle
    source_factory: Optional[Callable[[], CaptureSourcePort]] = None

    thread: Optional[threading.Thread] = None
    source: Optional[CaptureSourcePort] = None
    device: Optional[CaptureDeviceDescriptor] = None
    active: bool = False
    start_time: Optional[float] = None
    error: Optional[str] = None

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _new_source(self) -> CaptureSourcePort:
        if self.source_factory is not None:
            return self.source_factory()
        return LiveSniffer(self.logger, self.settings.read_timeout_ms)

    # ---------------------------- Devices ---------------------------------

    def list_devices(self) -> Tuple[List[CaptureDeviceDescriptor], Optional[CaptureDeviceDescriptor]]:
        """Return (devices, device that start() would pick without a keyword override)."""
        devices = self._new_source().list_devices()
        if not devices:
            return [], None
        return devices, select_device(devices, self.settings.device_keyword)

    # ---------------------------- Control plane ----------------------------

    def start(self, keyword: Optional[str] = None) -> Tuple[bool, str]:
        """
        Select and open a device, then start capture on a background thread.

        Returns:
            (ok, message); ok is False only when capture is already running.

        Raises:
            NoDeviceError: no capture devices were enumerated.
            CaptureOpenError: the selected device could not be opened.
        """
        with self._lock:
            if self.active:
                return False, "Capture already active"

            source = self._new_source()
            devices = source.list_devices()
            if not devices:
                raise NoDeviceError("No network devices found")
            device = select_device(devices, keyword or self.settings.device_keyword)
            source.open(device)

            self.source = source
            self.device = device
            self.active = True
            self.error = None
            self.start_time = time.time()

            pipeline = self.bundle.pipeline

            def runner() -> None:
                try:
                    source.run(pipeline.process_raw)
                except Exception as e:
                    self.logger.exception("Error during capture")
                    with self._lock:
                        self.error = f"Error: {e}"
                finally:
                    source.close()
                    with self._lock:
                        self.active = False

            self.thread = threading.Thread(target=runner, name="capture", daemon=True)
            self.thread.start()
            return True, f"Started capturing on {device.label}"

    def stop(self, timeout: float = 10.0) -> Dict[str, int]:
        """
        Signal capture to stop and wait for the thread to finish.
        Returns the pipeline counters.
        """
        with self._lock:
            source, thread = self.source, self.thread
            if source is not None and self.active:
                self.logger.info("Stopping capture…")
                source.stop()

        if thread is not None:
            thread.join(timeout=timeout)
        return self.bundle.pipeline.stats()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the capture thread exits (CLI foreground mode)."""
        thread = self.thread
        if thread is not None:
            thread.join(timeout=timeout)

    # ----------------------------- Telemetry ------------------------------

    def status(self) -> Dict[str, object]:
        with self._lock:
            elapsed = time.time() - self.start_time if (self.active and self.start_time) else 0.0
            return {
                "timestamp": utcnow_iso(),
                "active": self.active,
                "device": (
                    {"name": self.device.name, "description": self.device.description, "kind": self.device.kind}
                    if self.device else None
                ),
                "elapsed_time": round(elapsed, 1),
                "error": self.error,
                "counters": self.bundle.pipeline.stats(),
            }
