from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as DecodeTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
import logging
import threading

from client.inventory_client import ApiError, InventoryApiClient
from config.settings import settings
from modules.scanning.capture import Detection, Facing, ScanCapture, StreamHandle

logger = logging.getLogger(__name__)

class ScanOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    NO_BARCODE = "no_barcode"
    ERROR = "error"

@dataclass
class LookupResult:
    outcome: ScanOutcome
    detection: Optional[Detection] = None
    item: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

class ScanLookupController:
    """Drives scan -> lookup -> result for one view.

    Lookups run on a worker pool. Each one is tagged with the view generation
    current when it started; `navigate_away()` and `start()` bump the
    generation, so responses for a view that is gone are dropped instead of
    overwriting `result`. Live detections carry the generation of the stream
    that produced them.
    """

    def __init__(
        self,
        client: InventoryApiClient,
        capture: ScanCapture,
        on_result: Optional[Callable[[LookupResult], None]] = None,
        decode_timeout: Optional[float] = None,
    ):
        self.client = client
        self.capture = capture
        self.on_result = on_result
        self.decode_timeout = settings.SCAN_TIMEOUT_SECONDS if decode_timeout is None else decode_timeout
        self.result: Optional[LookupResult] = None

        # Reentrant so on_result may call back into the controller
        self._lock = threading.RLock()
        self._generation = 0
        self._stream: Optional[StreamHandle] = None
        self._lookups = ThreadPoolExecutor(max_workers=2, thread_name_prefix="scan-lookup")
        self._decoder = ThreadPoolExecutor(max_workers=2, thread_name_prefix="scan-decode")

    @property
    def scanning(self) -> bool:
        return self._stream is not None

    def _next_view(self) -> None:
        with self._lock:
            self._generation += 1
            self.result = None

    def _current_generation(self) -> int:
        with self._lock:
            return self._generation

    def start(self, facing: Facing = Facing.BACK) -> StreamHandle:
        """Start live scanning; the stream stops at the first detection"""
        self.stop()
        self._next_view()
        generation = self._current_generation()
        stream = self.capture.start(
            facing, lambda detection: self._on_detected(generation, detection)
        )
        with self._lock:
            self._stream = stream
        logger.info(f"Scanning started ({facing.value} camera)")
        return stream

    def stop(self) -> None:
        with self._lock:
            stream, self._stream = self._stream, None
        if stream is not None:
            self.capture.stop(stream)

    def navigate_away(self) -> None:
        """Leave the view: release the camera and drop pending results"""
        self._next_view()
        self.stop()

    def close(self) -> None:
        try:
            self.navigate_away()
        finally:
            self._lookups.shutdown(wait=False)
            self._decoder.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _on_detected(self, generation: int, detection: Detection) -> Optional[Future]:
        # Only the first detection of a live stream counts
        with self._lock:
            if generation != self._generation or self._stream is None:
                logger.debug(f"Ignoring detection of {detection.code} from a stopped stream")
                return None
            stream, self._stream = self._stream, None

        self.capture.stop(stream)
        return self._lookups.submit(self._run_lookup, generation, detection)

    def lookup(self, detection: Detection) -> Future:
        """Look up a detected (or manually entered) barcode"""
        generation = self._current_generation()
        return self._lookups.submit(self._run_lookup, generation, detection)

    def scan_image(self, image: bytes) -> Future:
        """Decode a still image, then look up whatever barcode it holds"""
        self.stop()
        generation = self._current_generation()
        return self._lookups.submit(self._run_image_scan, generation, image)

    def _resolve(self, detection: Detection) -> LookupResult:
        try:
            item = self.client.get_item_by_barcode(detection.code)
        except ApiError as e:
            return LookupResult(ScanOutcome.ERROR, detection, message=e.message)

        if item is None:
            return LookupResult(ScanOutcome.NOT_FOUND, detection, message="Item not found in database")
        return LookupResult(ScanOutcome.FOUND, detection, item=item)

    def _run_lookup(self, generation: int, detection: Detection) -> LookupResult:
        result = self._resolve(detection)
        self._apply(generation, result)
        return result

    def _run_image_scan(self, generation: int, image: bytes) -> LookupResult:
        decoding = self._decoder.submit(self.capture.decode_image, image)
        try:
            detection = decoding.result(timeout=self.decode_timeout)
        except DecodeTimeout:
            decoding.cancel()
            result = LookupResult(
                ScanOutcome.NO_BARCODE,
                message="Scan timeout: unable to detect a barcode in this image",
            )
        except Exception as e:
            logger.warning(f"Could not decode image: {e}")
            result = LookupResult(ScanOutcome.ERROR, message="Error reading image")
        else:
            if detection is None:
                result = LookupResult(ScanOutcome.NO_BARCODE, message="No barcode detected in image")
            else:
                result = self._resolve(detection)

        self._apply(generation, result)
        return result

    def _apply(self, generation: int, result: LookupResult) -> bool:
        with self._lock:
            if generation != self._generation:
                logger.debug(f"Dropping stale {result.outcome.value} result")
                return False
            self.result = result
            # Delivered under the lock so navigate_away() cannot slip in between
            if self.on_result is not None:
                self.on_result(result)
        return True
