from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

# Linear symbologies the scanner is configured to read
SUPPORTED_SYMBOLOGIES = (
    "code_128",
    "ean_13",
    "ean_8",
    "code_39",
    "code_39_vin",
    "codabar",
    "upc_a",
    "upc_e",
    "i2of5",
    "code_93",
)

class Facing(str, Enum):
    FRONT = "front"
    BACK = "back"

@dataclass(frozen=True)
class Detection:
    code: str
    symbology: str

@dataclass(frozen=True)
class StreamHandle:
    stream_id: str
    facing: Facing

DetectionCallback = Callable[[Detection], object]

class ScanCapture(ABC):
    """Camera capture and barcode decoding backend.

    Implementations wrap a camera stream and a decoding library. The
    controller only relies on this interface; how frames are acquired and
    decoded is up to the backend.
    """

    @abstractmethod
    def start(self, facing: Facing, on_detected: DetectionCallback) -> StreamHandle:
        """Open the camera and call `on_detected` for each recognized barcode"""

    @abstractmethod
    def stop(self, handle: StreamHandle) -> None:
        """Release the camera behind `handle`"""

    @abstractmethod
    def decode_image(self, image: bytes) -> Optional[Detection]:
        """Decode a still image; None when no barcode is visible"""
