"""Address detection from free-form input."""

from holdermap.detection.address import AddressDetector, DetectionResult

__all__ = [
    "AddressDetector",
    "DetectionResult",
]
