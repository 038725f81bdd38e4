"""Document tree abstractions."""

from .base import Document, Element, FrameRef, Subscription
from .soup import SoupDocument, SoupElement
from .live import LiveDocument, LiveElement

__all__ = [
    "Document",
    "Element",
    "FrameRef",
    "Subscription",
    "SoupDocument",
    "SoupElement",
    "LiveDocument",
    "LiveElement",
]
