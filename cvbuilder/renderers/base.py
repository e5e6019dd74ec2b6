"""
Base interface for CV renderers.

Defines the contract for pluggable render backends: finished HTML in,
document bytes out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..layout.model import A4, PageSpec


class RenderError(Exception):
    """
    A render backend failed.

    transient marks failures worth retrying (timeouts, a crashed or
    disconnected browser); anything else is treated as permanent.
    """

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


class CVRenderer(ABC):
    """
    Abstract base class for CV renderers.

    Implementations take a complete, self-contained HTML document and
    turn it into an output format (PDF, HTML preview, ...).
    """

    # File extension of the produced documents, including the dot
    extension: str = ""

    @abstractmethod
    def render(self, html: str, page_spec: PageSpec = A4) -> bytes:
        """
        Render an HTML document.

        Args:
            html: Complete HTML document (styles inline)
            page_spec: Physical page size; backend margins are always zero

        Returns:
            The rendered document as bytes

        Raises:
            RenderError: When the backend fails
        """
        ...
