"""Output generation for schedule options (PDF, text)."""

from shiftcover.output.debug_generator import DebugGenerator
from shiftcover.output.pdf_generator import PDFGenerator

__all__ = [
    "DebugGenerator",
    "PDFGenerator",
]
