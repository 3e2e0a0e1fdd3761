"""Report assembly helpers."""

from report.assembler import PresentationConfig, assemble, render

__all__ = ["PresentationConfig", "assemble", "render"]
