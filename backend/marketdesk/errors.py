from __future__ import annotations


class ReportGenerationError(RuntimeError):
    """The text-generation step produced no usable analysis text."""
