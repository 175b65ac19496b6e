"""FastAPI routers acting as controllers in the MVC architecture."""

from . import cleanup, comparison, transcription

__all__ = ["cleanup", "comparison", "transcription"]
