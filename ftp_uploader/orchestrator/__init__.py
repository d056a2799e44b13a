"""Orchestrator package - schedules uploads one item at a time."""
from .core import Uploader
from .file_collector import FileCollector
from .progress import SpeedMeter

__all__ = ["Uploader", "FileCollector", "SpeedMeter"]
