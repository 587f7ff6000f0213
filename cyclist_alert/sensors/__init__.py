"""Accelerometer sample sources and buffering."""

from .ring_buffer import MagnitudeBuffer
from .source import CsvSampleSource, QueueSampleSource, SampleSource

__all__ = ["MagnitudeBuffer", "SampleSource", "QueueSampleSource", "CsvSampleSource"]
