"""Media Conversion Orchestrator.

Drives an external encoder (ffmpeg) to convert media between container
formats: format resolution, pipeline selection, layered settings, progress
tracking, cancellation, retries and batch scheduling.
"""

__version__ = "0.1.0"
