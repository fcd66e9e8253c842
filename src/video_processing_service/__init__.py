"""Video processing service: stage, transcode and publish raw uploads."""

__version__ = "1.0.0"
