"""biliverec-hooks: webhook relay and HEVC transcode pipeline for a stream recorder."""

__version__ = "0.1.0"
