"""podfeed - build podcast feeds from audio files and publish them to S3."""

__version__ = "0.1.0"
