"""PhotoMetaFixer: rewrite the capture dates of library photos with exiftool."""

__version__ = "0.1.0"
