"""Media type detection for block devices behind MegaRAID controllers."""

__version__ = "1.0.0"
