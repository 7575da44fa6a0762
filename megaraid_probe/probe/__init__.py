"""Block device probes."""

from .base import Probe
from .megaraid import MegaRaidProbe

__all__ = ['Probe', 'MegaRaidProbe']
