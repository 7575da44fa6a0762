"""Writer configuration abstraction.

Separates writer-specific configuration from the probe config.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

ALLOWED_OUTPUTS = ['json', 'prometheus', 'both']


@dataclass
class WriterConfig:
    """Configuration specific to output writers."""

    output_format: str = 'json'  # 'json', 'prometheus', 'both'

    # JSON-specific configuration, None writes to stdout
    json_output: Optional[str] = None

    # Prometheus-specific configuration
    prometheus_port: int = 8000

    def __post_init__(self):
        """Validate writer configuration after initialization."""
        if self.output_format not in ALLOWED_OUTPUTS:
            raise ValueError(f"output_format must be one of {ALLOWED_OUTPUTS}")
        if not 0 < self.prometheus_port < 65536:
            raise ValueError(f"prometheus_port out of range: {self.prometheus_port}")

    @classmethod
    def from_args(cls, args) -> 'WriterConfig':
        """Create writer configuration from command line arguments."""
        return cls(
            output_format=getattr(args, 'output', 'json'),
            json_output=getattr(args, 'json_output', None),
            prometheus_port=getattr(args, 'prometheus_port', 8000),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for writer initialization."""
        return {
            'output_format': self.output_format,
            'json_output': self.json_output,
            'prometheus_port': self.prometheus_port,
        }
