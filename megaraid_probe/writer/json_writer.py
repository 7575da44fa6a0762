"""
JSON writer for MegaRAID probe results.
Writes one document per sweep to a file or to stdout.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .base import Writer
from ..schema.models import ClassificationResult

# Initialize logger
LOG = logging.getLogger(__name__)


class JsonWriter(Writer):
    """
    Writer producing {"timestamp": ..., "sweep": n, "results": [...]}.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, stream=None):
        """
        Initialize JSON writer.

        Args:
            config: Optional configuration dictionary; 'json_output' is the target
                file path, stdout when unset
            stream: Explicit text stream to write to, overrides json_output
        """
        config = config or {}
        self.output_path = config.get('json_output')
        self.stream = stream

    def build_document(self, results: List[ClassificationResult], sweep_iteration: int = 1) -> Dict[str, Any]:
        return {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'sweep': sweep_iteration,
            'results': [r.to_dict() for r in results],
        }

    def write(self, results: List[ClassificationResult], sweep_iteration: int = 1) -> bool:
        document = self.build_document(results, sweep_iteration)
        try:
            if self.stream is not None:
                json.dump(document, self.stream, indent=2)
                self.stream.write('\n')
            elif self.output_path:
                out_dir = os.path.dirname(self.output_path)
                if out_dir:
                    os.makedirs(out_dir, exist_ok=True)
                with open(self.output_path, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=2)
                LOG.info(f"Wrote {len(results)} results to {self.output_path}")
            else:
                json.dump(document, sys.stdout, indent=2)
                sys.stdout.write('\n')
            return True
        except OSError as e:
            LOG.error(f"Failed to write JSON results: {e}")
            return False
