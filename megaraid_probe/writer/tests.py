"""
Tests for result writers.
"""
import io
import json
import logging
import os
import unittest
from tempfile import TemporaryDirectory

from .json_writer import JsonWriter
from .prometheus_writer import PrometheusWriter
from .multi_writer import MultiWriter
from .factory import WriterFactory
from .base import Writer
from ..core.writer_config import WriterConfig
from ..schema.models import ClassificationResult

RESULTS = [
    ClassificationResult('/dev/sda', ClassificationResult.MATCHED, drive_type='SSD'),
    ClassificationResult('/dev/sdb', ClassificationResult.NO_MATCH),
    ClassificationResult('/dev/sdc', ClassificationResult.ERROR, error_message='storcli exited with status 1'),
]


class FailingWriter(Writer):
    def write(self, results, sweep_iteration=1) -> bool:
        return False


class TestJsonWriter(unittest.TestCase):

    def test_write_to_stream(self):
        stream = io.StringIO()
        self.assertTrue(JsonWriter(stream=stream).write(RESULTS, sweep_iteration=4))

        document = json.loads(stream.getvalue())
        self.assertEqual(document['sweep'], 4)
        self.assertIn('timestamp', document)
        self.assertEqual(document['results'][0], {
            'dev_path': '/dev/sda', 'status': 'matched', 'drive_type': 'SSD', 'error_message': None,
        })
        self.assertEqual(document['results'][2]['error_message'], 'storcli exited with status 1')

    def test_write_to_file(self):
        with TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, 'nested', 'results.json')
            self.assertTrue(JsonWriter({'json_output': path}).write(RESULTS))
            with open(path) as f:
                self.assertEqual(len(json.load(f)['results']), 3)


class TestPrometheusWriter(unittest.TestCase):

    def setUp(self):
        self.writer = PrometheusWriter({'serve': False})

    def test_metrics(self):
        self.assertTrue(self.writer.write(RESULTS))
        text = self.writer.render().decode()

        self.assertIn('megaraid_probe_drive_type_info{device="/dev/sda",drive_type="SSD"} 1.0', text)
        self.assertNotIn('megaraid_probe_drive_type_info{device="/dev/sdb"', text)
        self.assertIn('megaraid_probe_classification_status{device="/dev/sdb",status="no_match"} 1.0', text)
        self.assertIn('megaraid_probe_classification_status{device="/dev/sdb",status="matched"} 0.0', text)
        self.assertIn('megaraid_probe_last_sweep_timestamp_seconds', text)

    def test_departed_devices_are_dropped(self):
        self.writer.write(RESULTS)
        self.writer.write(RESULTS[1:])
        text = self.writer.render().decode()
        self.assertNotIn('device="/dev/sda"', text)
        self.assertFalse(self.writer.server_started)


class TestMultiWriterAndFactory(unittest.TestCase):

    def test_all_writers_must_succeed(self):
        stream = io.StringIO()
        self.assertTrue(MultiWriter([JsonWriter(stream=stream)]).write(RESULTS))
        self.assertFalse(MultiWriter([JsonWriter(stream=io.StringIO()), FailingWriter()]).write(RESULTS))
        self.assertEqual(str(MultiWriter([FailingWriter()])), 'MultiWriter(FailingWriter)')

    def test_factory(self):
        self.assertIsInstance(WriterFactory.create_writer_from_config(WriterConfig()), JsonWriter)
        self.assertIsInstance(
            WriterFactory.create_writer_from_config(WriterConfig(output_format='prometheus')),
            PrometheusWriter)
        both = WriterFactory.create_writer_from_config(WriterConfig(output_format='both'))
        self.assertIsInstance(both, MultiWriter)
        self.assertEqual(len(both.writers), 2)


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
