"""
Tests for the storcli and JSON replay data sources.
"""
import json
import logging
import os
import subprocess
import unittest
from tempfile import TemporaryDirectory
from unittest import mock

from .storcli import StorcliDataSource, DEFAULT_STORCLI_PATH
from .json_replay import JSONReplayDataSource
from ..errors import ExecutionError, ControllerError
from ..schema.models import VirtualDrive

CAPTURE = {
    "Controllers": [{
        "Command Status": {
            "CLI Version": "007.1705.0000.0000 Mar 31, 2021",
            "Operating system": "Linux 5.15.0",
            "Controller": 0,
            "Status": "Success",
            "Description": "None",
        },
        "Response Data": {
            "/c0/v0": [{"DG/VD": "0/0", "TYPE": "RAID1", "State": "Optl", "Size": "446.625 GB"}],
            "PDs for VD 0": [
                {"EID:Slt": "252:0", "DID": 8, "State": "Onln", "Intf": "SATA", "Med": "SSD",
                 "Model": "SAMSUNG MZ7LH480"},
                {"EID:Slt": "252:1", "DID": 9, "State": "Onln", "Intf": "SATA", "Med": "SSD",
                 "Model": "SAMSUNG MZ7LH480"},
            ],
            "VD0 Properties": {
                "Strip Size": "64 KB",
                "OS Drive Name": "/dev/sda",
                "SCSI NAA Id": "6d0946606ad2c40028b8f5390c3ac2e9",
            },
        },
    }]
}


def completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestStorcliDataSource(unittest.TestCase):
    """Test cases for the storcli invocation."""

    def test_default_command(self):
        datasource = StorcliDataSource()
        self.assertEqual(datasource.build_command(),
                         [DEFAULT_STORCLI_PATH, "/call/vall", "show", "all", "J"])

    @mock.patch('subprocess.run')
    def test_query_runs_fixed_command(self, mock_run):
        mock_run.return_value = completed(stdout=b'{"Controllers": []}')
        datasource = StorcliDataSource({'storcli_path': '/usr/local/sbin/storcli64'})

        self.assertEqual(datasource.query(), b'{"Controllers": []}')
        mock_run.assert_called_once_with(
            ['/usr/local/sbin/storcli64', '/call/vall', 'show', 'all', 'J'],
            capture_output=True, check=False,
        )

    @mock.patch('subprocess.run')
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")
        with self.assertRaises(ExecutionError) as ctx:
            StorcliDataSource().query()
        self.assertIsNone(ctx.exception.returncode)
        self.assertIn("No such file", ctx.exception.stderr)

    @mock.patch('subprocess.run')
    def test_not_executable(self, mock_run):
        mock_run.side_effect = PermissionError(13, "Permission denied")
        with self.assertRaises(ExecutionError):
            StorcliDataSource().query()

    @mock.patch('subprocess.run')
    def test_non_zero_exit(self, mock_run):
        mock_run.return_value = completed(returncode=255, stderr=b"Controller not found\n")
        with self.assertRaises(ExecutionError) as ctx:
            StorcliDataSource().query()
        self.assertEqual(ctx.exception.returncode, 255)
        self.assertEqual(ctx.exception.stderr, "Controller not found")

    @mock.patch('subprocess.run')
    def test_collect_virtual_drives(self, mock_run):
        mock_run.return_value = completed(stdout=json.dumps(CAPTURE).encode())
        datasource = StorcliDataSource()

        vds = datasource.collect_virtual_drives()
        self.assertEqual(vds, [VirtualDrive("wwn-0x6d0946606ad2c40028b8f5390c3ac2e9", "SSD")])
        self.assertEqual(datasource.queries_completed, 1)

    @mock.patch('subprocess.run')
    def test_collect_reports_controller_failure(self, mock_run):
        document = json.loads(json.dumps(CAPTURE))
        document["Controllers"][0]["Command Status"]["Status"] = "Failure"
        document["Controllers"][0]["Command Status"]["Description"] = "Un-supported command"
        mock_run.return_value = completed(stdout=json.dumps(document).encode())

        with self.assertRaises(ControllerError) as ctx:
            StorcliDataSource().collect_virtual_drives()
        self.assertEqual(str(ctx.exception), "Un-supported command")

    def test_is_available(self):
        self.assertFalse(StorcliDataSource({'storcli_path': '/nonexistent/storcli64'}).is_available())


class TestJSONReplayDataSource(unittest.TestCase):
    """Test cases for replaying a saved capture."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        self.capture_path = os.path.join(self.temp_dir.name, "storcli.json")
        with open(self.capture_path, 'w') as f:
            json.dump(CAPTURE, f)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_replay(self):
        datasource = JSONReplayDataSource({'from_json': self.capture_path})
        vds = datasource.collect_virtual_drives()
        self.assertEqual(len(vds), 1)
        self.assertEqual(vds[0].media_type, "SSD")

    def test_missing_file(self):
        datasource = JSONReplayDataSource({'from_json': os.path.join(self.temp_dir.name, "nope.json")})
        with self.assertRaises(ExecutionError):
            datasource.query()

    def test_not_configured(self):
        with self.assertRaises(ExecutionError):
            JSONReplayDataSource().query()


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
