"""
Tests for configuration, settings loading, the sweep runner and the CLI.
"""
import argparse
import json
import logging
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from .config import ProbeConfig, DEFAULT_PROBE_NAME
from .writer_config import WriterConfig
from .logging_config import LoggingConfigurator
from .runner import ProbeRunner
from ..config import Settings
from ..datasources.base import DataSource
from ..datasources.json_replay import JSONReplayDataSource
from ..datasources.storcli import StorcliDataSource, DEFAULT_STORCLI_PATH
from ..main import main, create_argument_parser
from ..read.tests import FakeUdevContext, FakeUdevDevice
from ..schema.blockdevice import BlockDevice, BY_ID_LINK
from ..schema.models import ClassificationResult
from ..utils import check_truthy, naa_id_to_wwn
from ..writer.base import Writer

CAPTURE = {
    "Controllers": [{
        "Command Status": {"Controller": 0, "Status": "Success", "Description": "None"},
        "Response Data": {
            "VD0 Properties": {"SCSI NAA Id": "600605b00d3a1c5028b8f5390c3ac2e9"},
            "PDs for VD 0": [{"Med": "HDD"}, {"Med": "HDD"}],
            "VD1 Properties": {"SCSI NAA Id": "600605b00d3a1c5028b8f5390c3ac2ea"},
            "PDs for VD 1": [{"Med": "SSD"}, {"Med": "SSD"}],
        },
    }]
}


class CountingDataSource(DataSource):
    def __init__(self, payload):
        super().__init__()
        self.payload = payload

    def query(self) -> bytes:
        return self.payload


class RecordingWriter(Writer):
    def __init__(self):
        self.calls = []

    def write(self, results, sweep_iteration=1) -> bool:
        self.calls.append((list(results), sweep_iteration))
        return True


def device(dev_path, *wwn_names):
    return BlockDevice.from_path(dev_path, {BY_ID_LINK: [f"/dev/disk/by-id/{n}" for n in wwn_names]})


class TestUtils(unittest.TestCase):

    def test_naa_id_to_wwn(self):
        self.assertEqual(naa_id_to_wwn("6a41"), "wwn-0x6a41")
        self.assertEqual(naa_id_to_wwn(""), "wwn-0x")

    def test_check_truthy(self):
        for value in (True, "true", "True", "YES", "1", "on", "enabled"):
            self.assertTrue(check_truthy(value), value)
        for value in (False, None, "", "false", "0", "off", "maybe"):
            self.assertFalse(check_truthy(value), value)


class TestProbeConfig(unittest.TestCase):
    """Test cases for ProbeConfig."""

    def test_defaults(self):
        config = ProbeConfig()
        self.assertEqual(config.name, DEFAULT_PROBE_NAME)
        self.assertEqual(config.priority, 2)
        self.assertEqual(config.storcli_path, DEFAULT_STORCLI_PATH)
        self.assertFalse(config.cache_per_sweep)
        self.assertFalse(config.use_json_replay)

    def test_validation(self):
        with self.assertRaises(ValueError):
            ProbeConfig(storcli_path="")
        with self.assertRaises(ValueError):
            ProbeConfig(priority="2")
        with self.assertRaises(ValueError):
            ProbeConfig(interval_time=-1)
        with self.assertRaises(ValueError):
            ProbeConfig(log_level="TRACE")
        with self.assertRaises(ValueError):
            ProbeConfig(log_level=10)

    def test_log_level_normalized(self):
        self.assertEqual(ProbeConfig(log_level="debug").log_level, "DEBUG")

    def test_from_args(self):
        args = create_argument_parser().parse_args([
            '--storcli', '/usr/sbin/storcli64', '--device', '/dev/sda', '--device', '/dev/sdb',
            '--cache-per-sweep', '--intervalTime', '60', '--maxIterations', '5',
        ])
        config = ProbeConfig.from_args(args)
        self.assertEqual(config.storcli_path, '/usr/sbin/storcli64')
        self.assertEqual(config.devices, ['/dev/sda', '/dev/sdb'])
        self.assertTrue(config.cache_per_sweep)
        self.assertEqual(config.interval_time, 60)
        self.assertEqual(config.max_iterations, 5)
        self.assertEqual(config.log_level, 'INFO')

    def test_from_args_falls_back_to_settings(self):
        settings = Settings(from_env=False)
        settings.apply({
            'storcli_path': '/opt/lsi/storcli',
            'log_level': 'WARNING',
            'probeconfigs': [{'key': 'mega-raid-probe', 'name': 'raid', 'state': 'false'}],
        })
        args = create_argument_parser().parse_args(['--log-level', 'ERROR'])
        config = ProbeConfig.from_args(args, settings)
        self.assertEqual(config.storcli_path, '/opt/lsi/storcli')
        self.assertEqual(config.log_level, 'ERROR')
        self.assertEqual(config.name, 'raid')
        self.assertFalse(config.enabled)


class TestWriterConfig(unittest.TestCase):

    def test_validation(self):
        with self.assertRaises(ValueError):
            WriterConfig(output_format='influxdb')
        with self.assertRaises(ValueError):
            WriterConfig(prometheus_port=0)

    def test_from_args(self):
        args = argparse.Namespace(output='both', json_output='/tmp/out.json', prometheus_port=9105)
        config = WriterConfig.from_args(args)
        self.assertEqual(config.to_dict(), {
            'output_format': 'both',
            'json_output': '/tmp/out.json',
            'prometheus_port': 9105,
        })


class TestSettings(unittest.TestCase):
    """Test cases for file and environment settings."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_file(self, name, content):
        path = os.path.join(self.temp_dir.name, name)
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_yaml_probeconfigs(self):
        path = self.write_file('probe.yaml', """
storcli_path: /usr/local/sbin/storcli64
cache_per_sweep: yes
probeconfigs:
  - key: smartprobe
    name: smart probe
    state: true
  - key: mega-raid-probe
    name: mega raid probe
    state: "True"
""")
        settings = Settings(config_file=path, from_env=False)
        self.assertEqual(settings.storcli_path, '/usr/local/sbin/storcli64')
        self.assertTrue(settings.cache_per_sweep)
        self.assertEqual(settings.probe_name, 'mega raid probe')
        self.assertTrue(settings.probe_state)

    def test_state_not_truthy_disables(self):
        path = self.write_file('probe.yml', """
probeconfigs:
  - key: mega-raid-probe
    state: "off"
""")
        settings = Settings(config_file=path, from_env=False)
        self.assertFalse(settings.probe_state)
        self.assertFalse(settings.to_probe_kwargs()['enabled'])

    def test_json_file(self):
        path = self.write_file('probe.json', json.dumps({'dev_root': '/tmp/disk'}))
        settings = Settings(config_file=path, from_env=False)
        self.assertEqual(settings.to_probe_kwargs(), {'dev_root': '/tmp/disk'})

    def test_missing_and_invalid_files(self):
        self.assertEqual(Settings(config_file='/nonexistent.yaml', from_env=False).to_probe_kwargs(), {})
        path = self.write_file('bad.yaml', "probeconfigs: [unclosed")
        self.assertEqual(Settings(config_file=path, from_env=False).to_probe_kwargs(), {})
        path = self.write_file('list.yaml', "- a\n- b\n")
        self.assertEqual(Settings(config_file=path, from_env=False).to_probe_kwargs(), {})

    def test_environment_overrides_file(self):
        path = self.write_file('probe.yaml', "storcli_path: /from/file\n")
        env = {'MEGARAID_STORCLI_PATH': '/from/env', 'MEGARAID_PROBE_STATE': 'yes'}
        with mock.patch.dict(os.environ, env):
            settings = Settings(config_file=path)
        self.assertEqual(settings.storcli_path, '/from/env')
        self.assertTrue(settings.probe_state)


class TestLoggingConfigurator(unittest.TestCase):

    def test_invalid_level(self):
        with self.assertRaises(ValueError):
            LoggingConfigurator.setup_logging(log_level='LOUD')

    def test_get_logger(self):
        self.assertEqual(LoggingConfigurator.get_logger('megaraid_probe.x').name, 'megaraid_probe.x')


class TestProbeRunner(unittest.TestCase):
    """Test cases for sweep orchestration."""

    def setUp(self):
        self.payload = json.dumps(CAPTURE).encode()
        self.writer = RecordingWriter()
        self.devices = [
            device('/dev/sda', 'wwn-0x600605b00d3a1c5028b8f5390c3ac2e9'),
            device('/dev/sdb', 'wwn-0x600605b00d3a1c5028b8f5390c3ac2ea'),
            device('/dev/sdc', 'wwn-0x5000c500a1b2c3d4'),
            device('/dev/sdd'),
        ]
        self.udev_context = FakeUdevContext([
            FakeUdevDevice('/dev/sdb', ['/dev/disk/by-id/wwn-0x600605b00d3a1c5028b8f5390c3ac2ea']),
        ])

    def test_datasource_selection(self):
        runner = ProbeRunner(ProbeConfig())
        runner.initialize()
        self.assertIsInstance(runner.datasource, StorcliDataSource)

        runner = ProbeRunner(ProbeConfig(from_json='/tmp/capture.json'))
        runner.initialize()
        self.assertIsInstance(runner.datasource, JSONReplayDataSource)

    def test_missing_storcli_is_reported(self):
        runner = ProbeRunner(ProbeConfig(storcli_path='/nonexistent/storcli64'))
        with self.assertLogs('megaraid_probe.core.runner', level='WARNING') as logs:
            self.assertTrue(runner.initialize())
        self.assertIn('storcli not found or not executable at /nonexistent/storcli64', logs.output[0])

    def test_classify_before_initialize(self):
        with self.assertRaises(RuntimeError):
            ProbeRunner(ProbeConfig()).classify(self.devices)

    def test_disabled_probe(self):
        runner = ProbeRunner(ProbeConfig(enabled=False), datasource=CountingDataSource(self.payload))
        self.assertFalse(runner.initialize())

    def test_sweep_results(self):
        datasource = CountingDataSource(self.payload)
        runner = ProbeRunner(ProbeConfig(), writer=self.writer, datasource=datasource)
        runner.initialize()

        results = runner.run_sweep(self.devices)
        self.assertEqual([r.status for r in results], [
            ClassificationResult.MATCHED,
            ClassificationResult.MATCHED,
            ClassificationResult.NO_MATCH,
            ClassificationResult.SKIPPED,
        ])
        self.assertEqual(self.devices[0].device_attributes.drive_type, 'HDD')
        self.assertEqual(self.devices[1].device_attributes.drive_type, 'SSD')
        self.assertEqual(self.devices[2].device_attributes.drive_type, '')
        # One controller query per device that has by-id links
        self.assertEqual(datasource.queries_completed, 3)
        self.assertEqual(len(self.writer.calls), 1)
        self.assertEqual(self.writer.calls[0][1], 1)

    def test_sweep_cache(self):
        datasource = CountingDataSource(self.payload)
        runner = ProbeRunner(ProbeConfig(cache_per_sweep=True), datasource=datasource)
        runner.initialize()

        runner.run_sweep(self.devices)
        self.assertEqual(datasource.queries_completed, 1)
        runner.run_sweep(self.devices)
        self.assertEqual(datasource.queries_completed, 2)

    def test_unexpected_failure_is_isolated(self):
        runner = ProbeRunner(ProbeConfig(), datasource=CountingDataSource(self.payload))
        runner.initialize()
        with mock.patch.object(runner.probe, 'get_vd_infos', side_effect=[RuntimeError("boom"), []]):
            with self.assertLogs('megaraid_probe.core.runner', level='ERROR'):
                results = runner.classify(self.devices[:2])
        self.assertEqual(results[0].status, ClassificationResult.ERROR)
        self.assertEqual(results[0].error_message, "boom")
        self.assertEqual(results[1].status, ClassificationResult.NO_MATCH)

    @mock.patch('megaraid_probe.core.runner.time.sleep')
    def test_run_continuous(self, mock_sleep):
        config = ProbeConfig(interval_time=30, max_iterations=3)
        runner = ProbeRunner(config, writer=self.writer, datasource=CountingDataSource(self.payload),
                             udev_context=self.udev_context)
        runner.initialize()
        runner.run_continuous()

        self.assertEqual(runner.sweeps_completed, 3)
        self.assertEqual([c[1] for c in self.writer.calls], [1, 2, 3])
        self.assertEqual(mock_sleep.call_count, 2)
        mock_sleep.assert_called_with(30)

    def test_single_sweep_discovers_devices(self):
        runner = ProbeRunner(ProbeConfig(), writer=self.writer,
                             datasource=CountingDataSource(self.payload),
                             udev_context=self.udev_context)
        runner.initialize()
        runner.run_continuous()

        self.assertEqual(runner.sweeps_completed, 1)
        results = self.writer.calls[0][0]
        self.assertEqual([(r.dev_path, r.drive_type) for r in results], [('/dev/sdb', 'SSD')])


class TestMain(unittest.TestCase):
    """End to end run of the command line entry point on a replayed capture."""

    def setUp(self):
        self.temp_dir = TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.capture = root / 'capture.json'
        self.capture.write_text(json.dumps(CAPTURE))
        self.output = root / 'out' / 'results.json'
        self.udev_context = FakeUdevContext([
            FakeUdevDevice('/dev/sda', ['/dev/disk/by-id/wwn-0x600605b00d3a1c5028b8f5390c3ac2ea']),
        ])

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_config(self, content):
        path = Path(self.temp_dir.name) / 'probe.yaml'
        path.write_text(content)
        return str(path)

    def test_replay_to_json_file(self):
        with mock.patch('megaraid_probe.read.devlinks.pyudev.Context', return_value=self.udev_context):
            code = main([
                '--fromJson', str(self.capture),
                '--device', '/dev/sda',
                '--json-output', str(self.output),
                '--log-level', 'ERROR',
            ])
        self.assertEqual(code, 0)

        document = json.loads(self.output.read_text())
        self.assertEqual(document['sweep'], 1)
        self.assertEqual(document['results'], [{
            'dev_path': '/dev/sda',
            'status': 'matched',
            'drive_type': 'SSD',
            'error_message': None,
        }])

    def test_json_output_with_prometheus_rejected(self):
        with self.assertRaises(SystemExit):
            main(['--output', 'prometheus', '--json-output', str(self.output)])

    def test_non_string_log_level_in_config_rejected(self):
        config_file = self.write_config("log_level: 10\n")
        with self.assertRaises(SystemExit) as ctx:
            main(['--config', config_file, '--fromJson', str(self.capture)])
        self.assertEqual(ctx.exception.code, 2)

    def test_writer_closed_when_probe_disabled(self):
        config_file = self.write_config("probeconfigs:\n  - key: mega-raid-probe\n    state: false\n")
        writer = mock.Mock(spec=Writer)
        with mock.patch('megaraid_probe.main.WriterFactory.create_writer_from_config', return_value=writer):
            code = main(['--config', config_file, '--fromJson', str(self.capture), '--log-level', 'ERROR'])
        self.assertEqual(code, 1)
        writer.close.assert_called_once_with()
        writer.write.assert_not_called()

    def test_writer_closed_on_interrupt(self):
        writer = mock.Mock(spec=Writer)
        with mock.patch('megaraid_probe.main.WriterFactory.create_writer_from_config', return_value=writer), \
                mock.patch('megaraid_probe.main.ProbeRunner.run_continuous', side_effect=KeyboardInterrupt):
            code = main(['--fromJson', str(self.capture), '--log-level', 'ERROR'])
        self.assertEqual(code, 0)
        writer.close.assert_called_once_with()


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
