"""
Tests for MegaRaidProbe classification.
"""
import json
import logging
import unittest

from .megaraid import MegaRaidProbe
from ..cache.inventory_cache import SweepInventoryCache
from ..core.config import ProbeConfig
from ..datasources.base import DataSource
from ..errors import ExecutionError
from ..schema.blockdevice import BlockDevice, BY_ID_LINK, BY_PATH_LINK
from ..schema.models import ClassificationResult


def storcli_document(vds, status="Success", description="None"):
    """Single-controller storcli document from (naa_id, med) pairs."""
    response_data = {}
    for index, (naa_id, med) in enumerate(vds):
        response_data[f"VD{index} Properties"] = {"SCSI NAA Id": naa_id}
        response_data[f"PDs for VD {index}"] = [{"Med": med}, {"Med": med}]
    return json.dumps({
        "Controllers": [{
            "Command Status": {"Controller": 0, "Status": status, "Description": description},
            "Response Data": response_data,
        }]
    }).encode()


class FakeDataSource(DataSource):
    """DataSource returning a canned document and counting queries."""

    def __init__(self, payload=None, error=None):
        super().__init__()
        self.payload = payload
        self.error = error
        self.calls = 0

    def query(self) -> bytes:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


def sda_with_links(*by_id_names):
    links = {BY_PATH_LINK: ["/dev/disk/by-path/pci-0000:18:00.0-scsi-0:2:0:0"]}
    if by_id_names:
        links[BY_ID_LINK] = [f"/dev/disk/by-id/{name}" for name in by_id_names]
    return BlockDevice.from_path("/dev/sda", links)


class TestMegaRaidProbe(unittest.TestCase):
    """Test cases for fill_block_device_details."""

    def setUp(self):
        self.config = ProbeConfig()
        self.datasource = FakeDataSource(storcli_document([
            ("6a416e7a06f9600027d34e94a257db13", "HDD"),
            ("ABC123", "SSD"),
        ]))
        self.probe = MegaRaidProbe(self.config, self.datasource)

    def test_match_sets_drive_type(self):
        device = sda_with_links("scsi-3abc123", "wwn-0xABC123")
        result = self.probe.fill_block_device_details(device)

        self.assertEqual(result.status, ClassificationResult.MATCHED)
        self.assertEqual(result.drive_type, "SSD")
        self.assertEqual(device.device_attributes.drive_type, "SSD")
        self.assertEqual(self.datasource.calls, 1)

    def test_match_compares_link_basename(self):
        device = BlockDevice.from_path("/dev/sdb", {
            BY_ID_LINK: ["/some/other/root/wwn-0x6a416e7a06f9600027d34e94a257db13"],
        })
        result = self.probe.fill_block_device_details(device)
        self.assertEqual(result.drive_type, "HDD")

    def test_match_is_case_sensitive(self):
        device = sda_with_links("wwn-0xabc123")
        result = self.probe.fill_block_device_details(device)
        self.assertEqual(result.status, ClassificationResult.NO_MATCH)
        self.assertEqual(device.device_attributes.drive_type, "")

    def test_no_by_id_links_skips_without_query(self):
        device = sda_with_links()
        with self.assertLogs('megaraid_probe.probe.MegaRaidProbe', level='ERROR') as logs:
            result = self.probe.fill_block_device_details(device)

        self.assertEqual(result.status, ClassificationResult.SKIPPED)
        self.assertEqual(self.datasource.calls, 0)
        self.assertEqual(device.device_attributes.drive_type, "")
        self.assertIn("/dev/sda byids not found", logs.output[0])

    def test_empty_by_id_group_skips(self):
        device = BlockDevice.from_path("/dev/sda", {BY_ID_LINK: []})
        result = self.probe.fill_block_device_details(device)
        self.assertEqual(result.status, ClassificationResult.SKIPPED)
        self.assertEqual(self.datasource.calls, 0)

    def test_first_matching_virtual_drive_wins(self):
        datasource = FakeDataSource(storcli_document([
            ("DDDD0001", "SSD"),
            ("DDDD0001", "HDD"),
        ]))
        probe = MegaRaidProbe(self.config, datasource)
        device = sda_with_links("wwn-0xDDDD0001")

        result = probe.fill_block_device_details(device)
        self.assertEqual(result.drive_type, "SSD")
        self.assertEqual(device.device_attributes.drive_type, "SSD")

    def test_no_match(self):
        device = sda_with_links("wwn-0xFFFF")
        with self.assertLogs('megaraid_probe.probe.MegaRaidProbe', level='WARNING') as logs:
            result = self.probe.fill_block_device_details(device)
        self.assertIn("/dev/sda matched none of 2 virtual drives", logs.output[0])
        self.assertEqual(result.status, ClassificationResult.NO_MATCH)
        self.assertEqual(device.device_attributes.drive_type, "")

    def test_no_virtual_drives(self):
        probe = MegaRaidProbe(self.config, FakeDataSource(storcli_document([])))
        result = probe.fill_block_device_details(sda_with_links("wwn-0xABC123"))
        self.assertEqual(result.status, ClassificationResult.NO_MATCH)

    def test_execution_error_is_reported(self):
        datasource = FakeDataSource(error=ExecutionError("storcli not found", stderr="No such file"))
        probe = MegaRaidProbe(self.config, datasource)
        device = sda_with_links("wwn-0xABC123")

        with self.assertLogs('megaraid_probe.probe.MegaRaidProbe', level='ERROR') as logs:
            result = probe.fill_block_device_details(device)

        self.assertEqual(result.status, ClassificationResult.ERROR)
        self.assertEqual(result.error_message, "storcli not found")
        self.assertEqual(device.device_attributes.drive_type, "")
        self.assertIn("/dev/sda err: storcli not found", logs.output[0])

    def test_controller_failure_is_reported(self):
        datasource = FakeDataSource(storcli_document([("ABC123", "SSD")], status="Failure",
                                                     description="Controller 0 not found"))
        probe = MegaRaidProbe(self.config, datasource)
        device = sda_with_links("wwn-0xABC123")

        result = probe.fill_block_device_details(device)
        self.assertEqual(result.status, ClassificationResult.ERROR)
        self.assertEqual(result.error_message, "Controller 0 not found")
        self.assertEqual(device.device_attributes.drive_type, "")

    def test_malformed_output_is_reported(self):
        probe = MegaRaidProbe(self.config, FakeDataSource(b"not json"))
        result = probe.fill_block_device_details(sda_with_links("wwn-0xABC123"))
        self.assertEqual(result.status, ClassificationResult.ERROR)

    def test_disabled_probe_skips(self):
        probe = MegaRaidProbe(ProbeConfig(enabled=False), self.datasource)
        device = sda_with_links("wwn-0xABC123")
        result = probe.fill_block_device_details(device)
        self.assertEqual(result.status, ClassificationResult.SKIPPED)
        self.assertEqual(self.datasource.calls, 0)

    def test_each_device_queries_without_cache(self):
        for _ in range(3):
            self.probe.fill_block_device_details(sda_with_links("wwn-0xABC123"))
        self.assertEqual(self.datasource.calls, 3)

    def test_cache_shares_one_query_per_sweep(self):
        cache = SweepInventoryCache()
        probe = MegaRaidProbe(self.config, self.datasource, cache=cache)

        cache.start_sweep("sweep-1")
        for _ in range(3):
            probe.fill_block_device_details(sda_with_links("wwn-0xABC123"))
        self.assertEqual(self.datasource.calls, 1)

        cache.start_sweep("sweep-2")
        probe.fill_block_device_details(sda_with_links("wwn-0xABC123"))
        self.assertEqual(self.datasource.calls, 2)

    def test_identity(self):
        self.assertEqual(self.probe.name, "mega raid probe")
        self.assertEqual(self.probe.priority, 2)
        self.assertTrue(self.probe.enabled)


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
