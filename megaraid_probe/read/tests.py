"""
Tests for the storcli response decoder, drive extractor and devlink discovery.
"""
import json
import logging
import unittest

from .response_decoder import decode_response, check_status
from .drive_extractor import (
    extract_virtual_drives,
    extract_all,
    decode_physical_drives,
    decode_virtual_drive_properties,
)
from .devlinks import group_links, discover_block_devices
from ..errors import ControllerError, DecodeError, MalformedResponseError
from ..schema.blockdevice import BY_ID_LINK, BY_PATH_LINK
from ..schema.models import PhysicalDrive, VirtualDrive


def make_response_data(vds):
    """Build a "Response Data" mapping from (index, naa_id, [med, ...]) tuples."""
    data = {
        "Virtual Drives": 1,
        "Physical Drives": 2,
    }
    for index, naa_id, meds in vds:
        data[f"VD{index} Properties"] = {
            "Strip Size": "256 KB",
            "OS Drive Name": f"/dev/sd{chr(ord('a') + index)}",
            "SCSI NAA Id": naa_id,
        }
        data[f"PDs for VD {index}"] = [
            {"EID:Slt": f"252:{slot}", "DID": slot, "State": "Onln", "Med": med, "Intf": "SATA"}
            for slot, med in enumerate(meds)
        ]
        data[f"/c0/v{index}"] = [{"DG/VD": f"0/{index}", "TYPE": "RAID1", "State": "Optl"}]
    return data


def make_document(*controllers):
    """Build a storcli document from (status, description, response_data) tuples."""
    return {
        "Controllers": [
            {
                "Command Status": {
                    "CLI Version": "007.1705.0000.0000 Mar 31, 2021",
                    "Controller": i,
                    "Status": status,
                    "Description": description,
                },
                "Response Data": response_data,
            }
            for i, (status, description, response_data) in enumerate(controllers)
        ]
    }


class TestResponseDecoder(unittest.TestCase):
    """Test cases for decode_response and check_status."""

    def test_decode_controllers(self):
        raw = json.dumps(make_document(
            ("Success", "None", make_response_data([(0, "6a41aa", ["HDD"])])),
            ("Success", "None", {}),
        )).encode()
        controllers = decode_response(raw)
        self.assertEqual(len(controllers), 2)
        self.assertEqual(controllers[0].command_status.controller, 0)
        self.assertEqual(controllers[1].command_status.controller, 1)
        self.assertTrue(controllers[0].command_status.is_success())
        self.assertIn("VD0 Properties", controllers[0].response_data)

    def test_missing_response_data_defaults_to_empty(self):
        raw = json.dumps({"Controllers": [{"Command Status": {"Status": "Success"}}]})
        controllers = decode_response(raw)
        self.assertEqual(controllers[0].response_data, {})

    def test_invalid_json(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b"storcli: command not recognised")

    def test_top_level_not_object(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b"[]")

    def test_controllers_missing(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b'{"Controller": []}')

    def test_controllers_not_list(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b'{"Controllers": {"Command Status": {}}}')

    def test_entry_without_command_status(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b'{"Controllers": [{"Response Data": {}}]}')

    def test_status_field_wrong_type(self):
        with self.assertRaises(MalformedResponseError):
            decode_response(b'{"Controllers": [{"Command Status": {"Status": 1}}]}')

    def test_check_status_failure_keeps_description(self):
        raw = json.dumps(make_document(("Failure", "Un-supported command", {})))
        controller = decode_response(raw)[0]
        with self.assertRaises(ControllerError) as ctx:
            check_status(controller)
        self.assertEqual(str(ctx.exception), "Un-supported command")
        self.assertEqual(ctx.exception.description, "Un-supported command")

    def test_check_status_is_case_sensitive(self):
        raw = json.dumps(make_document(("success", "lower case", {})))
        with self.assertRaises(ControllerError):
            check_status(decode_response(raw)[0])


class TestDriveExtractor(unittest.TestCase):
    """Test cases for virtual drive extraction."""

    def test_contiguous_indices(self):
        data = make_response_data([
            (0, "6a416e7a06f9600027d34e94a257db13", ["HDD", "HDD"]),
            (1, "6A416E7A06F9600027D34E94A257DB14", ["SSD", "SSD"]),
            (2, "6a416e7a06f9600027d34e94a257db15", ["HDD"]),
        ])
        vds = extract_virtual_drives(data)
        self.assertEqual(vds, [
            VirtualDrive("wwn-0x6a416e7a06f9600027d34e94a257db13", "HDD"),
            VirtualDrive("wwn-0x6A416E7A06F9600027D34E94A257DB14", "SSD"),
            VirtualDrive("wwn-0x6a416e7a06f9600027d34e94a257db15", "HDD"),
        ])

    def test_first_physical_drive_sets_media_type(self):
        data = make_response_data([(0, "abc", ["SSD", "HDD", "HDD"])])
        self.assertEqual(extract_virtual_drives(data)[0].media_type, "SSD")

    def test_stops_at_first_gap(self):
        data = make_response_data([
            (0, "aa", ["HDD"]),
            (1, "bb", ["SSD"]),
            (3, "dd", ["SSD"]),
        ])
        vds = extract_virtual_drives(data)
        self.assertEqual([vd.identifier for vd in vds], ["wwn-0xaa", "wwn-0xbb"])

    def test_stops_when_only_one_key_present(self):
        data = make_response_data([(0, "aa", ["HDD"]), (1, "bb", ["SSD"])])
        del data["PDs for VD 1"]
        self.assertEqual(len(extract_virtual_drives(data)), 1)

        data = make_response_data([(0, "aa", ["HDD"]), (1, "bb", ["SSD"])])
        del data["VD0 Properties"]
        self.assertEqual(extract_virtual_drives(data), [])

    def test_empty_response_data(self):
        self.assertEqual(extract_virtual_drives({}), [])

    def test_unknown_keys_ignored(self):
        data = make_response_data([(0, "aa", ["HDD"])])
        data["VD0 Properties"]["Some Future Field"] = {"nested": [1, 2]}
        data["PDs for VD 0"][0]["Another Field"] = None
        self.assertEqual(extract_virtual_drives(data), [VirtualDrive("wwn-0xaa", "HDD")])

    def test_physical_drives_not_a_list(self):
        data = make_response_data([(0, "aa", ["HDD"])])
        data["PDs for VD 0"] = {"Med": "HDD"}
        with self.assertRaises(DecodeError):
            extract_virtual_drives(data)

    def test_physical_drive_entry_not_an_object(self):
        with self.assertRaises(DecodeError):
            decode_physical_drives(["HDD"])

    def test_properties_not_an_object(self):
        with self.assertRaises(DecodeError):
            decode_virtual_drive_properties(["6a41"])

    def test_naa_id_wrong_type(self):
        with self.assertRaises(DecodeError):
            decode_virtual_drive_properties({"SCSI NAA Id": 1234})

    def test_empty_physical_drive_list(self):
        data = make_response_data([(0, "aa", [])])
        with self.assertRaises(DecodeError):
            extract_virtual_drives(data)

    def test_missing_naa_id_gives_bare_prefix(self):
        data = make_response_data([(0, "aa", ["HDD"])])
        del data["VD0 Properties"]["SCSI NAA Id"]
        self.assertEqual(extract_virtual_drives(data)[0].identifier, "wwn-0x")

    def test_keys_match_ignoring_case(self):
        self.assertEqual(PhysicalDrive.from_api_response({"MED": "SSD"}).med, "SSD")
        data = make_response_data([(0, "aa", ["HDD"])])
        data["VD0 Properties"] = {"scsi naa id": "aa"}
        data["PDs for VD 0"] = [{"med": "SSD"}]
        self.assertEqual(extract_virtual_drives(data), [VirtualDrive("wwn-0xaa", "SSD")])

    def test_exact_key_preferred_over_case_variant(self):
        self.assertEqual(PhysicalDrive.from_api_response({"MED": "HDD", "Med": "SSD"}).med, "SSD")

    def test_null_properties_decode_to_zero_values(self):
        data = make_response_data([(0, "aa", ["HDD"])])
        data["VD0 Properties"] = None
        self.assertEqual(extract_virtual_drives(data), [VirtualDrive("wwn-0x", "HDD")])

    def test_null_physical_drive_entry_has_empty_media(self):
        data = make_response_data([(0, "aa", ["HDD"])])
        data["PDs for VD 0"] = [None]
        self.assertEqual(extract_virtual_drives(data)[0].media_type, "")

    def test_extract_all_across_controllers(self):
        raw = json.dumps(make_document(
            ("Success", "None", make_response_data([(0, "aa", ["HDD"])])),
            ("Success", "None", make_response_data([(0, "bb", ["SSD"]), (1, "cc", ["HDD"])])),
        ))
        vds = extract_all(decode_response(raw))
        self.assertEqual([vd.identifier for vd in vds], ["wwn-0xaa", "wwn-0xbb", "wwn-0xcc"])

    def test_extract_all_aborts_on_failed_controller(self):
        raw = json.dumps(make_document(
            ("Success", "None", make_response_data([(0, "aa", ["HDD"])])),
            ("Failure", "Controller 1 not found", {}),
        ))
        with self.assertRaises(ControllerError) as ctx:
            extract_all(decode_response(raw))
        self.assertEqual(str(ctx.exception), "Controller 1 not found")

    def test_extraction_is_repeatable(self):
        raw = json.dumps(make_document(
            ("Success", "None", make_response_data([(0, "aa", ["HDD"]), (1, "bb", ["SSD"])])),
        )).encode()
        self.assertEqual(extract_all(decode_response(raw)), extract_all(decode_response(raw)))


class FakeUdevDevice:
    """Stand-in for pyudev.Device exposing the attributes discovery reads."""

    def __init__(self, device_node, links=(), devtype='disk'):
        self.device_node = device_node
        self._links = list(links)
        self.properties = {'DEVTYPE': devtype, 'DEVLINKS': ' '.join(self._links)}

    @property
    def device_links(self):
        return iter(self._links)


class FakeUdevContext:
    """Stand-in for pyudev.Context filtering on udev properties like list_devices."""

    def __init__(self, devices):
        self.devices = devices

    def list_devices(self, subsystem=None, **properties):
        return [d for d in self.devices
                if all(d.properties.get(k) == v for k, v in properties.items())]


class TestDevlinks(unittest.TestCase):
    """Test cases for udev link discovery."""

    def setUp(self):
        self.context = FakeUdevContext([
            FakeUdevDevice('/dev/sdb', ['/dev/disk/by-id/wwn-0x6a41bb']),
            FakeUdevDevice('/dev/sda', [
                '/dev/disk/by-path/pci-0000:18:00.0-scsi-0:2:0:0',
                '/dev/disk/by-id/wwn-0x6a41aa',
                '/dev/disk/by-id/scsi-36a41aa',
            ]),
            FakeUdevDevice('/dev/sda1', ['/dev/disk/by-id/wwn-0x6a41aa-part1'], devtype='partition'),
            FakeUdevDevice(None),
        ])

    def test_group_links_by_kind(self):
        grouped = group_links([
            '/dev/disk/by-id/wwn-0x6a41aa',
            '/dev/disk/by-path/pci-0000:18:00.0-scsi-0:2:0:0',
            '/dev/disk/by-id/scsi-36a41aa',
            '/dev/mapper/vg0-root',
        ])
        self.assertEqual(grouped, {
            BY_ID_LINK: ['/dev/disk/by-id/scsi-36a41aa', '/dev/disk/by-id/wwn-0x6a41aa'],
            BY_PATH_LINK: ['/dev/disk/by-path/pci-0000:18:00.0-scsi-0:2:0:0'],
        })

    def test_group_links_custom_root(self):
        grouped = group_links(['/srv/disk/by-id/wwn-0x1', '/dev/disk/by-id/wwn-0x2'], dev_root='/srv/disk')
        self.assertEqual(grouped, {BY_ID_LINK: ['/srv/disk/by-id/wwn-0x1']})

    def test_discover_skips_partitions(self):
        devices = discover_block_devices(self.context)
        self.assertEqual([d.dev_path for d in devices], ['/dev/sda', '/dev/sdb'])
        self.assertEqual([link.kind for link in devices[0].dev_links], [BY_ID_LINK, BY_PATH_LINK])
        self.assertEqual(devices[0].dev_links[0].links,
                         ['/dev/disk/by-id/scsi-36a41aa', '/dev/disk/by-id/wwn-0x6a41aa'])

    def test_discover_includes_partitions_on_request(self):
        devices = discover_block_devices(self.context, include_partitions=True)
        self.assertEqual([d.dev_path for d in devices], ['/dev/sda', '/dev/sda1', '/dev/sdb'])

    def test_discover_requested_devices(self):
        devices = discover_block_devices(self.context, devices=['/dev/disk/by-id/wwn-0x6a41bb', '/dev/sda'])
        self.assertEqual([d.dev_path for d in devices], ['/dev/sdb', '/dev/sda'])

    def test_discover_requested_device_unknown_to_udev(self):
        with self.assertLogs('megaraid_probe.read.devlinks', level='WARNING'):
            devices = discover_block_devices(self.context, devices=['/nonexistent/sdz'])
        self.assertEqual(devices[0].dev_path, '/nonexistent/sdz')
        self.assertEqual(devices[0].dev_links, [])

    def test_no_devices(self):
        self.assertEqual(discover_block_devices(FakeUdevContext([])), [])

if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
