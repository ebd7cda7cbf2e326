import unittest

from payload_router.errors import NoDeviceError
from payload_router.intake.device_selector import (
    classify_device,
    describe_device,
    describe_devices,
    select_best,
    select_by_keyword,
    select_device,
)


def _devs(*names):
    return describe_devices((n, "") for n in names)


class ClassifyDeviceTests(unittest.TestCase):
    def test_virtual_keywords(self):
        for name in ("VMware Network Adapter VMnet8", "vEthernet (WSL)", "NordLynx WireGuard Tunnel",
                     "VirtualBox Host-Only", "Hyper-V Virtual Switch", "vnic0"):
            self.assertEqual(classify_device(name), "virtual", name)

    def test_npcap_loopback_is_more_specific_than_loopback(self):
        self.assertEqual(classify_device("\\Device\\NPF_Loopback", "Npcap Loopback Adapter"), "npcap-loopback")
        self.assertEqual(classify_device("lo", "Loopback"), "loopback")

    def test_loopback_wins_over_virtual(self):
        self.assertEqual(classify_device("Virtual Loopback"), "loopback")

    def test_physical_by_default(self):
        self.assertEqual(classify_device("eth0", "Intel(R) Ethernet Connection"), "physical")

    def test_name_and_description_are_combined(self):
        dev = describe_device("\\Device\\NPF_{1234}", "Oracle VirtualBox Adapter")
        self.assertEqual(dev.kind, "virtual")


class SelectDeviceTests(unittest.TestCase):
    def test_automatic_prefers_physical(self):
        devices = _devs("vmware adapter", "Intel NIC", "Npcap Loopback")
        self.assertEqual(select_device(devices).name, "Intel NIC")

    def test_keyword_is_case_insensitive_and_checks_description(self):
        devices = [
            describe_device("\\Device\\NPF_{A}", "Intel(R) Wi-Fi 6"),
            describe_device("\\Device\\NPF_{B}", "Realtek PCIe GbE"),
        ]
        self.assertEqual(select_device(devices, "REALTEK").name, "\\Device\\NPF_{B}")

    def test_keyword_can_pick_a_virtual_device(self):
        devices = _devs("Intel NIC", "vmware adapter")
        self.assertEqual(select_device(devices, "vmware").name, "vmware adapter")

    def test_keyword_without_match_falls_through(self):
        devices = _devs("vmware adapter", "Intel NIC")
        self.assertEqual(select_device(devices, "broadcom").name, "Intel NIC")

    def test_blank_keyword_is_ignored(self):
        self.assertIsNone(select_by_keyword(_devs("Intel NIC"), "   "))

    def test_npcap_loopback_before_generic_loopback(self):
        devices = _devs("vmware adapter", "Loopback Pseudo-Interface", "Npcap Loopback Adapter")
        self.assertEqual(select_device(devices).name, "Npcap Loopback Adapter")

    def test_generic_loopback_before_first_device(self):
        devices = _devs("vmware adapter", "lo Loopback")
        self.assertEqual(select_device(devices).name, "lo Loopback")

    def test_all_virtual_returns_first(self):
        devices = _devs("vmware adapter", "VirtualBox Host-Only")
        self.assertEqual(select_best(devices).name, "vmware adapter")

    def test_empty_list_raises(self):
        with self.assertRaises(NoDeviceError):
            select_device([])
        with self.assertRaises(NoDeviceError):
            select_device([], "intel")

    def test_enumeration_order_is_respected(self):
        devices = _devs("eth0", "eth1")
        self.assertEqual(select_device(devices).name, "eth0")


if __name__ == "__main__":
    unittest.main()
