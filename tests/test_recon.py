"""
Tests for local reconnaissance generators.
"""

from __future__ import annotations

import random
import re

import pytest

from roguecode.models import TargetKind
from roguecode.services.recon import (
    COMMON_PORTS,
    SECRET_MESSAGE,
    VULNERABILITIES,
    ReconService,
    generate_device_id,
    generate_ip,
    generate_mac,
    generate_payload_id,
)


@pytest.fixture
def recon():
    return ReconService(rng=random.Random(5))


class TestIdentifiers:
    """Tests for address and id generators."""

    def test_ip_shape(self) -> None:
        rng = random.Random(1)
        for _ in range(50):
            octets = [int(o) for o in generate_ip(rng).split(".")]
            assert len(octets) == 4
            assert all(0 <= o <= 255 for o in octets)

    def test_ip_in_subnet(self) -> None:
        assert generate_ip(random.Random(1), subnet="192.168.4").startswith("192.168.4.")

    def test_mac_shape(self) -> None:
        assert re.fullmatch(r"([0-9A-F]{2}:){5}[0-9A-F]{2}", generate_mac(random.Random(2)))

    def test_device_id(self) -> None:
        device_id = generate_device_id(TargetKind.WORKSTATION, random.Random(3))
        assert re.fullmatch(r"WKS-[0-9A-F]{12}", device_id)

    def test_payload_id(self) -> None:
        assert re.fullmatch(r"0x[0-9a-f]{8}", generate_payload_id(random.Random(4)))


class TestScan:
    """Tests for ReconService.scan."""

    def test_basic_report(self, recon: ReconService) -> None:
        report = recon.scan("alpha")
        assert report.ip.startswith("192.168.")
        assert report.status in ("Online", "Offline")
        assert 1 <= len(report.open_ports) <= 5
        assert set(report.open_ports) <= set(COMMON_PORTS)
        assert report.open_ports == sorted(report.open_ports)
        assert report.vulnerabilities == []

        text = report.format()
        assert text.startswith("Scan results for alpha:")
        assert "Services:" not in text
        assert "ulnerabilities" not in text

    def test_deep_lists_services(self, recon: ReconService) -> None:
        report = recon.scan("alpha", deep=True)
        text = report.format()
        assert "Services:" in text
        for port in report.open_ports:
            assert f"{port}/tcp  open  {COMMON_PORTS[port]}" in text

    def test_vuln_assessment(self) -> None:
        recon = ReconService(rng=random.Random(8))
        for _ in range(30):
            report = recon.scan("beta", vulns=True)
            assert len(report.vulnerabilities) <= 2
            assert set(report.vulnerabilities) <= set(VULNERABILITIES)
            text = report.format()
            if report.vulnerabilities:
                assert "Vulnerabilities detected:" in text
            else:
                assert "No vulnerabilities detected." in text


class TestIntel:
    """Tests for trace, logs, download, decrypt and analyze."""

    def test_trace(self, recon: ReconService) -> None:
        profile = recon.trace("alpha")
        assert "@" in profile.email
        assert 0 <= profile.last_active_hours <= 23
        assert f"alpha → {profile.relay_ip} → {profile.ip}" in profile.format()

    def test_logs_sorted(self, recon: ReconService) -> None:
        lines = recon.system_logs(count=12)
        assert len(lines) == 12
        stamps = [line[1:20] for line in lines]
        assert stamps == sorted(stamps)

    def test_default_log_count(self, recon: ReconService) -> None:
        assert 3 <= len(recon.system_logs()) <= 7

    def test_download_summary(self, recon: ReconService) -> None:
        text = recon.download_summary("payroll.db")
        assert text.startswith("Downloading payroll.db...")
        assert text.endswith("Download complete. File saved to local storage.")

    def test_decrypt(self, recon: ReconService) -> None:
        cipher, plain = recon.decrypt()
        assert plain == SECRET_MESSAGE
        assert len(cipher) == len(plain)

    def test_analyze(self, recon: ReconService) -> None:
        text = recon.analyze("dropper.exe")
        assert text.startswith("Analyzing dropper.exe...")
        assert re.search(r"Hash: [0-9a-f]{32}", text)
