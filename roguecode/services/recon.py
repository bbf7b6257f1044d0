"""
Local reconnaissance generators for RogueCode.

Produces the flavor data behind scan, trace, download, decrypt and
analyze: addresses, device ids, port listings, vulnerabilities, user
profiles and system logs. Used directly when no enrichment provider
is available, and always used for the structured target record.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from roguecode.models.target import DEVICE_PREFIXES, TargetKind

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

COMMON_PORTS: dict[int, str] = {
    21: "ftp",
    22: "ssh",
    23: "telnet",
    25: "smtp",
    53: "dns",
    80: "http",
    110: "pop3",
    143: "imap",
    443: "https",
    3306: "mysql",
    3389: "rdp",
    5432: "postgresql",
    8080: "http-proxy",
}

VULNERABILITIES = [
    "Outdated OpenSSL (CVE-2023-0286)",
    "SQL Injection in login form",
    "Cross-Site Scripting in search function",
    "Default credentials (admin/admin)",
    "Directory traversal vulnerability",
    "Remote code execution in file upload",
]

OPERATING_SYSTEMS = ["Linux 5.15", "Windows Server 2019", "FreeBSD 13.1", "Ubuntu 22.04"]

ONLINE_PROBABILITY = 0.8
MAX_OPEN_PORTS = 5
MAX_VULNERABILITIES = 2

GLITCH_CHARS = "!@#$%^&*()_+-=[]{}|;:,.<>?/\\~`"
SECRET_MESSAGE = "This is a secret message that has been encrypted."

_HEX = "0123456789abcdef"

# Trace profiles
_FIRST_NAMES = ["John", "Jane", "Alex", "Sarah", "Michael", "Emma", "David", "Olivia"]
_LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Miller", "Davis", "Garcia"]
_EMAIL_DOMAINS = ["gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "protonmail.com"]
_LOCATIONS = [
    "New York, USA",
    "London, UK",
    "Tokyo, Japan",
    "Sydney, Australia",
    "Berlin, Germany",
    "Paris, France",
]

# System logs
_LOG_USERS = ["admin", "system", "root", "service", "daemon", "www-data", "postgres"]
_LOG_PROCESSES = ["httpd", "nginx", "mysqld", "sshd", "cron", "systemd", "kernel", "firewall"]
_LOG_ACTIONS: dict[str, list[str]] = {
    "INFO": [
        "Service started",
        "Connection established",
        "User login successful",
        "Database query executed",
        "Scheduled task completed",
    ],
    "WARNING": [
        "High CPU usage detected",
        "Low disk space warning",
        "Connection timeout",
        "Certificate expiring soon",
    ],
    "ERROR": [
        "Connection refused",
        "Authentication failed",
        "Permission denied",
        "Memory allocation error",
    ],
    "SYSTEM": [
        "System startup completed",
        "Kernel module loaded",
        "System time synchronized",
        "System update available",
    ],
    "AUTH": [
        "User authentication attempt",
        "Session created",
        "Access token issued",
        "Privilege escalation",
    ],
    "NETWORK": [
        "Packet loss detected",
        "Firewall rule triggered",
        "VPN tunnel established",
        "Routing table updated",
    ],
    "SECURITY": [
        "Intrusion attempt detected",
        "Malicious IP blocked",
        "Brute force attempt",
        "Security policy violation",
    ],
}
_LOG_IPS = ["192.168.1.1", "10.0.0.1", "172.16.0.1", "203.0.113.42", "198.51.100.23"]
_LOG_PATHS = ["/var/log/syslog", "/etc/passwd", "/opt/app/config.json", "/root/.ssh/id_rsa"]

_FILE_TYPES = ["Executable", "Document", "Image", "Audio", "Video", "Archive"]
_THREAT_LEVELS = ["None", "Low", "Medium", "High", "Critical"]


# =============================================================================
# Identifier Generators
# =============================================================================


def generate_ip(rng: random.Random, subnet: str | None = None) -> str:
    """Random IPv4 address, optionally inside a /24 subnet prefix."""
    if subnet:
        return f"{subnet}.{rng.randint(1, 254)}"
    return (
        f"{rng.randint(1, 223)}.{rng.randint(0, 255)}."
        f"{rng.randint(0, 255)}.{rng.randint(1, 254)}"
    )


def generate_mac(rng: random.Random) -> str:
    return ":".join(f"{rng.randint(0, 255):02X}" for _ in range(6))


def generate_hex(rng: random.Random, length: int) -> str:
    return "".join(rng.choice(_HEX) for _ in range(length))


def generate_device_id(kind: TargetKind, rng: random.Random) -> str:
    """Device id such as ``WKS-1A2B3C4D5E6F``."""
    return f"{DEVICE_PREFIXES[kind]}-{generate_hex(rng, 12).upper()}"


def generate_payload_id(rng: random.Random) -> str:
    """Injection id such as ``0x1a2b3c4d``."""
    return f"0x{generate_hex(rng, 8)}"


def glitch_text(text: str, rng: random.Random, intensity: float = 0.3) -> str:
    """Replace characters with noise at the given rate."""
    return "".join(
        rng.choice(GLITCH_CHARS) if rng.random() < intensity else ch for ch in text
    )


# =============================================================================
# Result Models
# =============================================================================


class ScanReport(BaseModel):
    """Structured result of a local scan."""

    target: str
    ip: str
    mac: str
    status: str
    os: str
    open_ports: list[int] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    deep: bool = False
    checked_vulns: bool = False

    def format(self) -> str:
        """Render as terminal scan output."""
        lines = [
            f"Scan results for {self.target}:",
            f"IP: {self.ip}",
            f"MAC: {self.mac}",
            f"Status: {self.status}",
            f"OS: {self.os}",
            f"Open ports: {', '.join(str(p) for p in self.open_ports) or 'none'}",
        ]

        if self.deep:
            lines.append("")
            lines.append("Services:")
            for port in self.open_ports:
                lines.append(f"  {port}/tcp  open  {COMMON_PORTS.get(port, 'unknown')}")

        if self.checked_vulns:
            lines.append("")
            if self.vulnerabilities:
                lines.append("Vulnerabilities detected:")
                lines.extend(f"- {v}" for v in self.vulnerabilities)
            else:
                lines.append("No vulnerabilities detected.")

        return "\n".join(lines)


class TraceProfile(BaseModel):
    """A traced user and the hop that leads to them."""

    target: str
    name: str
    email: str
    ip: str
    relay_ip: str
    location: str
    last_active_hours: int

    def format(self) -> str:
        return (
            f"Trace results for {self.target}:\n\n"
            f"User Profile:\n"
            f"Name: {self.name}\n"
            f"Email: {self.email}\n"
            f"IP Address: {self.ip}\n"
            f"Location: {self.location}\n"
            f"Last Active: {self.last_active_hours} hours ago\n\n"
            f"Connection Map:\n"
            f"{self.target} → {self.relay_ip} → {self.ip}\n\n"
            f"Trace complete."
        )


# =============================================================================
# Recon Service
# =============================================================================


@dataclass
class ReconService:
    """Generates scan reports and other intel from a shared random source."""

    rng: random.Random = field(default_factory=random.Random)

    def scan(self, target: str, *, deep: bool = False, vulns: bool = False) -> ScanReport:
        """
        Build a scan report for a target.

        Args:
            target: Target name as typed by the player
            deep: Include a per-port service listing
            vulns: Run the vulnerability assessment
        """
        port_count = self.rng.randint(1, MAX_OPEN_PORTS)
        open_ports = sorted(self.rng.sample(list(COMMON_PORTS), port_count))

        vulnerabilities: list[str] = []
        if vulns:
            vulnerabilities = self.rng.sample(
                VULNERABILITIES, self.rng.randint(0, MAX_VULNERABILITIES)
            )

        return ScanReport(
            target=target,
            ip=generate_ip(self.rng, subnet=f"192.168.{self.rng.randint(0, 254)}"),
            mac=generate_mac(self.rng),
            status="Online" if self.rng.random() < ONLINE_PROBABILITY else "Offline",
            os=self.rng.choice(OPERATING_SYSTEMS),
            open_ports=open_ports,
            vulnerabilities=vulnerabilities,
            deep=deep,
            checked_vulns=vulns,
        )

    def trace(self, target: str) -> TraceProfile:
        first = self.rng.choice(_FIRST_NAMES)
        last = self.rng.choice(_LAST_NAMES)
        return TraceProfile(
            target=target,
            name=f"{first} {last}",
            email=f"{first.lower()}.{last.lower()}@{self.rng.choice(_EMAIL_DOMAINS)}",
            ip=generate_ip(self.rng),
            relay_ip=generate_ip(self.rng),
            location=self.rng.choice(_LOCATIONS),
            last_active_hours=self.rng.randint(0, 23),
        )

    def system_logs(self, count: int | None = None) -> list[str]:
        """Formatted log lines from the last 24 hours, oldest first."""
        if count is None:
            count = self.rng.randint(3, 7)

        now = datetime.utcnow()
        entries: list[tuple[datetime, str]] = []
        for _ in range(count):
            log_type = self.rng.choice(list(_LOG_ACTIONS))
            message = self.rng.choice(_LOG_ACTIONS[log_type]) + self._log_details(log_type)
            timestamp = now - timedelta(seconds=self.rng.randint(0, 86_400))
            process = self.rng.choice(_LOG_PROCESSES)
            user = self.rng.choice(_LOG_USERS)
            stamp = timestamp.isoformat(timespec="seconds")
            entries.append((timestamp, f"[{stamp}Z] [{log_type}] [{process}] [{user}] {message}"))

        entries.sort(key=lambda e: e[0])
        return [line for _, line in entries]

    def _log_details(self, log_type: str) -> str:
        if log_type == "NETWORK":
            return f" src={self.rng.choice(_LOG_IPS)}:{self.rng.choice(list(COMMON_PORTS))}"
        if log_type == "AUTH":
            return f" ip={self.rng.choice(_LOG_IPS)}"
        if log_type == "SYSTEM":
            return f" pid={self.rng.randint(1, 10_000)}"
        if log_type in ("ERROR", "WARNING"):
            return f' path="{self.rng.choice(_LOG_PATHS)}"'
        return ""

    def download_summary(self, target: str) -> str:
        size_mb = self.rng.randint(100, 999)
        speed = self.rng.randint(1, 10)
        return (
            f"Downloading {target}...\n"
            f"File size: {size_mb} MB\n"
            f"Speed: {speed} MB/s\n"
            f"Estimated time: {size_mb // speed} seconds\n\n"
            f"Download complete. File saved to local storage."
        )

    def decrypt(self, plaintext: str = SECRET_MESSAGE) -> tuple[str, str]:
        """Return (ciphertext, plaintext)."""
        return glitch_text(plaintext, self.rng, intensity=0.7), plaintext

    def analyze(self, target: str) -> str:
        now = datetime.utcnow()
        created = now - timedelta(days=self.rng.randint(0, 365))
        modified = now - timedelta(days=self.rng.randint(0, 30))
        return (
            f"Analyzing {target}...\n\n"
            f"Analysis complete.\n\n"
            f"Results:\n"
            f"- File type: {self.rng.choice(_FILE_TYPES)}\n"
            f"- Size: {self.rng.randint(1, 1000)} KB\n"
            f"- Created: {created.date().isoformat()}\n"
            f"- Modified: {modified.date().isoformat()}\n"
            f"- Hash: {generate_hex(self.rng, 32)}\n"
            f"- Threat level: {self.rng.choice(_THREAT_LEVELS)}\n\n"
            f"No malicious code detected."
        )
