"""
Network target models for RogueCode.

Targets are systems the player has scanned or compromised, keyed by
their normalized name. Injections are payloads planted on a target;
they make later hack attempts against it easier.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TargetKind(str, Enum):
    """Device categories, inferred from the target name."""

    SERVER = "server"
    ROUTER = "router"
    FIREWALL = "firewall"
    WORKSTATION = "workstation"
    MOBILE = "mobile"
    IOT = "iot"
    DATABASE = "database"
    MAINFRAME = "mainframe"
    GENERIC = "generic"


# Keyword -> kind. Checked in order, so more specific words come first.
_KIND_KEYWORDS: list[tuple[str, TargetKind]] = [
    ("firewall", TargetKind.FIREWALL),
    ("mainframe", TargetKind.MAINFRAME),
    ("database", TargetKind.DATABASE),
    ("db", TargetKind.DATABASE),
    ("router", TargetKind.ROUTER),
    ("gateway", TargetKind.ROUTER),
    ("workstation", TargetKind.WORKSTATION),
    ("laptop", TargetKind.WORKSTATION),
    ("desktop", TargetKind.WORKSTATION),
    ("mobile", TargetKind.MOBILE),
    ("phone", TargetKind.MOBILE),
    ("iot", TargetKind.IOT),
    ("camera", TargetKind.IOT),
    ("server", TargetKind.SERVER),
    ("srv", TargetKind.SERVER),
]

DEVICE_PREFIXES: dict[TargetKind, str] = {
    TargetKind.SERVER: "SRV",
    TargetKind.ROUTER: "RTR",
    TargetKind.FIREWALL: "FWL",
    TargetKind.WORKSTATION: "WKS",
    TargetKind.MOBILE: "MOB",
    TargetKind.IOT: "IOT",
    TargetKind.DATABASE: "DBS",
    TargetKind.MAINFRAME: "MFR",
    TargetKind.GENERIC: "DEV",
}


def normalize_target(name: str) -> str:
    """Store key for a target name."""
    return name.strip().lower()


def infer_target_kind(name: str) -> TargetKind:
    """Guess the device kind from keywords in its name."""
    key = normalize_target(name)
    for keyword, kind in _KIND_KEYWORDS:
        if keyword in key:
            return kind
    return TargetKind.GENERIC


class Target(BaseModel):
    """A scanned or compromised system."""

    id: str = Field(description="Normalized target name (store key)")
    name: str
    kind: TargetKind = TargetKind.GENERIC
    device_id: str = ""
    ip: str = ""
    mac: str = ""
    os: str = "Unknown"
    status: str = "Unknown"
    open_ports: list[int] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)

    hacked: bool = False
    """Monotonic: only a full game reset clears it."""

    last_scan: datetime | None = None
    hacked_at: datetime | None = None


class Injection(BaseModel):
    """A payload planted on a target ("virus")."""

    id: str = Field(description="Payload id, e.g. 0x1a2b3c4d")
    type: str = Field(description="Payload kind: malware, keylogger, rootkit, ...")
    target: str = Field(description="Normalized target name")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    stealth: bool = False
    force: bool = False
    effect: str = ""


class SystemConnection(BaseModel):
    """The remote system the player is currently connected to."""

    name: str
    security_level: str = "Medium"
    access_level: str = "Guest"
    connected_at: datetime = Field(default_factory=datetime.utcnow)
