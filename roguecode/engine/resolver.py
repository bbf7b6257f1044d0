"""
Command Resolver for RogueCode.

Maps a parsed Command to a narrated Response plus state mutations.
Dispatch is a closed table keyed by action name; anything not in the
table falls through to the unknown-command branch. Every handler runs
inside an outer boundary that turns unexpected faults into an error
response, so a single bad command can never end the session.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from roguecode.db.interfaces import WorldStore
from roguecode.engine.models import Command, EngineConfig, Response, ResponseAction
from roguecode.engine.odds import Operation, roll, success_chance
from roguecode.models import (
    Injection,
    InvalidTransitionError,
    Mission,
    MissionStatus,
    SystemConnection,
    Target,
    TargetKind,
    infer_target_kind,
    normalize_target,
)
from roguecode.services.enrichment import Enrichment, EnrichmentProvider, request_enrichment
from roguecode.services.missions import MissionGenerator
from roguecode.services.progression import ProgressionService
from roguecode.services.recon import (
    ReconService,
    generate_device_id,
    generate_ip,
    generate_mac,
    generate_payload_id,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Command], Awaitable[Response]]


# =============================================================================
# Constants
# =============================================================================

# Reward tier per target kind for a first compromise
HACK_TIERS: dict[TargetKind, int] = {
    TargetKind.WORKSTATION: 1,
    TargetKind.IOT: 1,
    TargetKind.MOBILE: 1,
    TargetKind.GENERIC: 2,
    TargetKind.ROUTER: 2,
    TargetKind.SERVER: 3,
    TargetKind.DATABASE: 3,
    TargetKind.FIREWALL: 4,
    TargetKind.MAINFRAME: 5,
}
HACK_CREDITS_PER_TIER = 100
HACK_CREDITS_JITTER = 50
HACK_XP_PER_TIER = 50

PAYLOAD_EFFECTS: dict[str, str] = {
    "malware": "System performance degraded",
    "virus": "Corrupting system files",
    "trojan": "Remote access channel open",
    "keylogger": "Capturing keystrokes",
    "spyware": "Monitoring user activity",
    "worm": "Propagating across the network",
    "backdoor": "Hidden entry point installed",
    "rootkit": "Persistent kernel-level access",
    "ransomware": "Files encrypted pending payment",
}
DEFAULT_PAYLOAD_EFFECT = "Payload running"

SECURITY_LEVELS = ["Low", "Medium", "High"]
ACCESS_LEVELS = ["Guest", "User", "Admin"]

HACK_BANNER = r"""
 _   _            _    _
| | | | __ _  ___| | _(_)_ __   __ _
| |_| |/ _` |/ __| |/ / | '_ \ / _` |
|  _  | (_| | (__|   <| | | | | (_| |
|_| |_|\__,_|\___|_|\_\_|_| |_|\__, |
                               |___/
"""


@dataclass(frozen=True)
class UpgradeSpec:
    """A tool upgrade the player can install once."""

    skill_id: str
    label: str
    current_version: str
    new_version: str
    changelog: tuple[str, ...]
    action: ResponseAction


UPGRADES: dict[str, UpgradeSpec] = {
    "ai": UpgradeSpec(
        skill_id="ai_assistant_v2",
        label="AI assistant",
        current_version="1.2.3",
        new_version="1.3.0",
        changelog=(
            "Improved natural language processing",
            "Added support for advanced hacking techniques",
            "Enhanced pattern recognition algorithms",
            "Fixed memory leak issues",
        ),
        action=ResponseAction.UPGRADE_AI,
    ),
    "firewall": UpgradeSpec(
        skill_id="firewall_v2",
        label="Firewall",
        current_version="2.4.1",
        new_version="2.5.0",
        changelog=(
            "Enhanced intrusion detection system",
            "Added deep packet inspection",
            "Improved zero-day vulnerability protection",
            "Reduced false positive rate",
        ),
        action=ResponseAction.UPGRADE_FIREWALL,
    ),
    "toolkit": UpgradeSpec(
        skill_id="toolkit_v2",
        label="Hacking toolkit",
        current_version="3.1.2",
        new_version="3.2.0",
        changelog=(
            "Added new exploit frameworks",
            "Improved password cracking algorithms",
            "Enhanced stealth capabilities",
            "Added support for quantum encryption",
        ),
        action=ResponseAction.UPGRADE_TOOLKIT,
    ),
}

GENERAL_HELP = """Available commands:
  help       - Show this help message
  clear      - Clear the terminal
  status     - Show current status
  scan       - Scan a target system or network
  inject     - Inject malware or payload into a target
  hack       - Attempt to hack a target
  download   - Download files or data
  trace      - Trace a target's location or activity
  decrypt    - Decrypt encrypted data
  analyze    - Analyze data or systems
  upgrade    - Upgrade your hacking tools
  connect    - Connect to a remote system
  exit       - Exit the current system
  mission    - Generate, accept and complete missions
  skills     - View your skill tree
  inventory  - View your inventory
  settings   - Open the settings panel
  reset      - Reset stats or the whole game
  fix        - Repair inconsistent stats
  debug      - Inspect internal state

Type 'help [command]' for more information on a specific command."""

HELP_TOPICS: dict[str, str] = {
    "scan": """scan - Scan a target system or network
Usage: scan <target> [options]
Options:
  --vulns     Scan for vulnerabilities
  --deep      Perform a deep scan (lists services per port)
Examples:
  scan 192.168.1.1
  scan firewall --vulns
  scan network --deep""",
    "inject": """inject - Inject malware or payload into a target
Usage: inject <payload> <target> [options]
Options:
  --stealth   Use stealth mode (slower but less detectable)
  --force     Force injection (may trigger alarms)
Examples:
  inject malware server
  inject keylogger workstation --stealth
  inject rootkit firewall --force""",
    "hack": """hack - Attempt to gain access to a target
Usage: hack <target> [options]
Options:
  --bruteforce  Brute-force credentials (higher odds, noisy)
  --quiet       Minimal footprint (much lower odds)
A payload planted with 'inject' improves your odds.
Examples:
  hack workstation
  hack mainframe --bruteforce""",
    "download": """download - Download files or data from a target
Usage: download <target>
Examples:
  download logs
  download payroll.db""",
    "trace": """trace - Trace a target's location and owner
Usage: trace <target>""",
    "decrypt": """decrypt - Decrypt encrypted data
Usage: decrypt <target>""",
    "analyze": """analyze - Analyze a file or system
Usage: analyze <target>""",
    "upgrade": """upgrade - Upgrade your tools
Usage: upgrade <ai|firewall|toolkit>""",
    "connect": """connect - Connect to a remote system
Usage: connect <target>
Use 'exit' to disconnect.""",
    "mission": """mission - Manage missions
Usage:
  mission generate        Request a new mission
  mission list            List all missions
  mission accept <id>     Accept an available mission
  mission info <id>       Show mission details
  mission complete <id>   Complete an active mission""",
    "reset": """reset - Reset progress
Usage:
  reset stats   Reset level, XP, credits, reputation, skills and inventory
  reset all     Reset stats and clear missions, targets and payloads""",
    "fix": """fix - Repair inconsistent stats
Usage: fix stats""",
    "debug": """debug - Inspect internal state
Usage: debug xp|state""",
}


@dataclass
class CommandResolver:
    """
    The core state machine of the game.

    Consults and mutates the progression service and the world store,
    optionally asks the enrichment provider for prose, and returns a
    Response. Holds no game state of its own.
    """

    progression: ProgressionService
    world: WorldStore
    enrichment: EnrichmentProvider | None = None
    config: EngineConfig = field(default_factory=EngineConfig)
    rng: random.Random = field(default_factory=random.Random)

    # Components (initialized in __post_init__)
    missions: MissionGenerator = field(init=False)
    recon: ReconService = field(init=False)
    _handlers: dict[str, Handler] = field(init=False)

    def __post_init__(self) -> None:
        """Share the random source and build the dispatch table."""
        self.missions = MissionGenerator(rng=self.rng)
        self.recon = ReconService(rng=self.rng)
        self._handlers = {
            "help": self._handle_help,
            "?": self._handle_help,
            "clear": self._handle_clear,
            "status": self._handle_status,
            "settings": self._handle_settings,
            "scan": self._handle_scan,
            "inject": self._handle_inject,
            "hack": self._handle_hack,
            "download": self._handle_download,
            "trace": self._handle_trace,
            "decrypt": self._handle_decrypt,
            "analyze": self._handle_analyze,
            "upgrade": self._handle_upgrade,
            "connect": self._handle_connect,
            "exit": self._handle_exit,
            "skills": self._handle_skills,
            "inventory": self._handle_inventory,
            "inv": self._handle_inventory,
            "mission": self._handle_mission,
            "missions": self._handle_missions,
            "reset": self._handle_reset,
            "fix": self._handle_fix,
            "debug": self._handle_debug,
        }

    @property
    def actions(self) -> list[str]:
        """Every action name the resolver accepts, aliases included."""
        return list(self._handlers)

    async def resolve(self, command: Command) -> Response:
        """
        Resolve a parsed command.

        Args:
            command: Output of the parser

        Returns:
            Response for the player; never raises
        """
        handler = self._handlers.get(command.action) if command.action else None
        if handler is None:
            return self._unknown(command)

        try:
            return await handler(command)
        except Exception:
            logger.exception(f"Handler for '{command.action}' failed")
            return Response.error(
                f"Internal error while running '{command.action}'. Command aborted."
            )

    def _unknown(self, command: Command) -> Response:
        action = command.action or ""
        return Response.error(
            f"Command not recognized: {action}. Type 'help' for available commands."
        )

    async def _enrich(
        self, make_call: Callable[[EnrichmentProvider], Awaitable[str]]
    ) -> Enrichment:
        """Ask the enrichment provider for text, never raising."""
        if self.enrichment is None or not self.config.use_enrichment:
            return Enrichment.unavailable("enrichment disabled")

        try:
            call = make_call(self.enrichment)
        except Exception as e:
            logger.warning(f"Enrichment request could not be started: {e}")
            return Enrichment.unavailable(str(e))

        return await request_enrichment(call, timeout=self.config.enrichment_timeout)

    # =========================================================================
    # Terminal and panels
    # =========================================================================

    async def _handle_help(self, command: Command) -> Response:
        if not command.args:
            return Response.info(GENERAL_HELP, action=ResponseAction.OPEN_HELP_PANEL)

        topic = command.args[0].lower()
        text = HELP_TOPICS.get(topic)
        if text is None:
            return Response.error(
                f"No help available for '{topic}'. Type 'help' for a list of commands."
            )
        return Response.info(text)

    async def _handle_clear(self, command: Command) -> Response:
        return Response.system("Terminal cleared.", action=ResponseAction.CLEAR_TERMINAL)

    async def _handle_settings(self, command: Command) -> Response:
        return Response.system("Opening settings...", action=ResponseAction.OPEN_SETTINGS_PANEL)

    async def _handle_status(self, command: Command) -> Response:
        player = self.progression.player
        current = self.world.get_current_system()
        hacked = sum(1 for t in self.world.list_targets() if t.hacked)
        active = self.world.list_missions(MissionStatus.ACTIVE)

        connection = (
            f"{current.name} (Security: {current.security_level}, Access: {current.access_level})"
            if current
            else "None"
        )
        lines = [
            "System Status: Online",
            f"Level: {player.level} (XP {player.xp}/{player.xp_to_next_level})",
            f"Credits: {player.credits}",
            f"Reputation: {player.reputation}",
            f"Connection: {connection}",
            f"Compromised targets: {hacked}",
            f"Active missions: {len(active)}",
        ]
        for mission in active:
            lines.append(f"  [{mission.id}] {mission.title}")
        return Response.info("\n".join(lines))

    async def _handle_skills(self, command: Command) -> Response:
        skills = sorted(self.progression.player.skills)
        if skills:
            text = "Unlocked skills:\n" + "\n".join(f"- {s}" for s in skills)
        else:
            text = "No skills unlocked yet. Use 'upgrade' to improve your tools."
        return Response.system(text, action=ResponseAction.OPEN_SKILL_TREE)

    async def _handle_inventory(self, command: Command) -> Response:
        items = self.progression.player.inventory
        if items:
            text = "Inventory:\n" + "\n".join(f"- {item}" for item in items)
        else:
            text = "Inventory is empty."
        return Response.system(text, action=ResponseAction.OPEN_INVENTORY)

    # =========================================================================
    # Gated operations
    # =========================================================================

    async def _handle_scan(self, command: Command) -> Response:
        if not command.args:
            return Response.error(
                "Error: No target specified. Usage: scan <target> [--deep] [--vulns]"
            )

        name = command.args[0]
        deep = command.has_flag("deep")
        vulns = command.has_flag("vulns")
        kind = infer_target_kind(name)

        breakdown = success_chance(Operation.SCAN, flags=command.flags, target_kind=kind)
        logger.debug(breakdown.describe())
        if not roll(breakdown.chance, self.rng):
            return Response.warning(
                f"Scan of {name} failed: the probe timed out before completing.\n"
                "Try again."
            )

        report = self.recon.scan(name, deep=deep, vulns=vulns)
        existing = self.world.get_target(name)
        if existing is not None and existing.ip:
            report.ip = existing.ip
            report.mac = existing.mac

        record = Target(
            id=normalize_target(name),
            name=name,
            kind=kind,
            device_id=existing.device_id if existing else generate_device_id(kind, self.rng),
            ip=report.ip,
            mac=report.mac,
            os=report.os,
            status=report.status,
            open_ports=report.open_ports,
            vulnerabilities=report.vulnerabilities,
            hacked=existing.hacked if existing else False,
            hacked_at=existing.hacked_at if existing else None,
            last_scan=datetime.utcnow(),
        )
        stored = self.world.upsert_target(record)

        enrichment = await self._enrich(
            lambda provider: provider.get_scan_narrative(name, deep=deep, vulns=vulns)
        )
        text = enrichment.text if enrichment.ok else report.format()

        return Response.success(
            text,
            action=ResponseAction.START_DEEP_SCAN if deep else None,
            payload={
                "target": stored.model_dump(mode="json"),
                "report": report.model_dump(mode="json"),
                "enriched": enrichment.ok,
            },
        )

    async def _handle_inject(self, command: Command) -> Response:
        if len(command.args) < 2:
            return Response.error(
                "Error: Insufficient arguments. "
                "Usage: inject <payload> <target> [--stealth|--force]"
            )

        payload = command.args[0].lower()
        name = command.args[1]
        stealth = command.has_flag("stealth")
        force = command.has_flag("force")

        breakdown = success_chance(
            Operation.INJECT,
            flags=command.flags,
            target_kind=infer_target_kind(name),
            payload=payload,
        )
        logger.debug(breakdown.describe())
        if not roll(breakdown.chance, self.rng):
            return Response.error(
                f"Injection failed: Target {name} has rejected the {payload} payload.\n"
                "Possible causes:\n"
                "- Target system has advanced protection\n"
                "- Payload is incompatible with target\n"
                "- Connection instability\n\n"
                "Try using --force flag or a different payload."
            )

        injection = Injection(
            id=generate_payload_id(self.rng),
            type=payload,
            target=name,
            stealth=stealth,
            force=force,
            effect=PAYLOAD_EFFECTS.get(payload, DEFAULT_PAYLOAD_EFFECT),
        )
        self.world.add_injection(injection)

        risk = "Low" if stealth else "High" if force else "Medium"
        lines = [
            f"Injecting {payload} into {name} ██████████ 100%",
            "",
            "Injection successful!",
            f"Payload ID: {injection.id}",
            f"Target: {name}",
            f"Effect: {injection.effect}",
            f"Status: {'Hidden' if stealth else 'Active'}",
            f"Detection Risk: {risk}",
        ]
        if stealth:
            lines += ["", "Stealth mode active: Payload is running with minimal footprint."]
        if force:
            lines += ["", "Warning: Force mode may have triggered security alerts."]

        return Response.success(
            "\n".join(lines),
            action=ResponseAction.INJECTION_SUCCESS,
            payload={"injection": injection.model_dump(mode="json")},
        )

    async def _handle_hack(self, command: Command) -> Response:
        if not command.args:
            return Response.error(
                "Error: No target specified. Usage: hack <target> [--bruteforce|--quiet]"
            )

        name = command.args[0]
        kind = infer_target_kind(name)
        has_injection = self.world.has_injection_for(name)

        breakdown = success_chance(
            Operation.HACK,
            flags=command.flags,
            target_kind=kind,
            has_injection=has_injection,
        )
        logger.debug(breakdown.describe())

        intro = (
            f"{HACK_BANNER}\n"
            f"Initiating hack on {name}...\n"
            "Bypassing firewall...\n"
            "Exploiting vulnerabilities...\n"
            "Gaining access...\n"
        )
        if has_injection:
            intro += "Planted payload detected. Leveraging existing foothold...\n"

        if not roll(breakdown.chance, self.rng):
            text = intro + "\nHack failed. Target security measures blocked the attempt."
            if not has_injection:
                text += "\nTip: plant a payload with 'inject' first to improve your odds."
            return Response.error(
                text,
                action=ResponseAction.HACK_FAILURE,
                payload={"target": normalize_target(name), "chance": breakdown.chance},
            )

        existing = self.world.get_target(name)
        if existing is not None and existing.hacked:
            return Response.success(
                intro + f"\nAccess re-established. {name} was already compromised; "
                "no new rewards.",
                action=ResponseAction.HACK_SUCCESS,
                payload={"target": existing.model_dump(mode="json"), "first_compromise": False},
            )

        record = existing or Target(
            id=normalize_target(name),
            name=name,
            kind=kind,
            device_id=generate_device_id(kind, self.rng),
            ip=generate_ip(self.rng),
            mac=generate_mac(self.rng),
            status="Online",
        )
        record.hacked = True
        record.hacked_at = datetime.utcnow()
        stored = self.world.upsert_target(record)

        tier = HACK_TIERS[kind]
        credit_reward = HACK_CREDITS_PER_TIER * tier + self.rng.randint(0, HACK_CREDITS_JITTER)
        xp_reward = HACK_XP_PER_TIER * tier
        credits = self.progression.grant_credits(credit_reward)
        xp = self.progression.add_xp(xp_reward)

        lines = [
            intro,
            "Hack successful! You now have access to the system.",
            f"Credits: {credits.before} → {credits.after} (+{credits.delta})",
            xp.describe(),
        ]
        if xp.leveled_up:
            lines.append(f"LEVEL UP! You are now level {xp.level}.")

        return Response.success(
            "\n".join(lines),
            action=ResponseAction.HACK_SUCCESS,
            payload={
                "target": stored.model_dump(mode="json"),
                "first_compromise": True,
                "credits": credits.model_dump(),
                "xp": xp.model_dump(),
            },
        )

    # =========================================================================
    # Intel
    # =========================================================================

    async def _handle_download(self, command: Command) -> Response:
        if not command.args:
            return Response.error("Error: No target specified. Usage: download <target>")

        name = command.args[0]
        if name.lower() == "logs":
            entries = self.recon.system_logs()
            return Response.success(
                "Downloaded system logs:\n\n"
                + "\n".join(entries)
                + f"\n\nDownload complete. {len(entries)} log entries retrieved."
            )

        self.progression.add_item(name)
        return Response.success(self.recon.download_summary(name), payload={"item": name})

    async def _handle_trace(self, command: Command) -> Response:
        if not command.args:
            return Response.error("Error: No target specified. Usage: trace <target>")

        profile = self.recon.trace(command.args[0])
        return Response.success(profile.format(), payload={"profile": profile.model_dump()})

    async def _handle_decrypt(self, command: Command) -> Response:
        if not command.args:
            return Response.error("Error: No target specified. Usage: decrypt <target>")

        name = command.args[0]
        ciphertext, plaintext = self.recon.decrypt()
        return Response.success(
            f"Decrypting {name}...\n\n"
            f"Encrypted data:\n{ciphertext}\n\n"
            "Applying decryption algorithms...\n"
            "Analyzing patterns...\n"
            "Breaking encryption...\n\n"
            "Decryption successful!\n\n"
            f"Decrypted data:\n{plaintext}\n\n"
            "Decryption complete.",
            action=ResponseAction.DECRYPT_SUCCESS,
        )

    async def _handle_analyze(self, command: Command) -> Response:
        if not command.args:
            return Response.error("Error: No target specified. Usage: analyze <target>")

        return Response.success(
            self.recon.analyze(command.args[0]),
            action=ResponseAction.ANALYZE_COMPLETE,
        )

    # =========================================================================
    # Tools and connection
    # =========================================================================

    async def _handle_upgrade(self, command: Command) -> Response:
        if not command.args:
            return Response.error(
                "Error: No upgrade target specified. Usage: upgrade <ai|firewall|toolkit>"
            )

        component = command.args[0].lower()
        upgrade = UPGRADES.get(component)
        if upgrade is None:
            return Response.error(
                f"Error: Unknown upgrade target '{component}'.\n"
                f"Available upgrade targets: {', '.join(UPGRADES)}"
            )

        if not self.progression.add_skill(upgrade.skill_id):
            return Response.info(
                f"{upgrade.label} is already at version {upgrade.new_version}. No upgrade available."
            )

        changelog = "\n".join(f"- {line}" for line in upgrade.changelog)
        return Response.success(
            f"Upgrading {upgrade.label}...\n\n"
            f"Current version: {upgrade.current_version}\n"
            f"New version: {upgrade.new_version}\n\n"
            f"Changelog:\n{changelog}\n\n"
            f"Upgrade complete. {upgrade.label} is now at version {upgrade.new_version}.",
            action=upgrade.action,
            payload={"skill": upgrade.skill_id},
        )

    async def _handle_connect(self, command: Command) -> Response:
        if not command.args:
            return Response.error("Error: No target specified. Usage: connect <target>")

        name = command.args[0]
        target = self.world.get_target(name)
        security = self.rng.choice(SECURITY_LEVELS)
        access = "Admin" if target is not None and target.hacked else self.rng.choice(ACCESS_LEVELS)

        connection = SystemConnection(name=name, security_level=security, access_level=access)
        self.world.set_current_system(connection)

        return Response.success(
            f"Establishing secure connection to {name}...\n"
            "Authenticating...\n"
            "Bypassing security measures...\n"
            "Connection established.\n\n"
            f"Welcome to {name} system.\n"
            f"Security level: {security}\n"
            f"Access level: {access}\n\n"
            "Type 'help' for available commands.",
            action=ResponseAction.CONNECT_SYSTEM,
            payload={"connection": connection.model_dump(mode="json")},
        )

    async def _handle_exit(self, command: Command) -> Response:
        current = self.world.get_current_system()
        if current is None:
            return Response.info("No active connection.")

        self.world.set_current_system(None)
        return Response.system(
            f"Disconnecting from {current.name}...\nConnection closed.",
            action=ResponseAction.EXIT_SYSTEM,
        )

    # =========================================================================
    # Missions
    # =========================================================================

    async def _handle_missions(self, command: Command) -> Response:
        return self._mission_list()

    async def _handle_mission(self, command: Command) -> Response:
        if not command.args:
            return Response.error(f"Error: No subcommand specified.\n{HELP_TOPICS['mission']}")

        sub = command.args[0].lower()
        mission_id = command.args[1] if len(command.args) > 1 else None

        if sub == "generate":
            return await self._mission_generate()
        if sub == "list":
            return self._mission_list()
        if sub in ("accept", "info", "complete"):
            if mission_id is None:
                return Response.error(f"Error: No mission id specified. Usage: mission {sub} <id>")
            if sub == "accept":
                return self._mission_accept(mission_id)
            if sub == "info":
                return self._mission_info(mission_id)
            return self._mission_complete(mission_id)

        return Response.error(f"Error: Unknown mission subcommand '{sub}'.\n{HELP_TOPICS['mission']}")

    async def _mission_generate(self) -> Response:
        mission = self.missions.generate(self.progression.player.level)

        enrichment = await self._enrich(
            lambda provider: provider.get_mission_briefing(mission.type.value, mission.difficulty)
        )
        if enrichment.ok:
            mission.description = enrichment.text

        mission_id = self.world.add_mission(mission)
        stored = self.world.get_mission(mission_id)
        if stored is None:
            return Response.error(f"Error: Mission '{mission_id}' could not be stored.")

        return Response.success(
            f"New mission available: [{stored.id}] {stored.title}\n"
            f"{self._mission_details(stored)}\n\n"
            f"Type 'mission accept {stored.id}' to accept.",
            action=ResponseAction.MISSION_GENERATED,
            payload={"mission": stored.model_dump(mode="json"), "enriched": enrichment.ok},
        )

    def _mission_list(self) -> Response:
        missions = self.world.list_missions()
        if not missions:
            return Response.info(
                "No missions available. Type 'mission generate' to request one.",
                action=ResponseAction.LIST_MISSIONS,
            )

        lines = ["Missions:"]
        for m in missions:
            lines.append(
                f"  [{m.id}] {m.title} ({m.status.value}) - difficulty {m.difficulty}/5"
            )
        return Response.info(
            "\n".join(lines),
            action=ResponseAction.LIST_MISSIONS,
            payload={"missions": [m.model_dump(mode="json") for m in missions]},
        )

    def _mission_accept(self, mission_id: str) -> Response:
        mission = self.world.get_mission(mission_id)
        if mission is None:
            return Response.error(f"Error: Mission '{mission_id}' not found.")

        try:
            accepted = self.world.set_mission_status(mission_id, MissionStatus.ACTIVE)
        except InvalidTransitionError:
            return Response.error(
                f"Error: Mission '{mission_id}' is {mission.status.value} and cannot be accepted."
            )
        if accepted is None:
            return Response.error(f"Error: Mission '{mission_id}' not found.")

        return Response.success(
            f"Mission accepted: {accepted.title}\n"
            f"Objective: {accepted.objective}\n"
            f"Target: {accepted.target}\n"
            f"Time limit: {accepted.time_limit // 60} minutes",
            action=ResponseAction.MISSION_ACCEPTED,
            payload={"mission": accepted.model_dump(mode="json")},
        )

    def _mission_info(self, mission_id: str) -> Response:
        mission = self.world.get_mission(mission_id)
        if mission is None:
            return Response.error(f"Error: Mission '{mission_id}' not found.")

        return Response.info(
            f"[{mission.id}] {mission.title}\n"
            f"Status: {mission.status.value}\n"
            f"{self._mission_details(mission)}",
            payload={"mission": mission.model_dump(mode="json")},
        )

    def _mission_complete(self, mission_id: str) -> Response:
        mission = self.world.get_mission(mission_id)
        if mission is None:
            return Response.error(f"Error: Mission '{mission_id}' not found.")
        if mission.status == MissionStatus.AVAILABLE:
            return Response.error(
                f"Error: Mission '{mission_id}' has not been accepted. "
                f"Type 'mission accept {mission_id}' first."
            )
        if mission.is_terminal:
            return Response.error(f"Error: Mission '{mission_id}' is already completed.")

        completion = self.world.complete_mission(mission_id, self.progression)
        if completion is None:
            return Response.error(f"Error: Mission '{mission_id}' cannot be completed.")

        lines = [
            f"Mission complete: {completion.mission.title}",
            completion.xp.describe(),
            f"Credits: {completion.credits.before} → {completion.credits.after} "
            f"(+{completion.credits.delta})",
            f"Reputation: {completion.reputation.before} → {completion.reputation.after} "
            f"(+{completion.reputation.delta})",
        ]
        if completion.xp.leveled_up:
            lines.append(f"LEVEL UP! You are now level {completion.xp.level}.")

        return Response.success(
            "\n".join(lines),
            action=ResponseAction.MISSION_COMPLETED,
            payload=completion.model_dump(mode="json"),
        )

    @staticmethod
    def _mission_details(mission: Mission) -> str:
        return (
            f"Type: {mission.type.value} | Difficulty: {mission.difficulty}/5\n"
            f"Target: {mission.target}\n"
            f"Objective: {mission.objective}\n"
            f"Rewards: {mission.rewards_summary()}\n"
            f"Time limit: {mission.time_limit // 60} minutes\n\n"
            f"{mission.description}"
        )

    # =========================================================================
    # Maintenance
    # =========================================================================

    async def _handle_reset(self, command: Command) -> Response:
        scope = command.args[0].lower() if command.args else None

        if scope == "stats":
            player = self.progression.reset()
            return Response.success(
                "Player stats reset.\n"
                f"Level: {player.level} | XP: {player.xp}/{player.xp_to_next_level} | "
                f"Credits: {player.credits} | Reputation: {player.reputation}",
                action=ResponseAction.STATS_RESET,
            )

        if scope == "all":
            self.world.clear()
            self.progression.reset()
            return Response.success(
                "Game reset. All missions, targets, payloads and progress erased.",
                action=ResponseAction.GAME_RESET,
            )

        return Response.error("Error: Specify what to reset. Usage: reset stats|all")

    async def _handle_fix(self, command: Command) -> Response:
        scope = command.args[0].lower() if command.args else None
        if scope != "stats":
            return Response.error("Error: Specify what to fix. Usage: fix stats")

        repair = self.progression.repair_consistency()
        return Response.success(
            "Stats repaired.\n"
            f"Before: Level {repair.previous_level}, "
            f"XP {repair.previous_xp}/{repair.previous_xp_to_next_level}\n"
            f"After: Level {repair.level}, XP {repair.xp}/{repair.xp_to_next_level}",
            payload={"repair": repair.model_dump()},
        )

    async def _handle_debug(self, command: Command) -> Response:
        scope = command.args[0].lower() if command.args else None

        if scope == "xp":
            player = self.progression.player
            invariant = "OK" if player.is_consistent else "VIOLATED"
            return Response.info(
                f"Level: {player.level}\n"
                f"XP: {player.xp}\n"
                f"XP to next level: {player.xp_to_next_level}\n"
                f"Lifetime XP: {player.total_xp}\n"
                f"Invariant 0 <= xp < xp_to_next_level: {invariant}"
            )

        if scope == "state":
            missions = self.world.list_missions()
            targets = self.world.list_targets()
            current = self.world.get_current_system()
            by_status = {
                status.value: sum(1 for m in missions if m.status == status)
                for status in MissionStatus
            }
            status_counts = ", ".join(f"{k}={v}" for k, v in by_status.items())
            return Response.info(
                f"Missions: {len(missions)} ({status_counts})\n"
                f"Targets: {len(targets)} ({sum(1 for t in targets if t.hacked)} hacked)\n"
                f"Injections: {len(self.world.list_injections())}\n"
                f"Current system: {current.name if current else 'None'}",
                payload={"missions": by_status},
            )

        return Response.error("Error: Specify what to inspect. Usage: debug xp|state")
