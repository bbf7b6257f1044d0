"""
Tests for the command resolver: dispatch, gated operations, missions
and maintenance commands.
"""

from __future__ import annotations

import asyncio
import random

import pytest

from roguecode.db.memory import InMemoryWorldStore
from roguecode.engine.models import (
    Command,
    EngineConfig,
    Response,
    ResponseAction,
    ResponseType,
)
from roguecode.engine.parser import parse_command
from roguecode.engine.resolver import GENERAL_HELP, HELP_TOPICS, CommandResolver
from roguecode.models import MissionStatus, Target, TargetKind
from roguecode.services.progression import ProgressionService

# =============================================================================
# Helpers
# =============================================================================


class FixedRandom(random.Random):
    """Random source whose uniform draw is pinned to one value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


ALWAYS = 0.0
NEVER = 0.99


class FakeEnrichment:
    """Enrichment provider with scripted text, errors and delays."""

    def __init__(self, text: str = "", error: Exception | None = None, delay: float = 0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls = 0

    async def _reply(self) -> str:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.text

    async def get_scan_narrative(self, target, *, deep=False, vulns=False) -> str:
        return await self._reply()

    async def get_mission_briefing(self, mission_type, difficulty) -> str:
        return await self._reply()


def make_resolver(value: float = ALWAYS, enrichment=None, **config) -> CommandResolver:
    return CommandResolver(
        progression=ProgressionService(),
        world=InMemoryWorldStore(),
        enrichment=enrichment,
        config=EngineConfig(**config),
        rng=FixedRandom(value),
    )


async def run(resolver: CommandResolver, raw: str) -> Response:
    return await resolver.resolve(parse_command(raw))


@pytest.fixture
def resolver():
    return make_resolver()


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:
    """Tests for the closed dispatch table and the fault boundary."""

    @pytest.mark.asyncio
    async def test_unknown_command(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "dance wildly")
        assert response.type == ResponseType.ERROR
        assert response.text == (
            "Command not recognized: dance. Type 'help' for available commands."
        )

    @pytest.mark.asyncio
    async def test_null_action_is_unknown(self, resolver: CommandResolver) -> None:
        response = await resolver.resolve(Command())
        assert response.is_error

    @pytest.mark.asyncio
    async def test_handler_fault_becomes_error(self, resolver: CommandResolver) -> None:
        async def explode(command: Command) -> Response:
            raise KeyError("boom")

        resolver._handlers["status"] = explode
        response = await run(resolver, "status")

        assert response.is_error
        assert response.text == "Internal error while running 'status'. Command aborted."
        assert not (await run(resolver, "help")).is_error

    def test_aliases_registered(self, resolver: CommandResolver) -> None:
        for action in ("help", "?", "inv", "missions", "mission", "reset", "fix", "debug"):
            assert action in resolver.actions


class TestPanels:
    """Tests for help, clear, settings, status, skills and inventory."""

    @pytest.mark.asyncio
    async def test_help(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "help")
        assert response.text == GENERAL_HELP
        assert response.action == ResponseAction.OPEN_HELP_PANEL

    @pytest.mark.asyncio
    async def test_help_topic(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "help SCAN")
        assert response.text == HELP_TOPICS["scan"]
        assert response.action is None

    @pytest.mark.asyncio
    async def test_help_unknown_topic(self, resolver: CommandResolver) -> None:
        assert (await run(resolver, "help teleport")).is_error

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("raw", "action"),
        [
            ("clear", ResponseAction.CLEAR_TERMINAL),
            ("settings", ResponseAction.OPEN_SETTINGS_PANEL),
            ("skills", ResponseAction.OPEN_SKILL_TREE),
            ("inventory", ResponseAction.OPEN_INVENTORY),
            ("inv", ResponseAction.OPEN_INVENTORY),
        ],
    )
    async def test_panel_actions(self, resolver: CommandResolver, raw: str, action) -> None:
        response = await run(resolver, raw)
        assert response.action == action
        assert response.type == ResponseType.SYSTEM

    @pytest.mark.asyncio
    async def test_status(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "status")
        assert "Level: 1 (XP 0/100)" in response.text
        assert "Credits: 1000" in response.text
        assert "Connection: None" in response.text


# =============================================================================
# Scan
# =============================================================================


class TestScan:
    """Tests for the scan command."""

    @pytest.mark.asyncio
    async def test_missing_target(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "scan --deep")
        assert response.is_error
        assert resolver.world.list_targets() == []

    @pytest.mark.asyncio
    async def test_success_records_target(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "scan Alpha-Server")

        assert response.type == ResponseType.SUCCESS
        assert response.action is None
        assert response.text.startswith("Scan results for Alpha-Server:")
        assert response.payload["enriched"] is False

        target = resolver.world.get_target("alpha-server")
        assert target.kind == TargetKind.SERVER
        assert target.device_id.startswith("SRV-")
        assert target.last_scan is not None
        assert target.hacked is False

    @pytest.mark.asyncio
    async def test_deep_scan_action(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "scan network --deep --vulns")
        assert response.action == ResponseAction.START_DEEP_SCAN
        assert "Services:" in response.text

    @pytest.mark.asyncio
    async def test_failure_mutates_nothing(self) -> None:
        resolver = make_resolver(NEVER)
        response = await run(resolver, "scan alpha")
        assert response.type == ResponseType.WARNING
        assert resolver.world.list_targets() == []

    @pytest.mark.asyncio
    async def test_rescan_keeps_identity(self, resolver: CommandResolver) -> None:
        resolver.world.upsert_target(
            Target(
                id="alpha",
                name="alpha",
                ip="10.9.8.7",
                mac="AA:BB:CC:DD:EE:FF",
                device_id="DEV-123456789ABC",
                hacked=True,
            )
        )
        await run(resolver, "scan alpha")

        target = resolver.world.get_target("alpha")
        assert target.ip == "10.9.8.7"
        assert target.mac == "AA:BB:CC:DD:EE:FF"
        assert target.device_id == "DEV-123456789ABC"
        assert target.hacked is True

    @pytest.mark.asyncio
    async def test_enriched_text(self) -> None:
        provider = FakeEnrichment(text="  >> alpha: 3 ports open <<  ")
        resolver = make_resolver(enrichment=provider)

        response = await run(resolver, "scan alpha")

        assert response.text == ">> alpha: 3 ports open <<"
        assert response.payload["enriched"] is True
        assert resolver.world.get_target("alpha") is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "provider",
        [
            FakeEnrichment(error=ConnectionError("down")),
            FakeEnrichment(text="AI response unavailable: API key is missing"),
            FakeEnrichment(text="   "),
            object(),
        ],
    )
    async def test_enrichment_failure_falls_back(self, provider) -> None:
        resolver = make_resolver(enrichment=provider)
        response = await run(resolver, "scan alpha")
        assert response.type == ResponseType.SUCCESS
        assert response.text.startswith("Scan results for alpha:")
        assert response.payload["enriched"] is False

    @pytest.mark.asyncio
    async def test_slow_enrichment_times_out(self) -> None:
        provider = FakeEnrichment(text="late", delay=1.0)
        resolver = make_resolver(enrichment=provider, enrichment_timeout=0.01)
        response = await run(resolver, "scan alpha")
        assert response.text.startswith("Scan results for alpha:")

    @pytest.mark.asyncio
    async def test_disabled_enrichment_not_called(self) -> None:
        provider = FakeEnrichment(text="never")
        resolver = make_resolver(enrichment=provider, use_enrichment=False)
        await run(resolver, "scan alpha")
        assert provider.calls == 0


# =============================================================================
# Inject and hack
# =============================================================================


class TestInject:
    """Tests for the inject command."""

    @pytest.mark.asyncio
    async def test_needs_two_args(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "inject malware")
        assert response.is_error
        assert resolver.world.list_injections() == []

    @pytest.mark.asyncio
    async def test_success(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "inject Keylogger Workstation --stealth")

        assert response.action == ResponseAction.INJECTION_SUCCESS
        assert "Detection Risk: Low" in response.text
        assert resolver.world.has_injection_for("workstation")

        injection = resolver.world.list_injections()[0]
        assert injection.type == "keylogger"
        assert injection.stealth is True
        assert injection.effect == "Capturing keystrokes"
        assert injection.id.startswith("0x")

    @pytest.mark.asyncio
    async def test_failure(self) -> None:
        resolver = make_resolver(NEVER)
        response = await run(resolver, "inject rootkit firewall --force")
        assert response.is_error
        assert "rejected the rootkit payload" in response.text
        assert resolver.world.list_injections() == []


class TestHack:
    """Tests for the hack command."""

    @pytest.mark.asyncio
    async def test_missing_target(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "hack")
        assert response.is_error
        assert response.action is None

    @pytest.mark.asyncio
    async def test_first_compromise_rewards(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "hack workstation")

        assert response.action == ResponseAction.HACK_SUCCESS
        assert response.payload["first_compromise"] is True
        assert "Credits: 1000 → 1100 (+100)" in response.text
        assert "XP: 0/100 → 50/100" in response.text

        player = resolver.progression.player
        assert player.credits == 1100
        assert player.xp == 50
        assert resolver.world.get_target("workstation").hacked is True

    @pytest.mark.asyncio
    async def test_rehack_grants_nothing(self, resolver: CommandResolver) -> None:
        await run(resolver, "hack mainframe")
        after_first = resolver.progression.player.model_copy(deep=True)

        response = await run(resolver, "hack mainframe")

        assert response.action == ResponseAction.HACK_SUCCESS
        assert response.payload["first_compromise"] is False
        assert resolver.progression.player == after_first

    @pytest.mark.asyncio
    async def test_mainframe_tier(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "hack mainframe")
        assert response.payload["credits"]["after"] == 1500
        assert resolver.progression.player.total_xp == 250

    @pytest.mark.asyncio
    async def test_failure(self) -> None:
        resolver = make_resolver(NEVER)
        response = await run(resolver, "hack server --bruteforce")

        assert response.type == ResponseType.ERROR
        assert response.action == ResponseAction.HACK_FAILURE
        assert "inject" in response.text
        assert resolver.progression.player.credits == 1000
        assert resolver.world.get_target("server") is None

    @pytest.mark.asyncio
    async def test_injection_mentioned(self, resolver: CommandResolver) -> None:
        await run(resolver, "inject worm server")
        response = await run(resolver, "hack server")
        assert "Planted payload detected" in response.text

    @pytest.mark.asyncio
    async def test_hack_keeps_scanned_record(self, resolver: CommandResolver) -> None:
        await run(resolver, "scan router")
        scanned = resolver.world.get_target("router")
        await run(resolver, "hack router")
        hacked = resolver.world.get_target("router")
        assert hacked.ip == scanned.ip
        assert hacked.open_ports == scanned.open_ports
        assert hacked.hacked_at is not None


# =============================================================================
# Intel and tools
# =============================================================================


class TestIntel:
    """Tests for download, trace, decrypt and analyze."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["download", "trace", "decrypt", "analyze"])
    async def test_missing_target(self, resolver: CommandResolver, action: str) -> None:
        assert (await run(resolver, action)).is_error

    @pytest.mark.asyncio
    async def test_download_logs(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "download logs")
        assert response.text.startswith("Downloaded system logs:")
        assert resolver.progression.player.inventory == []

    @pytest.mark.asyncio
    async def test_download_file_adds_item(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "download payroll.db")
        assert response.payload == {"item": "payroll.db"}
        assert resolver.progression.player.inventory == ["payroll.db"]

        inventory = await run(resolver, "inventory")
        assert "- payroll.db" in inventory.text

    @pytest.mark.asyncio
    async def test_trace(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "trace ghost")
        assert response.text.startswith("Trace results for ghost:")

    @pytest.mark.asyncio
    async def test_decrypt(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "decrypt vault.enc")
        assert response.action == ResponseAction.DECRYPT_SUCCESS
        assert "Decryption successful!" in response.text

    @pytest.mark.asyncio
    async def test_analyze(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "analyze dropper.exe")
        assert response.action == ResponseAction.ANALYZE_COMPLETE


class TestUpgrade:
    """Tests for the upgrade command."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("component", "action", "skill"),
        [
            ("ai", ResponseAction.UPGRADE_AI, "ai_assistant_v2"),
            ("firewall", ResponseAction.UPGRADE_FIREWALL, "firewall_v2"),
            ("TOOLKIT", ResponseAction.UPGRADE_TOOLKIT, "toolkit_v2"),
        ],
    )
    async def test_upgrade(self, resolver: CommandResolver, component, action, skill) -> None:
        response = await run(resolver, f"upgrade {component}")
        assert response.action == action
        assert skill in resolver.progression.player.skills

    @pytest.mark.asyncio
    async def test_second_upgrade_is_info(self, resolver: CommandResolver) -> None:
        await run(resolver, "upgrade ai")
        response = await run(resolver, "upgrade ai")
        assert response.type == ResponseType.INFO
        assert response.action is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["upgrade", "upgrade warp-drive"])
    async def test_invalid(self, resolver: CommandResolver, raw: str) -> None:
        assert (await run(resolver, raw)).is_error
        assert resolver.progression.player.skills == set()


class TestConnection:
    """Tests for connect and exit."""

    @pytest.mark.asyncio
    async def test_connect_and_exit(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "connect mainframe")
        assert response.action == ResponseAction.CONNECT_SYSTEM
        assert resolver.world.get_current_system().name == "mainframe"

        status = await run(resolver, "status")
        assert "Connection: mainframe" in status.text

        response = await run(resolver, "exit")
        assert response.action == ResponseAction.EXIT_SYSTEM
        assert resolver.world.get_current_system() is None

    @pytest.mark.asyncio
    async def test_exit_without_connection(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "exit")
        assert response.text == "No active connection."
        assert response.action is None

    @pytest.mark.asyncio
    async def test_hacked_target_grants_admin(self, resolver: CommandResolver) -> None:
        await run(resolver, "hack gateway")
        await run(resolver, "connect gateway")
        assert resolver.world.get_current_system().access_level == "Admin"

    @pytest.mark.asyncio
    async def test_connect_needs_target(self, resolver: CommandResolver) -> None:
        assert (await run(resolver, "connect")).is_error
        assert resolver.world.get_current_system() is None


# =============================================================================
# Missions
# =============================================================================


class TestMissionCommands:
    """Tests for the mission command family."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        ["mission", "mission accept", "mission info", "mission complete", "mission dance"],
    )
    async def test_invalid_usage(self, resolver: CommandResolver, raw: str) -> None:
        assert (await run(resolver, raw)).is_error

    @pytest.mark.asyncio
    async def test_generate(self, resolver: CommandResolver) -> None:
        response = await run(resolver, "mission generate")
        assert response.action == ResponseAction.MISSION_GENERATED
        assert response.payload["mission"]["id"] == "mission-1"
        assert "mission accept mission-1" in response.text

    @pytest.mark.asyncio
    async def test_generate_after_restored_gap(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        snapshot = resolver.world.snapshot()
        snapshot["missions"][0]["id"] = "mission-2"
        resolver.world.restore(snapshot)

        response = await run(resolver, "mission generate")

        assert response.action == ResponseAction.MISSION_GENERATED
        assert response.payload["mission"]["id"] == "mission-3"

    @pytest.mark.asyncio
    async def test_generate_uses_briefing(self) -> None:
        resolver = make_resolver(enrichment=FakeEnrichment(text="Operation Nightglass."))
        response = await run(resolver, "mission generate")
        assert response.payload["enriched"] is True
        assert resolver.world.get_mission("mission-1").description == "Operation Nightglass."

    @pytest.mark.asyncio
    async def test_list(self, resolver: CommandResolver) -> None:
        empty = await run(resolver, "mission list")
        assert empty.action == ResponseAction.LIST_MISSIONS
        assert "No missions available" in empty.text

        await run(resolver, "mission generate")
        response = await run(resolver, "missions")
        assert "[mission-1]" in response.text
        assert "(available)" in response.text

    @pytest.mark.asyncio
    async def test_accept_twice(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        first = await run(resolver, "mission accept mission-1")
        second = await run(resolver, "mission accept mission-1")

        assert first.action == ResponseAction.MISSION_ACCEPTED
        assert second.is_error
        assert resolver.world.get_mission("mission-1").status == MissionStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unknown_id(self, resolver: CommandResolver) -> None:
        for sub in ("accept", "info", "complete"):
            response = await run(resolver, f"mission {sub} mission-42")
            assert response.text == "Error: Mission 'mission-42' not found."

    @pytest.mark.asyncio
    async def test_complete_requires_accept(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        response = await run(resolver, "mission complete mission-1")
        assert response.is_error
        assert resolver.progression.player.credits == 1000
        assert resolver.world.get_mission("mission-1").status == MissionStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_complete_applies_rewards_once(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        mission = resolver.world.get_mission("mission-1")
        await run(resolver, "mission accept mission-1")

        response = await run(resolver, "mission complete mission-1")
        assert response.action == ResponseAction.MISSION_COMPLETED
        assert response.payload["credits"]["after"] == 1000 + mission.credit_reward
        after_first = resolver.progression.player.model_copy(deep=True)

        again = await run(resolver, "mission complete mission-1")
        assert again.is_error
        assert "already completed" in again.text
        assert resolver.progression.player == after_first

    @pytest.mark.asyncio
    async def test_info(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        response = await run(resolver, "mission info mission-1")
        assert response.type == ResponseType.INFO
        assert "Status: available" in response.text


# =============================================================================
# Maintenance
# =============================================================================


class TestMaintenance:
    """Tests for reset, fix and debug."""

    @pytest.mark.asyncio
    async def test_reset_stats_keeps_world(self, resolver: CommandResolver) -> None:
        await run(resolver, "hack server")
        await run(resolver, "mission generate")

        response = await run(resolver, "reset stats")

        assert response.action == ResponseAction.STATS_RESET
        assert resolver.progression.player.credits == 1000
        assert resolver.progression.player.total_xp == 0
        assert len(resolver.world.list_missions()) == 1
        assert resolver.world.get_target("server").hacked is True

    @pytest.mark.asyncio
    async def test_reset_all(self, resolver: CommandResolver) -> None:
        await run(resolver, "hack server")
        await run(resolver, "mission generate")
        await run(resolver, "connect server")

        response = await run(resolver, "reset all")

        assert response.action == ResponseAction.GAME_RESET
        assert resolver.world.list_missions() == []
        assert resolver.world.list_targets() == []
        assert resolver.world.get_current_system() is None
        assert resolver.progression.player.credits == 1000

    @pytest.mark.asyncio
    async def test_reset_requires_scope(self, resolver: CommandResolver) -> None:
        await run(resolver, "hack server")
        response = await run(resolver, "reset")
        assert response.is_error
        assert resolver.progression.player.credits > 1000

    @pytest.mark.asyncio
    async def test_fix_stats(self, resolver: CommandResolver) -> None:
        resolver.progression.player.xp = 260

        debug = await run(resolver, "debug xp")
        assert "VIOLATED" in debug.text

        response = await run(resolver, "fix stats")
        assert "After: Level 3, XP 10/225" in response.text
        assert resolver.progression.player.is_consistent

        debug = await run(resolver, "debug xp")
        assert "Invariant 0 <= xp < xp_to_next_level: OK" in debug.text

    @pytest.mark.asyncio
    async def test_fix_requires_scope(self, resolver: CommandResolver) -> None:
        assert (await run(resolver, "fix everything")).is_error

    @pytest.mark.asyncio
    async def test_debug_state(self, resolver: CommandResolver) -> None:
        await run(resolver, "mission generate")
        await run(resolver, "inject worm router")
        response = await run(resolver, "debug state")
        assert "Missions: 1 (available=1, active=0, completed=0)" in response.text
        assert "Injections: 1" in response.text
        assert response.payload == {"missions": {"available": 1, "active": 0, "completed": 0}}

    @pytest.mark.asyncio
    async def test_debug_requires_scope(self, resolver: CommandResolver) -> None:
        assert (await run(resolver, "debug")).is_error
