from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from wgsentinel.backend import CommandResult, DockerWireGuardBackend, SubprocessRunner, parse_handshake_output
from wgsentinel.exceptions import BackendUnavailableError

KEY_A = "xTIBA5rboUvnH4htodjb6e697QjLERt1NAB4mZqp8Dg="
KEY_B = "TrMvSoP4jYQlY6RIzBgbssQqY3vxI2Pi+y71lOWWXX0="


@dataclass
class FakeRunner:
    responses: dict[tuple[str, ...], CommandResult] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def answer(self, argv: tuple[str, ...], stdout: str = "", *, returncode: int = 0, stderr: str = "") -> None:
        self.responses[argv] = CommandResult(argv=argv, returncode=returncode, stdout=stdout, stderr=stderr)

    async def run(self, *argv: str) -> CommandResult:
        self.calls.append(argv)
        try:
            return self.responses[argv]
        except KeyError:
            return CommandResult(argv=argv, returncode=127, stdout="", stderr="unexpected command")


WG_SHOW = ("docker", "exec", "wg-easy", "wg", "show", "all", "latest-handshakes")
INSPECT = ("docker", "container", "inspect", "wg-easy", "--format", "{{.State.Status}}")


def test_parse_handshake_output_keeps_well_formed_lines() -> None:
    output = f"wg0\t{KEY_A}\t1771000000\nwg0\t{KEY_B}\t0\n"

    records = parse_handshake_output(output)

    assert [(r.interface, r.peer, r.last_handshake) for r in records] == [
        ("wg0", KEY_A, 1771000000),
        ("wg0", KEY_B, 0),
    ]


def test_parse_handshake_output_discards_malformed_lines() -> None:
    output = "\n".join(
        [
            "interface: wg0",
            f"wg0 {KEY_A}",
            f"wg0 {KEY_A} soon",
            f"wg0 {KEY_A} -5",
            f"wg0 {KEY_A} 12 extra",
            "",
            f"wg0   {KEY_B}   99",
        ]
    )

    records = parse_handshake_output(output)

    assert [(r.peer, r.last_handshake) for r in records] == [(KEY_B, 99)]


def test_parse_empty_output_is_empty_snapshot() -> None:
    assert parse_handshake_output("") == []


@pytest.mark.asyncio
async def test_snapshot_runs_wg_show_in_container() -> None:
    runner = FakeRunner()
    runner.answer(WG_SHOW, f"wg0\t{KEY_A}\t1771000000\n")
    backend = DockerWireGuardBackend("wg-easy", runner=runner)

    records = await backend.snapshot()

    assert runner.calls == [WG_SHOW]
    assert [r.peer for r in records] == [KEY_A]


@pytest.mark.asyncio
async def test_snapshot_failure_raises_backend_unavailable() -> None:
    runner = FakeRunner()
    runner.answer(WG_SHOW, returncode=1, stderr="Error: No such container: wg-easy")
    backend = DockerWireGuardBackend("wg-easy", runner=runner)

    with pytest.raises(BackendUnavailableError) as exc_info:
        await backend.snapshot()

    assert exc_info.value.returncode == 1
    assert exc_info.value.command == WG_SHOW
    assert "No such container" in str(exc_info.value)


@pytest.mark.asyncio
async def test_check_available_requires_running_container() -> None:
    runner = FakeRunner()
    runner.answer(("docker", "info"), "Server: ok")
    runner.answer(INSPECT, "exited\n")
    backend = DockerWireGuardBackend("wg-easy", runner=runner)

    with pytest.raises(BackendUnavailableError, match="not running"):
        await backend.check_available()

    runner.answer(INSPECT, "running\n")
    await backend.check_available()


@pytest.mark.asyncio
async def test_check_available_fails_without_docker_daemon() -> None:
    runner = FakeRunner()
    runner.answer(("docker", "info"), returncode=1, stderr="Cannot connect to the Docker daemon")
    backend = DockerWireGuardBackend("wg-easy", runner=runner)

    with pytest.raises(BackendUnavailableError, match="Docker daemon"):
        await backend.check_available()
    assert runner.calls == [("docker", "info")]


@pytest.mark.asyncio
async def test_read_config_uses_configured_path() -> None:
    argv = ("docker", "exec", "vpn", "cat", "/etc/wireguard/wg1.conf")
    runner = FakeRunner()
    runner.answer(argv, "[Interface]\n")
    backend = DockerWireGuardBackend("vpn", runner=runner, config_path="/etc/wireguard/wg1.conf")

    assert await backend.read_config() == "[Interface]\n"


@pytest.mark.asyncio
async def test_subprocess_runner_missing_binary_raises() -> None:
    runner = SubprocessRunner(timeout=5.0)

    with pytest.raises(BackendUnavailableError):
        await runner.run("/nonexistent/definitely-not-docker", "info")
