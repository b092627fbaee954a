"""WireGuard handshake source backed by ``docker exec``."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from wgsentinel.exceptions import BackendUnavailableError
from wgsentinel.models.handshake import HandshakeRecord

_logger = logging.getLogger(__name__)

# `wg show all latest-handshakes` prints "<interface>\t<public key>\t<unix seconds>".
_HANDSHAKE_LINE = re.compile(r"^(\S+)\s+(\S+)\s+([0-9]+)$")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    """Structural interface for running an external command.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`SubprocessRunner`) concrete.
    """

    async def run(self, *argv: str) -> CommandResult:
        ...


class HandshakeSource(Protocol):
    """Lists peers with their latest handshake timestamps."""

    async def snapshot(self) -> list[HandshakeRecord]:
        ...


class WireGuardBackend(HandshakeSource, Protocol):
    """A handshake source that can also be probed and expose its config."""

    async def check_available(self) -> None:
        ...

    async def read_config(self) -> str:
        ...


class SubprocessRunner:
    """Run commands with :mod:`asyncio` subprocesses and a hard timeout."""

    def __init__(self, *, timeout: float = 30.0) -> None:
        self._timeout = timeout

    async def run(self, *argv: str) -> CommandResult:
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise BackendUnavailableError(f"Cannot execute {argv[0]!r}: {exc}", command=argv) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise BackendUnavailableError(
                f"{' '.join(argv)} timed out after {self._timeout:g}s",
                command=argv,
            ) from exc

        return CommandResult(
            argv=argv,
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )


def parse_handshake_output(output: str) -> list[HandshakeRecord]:
    """Parse ``wg show all latest-handshakes`` output.

    Lines that are not ``<interface> <peer> <unix seconds>`` are dropped so
    that only well-formed records reach reconciliation.
    """
    records: list[HandshakeRecord] = []
    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        match = _HANDSHAKE_LINE.match(line)
        if match is None:
            _logger.debug("Discarding unrecognised handshake line: %r", raw_line)
            continue
        interface, peer, timestamp = match.groups()
        try:
            records.append(HandshakeRecord(peer=peer, last_handshake=int(timestamp), interface=interface))
        except ValidationError:
            _logger.debug("Discarding invalid handshake line: %r", raw_line, exc_info=True)
    return records


class DockerWireGuardBackend:
    """Query a WireGuard container through the docker CLI."""

    def __init__(
        self,
        container_name: str,
        *,
        runner: CommandRunner | None = None,
        docker_binary: str = "docker",
        config_path: str = "/etc/wireguard/wg0.conf",
    ) -> None:
        self._container = container_name
        self._runner: CommandRunner = runner or SubprocessRunner()
        self._docker = docker_binary
        self._config_path = config_path

    @property
    def container_name(self) -> str:
        return self._container

    async def _exec(self, *args: str) -> CommandResult:
        return await self._runner.run(self._docker, *args)

    def _unavailable(self, message: str, result: CommandResult) -> BackendUnavailableError:
        detail = (result.stderr or result.stdout).strip()
        if detail:
            message = f"{message}: {detail[:200]}"
        return BackendUnavailableError(message, command=result.argv, returncode=result.returncode)

    async def check_available(self) -> None:
        """Ensure the docker daemon answers and the container is running."""
        info = await self._exec("info")
        if not info.ok:
            raise self._unavailable("Cannot connect to the Docker daemon", info)

        inspect = await self._exec("container", "inspect", self._container, "--format", "{{.State.Status}}")
        if not inspect.ok:
            raise self._unavailable(f"Container {self._container} not found", inspect)
        status = inspect.stdout.strip()
        if status != "running":
            raise BackendUnavailableError(
                f"Container {self._container} is not running (status: {status or 'unknown'})",
                command=inspect.argv,
                returncode=inspect.returncode,
            )

    async def snapshot(self) -> list[HandshakeRecord]:
        """Return the latest handshake of every peer on every interface."""
        result = await self._exec("exec", self._container, "wg", "show", "all", "latest-handshakes")
        if not result.ok:
            raise self._unavailable(f"Error retrieving handshake info from container {self._container}", result)
        records = parse_handshake_output(result.stdout)
        if not records:
            _logger.info("No valid handshake lines found in 'wg show' output.")
        return records

    async def read_config(self) -> str:
        """Return the WireGuard config text from inside the container."""
        result = await self._exec("exec", self._container, "cat", self._config_path)
        if not result.ok:
            raise self._unavailable(f"Error retrieving {self._config_path} from container {self._container}", result)
        return result.stdout
