"""TFTP probe executor.

Each probe sends a single read request (RRQ) datagram and classifies the
first reply:

- DATA or OACK: the file exists
- ERROR, any other opcode, or no reply within the timeout: absent
"""

from __future__ import annotations

import asyncio
import ipaddress
import struct
from typing import Optional

from wordbuster.core.exceptions import InvalidTargetError
from wordbuster.core.logging import get_logger
from wordbuster.core.models import Failure, ProbeOutcome, Success

logger = get_logger(__name__)

DEFAULT_TFTP_PORT = 69

# TFTP opcodes (RFC 1350, RFC 2347)
OP_RRQ = 1
OP_DATA = 3
OP_ERROR = 5
OP_OACK = 6


def build_read_request(
    filename: str,
    mode: str = "octet",
    options: Optional[dict[str, str]] = None,
) -> bytes:
    """Encode an RRQ: opcode | filename | 0 | mode | 0 | (option | 0 | value | 0)*"""
    packet = struct.pack("!H", OP_RRQ)
    packet += filename.encode("utf-8") + b"\x00"
    packet += mode.encode("ascii") + b"\x00"
    for name, value in (options or {}).items():
        packet += name.encode("ascii") + b"\x00" + str(value).encode("ascii") + b"\x00"
    return packet


def parse_opcode(datagram: bytes) -> Optional[int]:
    """Opcode of a reply, or None for datagrams too short to be TFTP."""
    if len(datagram) < 4:
        return None
    return struct.unpack("!H", datagram[:2])[0]


def parse_error_message(datagram: bytes) -> str:
    """Human-readable text of an ERROR packet."""
    if len(datagram) < 4:
        return "malformed error packet"
    code = struct.unpack("!H", datagram[2:4])[0]
    message = datagram[4:].split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return f"error {code}: {message}" if message else f"error {code}"


def parse_server_address(server: str) -> tuple[str, int]:
    """Parse ``host``, ``host:port`` or ``[ipv6]:port``.

    Raises:
        InvalidTargetError: On an empty host or an invalid port
    """
    server = server.strip()
    host, port_text = server, None

    if server.startswith("["):
        host, _, rest = server[1:].partition("]")
        if rest:
            if not rest.startswith(":"):
                raise InvalidTargetError(f"Invalid server address: '{server}'")
            port_text = rest[1:]
    elif server.count(":") == 1:
        host, _, port_text = server.partition(":")
    elif server.count(":") > 1:
        # Bare IPv6 literal without a port
        try:
            ipaddress.IPv6Address(server)
        except ValueError as e:
            raise InvalidTargetError(f"Invalid server address: '{server}'") from e

    if not host:
        raise InvalidTargetError(f"Invalid server address: '{server}' (missing host)")

    port = DEFAULT_TFTP_PORT
    if port_text is not None:
        if not port_text.isdigit() or not 0 < int(port_text) < 65536:
            raise InvalidTargetError(f"Invalid server address: '{server}' (bad port)")
        port = int(port_text)

    return host, port


class _FirstReply(asyncio.DatagramProtocol):
    """Resolves a future with the first datagram received."""

    def __init__(self, reply: asyncio.Future):
        self.reply = reply

    def datagram_received(self, data: bytes, addr) -> None:
        if not self.reply.done():
            self.reply.set_result(data)

    def error_received(self, exc: Exception) -> None:
        if not self.reply.done():
            self.reply.set_exception(exc)


class TftpProber:
    """Checks file existence on a TFTP server with one RRQ per probe."""

    def __init__(self, server: str, timeout: float = 5.0, block_size: int = 512):
        self.host, self.port = parse_server_address(server)
        self.timeout = timeout
        self.block_size = block_size

    async def check(self, filename: str) -> ProbeOutcome:
        """Send one read request for ``filename`` and classify the first reply."""
        loop = asyncio.get_running_loop()
        reply: asyncio.Future = loop.create_future()
        packet = build_read_request(filename, options={"blksize": str(self.block_size)})

        try:
            # Replies come from a fresh server port, so the socket is not connected
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _FirstReply(reply),
                local_addr=("0.0.0.0", 0) if ":" not in self.host else ("::", 0),
            )
        except OSError as e:
            return Failure(reason=f"Failed to bind socket: {e}")

        try:
            transport.sendto(packet, (self.host, self.port))
            datagram = await asyncio.wait_for(reply, timeout=self.timeout)
        except asyncio.TimeoutError:
            return Failure(reason="No reply before timeout", absent=True)
        except OSError as e:
            return Failure(reason=f"Failed to exchange datagrams: {e}")
        finally:
            transport.close()

        opcode = parse_opcode(datagram)
        if opcode == OP_DATA:
            return Success(extra_text="data")
        if opcode == OP_OACK:
            return Success(extra_text="oack")
        if opcode == OP_ERROR:
            return Failure(reason=parse_error_message(datagram), absent=True)
        return Failure(reason=f"Unexpected reply opcode {opcode}", absent=True)
