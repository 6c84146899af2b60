"""Enumeration modes - the closed set of probing strategies."""

from wordbuster.modes.base import EnumerationMode
from wordbuster.modes.bucket import BucketMode
from wordbuster.modes.dir import DirMode
from wordbuster.modes.dns import DnsMode
from wordbuster.modes.fuzz import FuzzMode
from wordbuster.modes.tftp import TftpMode
from wordbuster.modes.vhost import VhostMode

MODES: dict[str, type[EnumerationMode]] = {
    DirMode.name: DirMode,
    DnsMode.name: DnsMode,
    VhostMode.name: VhostMode,
    FuzzMode.name: FuzzMode,
    BucketMode.name: BucketMode,
    TftpMode.name: TftpMode,
}

__all__ = [
    "EnumerationMode",
    "DirMode",
    "DnsMode",
    "VhostMode",
    "FuzzMode",
    "BucketMode",
    "TftpMode",
    "MODES",
]
