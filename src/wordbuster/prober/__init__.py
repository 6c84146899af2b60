"""Prober module - Network probe executors."""

from wordbuster.prober.dns import DnsProber
from wordbuster.prober.http import HttpProber
from wordbuster.prober.tftp import TftpProber

__all__ = [
    "HttpProber",
    "DnsProber",
    "TftpProber",
]
