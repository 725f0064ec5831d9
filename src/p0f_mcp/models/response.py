"""Decoded lookup result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..protocol.codes import MatchQuality, SoftwareMismatch, render_code


@dataclass(frozen=True)
class Response:
    """Everything the daemon knows about one address."""

    first_seen: datetime
    last_seen: datetime
    total_conn: int
    uptime_min: int
    up_mod_days: int
    last_nat: datetime
    last_chg: datetime
    distance: int
    bad_sw: SoftwareMismatch | int
    os_match_quality: MatchQuality | int
    os_name: str
    os_flavor: str
    http_name: str
    http_flavor: str
    link_type: str
    language: str

    @property
    def bad_sw_name(self) -> str:
        return render_code(SoftwareMismatch, self.bad_sw)

    @property
    def os_match_quality_name(self) -> str:
        return render_code(MatchQuality, self.os_match_quality)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "first_seen": self.first_seen.isoformat(),
            "last_seen": self.last_seen.isoformat(),
            "total_conn": self.total_conn,
            "uptime_min": self.uptime_min,
            "up_mod_days": self.up_mod_days,
            "last_nat": self.last_nat.isoformat(),
            "last_chg": self.last_chg.isoformat(),
            "distance": self.distance,
            "bad_sw": self.bad_sw_name,
            "os_match_quality": self.os_match_quality_name,
            "os_name": self.os_name,
            "os_flavor": self.os_flavor,
            "http_name": self.http_name,
            "http_flavor": self.http_flavor,
            "link_type": self.link_type,
            "language": self.language,
        }

    def __str__(self) -> str:
        lines = [
            f"FirstSeen: {self.first_seen.isoformat()}",
            f"LastSeen: {self.last_seen.isoformat()}",
            f"BadSw: {self.bad_sw_name}",
            f"OsMatchQuality: {self.os_match_quality_name}",
            f"OsName: {self.os_name}",
            f"OsFlavor: {self.os_flavor}",
            f"HttpName: {self.http_name}",
            f"LinkType: {self.link_type}",
            f"Language: {self.language}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Response(os_name={self.os_name!r}, os_flavor={self.os_flavor!r}, "
            f"distance={self.distance})"
        )
