"""Closed set of dashboard sections."""

import enum

from .errors import UnknownSectionError


class SectionId(str, enum.Enum):
    OVERVIEW = "overview"
    TRAFFIC = "traffic"
    SECURITY = "security"
    CONNECTIVITY = "connectivity"
    BOTS = "bots"
    TOOLS = "tools"
    ANOMALY = "anomaly"

    @classmethod
    def parse(cls, value) -> "SectionId":
        """Validate a free-form identifier at the boundary."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownSectionError(value) from None


ALL_SECTIONS = frozenset(SectionId)
