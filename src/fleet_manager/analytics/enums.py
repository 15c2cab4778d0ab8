import re
from enum import Enum
from typing import Iterable, Set


class ServiceKind(str, Enum):
    oil_change = "Oil Change"
    tire_rotation = "Tire Rotation"
    brake_inspection = "Brake Inspection"
    brake_service = "Brake Service"
    air_filter = "Air Filter"
    annual_inspection = "Annual Inspection"
    other = "Other"

    @classmethod
    def from_label(cls, label: str) -> "ServiceKind":
        """Map a free-text service label onto a known kind, or ``other``."""
        normalized = normalize_label(label)
        if normalized == "inspection":
            return cls.annual_inspection
        for kind in cls:
            if kind is not cls.other and normalize_label(kind.value) == normalized:
                return kind
        return cls.other


def normalize_label(label: str) -> str:
    return re.sub(r"[\s_\-]+", " ", label).strip().casefold()


def _keyword_kinds(label: str) -> Set[ServiceKind]:
    text = normalize_label(label)
    kinds = set()
    if "oil" in text:
        kinds.add(ServiceKind.oil_change)
    if "tire" in text and "rotat" in text:
        kinds.add(ServiceKind.tire_rotation)
    if "inspection" in text or "annual" in text:
        kinds.add(ServiceKind.annual_inspection)
    return kinds


def covered_kinds(labels: Iterable[str]) -> Set[ServiceKind]:
    """
    Kinds already represented in a maintenance history.
    Known labels count by exact kind; free-text labels fall back to keywords.
    """
    covered: Set[ServiceKind] = set()
    for label in labels:
        kind = ServiceKind.from_label(label)
        if kind is ServiceKind.other:
            covered |= _keyword_kinds(label)
        else:
            covered.add(kind)
    return covered
