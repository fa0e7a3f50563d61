"""Integrity checks and deterministic repair of malformed fields."""
import logging
import re
import time

from skillvault.domain import schema
from skillvault.domain.enums import BarState, MobHealthBarType

log = logging.getLogger("skillvault.flatfile")

_BAR_STATES = frozenset(s.value for s in BarState)

# Stored values are never negative; a sign counts as corruption.
_INT_RE = re.compile(r"[0-9]+")
_NUMBER_RE = re.compile(r"([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def is_int(value: str) -> bool:
    return _INT_RE.fullmatch(value) is not None


def is_number(value: str) -> bool:
    return _NUMBER_RE.fullmatch(value) is not None


class ValidationResult:
    def __init__(self, fields: list, corrupted: bool, repaired: list):
        self.fields = fields
        self.corrupted = corrupted
        self.repaired = repaired


class IntegrityValidator:
    """Scans a current-length field list and replaces anything unusable."""

    def __init__(self, default_healthbar: MobHealthBarType = MobHealthBarType.HEARTS):
        self._healthbar = MobHealthBarType(default_healthbar)

    def repair(self, fields: list, now: int | None = None) -> ValidationResult:
        if now is None:
            now = int(time.time())
        fields = list(fields)
        repaired = []

        for spec in schema.FIELDS[: len(fields)]:
            i = spec.index
            value = fields[i]

            if value == "" and not spec.allow_empty:
                log.info(
                    "Player data at index %d appears to be empty, possible corruption of data has occurred.",
                    i,
                )
                if i == schema.LAST_LOGIN:
                    fields[i] = str(now)
                elif i == schema.HEALTHBAR:
                    fields[i] = self._healthbar.value
                else:
                    fields[i] = "0"
                repaired.append(i)
                continue

            if spec.kind == schema.FieldKind.HEALTHBAR and is_int(value):
                fields[i] = self._healthbar.value
                repaired.append(i)
            elif spec.kind == schema.FieldKind.INT and not is_int(value):
                fields[i] = "0"
                repaired.append(i)
            elif spec.kind == schema.FieldKind.FLOAT and not is_number(value):
                fields[i] = "0"
                repaired.append(i)
            elif spec.kind == schema.FieldKind.BAR_STATE and value not in _BAR_STATES:
                fields[i] = BarState.default_for(spec.skill).value
                repaired.append(i)

        return ValidationResult(fields, bool(repaired), repaired)
