"""Picker result model."""
from enum import Enum
from dataclasses import dataclass
from typing import Optional


class PickerOutcome(Enum):
    """How an fzf session ended."""
    SELECTED = "selected"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class PickerResult:
    """Result of running the fuzzy picker.

    Exactly one of the three variants:
    - Selected: `value` holds the chosen line, `key` the --expect key ("" for Enter)
    - Cancelled: no match, Esc or Ctrl-C
    - Failed: `detail` describes why fzf could not complete
    """
    outcome: PickerOutcome
    value: Optional[str] = None
    key: str = ""
    detail: Optional[str] = None

    @classmethod
    def selected(cls, value: str, key: str = "") -> "PickerResult":
        return cls(PickerOutcome.SELECTED, value=value, key=key)

    @classmethod
    def cancelled(cls) -> "PickerResult":
        return cls(PickerOutcome.CANCELLED)

    @classmethod
    def failed(cls, detail: str) -> "PickerResult":
        return cls(PickerOutcome.FAILED, detail=detail)

    @property
    def is_selected(self) -> bool:
        return self.outcome is PickerOutcome.SELECTED

    @property
    def is_cancelled(self) -> bool:
        return self.outcome is PickerOutcome.CANCELLED

    @property
    def is_failed(self) -> bool:
        return self.outcome is PickerOutcome.FAILED
