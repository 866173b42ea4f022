from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Match:
    """A matched span inside a column value, with its replacement when replacing."""

    start: int
    end: int
    text: str
    replacement: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"pos": self.start, "length": self.end - self.start, "text": self.text}
        if self.replacement is not None:
            data["replacement"] = self.replacement
        return data


@dataclass(frozen=True)
class ValueContext:
    """
    Result of evaluating one column value against one filter item.

    `matches` is empty for unmatched values and for matches that have no
    natural span, such as a negative string test.
    """

    column: str
    value: str
    matched: bool
    matches: List[Match] = field(default_factory=list)
    replacement: Optional[str] = None

    @property
    def has_replacement(self) -> bool:
        return self.replacement is not None and self.replacement != self.value

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "column": self.column,
            "value": self.value,
            "matched": self.matched,
            "matches": [match.to_json() for match in self.matches],
        }
        if self.replacement is not None:
            data["replacement"] = self.replacement
        return data
