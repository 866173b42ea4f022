from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActionKind(str, Enum):
    nothing = "nothing"
    replace = "replace"
    delete = "delete"


@dataclass(frozen=True)
class Action:
    kind: ActionKind = ActionKind.nothing
    replacement: Optional[str] = None

    @classmethod
    def from_json(cls, data: Optional[dict]) -> "Action":
        data = data or {}
        try:
            kind = ActionKind(str(data.get("action", "nothing")).lower())
        except ValueError:
            kind = ActionKind.nothing
        replacement = data.get("replacement")
        return cls(kind=kind, replacement=None if replacement is None else str(replacement))

    @property
    def is_replace(self) -> bool:
        return self.kind == ActionKind.replace and self.replacement is not None

    @property
    def is_delete(self) -> bool:
        return self.kind == ActionKind.delete
