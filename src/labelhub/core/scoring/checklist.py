"""Decoding of a project's review checklist into a weight lookup."""
import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from ..schemas.project import ChecklistItem

logger = logging.getLogger(__name__)

_items_adapter = TypeAdapter(list[ChecklistItem])


@dataclass(frozen=True)
class Checklist:
    """Checklist items keyed by error code.

    A checklist that could not be decoded is an empty checklist with
    ``is_valid`` False: every lookup on it is a miss.
    """
    items: dict[str, ChecklistItem] = field(default_factory=dict)
    is_valid: bool = True

    @classmethod
    def decode(cls, raw: Optional[str]) -> "Checklist":
        """Decode the JSON list stored on a project.

        Never raises: a missing or malformed checklist must not block a
        reviewer from rejecting work, so it decodes to an empty checklist.
        """
        if not raw or not raw.strip():
            return cls()

        try:
            parsed = _items_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed review checklist: {e.error_count()} error(s)")
            return cls(is_valid=False)

        items: dict[str, ChecklistItem] = {}
        for item in parsed:
            # First entry wins on duplicate codes
            items.setdefault(item.code, item)
        return cls(items=items)

    def lookup(self, code: Optional[str]) -> Optional[ChecklistItem]:
        """Get the item for an error code, or None when there is no match."""
        if not code:
            return None
        return self.items.get(code)

    def weight_for(self, code: Optional[str]) -> int:
        """Weight of an error code; 0 when the code does not match any item."""
        item = self.lookup(code)
        if item is None:
            return 0
        return item.weight

    def __len__(self) -> int:
        return len(self.items)
