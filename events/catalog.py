from __future__ import annotations

from collections.abc import Iterable, Iterator

from config import CalendarConfig
from events.parser import parse_event_text
from events.rules import AnyEventRule, EventKey


class EventCatalog:
    """Ordered, deduplicated collection of event rules.

    Rules keep their insertion order. Adding a rule whose ``dedup_key()`` is
    already present is a no-op, so the first occurrence wins.
    """

    def __init__(self, rules: Iterable[AnyEventRule] = ()) -> None:
        self._rules: list[AnyEventRule] = []
        self._keys: set[EventKey] = set()
        self.extend(rules)

    @classmethod
    def from_texts(cls, texts: Iterable[str], config: CalendarConfig) -> EventCatalog:
        catalog = cls()
        for text in texts:
            catalog.extend(parse_event_text(text, config))
        return catalog

    def add(self, rule: AnyEventRule) -> bool:
        """Add ``rule``; return ``False`` when an equivalent rule exists."""
        key = rule.dedup_key()
        if key in self._keys:
            return False
        self._keys.add(key)
        self._rules.append(rule)
        return True

    def extend(self, rules: Iterable[AnyEventRule]) -> int:
        return sum(1 for rule in rules if self.add(rule))

    def names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def __iter__(self) -> Iterator[AnyEventRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)
