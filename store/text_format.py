"""Plain-text record layout: ``##`` sections holding bullet lists or key/value lines."""

from __future__ import annotations

import re

SectionValue = list[str] | dict[str, object]

_SECTION_HEADING = re.compile(r"^##\s+(.+)$")
_KEY_VALUE = re.compile(r"^([^:]+):\s*(.+)$")
_BULLET_ITEM = re.compile(r"^[-•*]\s+(.+)$")
_NUMBERED_ITEM = re.compile(r"^\d+\.\s+(.+)$")
_INTEGER = re.compile(r"^-?\d+$")
_DECIMAL = re.compile(r"^-?\d+\.\d+$")

DEFAULT_SECTION = "default"


def to_snake_case(text: str) -> str:
    text = re.sub(r"([A-Z])", r"_\1", text)
    text = re.sub(r"[\s\-]+", "_", text)
    text = re.sub(r"_+", "_", text)
    return text.strip("_").lower()


def remove_comments(text: str) -> str:
    """Drop everything from ``//`` to the end of each line."""
    lines = []
    for line in text.split("\n"):
        index = line.find("//")
        lines.append(line[:index].rstrip() if index >= 0 else line)
    return "\n".join(lines)


def parse_value(value: str) -> object:
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INTEGER.match(value):
        return int(value)
    if _DECIMAL.match(value):
        return float(value)
    return value


def parse_key_values(text: str, parse_values: bool = True) -> dict[str, object]:
    pairs: dict[str, object] = {}
    for line in text.split("\n"):
        match = _KEY_VALUE.match(line.strip())
        if match:
            value = match.group(2).strip()
            pairs[to_snake_case(match.group(1).strip())] = parse_value(value) if parse_values else value
    return pairs


def _is_list(text: str) -> bool:
    return all(
        not line.strip() or _BULLET_ITEM.match(line.strip()) or _NUMBERED_ITEM.match(line.strip())
        for line in text.strip().split("\n")
    )


def parse_list(text: str) -> list[str]:
    items: list[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        match = _BULLET_ITEM.match(stripped) or _NUMBERED_ITEM.match(stripped)
        if match:
            items.append(match.group(1).strip())
    return items


def parse_sections(text: str) -> dict[str, SectionValue]:
    """Split ``text`` at ``##`` headings.

    Keys are the snake_cased heading names; text before the first heading is
    stored under ``"default"``. A section whose lines are all list items
    becomes a list of strings, anything else becomes a key/value mapping.
    Empty sections are left out.
    """
    sections: dict[str, SectionValue] = {}
    current = DEFAULT_SECTION
    body: list[str] = []

    def flush() -> None:
        content = "\n".join(body).strip()
        if content:
            sections[to_snake_case(current)] = (
                parse_list(content) if _is_list(content) else parse_key_values(content)
            )

    for line in remove_comments(text).split("\n"):
        heading = _SECTION_HEADING.match(line)
        if heading:
            flush()
            current = heading.group(1).strip()
            body = []
        else:
            body.append(line)
    flush()
    return sections
