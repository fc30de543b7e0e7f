"""Standardized logging utilities for calendar components."""

import json
from typing import Any, Dict, Literal, Optional

from logger import log

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CalendarLogger:
    """
    Component logger for the calendar engine.

    Prefixes every message with the component name and optionally logs a
    JSON rendering of structured data on the following line.
    """

    def __init__(self, component_name: str, calendar_id: Optional[str] = None):
        """
        Initialize calendar logger.

        Args:
            component_name: Name of the component (e.g., "Engine", "EventParser")
            calendar_id: Optional identifier of the calendar instance for context
        """
        self.component_name = component_name
        self.calendar_id = calendar_id

    def _format_message(self, message: str, level: LogLevel) -> str:
        if self.calendar_id:
            prefix = f"[{self.component_name}:{self.calendar_id}]"
        else:
            prefix = f"[{self.component_name}]"
        return f"{prefix} [{level}] {message}"

    def debug(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log("DEBUG", message, data)

    def info(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log("INFO", message, data)

    def warning(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log("WARNING", message, data)

    def error(self, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log("ERROR", message, data)

    def _log(self, level: LogLevel, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        log(self._format_message(message, level), level=level)

        if data:
            try:
                data_str = json.dumps(data, default=str)
            except (TypeError, ValueError):
                data_str = "(unserializable data)"
            log(f"DATA: {data_str}", level=level)

    def log_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Log a structured event (a dispatched notification, a record write).

        Args:
            event_type: Type of event
            data: Event payload
        """
        event_data = {
            "component": self.component_name,
            "calendar_id": self.calendar_id,
            "event_type": event_type,
            "data": data,
        }
        self.info(f"EVENT: {event_type}", event_data)

    def log_state_change(
        self, old_state: str, new_state: str, reason: Optional[str] = None
    ) -> None:
        """
        Log a time state transition.

        Args:
            old_state: Previous state summary
            new_state: New state summary
            reason: Optional cause (turn advance, manual skip, ...)
        """
        data = {"old_state": old_state, "new_state": new_state, "reason": reason}
        self.info(f"State change: {old_state} -> {new_state}", data)
