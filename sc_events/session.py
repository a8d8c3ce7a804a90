# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Parsing sessions. One ParserSession per Game.log being read.
"""

from typing import Iterable, List, Optional

from sc_events import event_parser
from sc_events.config import ParserConfig
from sc_events.models import LogEvent
from sc_events.state import SessionState


class ParserSession(SessionState):
    """
    Session state plus the parse entry points.

        session = new_session()
        for event in session.parse_lines(lines, user_id="me"):
            ...
        events = session.flush_pending("me")
    """

    def _user(self, user_id: Optional[str]) -> str:
        return user_id if user_id is not None else self.config.default_user_id

    def parse_line(self, line: str, user_id: Optional[str] = None) -> Optional[LogEvent]:
        return event_parser.parse_line(line, self._user(user_id), self)

    def parse_lines(self, lines: Iterable[str], user_id: Optional[str] = None) -> List[LogEvent]:
        return event_parser.parse_lines(lines, self._user(user_id), self)

    def flush_pending(self, user_id: Optional[str] = None) -> List[LogEvent]:
        """
        Emit the equipment windows still open. Call at end of input; a window
        is otherwise only emitted when a later equip event closes it.
        """
        user_id = self._user(user_id)
        return [
            event_parser.stamp(event_parser.equipment_event(player, window, self), user_id, self)
            for player, window in self.equipment.drain()
        ]


def new_session(config: Optional[ParserConfig] = None) -> ParserSession:
    return ParserSession(config)
