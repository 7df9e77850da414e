"""
Server-sent events parsing.

Only the parts of the format the back-office emits are handled: data,
event and id fields, comment lines and blank-line dispatch.
"""

import json
from dataclasses import dataclass
from typing import AsyncIterator, Iterable, List, Optional


@dataclass(frozen=True)
class ServerEvent:
    data: str
    event: str = "message"
    id: Optional[str] = None

    def json(self):
        return json.loads(self.data)


class SSEParser:
    """Line-at-a-time parser. feed() returns an event when a blank line completes one."""

    def __init__(self):
        self._data: List[str] = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None

    def feed(self, line: str) -> Optional[ServerEvent]:
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id":
            self._id = value
        return None

    def _dispatch(self) -> Optional[ServerEvent]:
        if not self._data:
            self._event = None
            return None
        event = ServerEvent(data="\n".join(self._data), event=self._event or "message", id=self._id)
        self._data = []
        self._event = None
        return event


def parse_events(lines: Iterable[str]) -> List[ServerEvent]:
    parser = SSEParser()
    events = []
    for line in lines:
        event = parser.feed(line)
        if event is not None:
            events.append(event)
    return events


async def iter_events(lines: AsyncIterator[str]) -> AsyncIterator[ServerEvent]:
    parser = SSEParser()
    async for line in lines:
        event = parser.feed(line)
        if event is not None:
            yield event
