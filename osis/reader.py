"""
KJV OSIS Importer - Tag Stream Reader

Turns an XML document into a flat stream of open / text / close events using
ElementTree's incremental parser with a custom target. The document is fed
in chunks; nothing is kept in memory beyond the open-element stack.

Close events repeat the attributes of the matching open tag so consumers can
tell a milestone <verse eID="..."/> from a container </verse>.
"""
import os
import xml.etree.ElementTree as ET
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Deque, Dict, Iterator, List, Mapping, Union

from core.errors import ErrorContext, KjvParseError

DEFAULT_CHUNK_SIZE = 64 * 1024

Source = Union[str, bytes, "os.PathLike[str]", BinaryIO]


@dataclass(frozen=True)
class OpenTag:
    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Text:
    data: str


@dataclass(frozen=True)
class CloseTag:
    name: str
    attributes: Mapping[str, str] = field(default_factory=dict)


TagEvent = Union[OpenTag, Text, CloseTag]


def strip_ns(tag: str) -> str:
    return tag.split("}", 1)[-1]


class _EventCollector:
    """ElementTree parser target that queues events in document order."""

    def __init__(self):
        self.events: Deque[TagEvent] = deque()
        self._stack: List[OpenTag] = []
        self._text: List[str] = []

    def _flush_text(self) -> None:
        # expat may split one run of character data across several callbacks
        if self._text:
            self.events.append(Text("".join(self._text)))
            self._text = []

    def start(self, tag: str, attrib: Dict[str, str]) -> None:
        self._flush_text()
        event = OpenTag(strip_ns(tag), {strip_ns(k): v for k, v in attrib.items()})
        self._stack.append(event)
        self.events.append(event)

    def end(self, tag: str) -> None:
        self._flush_text()
        opened = self._stack.pop()
        self.events.append(CloseTag(opened.name, opened.attributes))

    def data(self, data: str) -> None:
        self._text.append(data)

    def close(self) -> None:
        self._flush_text()


def _iter_chunks(source: Source, chunk_size: int) -> Iterator[Union[str, bytes]]:
    if isinstance(source, (str, bytes)):
        for start in range(0, len(source), chunk_size):
            yield source[start:start + chunk_size]
    elif isinstance(source, os.PathLike):
        with open(Path(source), "rb") as fh:
            yield from _iter_stream(fh, chunk_size)
    else:
        yield from _iter_stream(source, chunk_size)


def _iter_stream(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


def iter_events(source: Source, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[TagEvent]:
    """
    Stream tag events from an XML document.

    Args:
        source: XML text (str or bytes), a path (os.PathLike) or a binary stream
        chunk_size: number of characters/bytes fed to the parser at a time

    Raises:
        KjvParseError: the document is not well-formed XML
    """
    collector = _EventCollector()
    parser = ET.XMLParser(target=collector)
    description = str(source) if isinstance(source, os.PathLike) else "<stream>"

    try:
        for chunk in _iter_chunks(source, chunk_size):
            parser.feed(chunk)
            while collector.events:
                yield collector.events.popleft()
        parser.close()
    except ET.ParseError as exc:
        line, column = exc.position
        raise KjvParseError(
            f"Malformed OSIS XML at line {line}, column {column}: {exc}",
            line=line,
            column=column,
            context=ErrorContext(
                operation="iter_events",
                component="reader",
                source=description,
                line=line,
                column=column,
            ),
            cause=exc,
        ) from exc

    while collector.events:
        yield collector.events.popleft()
