"""
Format registry and convertor.

Parses unlabeled input by trying every registered parser, then formats the
result with a named formatter.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .errors import NoParserMatchedError, UnknownFormatError
from .notation import MusicNotation

logger = logging.getLogger(__name__)


@dataclass
class ParseOptions:
    """Options passed to every parser."""
    filename: Optional[str] = None


@dataclass
class FormatOptions:
    """Options passed to the selected formatter."""
    key_layout: Optional[str] = None  # key layout JSON text


MusicParser = Callable[[str, ParseOptions], MusicNotation]
MusicFormatter = Callable[[MusicNotation, FormatOptions], str]


@dataclass(frozen=True)
class Handler:
    """
    A sheet format registration.

    Attributes:
        label: Unique format label
        parser: Factory returning a parser (optional)
        formatter: Factory returning a formatter (optional)
        extension: File extension used for formatted output
    """
    label: str
    parser: Optional[Callable[[], MusicParser]] = None
    formatter: Optional[Callable[[], MusicFormatter]] = None
    extension: str = '.txt'


class MusicConvertor:
    """
    Converts sheets between registered formats.

    Handler tables are built once and never modified afterwards, so one
    convertor can serve any number of independent conversions.
    """

    def __init__(self, *handlers: Handler):
        self._parsers: Dict[str, MusicParser] = {}
        self._formatters: Dict[str, MusicFormatter] = {}
        self._extensions: Dict[str, str] = {}
        for handler in handlers:
            if handler.parser:
                self._parsers[handler.label] = handler.parser()
            if handler.formatter:
                self._formatters[handler.label] = handler.formatter()
            self._extensions[handler.label] = handler.extension

    @property
    def parser_labels(self) -> List[str]:
        return list(self._parsers)

    @property
    def formatter_labels(self) -> List[str]:
        return list(self._formatters)

    def extension_for(self, label: str) -> str:
        """File extension registered for a format label."""
        if label not in self._extensions:
            raise UnknownFormatError(label)
        return self._extensions[label]

    def convert(
        self,
        label: str,
        content: str,
        parse_options: Optional[ParseOptions] = None,
        format_options: Optional[FormatOptions] = None
    ) -> str:
        """
        Convert a sheet of any registered input format to ``label``.

        Args:
            label: Output format label
            content: Raw sheet text
            parse_options: Options for the parsers
            format_options: Options for the formatter

        Returns:
            Formatted sheet text
        """
        notation = self.parse_music(content, parse_options)
        return self.format_music(label, notation, format_options)

    def parse_music(self, content: str, options: Optional[ParseOptions] = None) -> MusicNotation:
        """
        Parse content with the first parser that accepts it.

        Parsers are tried in registration order.

        Raises:
            NoParserMatchedError: If every parser fails, with each failure
        """
        options = options or ParseOptions()
        failures: Dict[str, Exception] = {}
        for label, parse in self._parsers.items():
            try:
                notation = parse(content, options)
            except Exception as e:
                logger.debug(f"Parser '{label}' rejected input: {e}")
                failures[label] = e
                continue
            logger.debug(f"Parsed with '{label}': {notation.beat_count} beats, bpm={notation.bpm}")
            return notation
        raise NoParserMatchedError(failures)

    def format_music(self, label: str, notation: MusicNotation, options: Optional[FormatOptions] = None) -> str:
        """
        Format a notation with the formatter registered under ``label``.

        Raises:
            UnknownFormatError: If no formatter has that label
        """
        format_ = self._formatters.get(label)
        if format_ is None:
            raise UnknownFormatError(label)
        return format_(notation, options or FormatOptions())
