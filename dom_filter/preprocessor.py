"""
Preprocessor: string-level sanitation and parsing.

Turns an arbitrary markup blob (possibly malformed, possibly huge) into a
BeautifulSoup tree that the reduction stages can mutate:
- Sanitizes the raw string (NULL bytes, control characters, broken brackets)
- Parses with a fallback chain of tree builders
- Drops HTML comments

Design principle: accept anything a browser would render. Only when every
parser refuses the input does this module raise, and the public API turns
that into "return the original text, size-capped".
"""

import re
from typing import Optional

from bs4 import BeautifulSoup

from .dom import remove_comments
from .exceptions import PreprocessorError
from .logger import get_module_logger

logger = get_module_logger("preprocessor")

# html5lib implements the WHATWG parsing algorithm and copes with the worst
# markup; lxml is fast and tolerant; html.parser is always available.
PARSER_CHAIN = ("html5lib", "lxml", "html.parser")

_CONTROL_CHARS = "".join(chr(c) for c in range(32) if c not in (9, 10, 13))
_CONTROL_TABLE = str.maketrans("", "", _CONTROL_CHARS)

_DOUBLE_BRACKETS = re.compile(r"<{2,}(/?[a-zA-Z][^>]*?)>{2,}")
_STRAY_BRACKET = re.compile(r"<(?![a-zA-Z/!?])")
_DOUBLE_EQUALS_ATTR = re.compile(r"(\w+)==([\"'])")


class Preprocessor:
    """Sanitizes and parses raw markup into a mutable tree."""

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
    }

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> str:
        """
        Detect charset from raw page bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" ...>.

        Applies the WHATWG browser mapping so the page decodes the way a
        browser displays it. Returns 'utf-8' when nothing is declared.
        """
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        charset = None
        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1).strip().lower()

        if not charset:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
            if m:
                charset = m.group(1).strip().lower()

        if not charset:
            return 'utf-8'

        return Preprocessor.WHATWG_CHARSET_MAP.get(charset, charset)

    @staticmethod
    def decode_bytes(raw_bytes: bytes) -> str:
        """Decode page bytes with their declared charset, replacing bad bytes."""
        charset = Preprocessor.detect_charset_from_bytes(raw_bytes)
        try:
            return raw_bytes.decode(charset, errors='replace')
        except LookupError:
            logger.warning(f"Unknown charset '{charset}', decoding as utf-8")
            return raw_bytes.decode('utf-8', errors='replace')

    def __init__(self, parsers: Optional[tuple[str, ...]] = None):
        """
        Args:
            parsers: Tree builders to try, in order (default: PARSER_CHAIN)
        """
        self.parsers = parsers or PARSER_CHAIN

    def sanitize(self, html: str) -> tuple[str, list[str]]:
        """
        Fix common malformations at the string level so parsers don't choke.

        Returns:
            Tuple of (sanitized markup, list of warnings)
        """
        warnings = []
        sanitized = html

        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            warnings.append("Removed NULL bytes")

        # <<p>> from copy-paste corruption
        if _DOUBLE_BRACKETS.search(sanitized):
            sanitized = _DOUBLE_BRACKETS.sub(r'<\1>', sanitized)
            warnings.append("Fixed double angle brackets")

        if _STRAY_BRACKET.search(sanitized):
            sanitized = _STRAY_BRACKET.sub('&lt;', sanitized)
            warnings.append("Escaped stray angle brackets")

        # href=="/path" is a common CMS bug
        if _DOUBLE_EQUALS_ATTR.search(sanitized):
            sanitized = _DOUBLE_EQUALS_ATTR.sub(r'\1=\2', sanitized)
            warnings.append("Fixed malformed attributes (double equals)")

        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        if any(c in sanitized for c in _CONTROL_CHARS):
            sanitized = sanitized.translate(_CONTROL_TABLE)
            warnings.append("Removed control characters")

        logger.debug(f"Sanitization complete. {len(warnings)} fixes applied.")
        return sanitized, warnings

    def parse(self, html: str, warnings: Optional[list[str]] = None) -> BeautifulSoup:
        """
        Parse markup into a fresh, independently owned tree.

        Args:
            html: Raw markup
            warnings: Optional list collecting non-fatal issues

        Returns:
            BeautifulSoup document whose body is the reduction root

        Raises:
            PreprocessorError: when every parser in the chain fails
        """
        if warnings is None:
            warnings = []

        sanitized, sanitize_warnings = self.sanitize(html)
        warnings.extend(sanitize_warnings)

        soup = None
        errors = {}
        for parser in self.parsers:
            try:
                soup = BeautifulSoup(sanitized, parser)
                break
            except Exception as e:
                logger.warning(f"{parser} parsing failed: {e}")
                warnings.append(f"{parser} parsing failed: {e}")
                errors[parser] = str(e)

        if soup is None:
            raise PreprocessorError("No parser accepted the markup", details=errors)

        # html.parser does not synthesize <body> for fragments
        if soup.body is None:
            body = soup.new_tag("body")
            for child in list(soup.contents):
                body.append(child.extract())
            soup.append(body)

        removed = remove_comments(soup)
        if removed:
            logger.debug(f"Removed {removed} comments")

        return soup


def parse_document(html: str) -> BeautifulSoup:
    """Convenience function to parse markup with the default chain."""
    return Preprocessor().parse(html)
