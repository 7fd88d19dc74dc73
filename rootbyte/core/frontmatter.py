"""
Frontmatter parsing for Markdown articles.

The metadata block is a run of ``key: value`` lines between two lines that
contain exactly ``---``. Parsing is deliberately forgiving: a missing block or
a malformed line never raises, it just yields less metadata.
"""
import re
from typing import Any, Dict, Tuple, Union

FRONTMATTER_RE = re.compile(r'\A---\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)', re.DOTALL)
NUMBER_RE = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')
STATUS_RE = re.compile(r'^status:[^\r\n]*', re.MULTILINE)

QUOTE_CHARS = '"\'“”‘’'

Scalar = Union[str, int, float, bool]


def strip_quotes(value: str) -> str:
    """Remove one layer of surrounding straight or curly quotes."""
    if value and value[0] in QUOTE_CHARS:
        value = value[1:]
    if value and value[-1] in QUOTE_CHARS:
        value = value[:-1]
    return value


def coerce_value(value: str) -> Scalar:
    """
    Convert a raw frontmatter value into a bool, a number or a string.

    Args:
        value: Trimmed, unquoted value

    Returns:
        ``True``/``False`` for the literals ``true``/``false``, an int or float
        when the whole value is a decimal number, the string otherwise
    """
    if value == 'true':
        return True
    if value == 'false':
        return False
    if NUMBER_RE.match(value):
        if re.match(r'^[+-]?\d+$', value):
            return int(value)
        return float(value)
    return value


def parse_meta(block: str) -> Dict[str, Scalar]:
    meta = {}
    for line in block.splitlines():
        if ':' not in line:
            continue
        key, value = line.split(':', 1)
        key = key.strip()
        if not key:
            continue
        meta[key] = coerce_value(strip_quotes(value.strip()))
    return meta


def parse_frontmatter(text: str) -> Tuple[Dict[str, Scalar], str]:
    """
    Split a Markdown document into its metadata and body.

    Args:
        text: Raw file contents

    Returns:
        Tuple of (meta, body). Without a metadata block, meta is empty and the
        body is the original text untouched.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    return parse_meta(match.group(1) or ''), text[match.end():].strip()


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return repr(value)
    return f'"{value}"'


def serialize_frontmatter(meta: Dict[str, Any], body: str = "") -> str:
    """
    Render a metadata mapping and a body back into a Markdown document.

    Strings are always double-quoted; booleans and numbers are written bare so
    that parsing the result yields the same mapping.
    """
    lines = ['---']
    lines.extend(f'{key}: {format_value(value)}' for key, value in meta.items())
    lines.append('---')
    return '\n'.join(lines) + '\n\n' + body


def set_status(text: str, status: str) -> str:
    """
    Rewrite the ``status`` line of a document's metadata block.

    The line is replaced when present and inserted at the top of the block
    otherwise. A document without a block gets a new one. The document's
    line endings are kept.
    """
    newline = '\r\n' if '\r\n' in text else '\n'
    match = FRONTMATTER_RE.match(text)
    if not match:
        return f'---{newline}status: {status}{newline}---{newline}{newline}{text}'

    block = match.group(1)
    if block is None:
        opening = text.index('\n') + 1
        return text[:opening] + f'status: {status}{newline}' + text[opening:]

    if STATUS_RE.search(block):
        block = STATUS_RE.sub(f'status: {status}', block, count=1)
    else:
        block = f'status: {status}{newline}{block}'

    start, end = match.span(1)
    return text[:start] + block + text[end:]
