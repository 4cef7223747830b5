"""Field-oriented extraction from backend response bodies.

The backend's XML is not regular enough to justify a full parser, so
responses are read with scoped pattern matches instead:

* :func:`extract_field` / :func:`extract_all_fields` for leaf text,
* :func:`extract_block` / :func:`extract_all_blocks` for the inner XML of
  a nested element, which can then be searched again with the same helpers.

None of these raise on a missing tag; they return ``""`` or ``[]``.
"""

from __future__ import annotations

import re
from functools import lru_cache
from xml.sax.saxutils import unescape

_ENTITIES = {"&quot;": '"', "&apos;": "'"}


@lru_cache(maxsize=256)
def _leaf_pattern(tag: str) -> re.Pattern[str]:
    # Exact tag name, optional attributes, not self-closing, text-only body.
    name = re.escape(tag)
    return re.compile(rf"<{name}(?:\s[^>]*)?(?<!/)>([^<]*)</{name}\s*>")


@lru_cache(maxsize=256)
def _block_pattern(tag: str) -> re.Pattern[str]:
    # Containers match regardless of case; leaf fields stay exact.
    name = re.escape(tag)
    return re.compile(
        rf"<{name}(?:\s[^>]*)?(?<!/)>(.*?)</{name}\s*>", re.DOTALL | re.IGNORECASE
    )


def _text(raw: str) -> str:
    return unescape(raw.strip(), _ENTITIES)


def extract_field(xml: str, tag: str) -> str:
    """Return the text of the first ``<tag>`` element, or ``""``.

    Attributes are tolerated: ``<Foo attr="x">bar</Foo>`` yields ``"bar"``.
    """
    if not xml:
        return ""
    match = _leaf_pattern(tag).search(xml)
    return _text(match.group(1)) if match else ""


def extract_all_fields(xml: str, tag: str) -> list[str]:
    """Return the text of every ``<tag>`` element in document order."""
    if not xml:
        return []
    return [_text(m.group(1)) for m in _leaf_pattern(tag).finditer(xml)]


def extract_block(xml: str, tag: str) -> str:
    """Return the inner XML of the first ``<tag>`` element, or ``""``.

    Example::

        extract_block("<Person><Name>Jo</Name></Person>", "Person")
        # -> "<Name>Jo</Name>"
    """
    if not xml:
        return ""
    match = _block_pattern(tag).search(xml)
    return match.group(1).strip() if match else ""


def extract_all_blocks(xml: str, tag: str) -> list[str]:
    """Return the inner XML of every ``<tag>`` element in document order."""
    if not xml:
        return []
    return [m.group(1).strip() for m in _block_pattern(tag).finditer(xml)]


def has_element(xml: str, tag: str) -> bool:
    """True if an opening ``<tag>`` (with or without attributes) is present."""
    if not xml:
        return False
    return re.search(rf"<{re.escape(tag)}[\s/>]", xml) is not None


def parse_attributes(xml: str, tag: str) -> dict[str, str]:
    """Return the attributes of the first ``<tag ...>`` as a dict."""
    if not xml:
        return {}
    match = re.search(rf"<{re.escape(tag)}(\s[^>]*)?/?>", xml)
    if not match or not match.group(1):
        return {}
    return {
        key: _text(value)
        for key, value in re.findall(r'([\w:.-]+)\s*=\s*"([^"]*)"', match.group(1))
    }
