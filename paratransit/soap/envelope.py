"""Request envelope construction for the PassInfoServer backend.

Every request is one fixed SOAP envelope around a single element named for
the operation, with one child element per parameter::

    <?xml version="1.0" encoding="UTF-8"?>
    <SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
      <SOAP-ENV:Body>
        <PassGetClientTrips>
          <ClientId>12345</ClientId>
          ...
        </PassGetClientTrips>
      </SOAP-ENV:Body>
    </SOAP-ENV:Envelope>

The backend compares this layout closely, so the whitespace here is part of
the contract.
"""

from __future__ import annotations

from typing import Any, Mapping
from xml.sax.saxutils import escape

_ENTITIES = {'"': "&quot;", "'": "&apos;"}


class RawXml(str):
    """A pre-built XML fragment inserted verbatim by :func:`params_to_xml`.

    Repeated elements (passenger lists and the like) follow a different
    schema per operation, so call sites build them by hand and wrap the
    result in ``RawXml``.
    """


def escape_xml(text: str) -> str:
    """Escape ``& < > " '`` for use as element text."""
    return escape(text, _ENTITIES)


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return escape_xml(str(value))


def params_to_xml(params: Mapping[str, Any], indent: str = "") -> str:
    """Serialise a parameter tree into nested elements.

    Keys become tag names verbatim, ``None`` values are skipped and nested
    mappings recurse.  Sequences are rejected: build repeated elements
    explicitly and pass them as :class:`RawXml`.
    """
    xml = ""
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            inner = params_to_xml(value, indent + "  ")
            xml += f"{indent}<{key}>\n{inner}{indent}</{key}>\n"
        elif isinstance(value, RawXml):
            xml += f"{indent}<{key}>\n{value}{indent}</{key}>\n"
        elif isinstance(value, (list, tuple, set)):
            raise TypeError(
                f"Parameter {key!r} is a sequence; build repeated elements as RawXml"
            )
        else:
            xml += f"{indent}<{key}>{_format_scalar(value)}</{key}>\n"
    return xml


def build_request(operation: str, params: Mapping[str, Any] | None = None) -> str:
    """Wrap ``params`` in the backend's envelope for ``operation``."""
    params_xml = params_to_xml(params or {})
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/">
  <SOAP-ENV:Body>
    <{operation}>
      {params_xml}
    </{operation}>
  </SOAP-ENV:Body>
</SOAP-ENV:Envelope>"""


def repeated_elements(tag: str, items: list[Mapping[str, Any]], indent: str = "") -> RawXml:
    """Build ``<tag>...</tag>`` once per item, for list-shaped parameters."""
    xml = ""
    for item in items:
        inner = params_to_xml(item, indent + "  ")
        xml += f"{indent}<{tag}>\n{inner}{indent}</{tag}>\n"
    return RawXml(xml)
