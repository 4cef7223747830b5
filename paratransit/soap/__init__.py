"""Envelope codec for the PassInfoServer SOAP dialect."""

from .envelope import RawXml, build_request, escape_xml, params_to_xml, repeated_elements
from .extract import (
    extract_all_blocks,
    extract_all_fields,
    extract_block,
    extract_field,
    has_element,
    parse_attributes,
)

__all__ = [
    "RawXml",
    "build_request",
    "escape_xml",
    "extract_all_blocks",
    "extract_all_fields",
    "extract_block",
    "extract_field",
    "has_element",
    "params_to_xml",
    "parse_attributes",
    "repeated_elements",
]
