"""SRU (Search/Retrieve via URL) responses carrying MODS records."""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Any

from ...models.record import BookRecord
from ...records.builder import RecordBuilder
from .xmltools import children, descendants, first_text, parse_document, path, texts

logger = logging.getLogger(__name__)

YEAR_RE = re.compile(r"\b(\d{4})\b")


def parse_sru(document: str | bytes) -> list[BookRecord]:
    """Turn an SRU searchRetrieve response into records, one per MODS record."""
    root = parse_document(document)
    if root is None:
        logger.debug("SRU response is not well-formed XML")
        return []

    records: list[BookRecord] = []
    for record_data in descendants(root, "recordData"):
        for mods in children(record_data, "mods"):
            records.append(RecordBuilder.from_mapping(_mods_fields(mods)))
    return records


def _with_attribute(nodes: list[ET.Element], name: str, value: str) -> list[ET.Element]:
    return [node for node in nodes if node.get(name) == value]


def _issued(mods: ET.Element) -> str | None:
    issued = first_text(path(mods, "originInfo", "dateIssued"))
    if issued is None:
        return None
    # "c1966." and "[1966?]" style values: keep the year
    match = YEAR_RE.search(issued)
    if match and not re.fullmatch(r"\d{4}(-\d{1,2}){0,2}", issued):
        return match.group(1)
    return issued


def _mods_fields(mods: ET.Element) -> dict[str, Any]:
    publishers = path(mods, "originInfo", "publisher")
    return {
        "title": first_text(path(mods, "titleInfo", "title")),
        "subtitle": first_text(path(mods, "titleInfo", "subTitle")),
        "publisher": first_text(publishers),
        "authors": texts(path(mods, "name", "namePart")),
        "format": first_text(_with_attribute(path(mods, "physicalDescription", "form"), "authority", "marcform")),
        "isbn": first_text(_with_attribute(path(mods, "identifier"), "type", "isbn")),
        "language": first_text(path(mods, "language", "languageTerm")),
        "genres": texts(path(mods, "genre")),
        "publicationDate": _issued(mods),
    }
