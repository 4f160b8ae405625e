from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from lxml import etree

from importador.models.record import CanonicalRecord
from importador.services.exceptions import InvalidXmlError, UnrecognizedFormatError
from importador.services.extractors import EXTRACTORS, Extractor

logger = logging.getLogger(__name__)


def _parse_root(content: bytes | str) -> etree._Element:
    """Parse *content* into an lxml root element.

    Text input is encoded as UTF-8 first, since lxml refuses ``str`` input
    that carries an encoding declaration. The parser is then told the bytes
    are UTF-8 so a declared ISO-8859-1 does not re-decode them.
    """
    encoding = None
    if isinstance(content, str):
        content = content.encode("utf-8")
        encoding = "utf-8"
    if not content.strip():
        raise InvalidXmlError()
    parser = etree.XMLParser(encoding=encoding, resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise InvalidXmlError() from e


def parse_fiscal_xml(
    content: bytes | str,
    extractors: Sequence[Extractor] = EXTRACTORS,
) -> CanonicalRecord:
    """Classify a fiscal XML document and extract its canonical record.

    Candidates are tried in order and the first match wins.
    Raises InvalidXmlError for malformed input and UnrecognizedFormatError
    when no candidate matches.
    """
    root = _parse_root(content)
    for extractor in extractors:
        record = extractor.extract(root)
        if record is not None:
            return record

    attempted = tuple(e.name for e in extractors)
    logger.warning("Unrecognized fiscal XML (tried %s)", ", ".join(attempted))
    raise UnrecognizedFormatError(attempted=attempted)


def parse_fiscal_file(path: str | Path) -> CanonicalRecord:
    """Read a fiscal XML file from disk and extract its canonical record."""
    content = Path(path).read_bytes()
    logger.debug("Read %d bytes from %s", len(content), path)
    return parse_fiscal_xml(content)
