"""TEI P5 rendering of an apparatus.

Produces a parallel-segmentation apparatus: one <app> per line with the
base reading as <lem> and each alternative as <rdg>. The reader's
effective reading carries wit="#reader".
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from prism.document.models import Document
from prism.export.apparatus import ApparatusEntry

TEI_NS = "http://www.tei-c.org/ns/1.0"
XML_ID = "{http://www.w3.org/XML/1998/namespace}id"
READER_WITNESS = "#reader"

ET.register_namespace("", TEI_NS)


def _tei(tag: str) -> str:
    return f"{{{TEI_NS}}}{tag}"


def build_tei(document: Document, entries: list[ApparatusEntry]) -> ET.Element:
    """Build the TEI element tree."""
    root = ET.Element(_tei("TEI"))
    body = ET.SubElement(ET.SubElement(root, _tei("text")), _tei("body"))
    lg = ET.SubElement(body, _tei("lg"), {"type": "poem", XML_ID: document.doc_id})

    for entry in entries:
        l_el = ET.SubElement(lg, _tei("l"), {"n": str(entry.n)})
        app = ET.SubElement(l_el, _tei("app"))
        ET.SubElement(app, _tei("lem")).text = entry.base_text
        for reading in entry.readings:
            attrs = {}
            ana = " ".join(reading.ana_tokens())
            if ana:
                attrs["ana"] = ana
            if reading.is_effective:
                attrs["wit"] = READER_WITNESS
            ET.SubElement(app, _tei("rdg"), attrs).text = reading.text
    return root


def render_tei(document: Document, entries: list[ApparatusEntry]) -> str:
    """Serialize the apparatus as a TEI XML document string."""
    root = build_tei(document, entries)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"
