"""Tests for apparatus building and TEI/JSONL export."""

import json
import xml.etree.ElementTree as ET

from prism.engine.selection import SelectionState
from prism.export.apparatus import (
    APPARATUS_SCHEMA_VERSION,
    apparatus_hash,
    apparatus_jsonl,
    build_apparatus,
)
from prism.export.identifiers import canonical_json, line_id, reading_id
from prism.export.tei import READER_WITNESS, TEI_NS, render_tei

NS = {"tei": TEI_NS}


class TestIdentifiers:
    """Tests for export identifiers."""

    def test_line_id(self):
        assert line_id("jingyesi", 2) == "jingyesi.2"

    def test_reading_id_is_stable_under_normalization(self):
        assert reading_id("d.0", "  Moon ") == reading_id("d.0", "moon")
        assert reading_id("d.0", "moon") != reading_id("d.1", "moon")

    def test_canonical_json(self):
        assert canonical_json({"b": 1, "a": "月"}) == '{"a":"月","b":1}'


class TestBuildApparatus:
    """Tests for build_apparatus()."""

    def test_one_entry_per_choice(self, three_line_document):
        entries = build_apparatus(three_line_document, SelectionState())
        assert [e.line_id for e in entries] == ["test.0", "test.1", "test.2"]
        assert [e.n for e in entries] == [1, 2, 3]

    def test_base_reading_is_document_default(self, three_line_document):
        entry = build_apparatus(three_line_document, SelectionState({1: 0}))[1]
        assert entry.base_text == "one-b"
        assert [r.is_base for r in entry.readings] == [False, True, False]

    def test_effective_reading_follows_selection(self, three_line_document):
        entry = build_apparatus(three_line_document, SelectionState({1: 0}))[1]
        assert [r.is_effective for r in entry.readings] == [True, False, False]
        assert entry.effective.text == "one-a"

    def test_out_of_range_selection_marks_default(self, three_line_document):
        entry = build_apparatus(three_line_document, SelectionState({1: 8}))[1]
        assert entry.effective.index == 1

    def test_ana_tokens(self, demo_document):
        reading = build_apparatus(demo_document, SelectionState())[0].readings[1]
        tokens = reading.ana_tokens()
        assert all(t.startswith("#chip:") for t in tokens[:-1])
        assert tokens[-1] == "#phil:foreignizing"


class TestJsonl:
    """Tests for JSONL export."""

    def test_one_object_per_line(self, three_line_document):
        text = apparatus_jsonl(build_apparatus(three_line_document, SelectionState()))
        lines = text.splitlines()
        assert len(lines) == 3
        first = json.loads(lines[0])
        assert first["schema_version"] == APPARATUS_SCHEMA_VERSION
        assert first["base_text"] == "zero-a"

    def test_hash_changes_with_selection(self, three_line_document):
        before = apparatus_hash(build_apparatus(three_line_document, SelectionState()))
        same = apparatus_hash(build_apparatus(three_line_document, SelectionState()))
        after = apparatus_hash(
            build_apparatus(three_line_document, SelectionState({0: 1}))
        )
        assert before == same
        assert before != after


class TestTei:
    """Tests for TEI rendering."""

    def _parse(self, document, selection):
        xml = render_tei(document, build_apparatus(document, selection))
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        return ET.fromstring(xml.split("\n", 1)[1])

    def test_structure(self, demo_document):
        root = self._parse(demo_document, SelectionState())
        assert root.tag == f"{{{TEI_NS}}}TEI"
        lines = root.findall(".//tei:lg/tei:l", NS)
        assert [l.get("n") for l in lines] == ["1", "2", "3", "4"]
        app = lines[0].find("tei:app", NS)
        assert app.find("tei:lem", NS).text == "Before my bed, the bright moonlight,"
        assert len(app.findall("tei:rdg", NS)) == 3

    def test_reader_witness(self, demo_document):
        root = self._parse(demo_document, SelectionState({0: 2}))
        readings = root.findall(".//tei:l[@n='1']/tei:app/tei:rdg", NS)
        witnessed = [r for r in readings if r.get("wit") == READER_WITNESS]
        assert len(witnessed) == 1
        assert witnessed[0].text == "Moonlight pools beside my bed,"

    def test_lg_carries_document_id(self, demo_document):
        root = self._parse(demo_document, SelectionState())
        lg = root.find(".//tei:lg", NS)
        assert lg.get("{http://www.w3.org/XML/1998/namespace}id") == "jingyesi"
        assert lg.get("type") == "poem"
