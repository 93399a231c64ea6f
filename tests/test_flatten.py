import pytest

from conftest import make_raw
from lsp2gxl.exceptions import ProviderError
from lsp2gxl.provider import flatten_document_symbols, flatten_raw_symbols, parse_locations
from lsp2gxl.schemas import Range

pytestmark = pytest.mark.fast


def lsp_range(sl, sc, el, ec):
    return {"start": {"line": sl, "character": sc}, "end": {"line": el, "character": ec}}


class TestDocumentSymbols:
    def test_symbol_information(self):
        result = [
            {"name": "M", "kind": 5, "location": {"uri": "file:///r/m.py", "range": lsp_range(0, 0, 10, 0)}},
            {
                "name": "f",
                "kind": 6,
                "containerName": "M",
                "location": {"uri": "file:///r/m.py", "range": lsp_range(2, 4, 4, 0)},
            },
        ]

        symbols = flatten_document_symbols(result)

        assert [(s.name, s.kind, s.container_name) for s in symbols] == [("M", 5, None), ("f", 6, "M")]
        assert symbols[1].range == Range.of(2, 4, 4, 0)
        assert symbols[1].selection_range is None

    def test_document_symbol_tree_is_flattened_depth_first(self):
        result = [
            {
                "name": "M",
                "kind": 5,
                "range": lsp_range(0, 0, 10, 0),
                "selectionRange": lsp_range(0, 6, 0, 7),
                "children": [
                    {
                        "name": "f",
                        "kind": 6,
                        "range": lsp_range(2, 4, 4, 0),
                        "selectionRange": lsp_range(2, 8, 2, 9),
                        "children": [
                            {"name": "x", "kind": 13, "range": lsp_range(3, 8, 3, 13), "selectionRange": lsp_range(3, 8, 3, 9)},
                        ],
                    },
                ],
            },
            {"name": "g", "kind": 12, "range": lsp_range(12, 0, 14, 0), "selectionRange": lsp_range(12, 4, 12, 5)},
        ]

        symbols = flatten_document_symbols(result)

        assert [(s.name, s.container_name) for s in symbols] == [("M", None), ("f", "M"), ("x", "f"), ("g", None)]
        assert symbols[1].selection_range == Range.of(2, 8, 2, 9)
        assert all(s.children == [] for s in symbols)

    @pytest.mark.parametrize("result", [None, []])
    def test_empty_results(self, result):
        assert flatten_document_symbols(result) == []

    def test_malformed_entry(self):
        with pytest.raises(ProviderError):
            flatten_document_symbols([{"kind": 5, "range": lsp_range(0, 0, 1, 0)}])

    @pytest.mark.parametrize(
        "entry",
        [
            {"name": "x", "kind": "Function", "location": {"uri": "file:///r/m.py", "range": lsp_range(0, 0, 1, 0)}},
            {"name": 7, "kind": 12, "range": lsp_range(0, 0, 1, 0)},
            {"name": "M", "kind": 5, "range": lsp_range(0, 0, 9, 0), "children": [{"kind": 6, "range": lsp_range(1, 0, 2, 0)}]},
            {"name": "M", "kind": 5, "range": lsp_range(0, 0, 9, 0), "children": ["f"]},
        ],
    )
    def test_invalid_field_values(self, entry):
        with pytest.raises(ProviderError) as exc_info:
            flatten_document_symbols([entry])
        assert exc_info.value.method == "textDocument/documentSymbol"

    def test_malformed_range(self):
        with pytest.raises(ProviderError):
            flatten_document_symbols([{"name": "M", "kind": 5, "range": {"start": {"line": 0}}}])


class TestRawSymbols:
    def test_children_inherit_parent_name(self):
        tree = make_raw("C", 5, (0, 0, 9, 0), children=[make_raw("m", 6, (1, 0, 2, 0)), make_raw("n", 6, (3, 0, 4, 0), container_name="Other")])

        flat = flatten_raw_symbols([tree])

        assert [(s.name, s.container_name) for s in flat] == [("C", None), ("m", "C"), ("n", "Other")]

    def test_flat_input_is_unchanged(self):
        flat = [make_raw("a", 12, (0, 0, 1, 0)), make_raw("b", 12, (2, 0, 3, 0))]
        result = flatten_raw_symbols(flat)
        assert [(s.name, s.container_name, s.range) for s in result] == [(s.name, s.container_name, s.range) for s in flat]


class TestLocations:
    def test_locations(self):
        references = parse_locations([{"uri": "file:///r/a.py", "range": lsp_range(3, 4, 3, 5)}])
        assert len(references) == 1
        assert references[0].target_document_uri == "file:///r/a.py"
        assert references[0].range.start.line == 3

    def test_location_links(self):
        references = parse_locations(
            [{"targetUri": "file:///r/b.py", "targetRange": lsp_range(0, 0, 5, 0), "targetSelectionRange": lsp_range(1, 2, 1, 3)}]
        )
        assert references[0].range == Range.of(1, 2, 1, 3)

    def test_null_result(self):
        assert parse_locations(None) == []

    def test_malformed_location(self):
        with pytest.raises(ProviderError):
            parse_locations([{"range": lsp_range(0, 0, 0, 1)}])
