import pytest

from conftest import FakeProvider, make_raw, make_reference
from lsp2gxl.diagnostics import DiagnosticCode, DiagnosticLog
from lsp2gxl.exceptions import ConfigError, ProviderError
from lsp2gxl.pipeline import index_files, index_workspace
from lsp2gxl.schemas import EdgeType, Position, ReducedKind
from lsp2gxl.symbols import SymbolKind
from lsp2gxl.uris import path_to_uri

pytestmark = pytest.mark.fast


def edge_names(graph, edge_type):
    names = {node.id: (node.attributes.name, node.attributes.path) for node in graph.nodes}
    return {(names[e.from_id], names[e.to_id]) for e in graph.edges_of_type(edge_type)}


@pytest.fixture
def uris(temp_project):
    return {
        "m": path_to_uri(temp_project / "pkg" / "m.py"),
        "main": path_to_uri(temp_project / "main.py"),
    }


@pytest.fixture
def provider(uris):
    m, main = uris["m"], uris["main"]
    return FakeProvider(
        symbols={
            m: [
                make_raw("M", SymbolKind.CLASS, (0, 0, 2, 16), children=[make_raw("f", SymbolKind.METHOD, (1, 4, 2, 16))]),
                make_raw("g", SymbolKind.FUNCTION, (5, 0, 6, 18)),
                make_raw("CONSTANT", SymbolKind.VARIABLE, (3, 0, 3, 5)),
            ],
            main: [
                make_raw("g", SymbolKind.MODULE, (0, 0, 0, 19)),
                make_raw("run", SymbolKind.FUNCTION, (3, 0, 4, 14)),
            ],
        },
        references={
            (m, "M"): [make_reference(m, 6, 11)],
            (m, "f"): [make_reference(m, 6, 15)],
            (m, "g"): [make_reference(main, 0, 18), make_reference(main, 4, 11)],
        },
    )


class TestIndexWorkspace:
    @pytest.mark.asyncio
    async def test_dependency_graph(self, temp_project, provider):
        diagnostics = DiagnosticLog()

        graph = await index_workspace(provider, temp_project, "**/*.py", diagnostics=diagnostics)

        assert edge_names(graph, EdgeType.DEPENDENCY) == {
            (("g", "pkg/m.py"), ("M", "pkg/m.py")),
            (("g", "pkg/m.py"), ("f", "pkg/m.py")),
            (("g", "main.py"), ("g", "pkg/m.py")),
            (("run", "main.py"), ("g", "pkg/m.py")),
        }
        assert edge_names(graph, EdgeType.ENCLOSING) == {
            (("f", "pkg/m.py"), ("M", "pkg/m.py")),
            (("M", "pkg/m.py"), ("pkg/m.py", "pkg/m.py")),
            (("g", "pkg/m.py"), ("pkg/m.py", "pkg/m.py")),
            (("pkg/m.py", "pkg/m.py"), ("pkg", "pkg")),
            (("g", "main.py"), ("main.py", "main.py")),
            (("run", "main.py"), ("main.py", "main.py")),
        }
        assert len(diagnostics.of(DiagnosticCode.IMPORT_BINDING)) == 1

    @pytest.mark.asyncio
    async def test_import_bindings_get_no_references(self, temp_project, provider, uris):
        provider.references[(uris["main"], "g")] = [make_reference(uris["main"], 4, 11)]

        graph = await index_workspace(provider, temp_project, "**/*.py")

        targets = {to for _, to in edge_names(graph, EdgeType.DEPENDENCY)}
        assert ("g", "main.py") not in targets
        assert ("references", "g", Position(line=0, character=0)) not in provider.calls

    @pytest.mark.asyncio
    async def test_excluded_kinds_are_not_nodes(self, temp_project, provider):
        graph = await index_workspace(provider, temp_project, "**/*.py")
        assert "CONSTANT" not in {node.attributes.name for node in graph.nodes}
        assert {node.type for node in graph.nodes} <= set(ReducedKind)

    @pytest.mark.asyncio
    async def test_reference_lookups_skip_declaration_keywords(self, temp_project, provider):
        await index_workspace(provider, temp_project, "**/*.py")

        lookups = {(name, position) for kind, name, position in provider.calls if kind == "references"}
        assert lookups == {
            ("M", Position(line=0, character=6)),
            ("f", Position(line=1, character=8)),
            ("g", Position(line=5, character=4)),
            ("run", Position(line=3, character=4)),
        }

    @pytest.mark.asyncio
    async def test_provider_calls_are_sequential(self, temp_project, provider):
        await index_workspace(provider, temp_project, "**/*.py")
        assert provider.max_in_flight == 1
        assert [c[1] for c in provider.calls if c[0] == "symbols"] == [
            path_to_uri(temp_project / "main.py"),
            path_to_uri(temp_project / "pkg" / "m.py"),
        ]

    @pytest.mark.asyncio
    async def test_without_references(self, temp_project, provider):
        graph = await index_workspace(provider, temp_project, "**/*.py", include_references=False)

        assert graph.edges_of_type(EdgeType.DEPENDENCY) == []
        assert all(kind == "symbols" for kind, _, _ in provider.calls)

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, temp_project, provider):
        provider.fail_on = "g"
        with pytest.raises(ProviderError):
            await index_workspace(provider, temp_project, "**/*.py")

    @pytest.mark.asyncio
    async def test_invalid_pattern(self, temp_project, provider):
        with pytest.raises(ConfigError):
            await index_workspace(provider, temp_project, "")


class TestIndexFiles:
    @pytest.mark.asyncio
    async def test_documents_without_symbols(self, temp_project):
        files = [temp_project / "main.py", temp_project / "pkg" / "m.py"]

        graph = await index_files(FakeProvider(), temp_project, files)

        assert {node.attributes.name for node in graph.nodes} == {"main.py", "pkg/m.py", "pkg"}
        assert edge_names(graph, EdgeType.ENCLOSING) == {(("pkg/m.py", "pkg/m.py"), ("pkg", "pkg"))}
