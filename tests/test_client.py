import sys
import xml.etree.ElementTree as ET

import pytest

from lsp2gxl.diagnostics import DiagnosticLog
from lsp2gxl.exceptions import ProviderError
from lsp2gxl.pipeline import run_index
from lsp2gxl.provider import LanguageServerClient, RPCErrorCode, SymbolProvider
from lsp2gxl.schemas import Position, ReducedKind, Symbol, Range
from lsp2gxl.uris import path_to_uri

pytestmark = pytest.mark.integration


class TestLanguageServerClient:
    """Round trips against the scripted server in fake_lsp_server.py."""

    @pytest.mark.asyncio
    async def test_document_symbols(self, temp_project, fake_server_command):
        uri = path_to_uri(temp_project / "pkg" / "m.py")

        async with LanguageServerClient(fake_server_command, temp_project) as client:
            assert isinstance(client, SymbolProvider)
            assert client.server_capabilities["documentSymbolProvider"] is True
            symbols = await client.get_document_symbols(uri)

        assert [(s.name, s.kind, s.container_name) for s in symbols] == [
            ("M", 5, None),
            ("f", 6, "M"),
            ("g", 12, None),
        ]
        assert symbols[1].range == Range.of(1, 4, 2, 16)
        assert not client.running

    @pytest.mark.asyncio
    async def test_references(self, temp_project, fake_server_command):
        uri = path_to_uri(temp_project / "pkg" / "m.py")
        method = Symbol(name="f", kind=ReducedKind.METHOD, range=Range.of(1, 4, 2, 16), document_uri=uri)

        async with LanguageServerClient(fake_server_command, temp_project) as client:
            references = await client.get_references(method, Position(line=1, character=8))

        assert [(r.target_document_uri, r.range.start.line, r.range.start.character) for r in references] == [
            (uri, 6, 15),
        ]

    @pytest.mark.asyncio
    async def test_error_response_raises(self, temp_project, fake_server_command):
        uri = path_to_uri(temp_project / "pkg" / "m.py")
        method = Symbol(name="f", kind=ReducedKind.METHOD, range=Range.of(1, 4, 2, 16), document_uri=uri)

        async with LanguageServerClient(fake_server_command + ["--fail-references"], temp_project) as client:
            with pytest.raises(ProviderError) as excinfo:
                await client.get_references(method, Position(line=1, character=8))

        assert excinfo.value.code == -32603
        assert excinfo.value.method == "textDocument/references"

    @pytest.mark.asyncio
    async def test_server_requests_are_answered(self, temp_project, fake_server_command):
        uri = path_to_uri(temp_project / "pkg" / "m.py")

        async with LanguageServerClient(fake_server_command + ["--ask-client"], temp_project) as client:
            await client.get_document_symbols(uri)
            answers = await client.request("fake/answers")

        assert answers["ask-1"]["result"] == [None, None]
        assert answers["ask-2"]["error"]["code"] == RPCErrorCode.METHOD_NOT_FOUND
        assert "result" not in answers["ask-2"]
        assert answers["cfg-1"]["result"] == []

    @pytest.mark.asyncio
    async def test_missing_executable(self, temp_project):
        with pytest.raises(ProviderError):
            async with LanguageServerClient(["lsp2gxl-no-such-language-server"], temp_project):
                pass

    @pytest.mark.asyncio
    async def test_server_that_exits_immediately(self, temp_project):
        command = [sys.executable, "-c", "import sys; sys.exit(3)"]
        with pytest.raises(ProviderError):
            async with LanguageServerClient(command, temp_project):
                pass

    def test_empty_command(self, temp_project):
        with pytest.raises(ProviderError):
            LanguageServerClient([], temp_project)


class TestRunIndex:
    @pytest.mark.asyncio
    async def test_writes_gxl(self, temp_project, fake_server_command, tmp_path):
        out_file = tmp_path / "out.gxl"
        diagnostics = DiagnosticLog()

        summary = await run_index(fake_server_command, temp_project, "**/*.py", out_file, diagnostics=diagnostics)

        assert summary.total_files == 2
        assert summary.total_nodes == 8
        assert summary.edges_by_type == {"Enclosing": 6, "Source_Dependency": 4}
        assert summary.diagnostics == {"import_binding": 1}

        root = ET.parse(out_file).getroot()
        names = {}
        for node in root.iter("node"):
            attrs = {a.get("name"): a[0].text for a in node.findall("attr")}
            names[node.get("id")] = (attrs["Source.Name"], attrs["Source.Path"])
        dependencies = {
            (names[e.get("from")], names[e.get("to")])
            for e in root.iter("edge")
            if e.find("type").get("{http://www.w3.org/1999/xlink}href") == "Source_Dependency"
        }
        assert (("run", "main.py"), ("g", "pkg/m.py")) in dependencies
        assert (("g", "pkg/m.py"), ("f", "pkg/m.py")) in dependencies

    @pytest.mark.asyncio
    async def test_failure_writes_nothing(self, temp_project, fake_server_command, tmp_path):
        out_file = tmp_path / "out.gxl"

        with pytest.raises(ProviderError):
            await run_index(fake_server_command + ["--fail-references"], temp_project, "**/*.py", out_file)

        assert not out_file.exists()
