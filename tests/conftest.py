"""
Pytest configuration for the lsp2gxl test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temporary directory and sample workspace fixtures
- Symbol and range factories
- An in-memory SymbolProvider
"""

import asyncio
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

# Set before lsp2gxl configures its logger on import.
os.environ.setdefault("LSP2GXL_MACHINE_MODE", "1")

from lsp2gxl.exceptions import ProviderError
from lsp2gxl.logging_config import setup_logging
from lsp2gxl.schemas import Position, Range, RawSymbol, ReducedKind, Reference, Symbol

FAKE_SERVER = Path(__file__).parent / "fake_lsp_server.py"


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="lsp2gxl_test_")).resolve()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_project(temp_dir):
    """
    Create a small Python workspace.

    Layout:
        pkg/m.py   class M with method f, function g calling M().f()
        main.py    imports g and calls it from run()
    """
    pkg = temp_dir / "pkg"
    pkg.mkdir()
    (pkg / "m.py").write_text(
        "class M:\n"
        "    def f(self):\n"
        "        return 1\n"
        "\n"
        "\n"
        "def g():\n"
        "    return M().f()\n"
    )
    (temp_dir / "main.py").write_text(
        "from pkg.m import g\n"
        "\n"
        "\n"
        "def run():\n"
        "    return g()\n"
    )
    (temp_dir / "README.md").write_text("# sample\n")
    yield temp_dir


@pytest.fixture
def fake_server_command():
    """Command line of the scripted language server used by integration tests."""
    return [sys.executable, str(FAKE_SERVER)]


# ============================================================================
# SYMBOL FACTORIES
# ============================================================================

def make_range(start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
    return Range.of(start_line, start_character, end_line, end_character)


@pytest.fixture
def make_symbol():
    """
    Factory for reduced symbols.

    Usage:
        symbol = make_symbol("M", ReducedKind.CLASS, (0, 0, 10, 0), "file:///r/m.py")
    """
    def factory(
        name: str,
        kind: ReducedKind,
        bounds: Tuple[int, int, int, int],
        uri: str,
        container_name: Optional[str] = None,
    ) -> Symbol:
        return Symbol(
            name=name,
            kind=kind,
            container_name=container_name,
            range=make_range(*bounds),
            document_uri=uri,
        )

    return factory


def make_raw(
    name: str,
    kind: int,
    bounds: Tuple[int, int, int, int],
    container_name: Optional[str] = None,
    children: Optional[List[RawSymbol]] = None,
) -> RawSymbol:
    return RawSymbol(
        name=name,
        kind=kind,
        container_name=container_name,
        range=make_range(*bounds),
        children=children or [],
    )


def make_reference(uri: str, line: int, character: int) -> Reference:
    return Reference(target_document_uri=uri, range=make_range(line, character, line, character + 1))


# ============================================================================
# PROVIDER FIXTURES
# ============================================================================

class FakeProvider:
    """
    In-memory SymbolProvider.

    symbols maps a document URI to its raw symbols; references maps
    (document URI, symbol name) to the usage sites returned for it.
    """

    def __init__(
        self,
        symbols: Optional[Dict[str, List[RawSymbol]]] = None,
        references: Optional[Dict[Tuple[str, str], List[Reference]]] = None,
        fail_on: Optional[str] = None,
    ):
        self.symbols = symbols or {}
        self.references = references or {}
        self.fail_on = fail_on
        self.calls: List[Tuple[str, str, Optional[Position]]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)

    async def get_document_symbols(self, uri: str) -> List[RawSymbol]:
        await self._enter()
        try:
            self.calls.append(("symbols", uri, None))
            return list(self.symbols.get(uri, []))
        finally:
            self.in_flight -= 1

    async def get_references(self, symbol: Symbol, position: Position) -> List[Reference]:
        await self._enter()
        try:
            self.calls.append(("references", symbol.name, position))
            if symbol.name == self.fail_on:
                raise ProviderError("textDocument/references", f"cannot find references to {symbol.name}", -32603)
            return list(self.references.get((symbol.document_uri, symbol.name), []))
        finally:
            self.in_flight -= 1
