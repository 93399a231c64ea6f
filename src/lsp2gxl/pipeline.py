"""
Indexing pipeline: provider queries, symbol store, resolution, assembly, output.

Files are processed one at a time and every provider call is awaited before
the next one is made. The graph is assembled only after the last file, and
the document is written only once the whole graph has rendered, so a fatal
error never leaves a partial output file.
"""

import time
from collections import Counter
from pathlib import Path
from typing import List, Optional, Sequence

from lsp2gxl.diagnostics import DiagnosticCode, DiagnosticLog
from lsp2gxl.graph import GraphBuilder
from lsp2gxl.gxl import write_gxl
from lsp2gxl.logging_config import logger
from lsp2gxl.provider import LanguageServerClient, SymbolProvider, flatten_raw_symbols
from lsp2gxl.resolution import ReferenceResolver, reference_lookup_position, split_source_lines
from lsp2gxl.scanner import find_files, validate_file_pattern, validate_root_path
from lsp2gxl.schemas import Graph, IndexSummary
from lsp2gxl.symbols import SymbolStore, reduce_symbols
from lsp2gxl.tracing import trace
from lsp2gxl.uris import path_to_uri


async def _process_file(
    provider: SymbolProvider,
    store: SymbolStore,
    resolver: ReferenceResolver,
    file_path: Path,
    include_references: bool,
    diagnostics: DiagnosticLog,
) -> None:
    uri = path_to_uri(file_path)
    relative = store.relative_path(uri)
    logger.info(f"Getting symbols for '{relative}'")

    raw_symbols = await provider.get_document_symbols(uri)
    symbols = reduce_symbols(flatten_raw_symbols(raw_symbols), uri)
    store.ensure_ancestor_chain(file_path)
    store.record(uri, [store.document_symbol(file_path), *symbols])
    logger.debug(f"Recorded {len(symbols)} of {len(raw_symbols)} symbols for '{relative}'")

    if not include_references:
        return

    source_lines = split_source_lines(file_path.read_text(encoding="utf-8", errors="replace"))
    for symbol in symbols:
        position = reference_lookup_position(symbol, source_lines)
        if position is None:
            diagnostics.emit(
                DiagnosticCode.IMPORT_BINDING,
                f"Skipping references to import binding {symbol.name} in '{relative}'",
                uri=uri,
                symbol=symbol.name,
            )
            continue
        references = await provider.get_references(symbol, position)
        resolver.add_references(symbol, references)


@trace
async def index_files(
    provider: SymbolProvider,
    root_path: Path,
    files: Sequence[Path],
    include_references: bool = True,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Graph:
    """
    Builds the dependency graph for the given files.

    Args:
        provider: Source of document symbols and references.
        root_path: The workspace root. Directories strictly inside it become nodes.
        files: Absolute paths of the documents to index, in processing order.
        include_references: When False, only the containment hierarchy is built.
        diagnostics: Collector for non-fatal misses; a fresh one when omitted.

    Returns:
        The validated graph.

    Raises:
        ProviderError: If the provider fails.
        GraphIntegrityError: If assembly produced an inconsistent graph.
        NodeAttributeError: If a node cannot be built.
    """
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    store = SymbolStore(root_path)
    resolver = ReferenceResolver(store, diagnostics)

    for file_path in files:
        await _process_file(provider, store, resolver, Path(file_path), include_references, diagnostics)

    references = resolver.resolve()
    return GraphBuilder(store, references, diagnostics).build()


async def index_workspace(
    provider: SymbolProvider,
    root_path: Path,
    file_pattern: str,
    include_references: bool = True,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Graph:
    """
    Builds the dependency graph for every file under root_path matching file_pattern.

    Raises:
        ConfigError: If the root or the pattern is invalid.
    """
    root_path = validate_root_path(root_path)
    files = find_files(root_path, file_pattern)
    return await index_files(provider, root_path, files, include_references, diagnostics)


def summarize(
    graph: Graph,
    root_path: Path,
    out_file: Path,
    files: List[Path],
    diagnostics: DiagnosticLog,
    duration: float,
) -> IndexSummary:
    return IndexSummary(
        root_path=str(root_path),
        out_file=str(out_file),
        total_files=len(files),
        total_nodes=len(graph.nodes),
        total_edges=len(graph.edges),
        nodes_by_type=dict(Counter(node.type.value for node in graph.nodes)),
        edges_by_type=dict(Counter(edge.type.value for edge in graph.edges)),
        diagnostics=diagnostics.counts(),
        duration=duration,
    )


@trace
async def run_index(
    command: Sequence[str],
    root_path: Path,
    file_pattern: Optional[str],
    out_file: Path,
    include_references: bool = True,
    diagnostics: Optional[DiagnosticLog] = None,
) -> IndexSummary:
    """
    Runs a language server over a workspace and writes the GXL document.

    The server is shut down before the document is written, whether or not
    indexing succeeded.

    Raises:
        ConfigError: If the root or the pattern is invalid.
        ProviderError: If the server cannot be started or fails.
        GraphIntegrityError, NodeAttributeError, GxlSerializationError:
            If the graph cannot be assembled or rendered.
    """
    start_time = time.time()
    diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
    file_pattern = validate_file_pattern(file_pattern)
    root_path = validate_root_path(root_path)
    files = find_files(root_path, file_pattern)

    async with LanguageServerClient(command, root_path) as client:
        graph = await index_files(client, root_path, files, include_references, diagnostics)

    write_gxl(graph, out_file)
    return summarize(graph, root_path, out_file, files, diagnostics, time.time() - start_time)
