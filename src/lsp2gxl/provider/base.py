from typing import List, Protocol, runtime_checkable

from lsp2gxl.schemas import Position, RawSymbol, Reference, Symbol


@runtime_checkable
class SymbolProvider(Protocol):
    """
    The code-intelligence source the pipeline queries, one call at a time.

    Both operations return an empty list when the provider has nothing to
    report and raise ProviderError on failure.
    """

    async def get_document_symbols(self, uri: str) -> List[RawSymbol]:
        ...

    async def get_references(self, symbol: Symbol, position: Position) -> List[Reference]:
        ...
