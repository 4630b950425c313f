"""
utils.token_catalog
~~~~~~~~~~~~~~~~~~~
Catálogo de tokens de referencia (datos externos, inmutables en la sesión
salvo el precio, que vive en `utils.price_service.QuoteBook`).

Uso:
    cat = TokenCatalog.from_quotes(await radar_api.fetch_tokens())
    tok = cat.resolve("sol:pepe2")        # InvalidToken si no existe
    cat.search("pep")                     # nombre / símbolo / address
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from utils.data_utils import safe_float
from utils.errors import InvalidToken


def make_token_id(chain: str, symbol: str) -> str:
    """Id estable para tokens del feed: "<chain>:<symbol>" en minúsculas, sin '$'."""
    return f"{(chain or '').strip().lower()}:{(symbol or '').strip().lstrip('$').lower()}"


@dataclass(frozen=True)
class TokenRef:
    id: str
    name: str
    symbol: str
    chain: str
    address: str = ""
    price: Optional[float] = None

    @classmethod
    def from_quote(cls, quote: Mapping[str, Any]) -> "TokenRef":
        chain = str(quote.get("chain") or "")
        symbol = str(quote.get("symbol") or "")
        return cls(
            id=str(quote.get("id") or make_token_id(chain, symbol)),
            name=str(quote.get("name") or symbol),
            symbol=symbol,
            chain=chain,
            address=str(quote.get("address") or ""),
            price=safe_float(quote.get("price_usd", quote.get("priceUsd"))),
        )


class TokenCatalog:
    """Índice por id; conserva el orden de inserción."""

    def __init__(self, tokens: Iterable[TokenRef] = ()) -> None:
        self._by_id: Dict[str, TokenRef] = {}
        for tok in tokens:
            self._by_id[tok.id] = tok

    @classmethod
    def from_quotes(cls, quotes: Iterable[Mapping[str, Any]]) -> "TokenCatalog":
        return cls(TokenRef.from_quote(q) for q in quotes)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, token_id: object) -> bool:
        return token_id in self._by_id

    def __iter__(self):
        return iter(self._by_id.values())

    def get(self, token_id: str) -> Optional[TokenRef]:
        return self._by_id.get(token_id)

    def resolve(self, token_id: str) -> TokenRef:
        tok = self._by_id.get(token_id)
        if tok is None:
            raise InvalidToken(f"unknown token {token_id!r}")
        return tok

    def search(self, query: str) -> List[TokenRef]:
        """Filtro contains (case-insensitive) sobre nombre, símbolo y address."""
        q = (query or "").strip().lower()
        if not q:
            return list(self._by_id.values())
        return [
            t for t in self._by_id.values()
            if q in t.name.lower() or q in t.symbol.lower() or q in t.address.lower()
        ]

    def merged(self, tokens: Iterable[TokenRef]) -> "TokenCatalog":
        """Nuevo catálogo con `tokens` añadidos/sustituidos por id."""
        out = TokenCatalog(self._by_id.values())
        for tok in tokens:
            out._by_id[tok.id] = tok
        return out


__all__ = ["TokenRef", "TokenCatalog", "make_token_id"]
