"""Web boundary layer for the wallet swap API.

This layer translates wire contracts to routing types and back.

PRINCIPLES:
1. Quotes and unsigned transactions only. Nothing here signs or
   broadcasts.
2. Provider-specific knowledge stays in routing/. Services here only
   see NormalizedQuote and TransactionPayload.
"""

__all__ = [
    "contracts",
    "services",
]
