"""Web services for quoting and asset listings.

These services MUST NOT sign or broadcast transactions. They:
- Aggregate quotes across providers
- Prepare unsigned transactions for client signing
- List networks and tokens for the swap UI
"""

from bitrabo.web.services.quote_service import QuoteService
from bitrabo.web.services.token_service import TokenService

__all__ = [
    "QuoteService",
    "TokenService",
]
