"""
Partner company trust lookup.
"""

from typing import Optional, Protocol

from fleetledger.core.exceptions import NotFoundError
from fleetledger.data.models.load import TrustLevel


class TrustDirectory(Protocol):
    def trust_level(self, company_id: str) -> TrustLevel: ...


class StaticTrustDirectory:
    """
    Trust levels held in memory.

    Unknown companies fall back to default_level when one is set,
    otherwise they raise NotFoundError.
    """

    def __init__(
        self,
        levels: Optional[dict[str, TrustLevel]] = None,
        default_level: Optional[TrustLevel] = None,
    ) -> None:
        self._levels = {k: TrustLevel(v) for k, v in (levels or {}).items()}
        self.default_level = default_level

    def trust_level(self, company_id: str) -> TrustLevel:
        level = self._levels.get(company_id, self.default_level)
        if level is None:
            raise NotFoundError(f"no trust level for company {company_id}", field="company_id")
        return level
