"""Plaid account mapper.

Plaid Accounts Response (accounts part):
    {
        "accounts": [
            {
                "account_id": "BxBXxLj1m4HMXBm9WZZmCWVbPjX16EHwv99vp",
                "name": "Plaid IRA",
                "type": "investment",
                "subtype": "ira",
                "balances": {"current": 320.76, "available": null}
            }
        ]
    }
"""

from decimal import Decimal
from typing import Any

import structlog

from src.core.result import Failure, Result, Success
from src.domain.errors import ProviderInvalidResponseError
from src.infrastructure.providers.normalization import (
    PayloadError,
    invalid_payload,
    mask_ref,
    parse_decimal,
    quantize_money,
)

logger = structlog.get_logger(__name__)


class PlaidAccountMapper:
    """Mapper for Plaid account selection and balances."""

    def resolve_account_id(
        self,
        accounts: list[dict[str, Any]],
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        """Pick the account to sync.

        The stored account id wins; otherwise the first investment account,
        otherwise the first account of the item.
        """
        usable = [a for a in accounts if isinstance(a, dict) and a.get("account_id")]
        if not usable:
            return Failure(error=invalid_payload("plaid", "Plaid item has no accounts"))

        if preferred is not None:
            if any(a["account_id"] == preferred for a in usable):
                return Success(value=preferred)
            logger.warning(
                "plaid_stored_account_not_found",
                account_ref=mask_ref(preferred),
                visible_accounts=len(usable),
            )
            return Failure(
                error=invalid_payload(
                    "plaid", "Stored Plaid account is not visible to this item"
                )
            )

        investment = next((a for a in usable if a.get("type") == "investment"), None)
        return Success(value=(investment or usable[0])["account_id"])

    def map_balance(self, accounts: list[dict[str, Any]], account_id: str) -> Decimal:
        """Current balance of account_id (2dp).

        Raises:
            PayloadError: Account absent or balance not numeric.
        """
        account = next(
            (a for a in accounts if isinstance(a, dict) and a.get("account_id") == account_id),
            None,
        )
        if account is None:
            raise PayloadError("accounts", mask_ref(account_id))

        balances = account.get("balances") or {}
        return quantize_money(parse_decimal(balances.get("current"), "balances.current"))
