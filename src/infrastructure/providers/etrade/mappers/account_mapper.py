"""E*TRADE account mapper.

Extracts account records from the account list, selects the account to
sync and reads the real-time account value from the balance document.

E*TRADE Account List Response:
    {
        "AccountListResponse": {
            "Accounts": {
                "Account": [
                    {
                        "accountId": "84010429",
                        "accountIdKey": "JIdOIAcSpwR1Jva7RQBraQ",
                        "accountName": "Brokerage",
                        "accountStatus": "ACTIVE"
                    }
                ]
            }
        }
    }

E*TRADE Balance Response:
    {
        "BalanceResponse": {
            "Computed": {"RealTimeValues": {"totalAccountValue": 12345.67}}
        }
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


def as_list(value: Any) -> list[Any]:
    """E*TRADE JSON renders single-element arrays as bare objects."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class ETradeAccountMapper:
    """Mapper for E*TRADE account listings and balances."""

    def extract_accounts(self, document: dict[str, Any]) -> list[dict[str, Any]]:
        """Account records from an AccountListResponse.

        Raises:
            PayloadError: Document does not have the expected shape.
        """
        response = document.get("AccountListResponse")
        if not isinstance(response, dict):
            raise PayloadError("AccountListResponse", type(response).__name__)

        accounts = (response.get("Accounts") or {}).get("Account")
        return [a for a in as_list(accounts) if isinstance(a, dict)]

    def resolve_account_id_key(
        self,
        accounts: list[dict[str, Any]],
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        """Pick the accountIdKey to sync.

        The stored key (or plain accountId) wins; otherwise the first account
        that is not closed.
        """
        usable = [a for a in accounts if a.get("accountIdKey")]

        if preferred is not None:
            for account in usable:
                if preferred in (account.get("accountIdKey"), account.get("accountId")):
                    return Success(value=account["accountIdKey"])
            logger.warning(
                "etrade_stored_account_not_found",
                account_ref=mask_ref(preferred),
                visible_accounts=len(usable),
            )
            return Failure(
                error=invalid_payload(
                    "etrade", "Stored E*TRADE account is not visible to these credentials"
                )
            )

        for account in usable:
            if str(account.get("accountStatus", "")).upper() != "CLOSED":
                return Success(value=account["accountIdKey"])

        return Failure(error=invalid_payload("etrade", "E*TRADE returned no open accounts"))

    def map_balance(self, document: dict[str, Any]) -> Decimal:
        """Extract totalAccountValue (2dp).

        Raises:
            PayloadError: Value missing or not numeric.
        """
        real_time = (
            ((document.get("BalanceResponse") or {}).get("Computed") or {}).get(
                "RealTimeValues"
            )
            or {}
        )
        return quantize_money(
            parse_decimal(
                real_time.get("totalAccountValue"),
                "BalanceResponse.Computed.RealTimeValues.totalAccountValue",
            )
        )
