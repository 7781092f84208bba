"""Schwab account mapper.

Selects the remote account to sync from the accountNumbers listing and
extracts the account balance from the account document.

Schwab Account Numbers Response:
    [
        {"accountNumber": "12345678", "hashValue": "E5B8A1..."}
    ]

Schwab Account Response (balance part):
    {
        "securitiesAccount": {
            "type": "MARGIN",
            "accountNumber": "12345678",
            "currentBalances": {"liquidationValue": 50000.00}
        }
    }

Reference:
    - Schwab Trader API: https://developer.schwab.com
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


class SchwabAccountMapper:
    """Mapper for Schwab account listings and balances.

    Thread-safe: No mutable state, can be shared across requests.
    """

    def resolve_account_hash(
        self,
        account_numbers: list[dict[str, Any]],
        preferred: str | None,
    ) -> Result[str, ProviderInvalidResponseError]:
        """Pick the account hash to sync.

        Args:
            account_numbers: Records from /accounts/accountNumbers.
            preferred: Stored hash (or plain account number) of the account.

        Returns:
            Success(str): Hash of the stored account, else of the first account.
            Failure(ProviderInvalidResponseError): No usable account, or the
                stored account is no longer visible to the credentials.
        """
        hashes = [
            (record.get("accountNumber"), record.get("hashValue"))
            for record in account_numbers
            if isinstance(record, dict) and record.get("hashValue")
        ]
        if not hashes:
            return Failure(
                error=invalid_payload("schwab", "Schwab returned no accounts")
            )

        if preferred is None:
            return Success(value=hashes[0][1])

        for account_number, hash_value in hashes:
            if preferred in (hash_value, account_number):
                return Success(value=hash_value)

        logger.warning(
            "schwab_stored_account_not_found",
            account_ref=mask_ref(preferred),
            visible_accounts=len(hashes),
        )
        return Failure(
            error=invalid_payload(
                "schwab", "Stored Schwab account is not visible to these credentials"
            )
        )

    def map_balance(self, account_data: dict[str, Any]) -> Decimal:
        """Extract liquidationValue (2dp).

        Raises:
            PayloadError: Balance missing or not numeric.
        """
        securities_account = account_data.get("securitiesAccount")
        if not isinstance(securities_account, dict):
            raise PayloadError("securitiesAccount", securities_account)

        balances = securities_account.get("currentBalances") or {}
        return quantize_money(
            parse_decimal(
                balances.get("liquidationValue"),
                "currentBalances.liquidationValue",
            )
        )
