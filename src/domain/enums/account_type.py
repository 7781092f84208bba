"""Account type enumeration.

Investment account classifications shown on the portfolio view.
"""

from enum import Enum


class AccountType(str, Enum):
    """Type of investment account.

    Examples:
        >>> AccountType("401k")
        <AccountType.RETIREMENT_401K: '401k'>
    """

    INDIVIDUAL = "individual"
    JOINT = "joint"
    IRA = "ira"
    ROTH_IRA = "roth_ira"
    RETIREMENT_401K = "401k"
    BROKERAGE = "brokerage"
    OTHER = "other"
