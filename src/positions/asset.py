"""Asset - a fungible unit of value (a currency or similar denominator)."""

import re
from functools import total_ordering
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from positions.errors import InvalidAssetCode

# Upper-case ASCII letters and digits; '-' is reserved for instrument symbols
_CODE_PATTERN = re.compile(r"^[A-Z0-9]{1,16}$")


def _normalize(text: str) -> str:
    return text.strip().upper()


@total_ordering
class Asset(BaseModel):
    """
    Identifier for a fungible unit of value.

    Codes are normalized (stripped, upper-cased) and compared by value, so
    ``Asset.parse("usd") == Asset.parse(" USD ")``. Immutable and hashable,
    usable as a dictionary key.

    Example:
        >>> mx = Asset.parse("MX")
        >>> str(mx)
        'MX'
    """

    code: str = Field(..., description="Normalized currency code (e.g., 'USD', 'BTC')")

    model_config = ConfigDict(frozen=True)

    @field_validator("code", mode="before")
    @classmethod
    def validate_code(cls, v: Any) -> str:
        """Normalize and validate the code."""
        if not isinstance(v, str):
            raise ValueError(f"Asset code must be a string, got {type(v).__name__}")
        code = _normalize(v)
        if not _CODE_PATTERN.match(code):
            raise ValueError(f"Invalid asset code: {v!r}")
        return code

    @classmethod
    def parse(cls, text: str) -> "Asset":
        """
        Parse an asset from text.

        Args:
            text: Currency code, case-insensitive, surrounding whitespace ignored

        Returns:
            Parsed Asset

        Raises:
            InvalidAssetCode: If text is not 1-16 ASCII letters or digits
        """
        if not isinstance(text, str):
            raise InvalidAssetCode(text)
        code = _normalize(text)
        if not _CODE_PATTERN.match(code):
            raise InvalidAssetCode(text)
        return cls(code=code)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.code < other.code

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Asset({self.code})"


USD = Asset(code="USD")
EUR = Asset(code="EUR")
CAD = Asset(code="CAD")
USDT = Asset(code="USDT")
BTC = Asset(code="BTC")
