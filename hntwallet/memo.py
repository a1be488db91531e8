"""Payment memo: a 64-bit value written as base64."""

from __future__ import annotations

from dataclasses import dataclass

from hntwallet.codec import WalletError, u64_from_b64, u64_to_b64


@dataclass(frozen=True, order=True)
class Memo:
    """A payment memo holding an unsigned 64-bit value."""

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value < 1 << 64:
            raise ValueError(f"{self.value} is not an unsigned 64-bit integer")

    @classmethod
    def parse(cls, text: str) -> Memo:
        """Parse a memo from its base64 form."""
        try:
            return cls(u64_from_b64(text))
        except WalletError as err:
            raise WalletError("Invalid base64 memo") from err

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return u64_to_b64(self.value)