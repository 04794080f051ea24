"""
Wallet Models

Identity of a store wallet and the recovery phrase returned by wallet
generation.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

MNEMONIC_WORD_COUNTS = (12, 15, 18, 21, 24)


class WalletId(BaseModel):
    """
    A wallet belonging to a store, identified by store id and asset code.

    Rendered as ``S-<store_id>-<crypto_code>`` in wallet URLs.
    """

    model_config = ConfigDict(frozen=True)

    store_id: str = Field(..., min_length=1, description="Owning store id")
    crypto_code: str = Field(..., min_length=1, description="Asset code, e.g. BTC")

    @field_validator("crypto_code")
    @classmethod
    def normalize_crypto_code(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def parse(cls, value: str) -> "WalletId":
        """Parse the ``S-<store_id>-<crypto_code>`` form."""
        prefix, sep, rest = value.partition("S-")
        if prefix or not sep:
            raise ValueError(f"Not a wallet id: {value!r}")
        store_id, sep, crypto_code = rest.rpartition("-")
        if not sep:
            raise ValueError(f"Not a wallet id: {value!r}")
        return cls(store_id=store_id, crypto_code=crypto_code)

    def __str__(self) -> str:
        return f"S-{self.store_id}-{self.crypto_code}"


class Mnemonic(BaseModel):
    """Recovery phrase of a generated wallet."""

    model_config = ConfigDict(frozen=True)

    words: List[str]

    @field_validator("words")
    @classmethod
    def validate_word_count(cls, v: List[str]) -> List[str]:
        if len(v) not in MNEMONIC_WORD_COUNTS:
            raise ValueError(
                f"Mnemonic must have {MNEMONIC_WORD_COUNTS} words, got {len(v)}"
            )
        return v

    @classmethod
    def from_phrase(cls, phrase: str) -> "Mnemonic":
        return cls(words=phrase.split())

    def __str__(self) -> str:
        return " ".join(self.words)
