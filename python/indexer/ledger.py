"""Ledger context and identifier encoding.

Every projected event comes with the context of the block that carried it.
Identifiers are normalized here so that bucket/object keys and addresses are
rendered identically no matter which event they arrive in.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

HASH_LENGTH = 32
ADDRESS_LENGTH = 20

ZERO_ADDRESS = "0x" + "00" * ADDRESS_LENGTH


@dataclass(frozen=True)
class LedgerContext:
    """Block/transaction metadata accompanying one event.

    Attributes:
        block_height: Height of the block carrying the event
        block_time: Ledger-reported block time (naive values are taken as UTC)
        tx_hash: Hash of the transaction that emitted the event
        chain_id: Id of the chain the event was emitted on
    """

    block_height: int
    block_time: datetime
    tx_hash: str
    chain_id: int = 0

    @property
    def block_timestamp(self) -> int:
        """Block time as unix seconds."""
        block_time = self.block_time
        if block_time.tzinfo is None:
            block_time = block_time.replace(tzinfo=timezone.utc)
        return int(block_time.timestamp())


def big_to_hash(value: int) -> str:
    """Render an unsigned ledger id as a 32-byte big-endian hex hash.

    Values wider than 32 bytes keep their low-order bytes.
    """
    if value < 0:
        raise ValueError(f"ledger ids are unsigned, got {value}")
    raw = (value % (1 << (8 * HASH_LENGTH))).to_bytes(HASH_LENGTH, "big")
    return "0x" + raw.hex()


def hex_to_address(value: str) -> str:
    """Normalize a hex account address to 0x + 40 lowercase hex digits.

    Longer inputs keep their last 20 bytes; shorter ones are left-padded.
    """
    digits = value[2:] if value[:2] in ("0x", "0X") else value
    if len(digits) % 2 == 1:
        digits = "0" + digits
    raw = bytes.fromhex(digits)
    raw = raw[-ADDRESS_LENGTH:].rjust(ADDRESS_LENGTH, b"\x00")
    return "0x" + raw.hex()
