from __future__ import annotations

from dataclasses import dataclass, field

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from titan_swap_client.errors import NoRoutesAvailable
from titan_swap_client.quote import InstructionData, SwapRoute


@dataclass(frozen=True)
class SwapResponse:
    instructions: tuple[Instruction, ...]
    address_lookup_table_addresses: tuple[Pubkey, ...]
    compute_unit_limit: int
    compute_units_safe: int | None = None
    context_slot: int | None = None
    expires_at_ms: int | None = None
    expires_after_slot: int | None = None
    transaction: bytes | None = field(default=None, repr=False)

    @classmethod
    def from_route(cls, route: SwapRoute) -> SwapResponse:
        if not route.instructions:
            raise NoRoutesAvailable()
        return cls(
            instructions=tuple(to_instruction(ix) for ix in route.instructions),
            address_lookup_table_addresses=tuple(route.address_lookup_tables),
            compute_unit_limit=route.compute_units or 0,
            compute_units_safe=route.compute_units_safe,
            context_slot=route.context_slot,
            expires_at_ms=route.expires_at_ms,
            expires_after_slot=route.expires_after_slot,
            transaction=route.transaction,
        )


def to_instruction(ix: InstructionData) -> Instruction:
    accounts = [
        AccountMeta(pubkey=meta.pubkey, is_signer=meta.is_signer, is_writable=meta.is_writable)
        for meta in ix.accounts
    ]
    return Instruction(program_id=ix.program_id, data=ix.data, accounts=accounts)
