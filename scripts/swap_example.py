from __future__ import annotations

import argparse
from typing import Iterable

from loguru import logger
from pydantic import ValidationError
from solana.rpc.api import Client
from solana.rpc.types import TxOpts
from solders.address_lookup_table_account import AddressLookupTable, AddressLookupTableAccount
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from titan_swap_client.client import TitanClient
from titan_swap_client.config import ClientSettings
from titan_swap_client.errors import TitanClientError
from titan_swap_client.quote import QuoteRequest, SwapMode
from titan_swap_client.swap import SwapResponse

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SWAP_AMOUNT = 100_000_000  # 0.1 SOL
SLIPPAGE_BPS = 50


def load_keypair(private_key: str) -> Keypair:
    import base58

    return Keypair.from_bytes(base58.b58decode(private_key))


def load_lookup_tables(rpc, addresses: Iterable[Pubkey]) -> list[AddressLookupTableAccount]:
    tables: list[AddressLookupTableAccount] = []
    for address in addresses:
        account = rpc.get_account_info(address).value
        if account is None:
            raise RuntimeError(f"Address lookup table {address} not found")
        alt = AddressLookupTable.deserialize(bytes(account.data))
        logger.info("Loaded ALT {} with {} addresses", address, len(alt.addresses))
        tables.append(AddressLookupTableAccount(key=address, addresses=list(alt.addresses)))
    return tables


def build_transaction(
    keypair: Keypair,
    swap: SwapResponse,
    lookup_tables: list[AddressLookupTableAccount],
    blockhash: Hash,
) -> VersionedTransaction:
    message = MessageV0.try_compile(keypair.pubkey(), swap.instructions, lookup_tables, blockhash)
    return VersionedTransaction(message, [keypair])


def plural(n: int) -> str:
    return "" if n == 1 else "s"


def ui_amount(amount: int, decimals: int) -> str:
    return f"{amount / 10**decimals:.2f}"


def main() -> int:
    p = argparse.ArgumentParser(description="Quote a swap on Titan and optionally send it")
    p.add_argument("--input-mint", default=SOL_MINT)
    p.add_argument("--output-mint", default=USDC_MINT)
    p.add_argument("--amount", type=int, default=SWAP_AMOUNT, help="Input amount in the smallest unit")
    p.add_argument("--slippage-bps", type=int, default=SLIPPAGE_BPS)
    p.add_argument("--max-accounts", type=int, default=50)
    p.add_argument("--in-decimals", type=int, default=9, help="Decimals of the input mint (SOL: 9)")
    p.add_argument("--out-decimals", type=int, default=6, help="Decimals of the output mint (USDC: 6)")
    p.add_argument("--send", action="store_true", help="Send the transaction (same as TITAN_SEND_TX=true)")
    args = p.parse_args()

    settings = ClientSettings()
    logger.remove()
    logger.add(lambda m: print(m, end=""), level=settings.log_level)

    if not settings.user_pubkey:
        logger.error("TITAN_USER_PUBKEY must be set")
        return 1
    send_tx = args.send or settings.send_tx

    keypair = None
    if settings.private_key:
        keypair = load_keypair(settings.private_key)
        if str(keypair.pubkey()) != settings.user_pubkey:
            logger.error("TITAN_USER_PUBKEY does not match the keypair derived from TITAN_PRIVATE_KEY")
            return 1
    elif send_tx:
        logger.error("TITAN_PRIVATE_KEY must be set to send transactions")
        return 1

    try:
        request = QuoteRequest(
            input_mint=args.input_mint,
            output_mint=args.output_mint,
            amount=args.amount,
            user_pubkey=settings.user_pubkey,
            max_accounts=args.max_accounts,
            swap_mode=SwapMode.EXACT_IN,
            slippage_bps=args.slippage_bps,
        )
    except ValidationError as e:
        logger.error("Invalid quote request: {}", e)
        return 1

    client = TitanClient.from_settings(settings)
    try:
        quote = client.quote(request)
        swap = client.swap(quote)
    except TitanClientError as e:
        logger.error("Titan request failed: {}", e)
        return 1

    steps = len(quote.route_plan)
    print(
        f"Quote: {ui_amount(quote.in_amount, args.in_decimals)} -> "
        f"{ui_amount(quote.out_amount, args.out_decimals)} "
        f"({quote.slippage_bps} bps slippage, {steps} step{plural(steps)})"
    )

    alts = len(swap.address_lookup_table_addresses)
    print(
        f"Swap: {len(swap.instructions)} instructions, {swap.compute_unit_limit} CU limit, "
        f"{alts} ALT{plural(alts)}"
    )

    if not send_tx:
        print("\nSet TITAN_SEND_TX=true to actually send the transaction")
        return 0

    rpc = Client(settings.rpc_url)
    blockhash = rpc.get_latest_blockhash().value.blockhash
    tables = load_lookup_tables(rpc, swap.address_lookup_table_addresses)
    tx = build_transaction(keypair, swap, tables, blockhash)

    logger.info("Sending transaction...")
    resp = rpc.send_raw_transaction(bytes(tx), opts=TxOpts(skip_confirmation=False))
    sig = resp.value
    print(f"\nTransaction sent: {sig}")
    print(f"Explorer: https://solscan.io/tx/{sig}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
