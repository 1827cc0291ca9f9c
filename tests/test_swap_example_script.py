import importlib.util
from pathlib import Path

import pytest
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from titan_swap_client.swap import SwapResponse


def load_module(path: Path):
    spec = importlib.util.spec_from_file_location("swap_example", str(path))
    assert spec and spec.loader, "Failed to load module spec"
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # type: ignore[assignment]
    return mod


def test_build_transaction_signed_by_payer():
    mod = load_module(Path("scripts/swap_example.py"))
    kp = Keypair()
    program = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
    ix = Instruction(program, bytes([1]), [AccountMeta(kp.pubkey(), is_signer=True, is_writable=True)])
    swap = SwapResponse(instructions=(ix,), address_lookup_table_addresses=(), compute_unit_limit=0)

    tx = mod.build_transaction(kp, swap, [], Hash.default())

    assert tx.message.account_keys[0] == kp.pubkey()
    assert len(tx.signatures) == 1
    assert tx.message.recent_blockhash == Hash.default()


def test_load_lookup_tables_empty_and_missing():
    mod = load_module(Path("scripts/swap_example.py"))

    class Resp:
        value = None

    class FakeRpc:
        def get_account_info(self, address):
            return Resp()

    assert mod.load_lookup_tables(FakeRpc(), []) == []
    with pytest.raises(RuntimeError):
        mod.load_lookup_tables(FakeRpc(), [Pubkey.default()])


def test_plural():
    mod = load_module(Path("scripts/swap_example.py"))
    assert mod.plural(1) == ""
    assert mod.plural(2) == "s"


def test_ui_amount_uses_decimals():
    mod = load_module(Path("scripts/swap_example.py"))
    assert mod.ui_amount(100_000_000, 9) == "0.10"
    assert mod.ui_amount(15_123_456, 6) == "15.12"


def test_main_returns_error_code_on_api_failure(monkeypatch):
    from titan_swap_client.errors import ApiError

    mod = load_module(Path("scripts/swap_example.py"))

    class FailingClient:
        def quote(self, request):
            raise ApiError(500, '{"error": "upstream down"}')

    class FakeTitanClient:
        @classmethod
        def from_settings(cls, settings):
            return FailingClient()

    monkeypatch.setenv("TITAN_AUTH_TOKEN", "tok")
    monkeypatch.setenv("TITAN_USER_PUBKEY", "9xQeWvG816bUx9EPm2Tbd2Ykqg3k9uADuZbL9g1z3Q2E")
    monkeypatch.setenv("TITAN_PRIVATE_KEY", "")
    monkeypatch.setenv("TITAN_SEND_TX", "false")
    monkeypatch.setattr(mod, "TitanClient", FakeTitanClient)
    monkeypatch.setattr("sys.argv", ["swap_example.py"])

    assert mod.main() == 1


def test_main_returns_error_code_on_invalid_request(monkeypatch):
    mod = load_module(Path("scripts/swap_example.py"))

    monkeypatch.setenv("TITAN_AUTH_TOKEN", "tok")
    monkeypatch.setenv("TITAN_USER_PUBKEY", "9xQeWvG816bUx9EPm2Tbd2Ykqg3k9uADuZbL9g1z3Q2E")
    monkeypatch.setenv("TITAN_PRIVATE_KEY", "")
    monkeypatch.setenv("TITAN_SEND_TX", "false")
    monkeypatch.setattr("sys.argv", ["swap_example.py", "--amount", "0"])

    assert mod.main() == 1
