# tests/test_swap_pool.py

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from token_swap.core import swap_pool
from token_swap.core.exceptions import (
    AccountNotFoundError,
    MissingRequiredAccountError,
    SendTransactionError,
    TokenSwapError,
    ValueTooLargeError,
)
from token_swap.core.instructions import TokenSwapInstruction, decode_instruction_data, instruction_opcode
from token_swap.core.layouts import TOKEN_SWAP_ACCOUNT_SIZE, CurveType
from token_swap.core.pool_state import find_authority
from token_swap.core.swap_pool import TokenSwap
from token_swap.core.transactions import TransactionSendResult

RENT = 3_145_920


class FakeSolanaClient:
    def __init__(self, accounts):
        self.accounts = accounts
        self.fetches = []

    async def fetch_account_bytes(self, address, expected_owner=None):
        self.fetches.append((address, expected_owner))
        if address not in self.accounts:
            raise AccountNotFoundError(f"Failed to find account {address}")
        return self.accounts[address]

    async def get_minimum_balance_for_rent_exemption(self, size):
        assert size == TOKEN_SWAP_ACCOUNT_SIZE
        return RENT


@pytest.fixture
def submitted(monkeypatch):
    calls = []

    async def fake_submit(client, instructions, payer, signers=None, label="Transaction", **kwargs):
        calls.append({"instructions": list(instructions), "payer": payer, "signers": list(signers), "label": label})
        return TransactionSendResult(success=True, signature="5igSig")

    monkeypatch.setattr(swap_pool, "submit_and_confirm", fake_submit)
    return calls


@pytest.fixture
def payer():
    return Keypair()


@pytest.fixture
def client(swap_address, pool_bytes):
    return FakeSolanaClient({swap_address: pool_bytes})


@pytest.fixture
async def pool(client, swap_address, program_id, payer):
    return await TokenSwap.load(client, swap_address, program_id, payer)


@pytest.mark.asyncio
async def test_load(pool, client, swap_address, program_id, pool_fields):
    assert client.fetches == [(swap_address, program_id)]
    assert pool.address == swap_address
    assert pool.authority == find_authority(swap_address, program_id)[0]
    assert pool.pool_token_mint == pool_fields["token_pool"]
    assert pool.token_account_a == pool_fields["token_account_a"]
    assert pool.curve_type is CurveType.CONSTANT_PRODUCT


@pytest.mark.asyncio
async def test_load_missing_account(client, program_id):
    with pytest.raises(AccountNotFoundError):
        await TokenSwap.load(client, Pubkey.new_unique(), program_id)


@pytest.mark.asyncio
async def test_rent(client):
    assert await TokenSwap.get_min_balance_rent_for_exempt_token_swap(client) == RENT


@pytest.mark.asyncio
async def test_swap(pool, payer, submitted, program_id):
    user = Keypair()
    host = Pubkey.new_unique()
    sig = await pool.swap(
        user_source=Pubkey.new_unique(),
        pool_source=pool.token_account_a,
        pool_destination=pool.token_account_b,
        user_destination=Pubkey.new_unique(),
        host_fee_account=host,
        user_transfer_authority=user,
        amount_in=1_000,
        minimum_amount_out=900,
    )
    assert sig == "5igSig"
    (call,) = submitted
    assert call["label"] == "swap"
    assert call["payer"] is payer
    assert call["signers"] == [user]
    (ix,) = call["instructions"]
    assert ix.program_id == program_id
    assert instruction_opcode(ix) is TokenSwapInstruction.SWAP
    assert len(ix.accounts) == 11
    assert ix.accounts[0].pubkey == pool.address
    assert ix.accounts[1].pubkey == pool.authority
    assert ix.accounts[2].pubkey == user.pubkey()
    assert ix.accounts[7].pubkey == pool.pool_token_mint
    assert ix.accounts[8].pubkey == pool.fee_account
    assert ix.accounts[10].pubkey == host


@pytest.mark.asyncio
async def test_swap_invalid_amount_sends_nothing(pool, submitted):
    with pytest.raises(ValueTooLargeError):
        await pool.swap(Pubkey.new_unique(), pool.token_account_a, pool.token_account_b,
                        Pubkey.new_unique(), None, Keypair(), 2**64, 0)
    assert submitted == []


@pytest.mark.asyncio
async def test_deposit_all_token_types(pool, submitted):
    user_a, user_b, pool_account = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    await pool.deposit_all_token_types(user_a, user_b, pool_account, Keypair(), 100, 10, 20)
    (ix,) = submitted[0]["instructions"]
    op, fields = decode_instruction_data(bytes(ix.data))
    assert op is TokenSwapInstruction.DEPOSIT_ALL_TOKEN_TYPES
    assert fields == {"pool_token_amount": 100, "maximum_token_a": 10, "maximum_token_b": 20}
    keys = [m.pubkey for m in ix.accounts]
    assert keys[3:9] == [user_a, user_b, pool.token_account_a, pool.token_account_b,
                         pool.pool_token_mint, pool_account]


@pytest.mark.asyncio
async def test_withdraw_all_token_types(pool, submitted):
    user_a, user_b, pool_account = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
    await pool.withdraw_all_token_types(user_a, user_b, pool_account, Keypair(), 100, 1, 2)
    (ix,) = submitted[0]["instructions"]
    assert instruction_opcode(ix) is TokenSwapInstruction.WITHDRAW_ALL_TOKEN_TYPES
    keys = [m.pubkey for m in ix.accounts]
    assert keys[3:10] == [pool.pool_token_mint, pool_account, pool.token_account_a, pool.token_account_b,
                          user_a, user_b, pool.fee_account]


@pytest.mark.asyncio
async def test_single_token_type_operations(pool, submitted):
    user, pool_account = Pubkey.new_unique(), Pubkey.new_unique()
    await pool.deposit_single_token_type_exact_amount_in(user, pool_account, Keypair(), 500, 5)
    await pool.withdraw_single_token_type_exact_amount_out(user, pool_account, Keypair(), 500, 7)
    deposit_ix = submitted[0]["instructions"][0]
    withdraw_ix = submitted[1]["instructions"][0]
    assert instruction_opcode(deposit_ix) is TokenSwapInstruction.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_IN
    assert instruction_opcode(withdraw_ix) is TokenSwapInstruction.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_AMOUNT_OUT
    assert len(deposit_ix.accounts) == 9
    assert len(withdraw_ix.accounts) == 10


@pytest.mark.asyncio
async def test_send_failure_raises(pool, monkeypatch):
    async def failing_submit(*args, **kwargs):
        return TransactionSendResult(success=False, error_message="boom", error_type="TxError")

    monkeypatch.setattr(swap_pool, "submit_and_confirm", failing_submit)
    with pytest.raises(SendTransactionError):
        await pool.deposit_single_token_type_exact_amount_in(Pubkey.new_unique(), Pubkey.new_unique(),
                                                             Keypair(), 1, 1)


@pytest.mark.asyncio
async def test_operations_need_payer(client, swap_address, program_id, submitted):
    pool = await TokenSwap.load(client, swap_address, program_id)
    with pytest.raises(TokenSwapError):
        await pool.withdraw_single_token_type_exact_amount_out(Pubkey.new_unique(), Pubkey.new_unique(),
                                                               Keypair(), 1, 1)
    assert submitted == []


@pytest.mark.asyncio
async def test_refresh_returns_new_handle(pool, client):
    fresh = await pool.refresh()
    assert fresh is not pool
    assert fresh.state == pool.state
    assert len(client.fetches) == 2


@pytest.mark.asyncio
async def test_create(client, payer, program_id, pool_bytes, fees, submitted):
    swap_account = Keypair()
    client.accounts[swap_account.pubkey()] = pool_bytes
    authority, nonce = find_authority(swap_account.pubkey(), program_id)

    pool = await TokenSwap.create(
        client, payer, swap_account, authority, nonce,
        token_account_a=Pubkey.new_unique(),
        token_account_b=Pubkey.new_unique(),
        pool_token_mint=Pubkey.new_unique(),
        fee_account=Pubkey.new_unique(),
        token_account_pool=Pubkey.new_unique(),
        fees=fees,
        program_id=program_id,
    )

    (call,) = submitted
    assert call["signers"] == [swap_account]
    create_ix, init_ix = call["instructions"]
    assert bytes(create_ix.data)[:4] == (0).to_bytes(4, "little")  # system CreateAccount
    assert int.from_bytes(bytes(create_ix.data)[4:12], "little") == RENT
    assert int.from_bytes(bytes(create_ix.data)[12:20], "little") == TOKEN_SWAP_ACCOUNT_SIZE
    assert bytes(create_ix.data)[20:52] == bytes(program_id)

    op, fields = decode_instruction_data(bytes(init_ix.data))
    assert op is TokenSwapInstruction.INITIALIZE
    assert fields["nonce"] == nonce
    assert fields["trade_fee_numerator"] == fees.trade_fee_numerator
    assert init_ix.accounts[0].pubkey == swap_account.pubkey()
    assert init_ix.accounts[1].pubkey == authority

    assert pool.address == swap_account.pubkey()
    assert pool.payer is payer


@pytest.mark.asyncio
async def test_create_missing_account_sends_nothing(client, payer, program_id, fees, submitted):
    swap_account = Keypair()
    authority, nonce = find_authority(swap_account.pubkey(), program_id)
    with pytest.raises(MissingRequiredAccountError):
        await TokenSwap.create(
            client, payer, swap_account, authority, nonce,
            token_account_a=Pubkey.new_unique(),
            token_account_b=Pubkey.new_unique(),
            pool_token_mint=Pubkey.new_unique(),
            fee_account=None,
            token_account_pool=Pubkey.new_unique(),
            fees=fees,
            program_id=program_id,
        )
    assert submitted == []
