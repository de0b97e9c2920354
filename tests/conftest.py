from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from controllers.trade_controller import TradeController
from controllers.wallet_controller import WalletController
from enums.trade_action import TradeAction
from models.quote import Quote
from models.token import TokenInfo
from repositories.session_repository import SessionRepository
from repositories.wallet_repository import WalletRepository
from utils.solana_utils import SOL_MINT, to_base_units

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
# dirección válida sin pares en el mercado
UNLISTED = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


def make_token(address: str, symbol: str = "TKN") -> TokenInfo:
    return TokenInfo(address=address, name=f"{symbol} token", symbol=symbol, price_usd=0.5,
                     fdv=1_000_000.0, volume_h24=25_000.0, price_change_h24=-3.2,
                     liquidity_usd=80_000.0, dex_id="raydium")


class FakeMarket:
    def __init__(self, tokens: dict | None = None) -> None:
        self.tokens = tokens if tokens is not None else {USDC: make_token(USDC, "USDC"), BONK: make_token(BONK, "BONK")}
        self.calls: list[str] = []
        self.error: Exception | None = None

    def get_token_info(self, address: str):
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.tokens.get(address)


class FakeSolana:
    """Saldos fijos y registro ordenado de llamadas."""
    def __init__(self, balance: int = 2_000_000_000, token_balance: float = 0.0, decimals: int = 6) -> None:
        self.balance = balance
        self.token_balance = token_balance
        self.decimals = decimals
        self.calls: list[tuple] = []

    def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        return self.balance

    def get_token_balance(self, owner: str, mint: str) -> float:
        self.calls.append(("get_token_balance", owner, mint))
        return self.token_balance

    def get_mint_decimals(self, mint: str) -> int:
        self.calls.append(("get_mint_decimals", mint))
        return 9 if mint == SOL_MINT else self.decimals

    def ensure_token_account(self, signer, mint: str) -> str:
        self.calls.append(("ensure_token_account", mint))
        return f"ata-{mint}"

    def approve_delegate(self, signer, mint: str, delegate: str, amount_raw: int) -> str:
        self.calls.append(("approve_delegate", mint, delegate, amount_raw))
        return "approve-sig"

    def send_and_confirm(self, raw_tx: bytes, last_valid_block_height=None) -> str:
        self.calls.append(("send_and_confirm", raw_tx, last_valid_block_height))
        return "swap-sig"


class FakeSwap:
    """Sustituto de SwapService para el controlador: cotiza en memoria."""
    def __init__(self) -> None:
        self.quotes: list[tuple] = []
        self.executions: list[tuple] = []
        self.quote_error: Exception | None = None
        self.execute_error: Exception | None = None

    def quote(self, action: TradeAction, token_address: str, amount: float) -> Quote:
        self.quotes.append((action, token_address, amount))
        if self.quote_error is not None:
            raise self.quote_error
        in_dec, out_dec = (6, 9) if action == TradeAction.SELL else (9, 6)
        return Quote(input_mint=token_address if action == TradeAction.SELL else SOL_MINT,
                     output_mint=SOL_MINT if action == TradeAction.SELL else token_address,
                     in_amount=to_base_units(amount, in_dec), out_amount=1_000_000,
                     other_amount_threshold=990_000, price_impact_pct=0.12, slippage_bps=100,
                     input_decimals=in_dec, output_decimals=out_dec)

    def execute(self, signer, action: TradeAction, token_address: str, amount: float) -> str:
        self.executions.append((signer.public_key, action, token_address, amount))
        if self.execute_error is not None:
            raise self.execute_error
        return "5ignature"


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "bot.db")


@pytest.fixture
def encryption_key() -> str:
    return Fernet.generate_key().decode("utf-8")


@pytest.fixture
def sessions(db_path) -> SessionRepository:
    return SessionRepository(db_path)


@pytest.fixture
def wallet_repo(db_path, encryption_key) -> WalletRepository:
    return WalletRepository(db_path, encryption_key=encryption_key)


@pytest.fixture
def wallets(wallet_repo, sessions) -> WalletController:
    return WalletController(wallet_repo, sessions)


@pytest.fixture
def market() -> FakeMarket:
    return FakeMarket()


@pytest.fixture
def solana() -> FakeSolana:
    return FakeSolana()


@pytest.fixture
def swap() -> FakeSwap:
    return FakeSwap()


@pytest.fixture
def trade(sessions, wallets, market, solana, swap) -> TradeController:
    return TradeController(sessions=sessions, wallets=wallets, market=market, solana=solana, swap=swap)
