from arktx.config import Settings
from arktx.errors import ExternalLookupError, SubmissionError
from arktx.ledger import AbstractLedger, Lookup, SubmitResult, WalletState
from arktx import fixtures

import pytest


class FakeLedger(AbstractLedger):

    def __init__(self,
        wallets: dict[str, WalletState] | None = None,
        network_time: int | None = 1_000_000,
        lock_id: str | None = None,
        height: int | None = 100,
        submit_error: SubmissionError | None = None
    ):
        self.wallets = wallets or {}
        self._network_time = network_time
        self.lock_id = lock_id
        self._height = height
        self.submit_error = submit_error
        self.calls: list[str] = []
        self.submitted: list[list[dict]] = []

    async def wallet(self, address: str) -> Lookup[WalletState]:
        self.calls.append('wallet')
        return Lookup(self.wallets.get(address) or WalletState(address=address))

    async def network_time(self) -> Lookup[int]:
        self.calls.append('network_time')
        if self._network_time is None:
            return Lookup.fallback(0, ExternalLookupError('down'))
        return Lookup(self._network_time)

    async def latest_lock_transaction(self, public_key: str) -> Lookup[str | None]:
        self.calls.append('latest_lock_transaction')
        return Lookup(self.lock_id)

    async def height(self) -> Lookup[int]:
        self.calls.append('height')
        if self._height is None:
            return Lookup.fallback(0, ExternalLookupError('down'))
        return Lookup(self._height)

    async def submit(self, transactions: list[dict]) -> SubmitResult:
        self.calls.append('submit')
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(transactions)
        return SubmitResult([t['id'] for t in transactions])


def make_settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


@pytest.fixture
def settings() -> Settings:
    return make_settings(
        passphrase=fixtures.WALLETS[0].passphrase,
        recipient_id=fixtures.WALLETS[1].address,
    )


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()
