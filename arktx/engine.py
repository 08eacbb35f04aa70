from __future__ import annotations
from typing import Callable
from arktx.broker import (
    Broker, TransactionBuilt, TransactionFailed, MultiSignatureDerived,
    BatchSubmitted, SubmissionFailed
)
from arktx.builder import AssetBuilder, TransactionRequest
from arktx.config import Settings
from arktx.crypto import Keypair, address
from arktx.errors import (
    ArktxError, InputError, SigningOrderError, VerificationFailed,
    SubmissionError
)
from arktx.ledger import AbstractLedger, SubmitResult, WalletState
from arktx.nonce import NonceSequencer
from arktx.signing import Orchestrator, verify
from arktx.transaction import MultiSignatureAsset, PublicKey
from arktx import fixtures

import logging
import random


logger = logging.getLogger(__name__)

# Errors that abort one transaction of a batch
TRANSACTION_ERRORS = (InputError, SigningOrderError, VerificationFailed)


class TransactionFailure(object):

    def __init__(self, index: int, nonce: int | None, error: ArktxError):
        self.index = index
        self.nonce = nonce
        self.error = error

    def __iter__(self):
        return iter((self.index, self.nonce, self.error))


class BatchResult(object):

    def __init__(self):
        self.transactions: list[dict] = []
        self.failures: list[TransactionFailure] = []
        self.submission: SubmitResult | None = None
        self.submission_error: SubmissionError | None = None

    @property
    def submitted(self) -> bool:
        return self.submission is not None


class Engine(object):
    """
    Builds, signs and verifies a batch of transactions of one kind, then
    hands the payloads to the ledger.

    One engine lives for the whole session so the nonce sequence carries
    over from batch to batch.
    """

    def __init__(self,
        settings: Settings,
        ledger: AbstractLedger,
        broker: Broker | None = None,
        sequencer: NonceSequencer | None = None,
        rng: random.Random | None = None
    ):
        network = fixtures.NETWORKS.get(settings.network)
        if network is None:
            raise InputError(f'Unknown network {settings.network!r}.')
        self.settings = settings
        self.ledger = ledger
        self.broker = broker or Broker()
        self.network = network
        self.sequencer = sequencer or NonceSequencer(settings.start_nonce)
        self.rng = rng or random.Random()

    async def features(self) -> Callable[[str], bool]:
        if self.settings.height is not None:
            return self.network.features(self.settings.height)
        lookup = await self.ledger.height()
        if lookup.degraded:
            logger.warning('Chain height unavailable, only legacy types enabled')
        return self.network.features(lookup.value)

    def sender(self) -> Keypair:
        passphrase = (
            self.settings.passphrase
            or self.rng.choice(fixtures.WALLETS).passphrase
        )
        return Keypair.from_passphrase(passphrase)

    def recipient_id(self) -> str:
        return (
            self.settings.recipient_id
            or self.rng.choice(fixtures.WALLETS).address
        )

    async def multisig(self) -> MultiSignatureAsset | None:
        config = self.settings.multi_signature
        if not config.enabled:
            return None
        public_keys: list[PublicKey] = []
        for passphrase in config.asset.participants:
            keypair = Keypair.from_passphrase(passphrase)
            public_keys.append(PublicKey(await keypair.public_key()))
        try:
            return MultiSignatureAsset(public_keys, config.asset.min)
        except ValueError as e:
            raise InputError(f'Invalid multisignature account: {e}') from e

    async def nonce(self,
        sender: str, wallet: WalletState, seed_address: str | None
    ) -> int:
        if self.sequencer.seeded(sender):
            return self.sequencer.next(sender)
        seed = wallet.nonce
        if seed_address is not None:
            seed = (await self.ledger.wallet(seed_address)).value.nonce
        return self.sequencer.next(sender, seed)

    async def run(self, request: TransactionRequest) -> BatchResult:
        settings = self.settings
        version = self.network.pub_key_hash
        features = await self.features()
        sender = self.sender()
        public_key = (await sender.public_key()).hex()
        sender_address = await address(bytes.fromhex(public_key), version)
        wallet = (await self.ledger.wallet(sender_address)).value
        if wallet.public_key is None:
            wallet.public_key = public_key

        multisig = await self.multisig()
        seed_address = None
        if multisig is not None:
            multisig_key = await multisig.public_key()
            seed_address = await address(multisig_key.value, version)
            logger.info(f'Multisignature address {seed_address}')
            self.broker.pub(MultiSignatureDerived(seed_address, multisig_key.hex))

        builder = AssetBuilder(
            settings, self.ledger, self.network, features, self.rng
        )
        orchestrator = Orchestrator(settings, multisig)
        recipient_id = self.recipient_id()
        result = BatchResult()

        for index in range(request.quantity):
            nonce = None
            try:
                nonce = await self.nonce(public_key, wallet, seed_address)
                transaction = await builder.build(
                    request, nonce, sender, wallet, recipient_id
                )
                session = await orchestrator.sign(transaction, sender, wallet)
                await verify(session)
                payload = await transaction.to_json()
            except TRANSACTION_ERRORS as e:
                logger.error(
                    f'{request.kind.name} #{index} (nonce {nonce}) failed: '
                    f'{e.message}'
                )
                if settings.release_failed_nonces and nonce is not None:
                    self.sequencer.release(public_key, nonce)
                result.failures.append(TransactionFailure(index, nonce, e))
                self.broker.pub(TransactionFailed(index, nonce, e))
                continue
            logger.info(
                f'{request.kind.name} #{index} nonce {nonce} '
                f'{session.state.value}'
            )
            result.transactions.append(payload)
            self.broker.pub(TransactionBuilt(index, payload))

        if result.transactions and not settings.coldrun:
            await self.submit(result)
        return result

    async def submit(self, result: BatchResult):
        try:
            result.submission = await self.ledger.submit(result.transactions)
        except SubmissionError as e:
            logger.error(f'Submission failed: {e.message}')
            result.submission_error = e
            self.broker.pub(SubmissionFailed(e))
            return
        self.broker.pub(
            BatchSubmitted(len(result.transactions), result.submission)
        )
