"""
Signing of built transactions.

A `SigningSession` walks a transaction through one of three signing
paths and refuses any step taken out of order:

    SINGLE        UNSIGNED -> SENDER_SIGNED [-> SECOND_SIGNED]
    REGISTRATION  UNSIGNED -> PARTIALLY_CO_SIGNED (every participant)
                  -> SENDER_SIGNED [-> SECOND_SIGNED]
    SPEND         UNSIGNED -> PARTIALLY_CO_SIGNED -> FULLY_SIGNED (min reached)

Co-signatures are made over the transaction without any signature. The
sender signature covers the co-signatures, and the second signature
covers the sender signature, so registration participants always sign
before the sender.
"""

from __future__ import annotations
from enum import Enum
from arktx.config import Settings, SECOND_PASSPHRASE
from arktx.crypto import Keypair, Verifier
from arktx.errors import InputError, SigningOrderError, VerificationFailed
from arktx.ledger import WalletState
from arktx.transaction import (
    Transaction, TransactionType, MultiSignature, MultiSignatureAsset,
    CompactSignature, PublicKey
)

import logging


logger = logging.getLogger(__name__)


class SigningMode(Enum):

    SINGLE = 'single'
    REGISTRATION = 'registration'
    SPEND = 'spend'


class SigningState(Enum):

    UNSIGNED = 'unsigned'
    PARTIALLY_CO_SIGNED = 'partially_co_signed'
    SENDER_SIGNED = 'sender_signed'
    SECOND_SIGNED = 'second_signed'
    FULLY_SIGNED = 'fully_signed'


class SigningSession(object):

    def __init__(self,
        transaction: Transaction,
        mode: SigningMode = SigningMode.SINGLE,
        multisig: MultiSignatureAsset | None = None
    ):
        if mode != SigningMode.SINGLE and multisig is None:
            raise ValueError('Multisignature signing requires participants.')
        self.transaction = transaction
        self.mode = mode
        self.multisig = multisig
        self.state = SigningState.UNSIGNED
        self.second_public_key: bytes | None = None
        self.second_required = False
        # Indices whose co-signature verified against their participant
        self._valid: set[int] = set()

    @classmethod
    def registration(cls, transaction: Transaction) -> SigningSession:
        if not isinstance(transaction.asset, MultiSignatureAsset):
            raise ValueError('Not a multisignature registration.')
        return cls(transaction, SigningMode.REGISTRATION, transaction.asset)

    @classmethod
    async def spend(cls,
        transaction: Transaction, multisig: MultiSignatureAsset
    ) -> SigningSession:
        transaction.sender_public_key = await multisig.public_key()
        return cls(transaction, SigningMode.SPEND, multisig)

    @property
    def co_signatures(self) -> int:
        return len(self._valid)

    @property
    def quorum(self) -> bool:
        return (
            self.multisig is not None
            and len(self._valid) >= self.multisig.min
        )

    def _expect(self, *states: SigningState):
        if self.state not in states:
            raise SigningOrderError(
                f'Cannot sign from {self.state.value} in {self.mode.value} mode.'
            )

    async def co_sign(self, keypair: Keypair, index: int) -> MultiSignature:
        match self.mode:
            case SigningMode.REGISTRATION:
                self._expect(
                    SigningState.UNSIGNED, SigningState.PARTIALLY_CO_SIGNED
                )
            case SigningMode.SPEND:
                self._expect(
                    SigningState.UNSIGNED, SigningState.PARTIALLY_CO_SIGNED,
                    SigningState.FULLY_SIGNED
                )
            case _:
                raise SigningOrderError('Co-signing requires a multisignature.')
        participants = self.multisig.public_keys
        if index < 0 or index >= len(participants):
            raise InputError(f'Signature index {index} out of range.')
        if any(s.index == index for s in self.transaction.signatures):
            raise InputError(f'Duplicate signature index {index}.')
        hash = await self.transaction.hash(
            include_signature=False,
            include_second_signature=False,
            include_signatures=False
        )
        signature = MultiSignature(
            index, CompactSignature(await keypair.sign(hash, compact=True))
        )
        self.transaction.signatures.append(signature)
        verifier = Verifier(participants[index].value)
        if await verifier.verify(signature.signature.value, hash, compact=True):
            self._valid.add(index)
        else:
            logger.warning(
                f'Co-signature at index {index} does not match its participant'
            )
        if self.mode == SigningMode.SPEND and self.quorum:
            self.state = SigningState.FULLY_SIGNED
        else:
            self.state = SigningState.PARTIALLY_CO_SIGNED
        return signature

    async def sign(self, keypair: Keypair) -> bytes:
        match self.mode:
            case SigningMode.SINGLE:
                self._expect(SigningState.UNSIGNED)
            case SigningMode.REGISTRATION:
                self._expect(SigningState.PARTIALLY_CO_SIGNED)
                if len(self.transaction.signatures) != len(self.multisig.public_keys):
                    raise SigningOrderError(
                        'Every participant must co-sign before the sender.'
                    )
            case _:
                raise SigningOrderError(
                    'Multisignature spends carry no sender signature.'
                )
        hash = await self.transaction.hash(
            include_signature=False, include_second_signature=False
        )
        self.transaction.signature = await keypair.sign(hash)
        self.state = SigningState.SENDER_SIGNED
        return self.transaction.signature

    async def second_sign(self, keypair: Keypair) -> bytes:
        self._expect(SigningState.SENDER_SIGNED)
        hash = await self.transaction.hash(include_second_signature=False)
        self.transaction.second_signature = await keypair.sign(hash)
        # A key registered on the ledger is kept for verification
        if self.second_public_key is None:
            self.second_public_key = await keypair.public_key()
        self.state = SigningState.SECOND_SIGNED
        return self.transaction.second_signature

    def finalize(self) -> SigningState:
        match self.state:
            case SigningState.SENDER_SIGNED if not self.second_required:
                self.state = SigningState.FULLY_SIGNED
            case SigningState.SECOND_SIGNED:
                self.state = SigningState.FULLY_SIGNED
            case SigningState.PARTIALLY_CO_SIGNED if (
                self.mode == SigningMode.SPEND and self.quorum
            ):
                self.state = SigningState.FULLY_SIGNED
        return self.state


async def verify(session: SigningSession) -> Transaction:
    """
    Check the sender (and known second) signature of a signed transaction.

    Multisignature spends pass unchecked: deciding whether their
    co-signatures reach quorum is left to the ledger.
    """
    transaction = session.transaction
    if session.mode == SigningMode.SPEND:
        return transaction
    transaction_id = (await transaction.id()).hex
    if not transaction.signature:
        raise VerificationFailed(transaction_id, 'Missing sender signature.')
    verifier = Verifier(transaction.sender_public_key.value)
    hash = await transaction.hash(
        include_signature=False, include_second_signature=False
    )
    if not await verifier.verify(transaction.signature, hash):
        raise VerificationFailed(transaction_id)
    if transaction.second_signature and session.second_public_key:
        verifier = Verifier(session.second_public_key)
        hash = await transaction.hash(include_second_signature=False)
        if not await verifier.verify(transaction.second_signature, hash):
            raise VerificationFailed(
                transaction_id, 'Second signature verification failed.'
            )
    return transaction


class Orchestrator(object):
    """
    Signs built transactions with the keys named in the settings.
    """

    def __init__(self,
        settings: Settings,
        multisig: MultiSignatureAsset | None = None
    ):
        if settings.multi_signature.enabled and multisig is None:
            raise ValueError('Multisignature enabled without an account.')
        self.settings = settings
        self.multisig = multisig

    def mode(self, transaction: Transaction) -> SigningMode:
        if transaction.asset.TYPE == TransactionType.MULTI_SIGNATURE:
            return SigningMode.REGISTRATION
        if self.settings.multi_signature.enabled:
            return SigningMode.SPEND
        return SigningMode.SINGLE

    async def sign(self,
        transaction: Transaction,
        sender: Keypair,
        wallet: WalletState
    ) -> SigningSession:
        match self.mode(transaction):
            case SigningMode.REGISTRATION:
                session = SigningSession.registration(transaction)
                participants = self.settings.multi_signature.asset.participants
                for index, passphrase in enumerate(participants):
                    await session.co_sign(Keypair.from_passphrase(passphrase), index)
                await self.sender_sign(session, sender, wallet)
            case SigningMode.SPEND:
                session = await SigningSession.spend(transaction, self.multisig)
                for p in self.settings.multi_signature.passphrases:
                    await session.co_sign(Keypair.from_passphrase(p.passphrase), p.index)
            case SigningMode.SINGLE:
                session = SigningSession(transaction)
                await self.sender_sign(session, sender, wallet)
        session.finalize()
        return session

    async def sender_sign(self,
        session: SigningSession,
        sender: Keypair,
        wallet: WalletState
    ):
        await session.sign(sender)
        if self.settings.second_passphrase:
            second = self.settings.second_passphrase
        elif wallet.second_public_key:
            second = SECOND_PASSPHRASE
        else:
            return
        if wallet.second_public_key:
            try:
                registered = PublicKey.from_hex(wallet.second_public_key)
            except ValueError as e:
                raise InputError(f'Invalid second public key: {e}') from e
            session.second_public_key = registered.value
        session.second_required = True
        await session.second_sign(Keypair.from_passphrase(second))
