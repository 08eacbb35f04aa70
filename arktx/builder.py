from __future__ import annotations
from typing import Callable
from arktx.config import Settings, SECOND_PASSPHRASE
from arktx.errors import InputError, NotSupported
from arktx.expiration import resolve_expiration
from arktx.ledger import AbstractLedger, WalletState
from arktx.crypto import Keypair
from arktx import fixtures
from arktx.transaction import (
    Transaction, TransactionType, TransactionAsset, LEGACY_TYPES,
    PublicKey, Address, TransactionId, SecretHash, ExpirationType,
    EntityAction, TransferAsset, SecondSignatureAsset,
    DelegateRegistrationAsset, Vote, VoteAsset, MultiSignatureAsset,
    IpfsAsset, Payment, MultiPaymentAsset, DelegateResignationAsset,
    HtlcExpiration, HtlcLockAsset, HtlcClaimAsset, HtlcRefundAsset,
    EntityAsset
)

import logging
import random


logger = logging.getLogger(__name__)

MIN_RANDOM_PAYMENTS = 64
MAX_RANDOM_PAYMENTS = 128

ENTITY_ACTIONS = {
    'register': EntityAction.REGISTER,
    'update': EntityAction.UPDATE,
    'resign': EntityAction.RESIGN,
}


class EntityRequest(object):

    def __init__(self,
        type: int,
        sub_type: int,
        action: str,
        fields: list[str]
    ):
        self.type = type
        self.sub_type = sub_type
        self.action = action
        self.fields = fields


class TransactionRequest(object):

    def __init__(self,
        kind: TransactionType,
        quantity: int = 1,
        entity: EntityRequest | None = None
    ):
        self.kind = kind
        self.quantity = quantity
        self.entity = entity

    @classmethod
    def parse(cls, line: str) -> TransactionRequest:
        """
        Parse a prompt line: ``<type> [quantity] [entity fields]``.

        Entity fields are ``<type> <subType> <action> [name|registrationId]
        [ipfsData]``, for example
        ``11 1 1 1 register my_business Qm...``.
        """
        words = line.split()
        if not words:
            raise InputError('Missing transaction type.')
        try:
            kind = TransactionType(int(words[0]))
        except ValueError:
            raise InputError(f'Unknown type {words[0]!r}.')
        try:
            quantity = int(words[1]) if len(words) > 1 else 1
        except ValueError:
            raise InputError(f'Invalid quantity {words[1]!r}.')
        if quantity <= 0:
            raise InputError(f'Invalid quantity {quantity}.')
        entity = None
        if kind == TransactionType.ENTITY:
            if len(words) < 5:
                raise InputError('Entity requires type, sub type and action.')
            try:
                entity_type, sub_type = int(words[2]), int(words[3])
            except ValueError:
                raise InputError('Entity type and sub type must be integers.')
            entity = EntityRequest(entity_type, sub_type, words[4], words[5:])
        return cls(kind, quantity, entity)


class AssetBuilder(object):
    """
    Builds the unsigned transaction for one request, filling every field
    the settings leave open with its documented default.
    """

    def __init__(self,
        settings: Settings,
        ledger: AbstractLedger,
        network: fixtures.Network,
        features: Callable[[str], bool],
        rng: random.Random | None = None
    ):
        self.settings = settings
        self.ledger = ledger
        self.network = network
        self.features = features
        self.rng = rng or random.Random()

    async def build(self,
        request: TransactionRequest,
        nonce: int,
        sender: Keypair,
        wallet: WalletState,
        recipient_id: str
    ) -> Transaction:
        kind = request.kind
        if kind not in LEGACY_TYPES and not self.features('aip11'):
            raise NotSupported(kind.name, 'aip11')
        sender_public_key = PublicKey(await sender.public_key())
        try:
            match kind:
                case TransactionType.TRANSFER:
                    asset = self.transfer(recipient_id)
                case TransactionType.SECOND_SIGNATURE:
                    asset = await self.second_signature()
                case TransactionType.DELEGATE_REGISTRATION:
                    asset = self.delegate_registration(sender_public_key)
                case TransactionType.VOTE:
                    asset = self.vote(sender_public_key, wallet)
                case TransactionType.MULTI_SIGNATURE:
                    asset = await self.multi_signature()
                case TransactionType.IPFS:
                    asset = IpfsAsset(self.settings.ipfs)
                case TransactionType.MULTI_PAYMENT:
                    asset = self.multi_payment()
                case TransactionType.DELEGATE_RESIGNATION:
                    asset = DelegateResignationAsset()
                case TransactionType.HTLC_LOCK:
                    asset = await self.htlc_lock(recipient_id)
                case TransactionType.HTLC_CLAIM:
                    asset = await self.htlc_claim(sender_public_key, wallet)
                case TransactionType.HTLC_REFUND:
                    asset = await self.htlc_refund(sender_public_key, wallet)
                case TransactionType.ENTITY:
                    asset = self.entity(request.entity)
                case _:
                    raise InputError(f'Unknown type {kind!r}.')
            return Transaction(
                asset, nonce, sender_public_key,
                fee=self.settings.fee,
                vendor_field=self.vendor_field(asset),
                network=self.network.pub_key_hash
            )
        except ValueError as e:
            raise InputError(f'{kind.name}: {e}') from e

    def vendor_field(self, asset: TransactionAsset) -> str | None:
        if not asset.HAS_VENDOR_FIELD:
            return None
        config = self.settings.vendor_field
        if config.value:
            return config.value
        if config.random:
            return str(self.rng.random())
        return None

    def transfer(self, recipient_id: str) -> TransferAsset:
        return TransferAsset(
            Address(recipient_id),
            self.settings.amount,
            self.settings.expiration or 0
        )

    async def second_signature(self) -> SecondSignatureAsset:
        passphrase = self.settings.second_passphrase or SECOND_PASSPHRASE
        keypair = Keypair.from_passphrase(passphrase)
        return SecondSignatureAsset(PublicKey(await keypair.public_key()))

    def delegate_registration(self,
        sender_public_key: PublicKey
    ) -> DelegateRegistrationAsset:
        username = (
            self.settings.delegate_name
            or f'delegate.{sender_public_key.hex[:10]}'
        )
        return DelegateRegistrationAsset(username)

    def vote(self, sender_public_key: PublicKey, wallet: WalletState) -> VoteAsset:
        if self.settings.vote:
            vote = Vote(PublicKey.from_hex(self.settings.vote), add=True)
        elif self.settings.unvote:
            vote = Vote(PublicKey.from_hex(self.settings.unvote), add=False)
        elif wallet.vote:
            vote = Vote(PublicKey.from_hex(wallet.vote), add=False)
        else:
            vote = Vote(sender_public_key, add=True)
        return VoteAsset([vote])

    async def multi_signature(self) -> MultiSignatureAsset:
        config = self.settings.multi_signature.asset
        public_keys: list[PublicKey] = []
        for passphrase in config.participants:
            keypair = Keypair.from_passphrase(passphrase)
            public_keys.append(PublicKey(await keypair.public_key()))
        return MultiSignatureAsset(public_keys, config.min)

    def multi_payment(self) -> MultiPaymentAsset:
        if self.settings.multi_payments:
            payments = [
                Payment(Address(p.recipient_id), p.amount)
                for p in self.settings.multi_payments
            ]
        else:
            count = self.rng.randint(MIN_RANDOM_PAYMENTS, MAX_RANDOM_PAYMENTS)
            wallets = fixtures.WALLETS
            payments = [
                Payment(Address(wallets[i % len(wallets)].address), 1)
                for i in range(count)
            ]
        return MultiPaymentAsset(payments)

    async def htlc_lock(self, recipient_id: str) -> HtlcLockAsset:
        config = self.settings.htlc.lock
        value = config.expiration.value
        if config.expiration.type == ExpirationType.EPOCH_TIMESTAMP:
            network_time = await self.ledger.network_time()
            if network_time.degraded:
                logger.warning(
                    'HTLC lock expiration not adjusted, network time unavailable'
                )
            value = resolve_expiration(
                config.expiration.type, value, network_time.value
            )
        return HtlcLockAsset(
            Address(recipient_id),
            self.settings.amount,
            SecretHash.from_hex(config.secret_hash),
            HtlcExpiration(config.expiration.type, value)
        )

    async def lock_transaction_id(self,
        configured: str | None,
        sender_public_key: PublicKey,
        wallet: WalletState
    ) -> TransactionId:
        if configured:
            return TransactionId.from_hex(configured)
        lookup = await self.ledger.latest_lock_transaction(
            wallet.public_key or sender_public_key.hex
        )
        if lookup.value is None:
            raise InputError('No lock transaction found for sender.')
        return TransactionId.from_hex(lookup.value)

    async def htlc_claim(self,
        sender_public_key: PublicKey, wallet: WalletState
    ) -> HtlcClaimAsset:
        config = self.settings.htlc.claim
        lock_id = await self.lock_transaction_id(
            config.lock_transaction_id, sender_public_key, wallet
        )
        return HtlcClaimAsset(lock_id, config.unlock_secret)

    async def htlc_refund(self,
        sender_public_key: PublicKey, wallet: WalletState
    ) -> HtlcRefundAsset:
        config = self.settings.htlc.refund
        lock_id = await self.lock_transaction_id(
            config.lock_transaction_id, sender_public_key, wallet
        )
        return HtlcRefundAsset(lock_id)

    def entity(self, request: EntityRequest | None) -> EntityAsset:
        if request is None:
            raise InputError('Missing entity fields.')
        action = ENTITY_ACTIONS.get(request.action)
        if action is None:
            raise InputError(f'Unknown entity action {request.action!r}.')
        fields = request.fields + [None, None]
        match action:
            case EntityAction.REGISTER:
                return EntityAsset(
                    request.type, request.sub_type, action,
                    name=fields[0], ipfs_data=fields[1]
                )
            case EntityAction.UPDATE:
                return EntityAsset(
                    request.type, request.sub_type, action,
                    registration_id=self.registration_id(fields[0]),
                    ipfs_data=fields[1]
                )
            case EntityAction.RESIGN:
                return EntityAsset(
                    request.type, request.sub_type, action,
                    registration_id=self.registration_id(fields[0])
                )

    @staticmethod
    def registration_id(value: str | None) -> TransactionId:
        if value is None:
            raise InputError('Missing registration id.')
        return TransactionId.from_hex(value)
