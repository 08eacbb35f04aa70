from __future__ import annotations
from enum import IntEnum
from struct import pack
from arktx.crypto import sha256, address, multisig_public_key, decode_address

import re
import base58


MAX_VENDOR_FIELD_BYTES = 255
MAX_MULTISIG_PARTICIPANTS = 16
MAX_PAYMENTS = 256
# Amounts, fees and nonces are encoded as uint64
MAX_UINT64 = 0xffff_ffff_ffff_ffff
USERNAME = re.compile(r'^[a-z0-9!@$&_.]{1,20}$')
ENTITY_NAME = re.compile(r'^[a-zA-Z0-9_-]{1,40}$')


class TransactionType(IntEnum):

    TRANSFER = 0
    SECOND_SIGNATURE = 1
    DELEGATE_REGISTRATION = 2
    VOTE = 3
    MULTI_SIGNATURE = 4
    IPFS = 5
    MULTI_PAYMENT = 6
    DELEGATE_RESIGNATION = 7
    HTLC_LOCK = 8
    HTLC_CLAIM = 9
    HTLC_REFUND = 10
    ENTITY = 11


# Kinds valid before the aip11 milestone
LEGACY_TYPES = frozenset([
    TransactionType.TRANSFER,
    TransactionType.SECOND_SIGNATURE,
    TransactionType.DELEGATE_REGISTRATION,
    TransactionType.VOTE,
])


class TransactionTypeGroup(IntEnum):

    CORE = 1
    MAGISTRATE = 2


class ExpirationType(IntEnum):

    EPOCH_TIMESTAMP = 1
    BLOCK_HEIGHT = 2


class EntityAction(IntEnum):

    REGISTER = 0
    UPDATE = 1
    RESIGN = 2


def _encode_string(value: str | None) -> bytes:
    if value is None:
        return b'\x00'
    data = value.encode('utf-8')
    if len(data) > 0xff:
        raise ValueError('Invalid string size.')
    return pack('<B', len(data)) + data


def _check_multihash(cid: str):
    if not isinstance(cid, str):
        raise ValueError('Invalid IPFS hash.')
    try:
        multihash = base58.b58decode(cid)
    except ValueError:
        raise ValueError('Invalid IPFS hash.')
    # <hash function> <digest size> <digest>
    if len(multihash) < 2 or multihash[1] != len(multihash) - 2:
        raise ValueError('Invalid IPFS hash.')


class AbstractElement(object):

    def __eq__(self, value: AbstractElement) -> bool:
        return isinstance(value, type(self))

    def __ne__(self, value: AbstractElement) -> bool:
        return not self.__eq__(value)

    def __hash__(self) -> int:
        return hash(self.encode())

    @property
    def size(self) -> int:
        return len(self.encode())

    def encode(self) -> bytes:
        raise NotImplementedError()

    def to_json(self) -> dict | str:
        raise NotImplementedError()


class Bytes(AbstractElement):

    def __init__(self,
        value: bytes | bytearray | memoryview
    ):
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise ValueError('invalid value type.')
        if len(value) != self.SIZE:
            raise ValueError('Invalid value size.')
        self.value = value if isinstance(value, bytes) else bytes(value)

    def __eq__(self, value: Bytes) -> bool:
        return (
            super().__eq__(value)
            and self.value == value.value
        )

    @property
    def size(self) -> int:
        return self.SIZE

    @property
    def hex(self) -> str:
        return self.value.hex()

    @classmethod
    def from_hex(cls, value: str) -> Bytes:
        try:
            return cls(bytes.fromhex(value))
        except (TypeError, ValueError):
            raise ValueError(f'Invalid {cls.__name__}.')

    def encode(self) -> bytes:
        return self.value

    def to_json(self) -> str:
        return self.hex


class PublicKey(Bytes):

    SIZE = 33


class TransactionId(Bytes):

    SIZE = 32


class SecretHash(Bytes):

    SIZE = 32


class CompactSignature(Bytes):

    SIZE = 64


class Address(AbstractElement):

    def __init__(self, value: str):
        if not isinstance(value, str):
            raise ValueError('Invalid address.')
        decode_address(value)
        self.value = value

    def __eq__(self, value: Address) -> bool:
        return (
            super().__eq__(value)
            and self.value == value.value
        )

    @property
    def size(self) -> int:
        return 21

    def encode(self) -> bytes:
        return decode_address(self.value)

    def to_json(self) -> str:
        return self.value


class TransactionAsset(AbstractElement):
    """
    Type specific part of a transaction. Subclasses carry the fields of
    exactly one `TransactionType`.
    """

    TYPE: TransactionType
    WIRE_TYPE: int | None = None
    TYPE_GROUP = TransactionTypeGroup.CORE
    FEE = 0
    HAS_VENDOR_FIELD = False

    @property
    def type(self) -> int:
        return self.TYPE if self.WIRE_TYPE is None else self.WIRE_TYPE

    @property
    def fee(self) -> int:
        return self.FEE

    def json_fields(self) -> dict:
        """
        Fields merged into the transaction JSON.
        """
        return {'asset': self.to_json()}


class TransferAsset(TransactionAsset):

    TYPE = TransactionType.TRANSFER
    FEE = 10_000_000
    HAS_VENDOR_FIELD = True

    def __init__(self,
        recipient_id: Address,
        amount: int,
        expiration: int = 0
    ):
        if not isinstance(recipient_id, Address):
            raise ValueError('Invalid recipient.')
        if not isinstance(amount, int) or not 0 < amount <= MAX_UINT64:
            raise ValueError('Invalid amount.')
        if (
            not isinstance(expiration, int)
            or expiration < 0
            or expiration >= 0x1_0000_0000
        ):
            raise ValueError('Invalid expiration.')
        self.recipient_id = recipient_id
        self.amount = amount
        self.expiration = expiration

    def __eq__(self, value: TransferAsset) -> bool:
        return (
            super().__eq__(value)
            and self.recipient_id == value.recipient_id
            and self.amount == value.amount
            and self.expiration == value.expiration
        )

    def encode(self) -> bytes:
        return b''.join([
            pack('<QI', self.amount, self.expiration),
            self.recipient_id.encode()
        ])

    def json_fields(self) -> dict:
        return {
            'amount': str(self.amount),
            'recipientId': self.recipient_id.to_json(),
            'expiration': self.expiration,
        }


class SecondSignatureAsset(TransactionAsset):

    TYPE = TransactionType.SECOND_SIGNATURE
    FEE = 500_000_000

    def __init__(self, public_key: PublicKey):
        if not isinstance(public_key, PublicKey):
            raise ValueError('Invalid public key.')
        self.public_key = public_key

    def __eq__(self, value: SecondSignatureAsset) -> bool:
        return (
            super().__eq__(value)
            and self.public_key == value.public_key
        )

    def encode(self) -> bytes:
        return self.public_key.encode()

    def to_json(self) -> dict:
        return {'signature': {'publicKey': self.public_key.to_json()}}


class DelegateRegistrationAsset(TransactionAsset):

    TYPE = TransactionType.DELEGATE_REGISTRATION
    FEE = 2_500_000_000

    def __init__(self, username: str):
        if not isinstance(username, str) or not USERNAME.match(username):
            raise ValueError('Invalid username.')
        self.username = username

    def __eq__(self, value: DelegateRegistrationAsset) -> bool:
        return (
            super().__eq__(value)
            and self.username == value.username
        )

    def encode(self) -> bytes:
        return _encode_string(self.username)

    def to_json(self) -> dict:
        return {'delegate': {'username': self.username}}


class Vote(AbstractElement):

    def __init__(self, public_key: PublicKey, add: bool = True):
        if not isinstance(public_key, PublicKey):
            raise ValueError('Invalid vote public key.')
        self.public_key = public_key
        self.add = add

    def __eq__(self, value: Vote) -> bool:
        return (
            super().__eq__(value)
            and self.public_key == value.public_key
            and self.add == value.add
        )

    def encode(self) -> bytes:
        return pack('<B', int(self.add)) + self.public_key.encode()

    def to_json(self) -> str:
        return ('+' if self.add else '-') + self.public_key.to_json()


class VoteAsset(TransactionAsset):

    TYPE = TransactionType.VOTE
    FEE = 100_000_000

    def __init__(self, votes: list[Vote]):
        if not votes or len(votes) > 2:
            raise ValueError('Invalid vote list.')
        if not all(isinstance(v, Vote) for v in votes):
            raise ValueError('Invalid vote list.')
        self.votes = votes

    def __eq__(self, value: VoteAsset) -> bool:
        return (
            super().__eq__(value)
            and self.votes == value.votes
        )

    def encode(self) -> bytes:
        return b''.join(
            [pack('<B', len(self.votes))] + [v.encode() for v in self.votes]
        )

    def to_json(self) -> dict:
        return {'votes': [v.to_json() for v in self.votes]}


class MultiSignatureAsset(TransactionAsset):
    """
    Ordered participant keys and the number of co-signatures required.
    The order is part of the composite key derivation and fixes the
    signing index of every participant.
    """

    TYPE = TransactionType.MULTI_SIGNATURE
    FEE = 500_000_000

    def __init__(self,
        public_keys: list[PublicKey],
        min: int
    ):
        if (
            not public_keys
            or len(public_keys) > MAX_MULTISIG_PARTICIPANTS
            or not all(isinstance(k, PublicKey) for k in public_keys)
        ):
            raise ValueError('Invalid participant list.')
        if len(set(k.value for k in public_keys)) != len(public_keys):
            raise ValueError('Duplicate participant.')
        if not isinstance(min, int) or min <= 0 or min > len(public_keys):
            raise ValueError('Invalid threshold.')
        self.public_keys = public_keys
        self.min = min

    def __eq__(self, value: MultiSignatureAsset) -> bool:
        return (
            super().__eq__(value)
            and self.public_keys == value.public_keys
            and self.min == value.min
        )

    @property
    def fee(self) -> int:
        return self.FEE * (len(self.public_keys) + 1)

    async def public_key(self) -> PublicKey:
        return PublicKey(await multisig_public_key(
            [k.value for k in self.public_keys], self.min
        ))

    async def address(self, version: int) -> str:
        return await address((await self.public_key()).value, version)

    def encode(self) -> bytes:
        return b''.join(
            [pack('<BB', self.min, len(self.public_keys))]
            + [k.encode() for k in self.public_keys]
        )

    def to_json(self) -> dict:
        return {
            'multiSignature': {
                'min': self.min,
                'publicKeys': [k.to_json() for k in self.public_keys],
            }
        }


class IpfsAsset(TransactionAsset):

    TYPE = TransactionType.IPFS
    FEE = 500_000_000

    def __init__(self, cid: str):
        _check_multihash(cid)
        self.cid = cid

    def __eq__(self, value: IpfsAsset) -> bool:
        return (
            super().__eq__(value)
            and self.cid == value.cid
        )

    def encode(self) -> bytes:
        return base58.b58decode(self.cid)

    def to_json(self) -> dict:
        return {'ipfs': self.cid}


class Payment(AbstractElement):

    def __init__(self, recipient_id: Address, amount: int):
        if not isinstance(recipient_id, Address):
            raise ValueError('Invalid payment recipient.')
        if not isinstance(amount, int) or not 0 < amount <= MAX_UINT64:
            raise ValueError('Invalid payment amount.')
        self.recipient_id = recipient_id
        self.amount = amount

    def __eq__(self, value: Payment) -> bool:
        return (
            super().__eq__(value)
            and self.recipient_id == value.recipient_id
            and self.amount == value.amount
        )

    def encode(self) -> bytes:
        return pack('<Q', self.amount) + self.recipient_id.encode()

    def to_json(self) -> dict:
        return {
            'amount': str(self.amount),
            'recipientId': self.recipient_id.to_json(),
        }


class MultiPaymentAsset(TransactionAsset):

    TYPE = TransactionType.MULTI_PAYMENT
    FEE = 10_000_000
    HAS_VENDOR_FIELD = True

    def __init__(self, payments: list[Payment]):
        if len(payments) < 2 or len(payments) > MAX_PAYMENTS:
            raise ValueError('Invalid payment count.')
        if not all(isinstance(p, Payment) for p in payments):
            raise ValueError('Invalid payment list.')
        self.payments = payments

    def __eq__(self, value: MultiPaymentAsset) -> bool:
        return (
            super().__eq__(value)
            and self.payments == value.payments
        )

    def encode(self) -> bytes:
        return b''.join(
            [pack('<H', len(self.payments))]
            + [p.encode() for p in self.payments]
        )

    def to_json(self) -> dict:
        return {'payments': [p.to_json() for p in self.payments]}


class DelegateResignationAsset(TransactionAsset):

    TYPE = TransactionType.DELEGATE_RESIGNATION
    FEE = 2_500_000_000

    def encode(self) -> bytes:
        return b''

    def json_fields(self) -> dict:
        return {}


class HtlcExpiration(AbstractElement):

    def __init__(self, type: ExpirationType, value: int):
        if type not in (ExpirationType.EPOCH_TIMESTAMP, ExpirationType.BLOCK_HEIGHT):
            raise ValueError('Invalid expiration type.')
        if not isinstance(value, int) or value < 0 or value >= 0x1_0000_0000:
            raise ValueError('Invalid expiration value.')
        self.type = ExpirationType(type)
        self.value = value

    def __eq__(self, value: HtlcExpiration) -> bool:
        return (
            super().__eq__(value)
            and self.type == value.type
            and self.value == value.value
        )

    def encode(self) -> bytes:
        return pack('<BI', self.type, self.value)

    def to_json(self) -> dict:
        return {'type': int(self.type), 'value': self.value}


class HtlcLockAsset(TransactionAsset):

    TYPE = TransactionType.HTLC_LOCK
    FEE = 10_000_000
    HAS_VENDOR_FIELD = True

    def __init__(self,
        recipient_id: Address,
        amount: int,
        secret_hash: SecretHash,
        expiration: HtlcExpiration
    ):
        if not isinstance(recipient_id, Address):
            raise ValueError('Invalid recipient.')
        if not isinstance(amount, int) or not 0 < amount <= MAX_UINT64:
            raise ValueError('Invalid amount.')
        if not isinstance(secret_hash, SecretHash):
            raise ValueError('Invalid secret hash.')
        if not isinstance(expiration, HtlcExpiration):
            raise ValueError('Invalid expiration.')
        self.recipient_id = recipient_id
        self.amount = amount
        self.secret_hash = secret_hash
        self.expiration = expiration

    def __eq__(self, value: HtlcLockAsset) -> bool:
        return (
            super().__eq__(value)
            and self.recipient_id == value.recipient_id
            and self.amount == value.amount
            and self.secret_hash == value.secret_hash
            and self.expiration == value.expiration
        )

    def encode(self) -> bytes:
        return b''.join([
            pack('<Q', self.amount), self.secret_hash.encode(),
            self.expiration.encode(), self.recipient_id.encode()
        ])

    def to_json(self) -> dict:
        return {
            'lock': {
                'secretHash': self.secret_hash.to_json(),
                'expiration': self.expiration.to_json(),
            }
        }

    def json_fields(self) -> dict:
        return {
            'amount': str(self.amount),
            'recipientId': self.recipient_id.to_json(),
            'asset': self.to_json(),
        }


class HtlcClaimAsset(TransactionAsset):

    TYPE = TransactionType.HTLC_CLAIM

    def __init__(self,
        lock_transaction_id: TransactionId,
        unlock_secret: str
    ):
        if not isinstance(lock_transaction_id, TransactionId):
            raise ValueError('Invalid lock transaction id.')
        if (
            not isinstance(unlock_secret, str)
            or len(unlock_secret.encode('utf-8')) != 32
        ):
            raise ValueError('Invalid unlock secret.')
        self.lock_transaction_id = lock_transaction_id
        self.unlock_secret = unlock_secret

    def __eq__(self, value: HtlcClaimAsset) -> bool:
        return (
            super().__eq__(value)
            and self.lock_transaction_id == value.lock_transaction_id
            and self.unlock_secret == value.unlock_secret
        )

    def encode(self) -> bytes:
        return (
            self.lock_transaction_id.encode()
            + self.unlock_secret.encode('utf-8')
        )

    def to_json(self) -> dict:
        return {
            'claim': {
                'lockTransactionId': self.lock_transaction_id.to_json(),
                'unlockSecret': self.unlock_secret,
            }
        }


class HtlcRefundAsset(TransactionAsset):

    TYPE = TransactionType.HTLC_REFUND

    def __init__(self,
        lock_transaction_id: TransactionId
    ):
        if not isinstance(lock_transaction_id, TransactionId):
            raise ValueError('Invalid lock transaction id.')
        self.lock_transaction_id = lock_transaction_id

    def __eq__(self, value: HtlcRefundAsset) -> bool:
        return (
            super().__eq__(value)
            and self.lock_transaction_id == value.lock_transaction_id
        )

    def encode(self) -> bytes:
        return self.lock_transaction_id.encode()

    def to_json(self) -> dict:
        return {
            'refund': {
                'lockTransactionId': self.lock_transaction_id.to_json(),
            }
        }


class EntityAsset(TransactionAsset):

    TYPE = TransactionType.ENTITY
    WIRE_TYPE = 6
    TYPE_GROUP = TransactionTypeGroup.MAGISTRATE
    FEE = 5_000_000_000

    def __init__(self,
        type: int,
        sub_type: int,
        action: EntityAction,
        registration_id: TransactionId | None = None,
        name: str | None = None,
        ipfs_data: str | None = None
    ):
        if not isinstance(type, int) or type < 0 or type > 0xff:
            raise ValueError('Invalid entity type.')
        if not isinstance(sub_type, int) or sub_type < 0 or sub_type > 0xff:
            raise ValueError('Invalid entity sub type.')
        if registration_id is not None:
            if not isinstance(registration_id, TransactionId):
                raise ValueError('Invalid registration id.')
        if name is not None and not ENTITY_NAME.match(name):
            raise ValueError('Invalid entity name.')
        if ipfs_data is not None:
            _check_multihash(ipfs_data)
        match action:
            case EntityAction.REGISTER:
                if registration_id is not None:
                    raise ValueError('Register takes no registration id.')
                if name is None or ipfs_data is None:
                    raise ValueError('Register requires name and ipfs data.')
            case EntityAction.UPDATE | EntityAction.RESIGN:
                if registration_id is None:
                    raise ValueError('Missing registration id.')
            case _:
                raise ValueError('Invalid entity action.')
        self.entity_type = type
        self.sub_type = sub_type
        self.action = EntityAction(action)
        self.registration_id = registration_id
        self.name = name
        self.ipfs_data = ipfs_data

    def __eq__(self, value: EntityAsset) -> bool:
        return (
            super().__eq__(value)
            and self.entity_type == value.entity_type
            and self.sub_type == value.sub_type
            and self.action == value.action
            and self.registration_id == value.registration_id
            and self.name == value.name
            and self.ipfs_data == value.ipfs_data
        )

    @property
    def fee(self) -> int:
        if self.action == EntityAction.REGISTER:
            return self.FEE
        return self.FEE // 10

    def encode(self) -> bytes:
        registration_id = (
            pack('<B', TransactionId.SIZE) + self.registration_id.encode()
            if self.registration_id else b'\x00'
        )
        return b''.join([
            pack('<BBB', self.entity_type, self.sub_type, self.action),
            registration_id,
            _encode_string(self.name), _encode_string(self.ipfs_data)
        ])

    def to_json(self) -> dict:
        asset = {
            'type': self.entity_type,
            'subType': self.sub_type,
            'action': int(self.action),
        }
        if self.registration_id is not None:
            asset['registrationId'] = self.registration_id.to_json()
        data = {}
        if self.name is not None:
            data['name'] = self.name
        if self.ipfs_data is not None:
            data['ipfsData'] = self.ipfs_data
        asset['data'] = data
        return asset


class MultiSignature(AbstractElement):
    """
    Co-signature of one participant, bound to its index in the
    participant list.
    """

    def __init__(self, index: int, signature: CompactSignature):
        if not isinstance(index, int) or index < 0 or index >= 0x100:
            raise ValueError('Invalid signature index.')
        if not isinstance(signature, CompactSignature):
            raise ValueError('Invalid signature.')
        self.index = index
        self.signature = signature

    def __eq__(self, value: MultiSignature) -> bool:
        return (
            super().__eq__(value)
            and self.index == value.index
            and self.signature == value.signature
        )

    def encode(self) -> bytes:
        return pack('<B', self.index) + self.signature.encode()

    def to_json(self) -> str:
        return self.encode().hex()


class Transaction(AbstractElement):

    HEADER = 0xff
    VERSION = 2

    def __init__(self,
        asset: TransactionAsset,
        nonce: int,
        sender_public_key: PublicKey,
        fee: int | None = None,
        vendor_field: str | None = None,
        network: int = 30,
        signature: bytes | None = None,
        second_signature: bytes | None = None,
        signatures: list[MultiSignature] | None = None
    ):
        if not isinstance(asset, TransactionAsset):
            raise ValueError('Invalid asset.')
        if not isinstance(nonce, int) or not 0 < nonce <= MAX_UINT64:
            raise ValueError('Invalid nonce.')
        if not isinstance(sender_public_key, PublicKey):
            raise ValueError('Invalid sender public key.')
        if fee is not None and (not isinstance(fee, int) or not 0 <= fee <= MAX_UINT64):
            raise ValueError('Invalid fee.')
        if vendor_field is not None:
            if not asset.HAS_VENDOR_FIELD:
                raise ValueError('Vendor field not supported.')
            if len(vendor_field.encode('utf-8')) > MAX_VENDOR_FIELD_BYTES:
                raise ValueError('Invalid vendor field.')
        self.asset = asset
        self.nonce = nonce
        self.sender_public_key = sender_public_key
        self.fee = asset.fee if fee is None else fee
        self.vendor_field = vendor_field or None
        self.network = network
        self.signature = signature
        self.second_signature = second_signature
        self.signatures: list[MultiSignature] = signatures or []

    def __eq__(self, value: Transaction) -> bool:
        return (
            super().__eq__(value)
            and self.encode() == value.encode()
        )

    @property
    def type(self) -> int:
        return self.asset.type

    @property
    def type_group(self) -> int:
        return self.asset.TYPE_GROUP

    def encode(self,
        include_signature: bool = True,
        include_second_signature: bool = True,
        include_signatures: bool = True
    ) -> bytes:
        vendor_field = (
            self.vendor_field.encode('utf-8') if self.vendor_field else b''
        )
        parts = [
            pack(
                '<BBBIHQ', self.HEADER, self.VERSION, self.network,
                self.type_group, self.type, self.nonce
            ),
            self.sender_public_key.encode(),
            pack('<QB', self.fee, len(vendor_field)),
            vendor_field,
            self.asset.encode()
        ]
        if include_signature and self.signature:
            parts.append(self.signature)
        if include_second_signature and self.second_signature:
            parts.append(self.second_signature)
        if include_signatures:
            parts.extend(s.encode() for s in self.signatures)
        return b''.join(parts)

    async def hash(self,
        include_signature: bool = True,
        include_second_signature: bool = True,
        include_signatures: bool = True
    ) -> bytes:
        return await sha256(self.encode(
            include_signature, include_second_signature, include_signatures
        ))

    async def id(self) -> TransactionId:
        return TransactionId(await self.hash())

    async def to_json(self) -> dict:
        data = {
            'version': self.VERSION,
            'network': self.network,
            'typeGroup': int(self.type_group),
            'type': int(self.type),
            'nonce': str(self.nonce),
            'senderPublicKey': self.sender_public_key.to_json(),
            'fee': str(self.fee),
        }
        data.update(self.asset.json_fields())
        if self.vendor_field:
            data['vendorField'] = self.vendor_field
        if self.signature:
            data['signature'] = self.signature.hex()
        if self.second_signature:
            data['secondSignature'] = self.second_signature.hex()
        if self.signatures:
            data['signatures'] = [s.to_json() for s in self.signatures]
        data['id'] = (await self.id()).to_json()
        return data
