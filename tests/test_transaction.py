from arktx import transaction as tx
from arktx import fixtures
from os import urandom

import pytest


ADDRESS = tx.Address(fixtures.WALLETS[1].address)
SENDER = tx.PublicKey.from_hex(fixtures.WALLETS[0].public_key)
CID = 'QmYSK2JyM3RyDyB52caZCTKFR3HKniEcMnNJYdk8DQ6KKB'


def test_abstract_element():
    x = tx.AbstractElement()
    assert x == tx.AbstractElement()
    with pytest.raises(NotImplementedError):
        y = x.size
    with pytest.raises(NotImplementedError):
        y = x.encode()
    with pytest.raises(NotImplementedError):
        y = x.to_json()


def test_bytes():
    class A(tx.Bytes):
        SIZE = 10
    x = A(urandom(10))
    assert x.encode() == x.value
    assert x == A.from_hex(x.hex)
    assert x.size == A.SIZE
    with pytest.raises(ValueError):
        x = A(urandom(9))
    with pytest.raises(ValueError):
        x = A(urandom(11))
    with pytest.raises(ValueError):
        x = A(list(urandom(10)))
    with pytest.raises(ValueError):
        x = A.from_hex('zz')


def test_address():
    assert ADDRESS.size == len(ADDRESS.encode()) == 21
    assert ADDRESS.to_json() == fixtures.WALLETS[1].address
    with pytest.raises(ValueError):
        tx.Address('DHKxXag9PjfjHBbPg3HQS5WCaQZdgDf6yz')
    with pytest.raises(ValueError):
        tx.Address(b'DHKxXag9PjfjHBbPg3HQS5WCaQZdgDf6yi')


def test_transfer_asset():
    x = tx.TransferAsset(ADDRESS, 1)
    assert x.type == tx.TransactionType.TRANSFER
    assert x.fee == 10_000_000
    assert x.size == 8 + 4 + 21
    assert x == tx.TransferAsset(ADDRESS, 1, 0)
    assert x != tx.TransferAsset(ADDRESS, 2)
    with pytest.raises(ValueError):
        tx.TransferAsset(ADDRESS, 0)
    with pytest.raises(ValueError):
        tx.TransferAsset(fixtures.WALLETS[1].address, 1)
    with pytest.raises(ValueError):
        tx.TransferAsset(ADDRESS, 1, -1)
    assert tx.TransferAsset(ADDRESS, 2**64 - 1).encode()[:8] == b'\xff' * 8
    with pytest.raises(ValueError):
        tx.TransferAsset(ADDRESS, 2**64)


def test_vote():
    x = tx.Vote(SENDER)
    assert x.add and x.public_key == SENDER
    assert x.to_json() == '+' + SENDER.hex
    assert x.encode() == b'\x01' + SENDER.value
    y = tx.Vote(SENDER, add=False)
    assert y.to_json() == '-' + SENDER.hex
    assert tx.VoteAsset([x]).to_json() == {'votes': ['+' + SENDER.hex]}
    with pytest.raises(ValueError):
        tx.Vote(SENDER.hex)
    with pytest.raises(ValueError):
        tx.VoteAsset([])
    with pytest.raises(ValueError):
        tx.VoteAsset([x, y, x])


def test_delegate_registration_asset():
    x = tx.DelegateRegistrationAsset('delegate.02ca35b120')
    assert x.fee == 2_500_000_000
    assert x.to_json() == {'delegate': {'username': 'delegate.02ca35b120'}}
    with pytest.raises(ValueError):
        tx.DelegateRegistrationAsset('Upper')
    with pytest.raises(ValueError):
        tx.DelegateRegistrationAsset('x' * 21)


def test_multi_signature_asset():
    keys = [tx.PublicKey.from_hex(w.public_key) for w in fixtures.WALLETS[:3]]
    x = tx.MultiSignatureAsset(keys, 2)
    assert x.fee == 500_000_000 * 4
    assert x.size == 2 + 3 * 33
    assert x.to_json() == {
        'multiSignature': {'min': 2, 'publicKeys': [k.hex for k in keys]}
    }
    with pytest.raises(ValueError):
        tx.MultiSignatureAsset(keys, 0)
    with pytest.raises(ValueError):
        tx.MultiSignatureAsset(keys, 4)
    with pytest.raises(ValueError):
        tx.MultiSignatureAsset([keys[0], keys[1], keys[0]], 2)
    with pytest.raises(ValueError):
        tx.MultiSignatureAsset([], 1)


@pytest.mark.asyncio
async def test_multi_signature_asset_address():
    keys = [tx.PublicKey.from_hex(w.public_key) for w in fixtures.WALLETS[:3]]
    x = tx.MultiSignatureAsset(keys, 2)
    y = tx.MultiSignatureAsset(keys[::-1], 2)
    assert await x.public_key() == await x.public_key()
    assert await x.public_key() != await y.public_key()
    address = await x.address(fixtures.DEVNET.pub_key_hash)
    assert address == await tx.MultiSignatureAsset(keys, 2).address(30)
    assert address != await y.address(30)
    assert tx.Address(address).encode()[0] == 30


def test_ipfs_asset():
    x = tx.IpfsAsset(CID)
    assert x.size == 34
    with pytest.raises(ValueError):
        tx.IpfsAsset('11111')
    with pytest.raises(ValueError):
        tx.IpfsAsset('0OIl')


def test_multi_payment_asset():
    payments = [tx.Payment(ADDRESS, 1) for _ in range(64)]
    x = tx.MultiPaymentAsset(payments)
    assert x.size == 2 + 64 * (8 + 21)
    assert x.to_json()['payments'][0] == {
        'amount': '1', 'recipientId': ADDRESS.to_json()
    }
    with pytest.raises(ValueError):
        tx.MultiPaymentAsset(payments[:1])
    with pytest.raises(ValueError):
        tx.MultiPaymentAsset(payments * 5)
    with pytest.raises(ValueError):
        tx.Payment(ADDRESS, 0)
    with pytest.raises(ValueError):
        tx.Payment(ADDRESS, 2**64)


def test_htlc_assets():
    secret_hash = tx.SecretHash(urandom(32))
    expiration = tx.HtlcExpiration(tx.ExpirationType.BLOCK_HEIGHT, 1000)
    lock = tx.HtlcLockAsset(ADDRESS, 5, secret_hash, expiration)
    assert lock.json_fields() == {
        'amount': '5',
        'recipientId': ADDRESS.to_json(),
        'asset': {
            'lock': {
                'secretHash': secret_hash.hex,
                'expiration': {'type': 2, 'value': 1000},
            }
        },
    }
    with pytest.raises(ValueError):
        tx.HtlcLockAsset(ADDRESS, 2**64, secret_hash, expiration)
    with pytest.raises(ValueError):
        tx.HtlcExpiration(3, 1000)
    lock_id = tx.TransactionId(urandom(32))
    claim = tx.HtlcClaimAsset(lock_id, 'a' * 32)
    assert claim.fee == 0
    assert claim.size == 64
    with pytest.raises(ValueError):
        tx.HtlcClaimAsset(lock_id, 'a' * 31)
    refund = tx.HtlcRefundAsset(lock_id)
    assert refund.to_json() == {'refund': {'lockTransactionId': lock_id.hex}}


def test_entity_asset():
    x = tx.EntityAsset(1, 1, tx.EntityAction.REGISTER, name='my_business', ipfs_data=CID)
    assert x.type == 6
    assert x.TYPE_GROUP == tx.TransactionTypeGroup.MAGISTRATE
    assert x.fee == 5_000_000_000
    assert x.to_json() == {
        'type': 1, 'subType': 1, 'action': 0,
        'data': {'name': 'my_business', 'ipfsData': CID},
    }
    registration_id = tx.TransactionId(urandom(32))
    y = tx.EntityAsset(1, 1, tx.EntityAction.RESIGN, registration_id=registration_id)
    assert y.fee == 500_000_000
    assert y.to_json()['registrationId'] == registration_id.hex
    with pytest.raises(ValueError):
        tx.EntityAsset(1, 1, tx.EntityAction.REGISTER, name='my_business')
    with pytest.raises(ValueError):
        tx.EntityAsset(
            1, 1, tx.EntityAction.REGISTER, registration_id=registration_id,
            name='my_business', ipfs_data=CID
        )
    with pytest.raises(ValueError):
        tx.EntityAsset(1, 1, tx.EntityAction.UPDATE)
    with pytest.raises(ValueError):
        tx.EntityAsset(1, 1, tx.EntityAction.REGISTER, name='my_business', ipfs_data='Qm')
    with pytest.raises(ValueError):
        tx.EntityAsset(
            1, 1, tx.EntityAction.UPDATE, registration_id=registration_id,
            ipfs_data='not a hash'
        )
    z = tx.EntityAsset(
        1, 1, tx.EntityAction.UPDATE, registration_id=registration_id, ipfs_data=CID
    )
    assert z.to_json()['data'] == {'ipfsData': CID}
    with pytest.raises(ValueError):
        tx.EntityAsset(1, 1, 5, registration_id=registration_id)


def test_multi_signature_element():
    x = tx.MultiSignature(2, tx.CompactSignature(urandom(64)))
    assert x.encode()[0] == 2
    assert x.to_json() == '02' + x.signature.hex
    with pytest.raises(ValueError):
        tx.MultiSignature(256, tx.CompactSignature(urandom(64)))
    with pytest.raises(ValueError):
        tx.MultiSignature(0, urandom(64))


def test_transaction_validation():
    asset = tx.TransferAsset(ADDRESS, 1)
    with pytest.raises(ValueError):
        tx.Transaction(asset, 0, SENDER)
    with pytest.raises(ValueError):
        tx.Transaction(asset, 1, SENDER.value)
    with pytest.raises(ValueError):
        tx.Transaction(asset, 1, SENDER, vendor_field='x' * 256)
    with pytest.raises(ValueError):
        tx.Transaction(tx.DelegateResignationAsset(), 1, SENDER, vendor_field='x')
    with pytest.raises(ValueError):
        tx.Transaction(asset, 1, SENDER, fee=-1)
    with pytest.raises(ValueError):
        tx.Transaction(asset, 1, SENDER, fee=2**64)
    with pytest.raises(ValueError):
        tx.Transaction(asset, 2**64, SENDER)
    assert tx.Transaction(asset, 2**64 - 1, SENDER).encode()[9:17] == b'\xff' * 8


def test_transaction_encode():
    asset = tx.TransferAsset(ADDRESS, 1)
    x = tx.Transaction(asset, 7, SENDER, vendor_field='hello')
    assert x.fee == asset.fee
    data = x.encode()
    assert data[:3] == bytes([0xff, 2, 30])
    assert int.from_bytes(data[3:7], 'little') == 1
    assert int.from_bytes(data[7:9], 'little') == 0
    assert int.from_bytes(data[9:17], 'little') == 7
    assert data[17:50] == SENDER.value
    assert x.size == 50 + 9 + 5 + asset.size
    x.signature = urandom(70)
    assert x.encode(include_signature=False) == data
    assert x.encode() == data + x.signature
    x.signatures.append(tx.MultiSignature(0, tx.CompactSignature(urandom(64))))
    assert x.encode(include_signature=False, include_signatures=False) == data


@pytest.mark.asyncio
async def test_transaction_to_json():
    asset = tx.TransferAsset(ADDRESS, 1)
    x = tx.Transaction(asset, 3, SENDER, vendor_field='hello')
    data = await x.to_json()
    assert data['version'] == 2
    assert data['network'] == 30
    assert data['typeGroup'] == 1
    assert data['type'] == 0
    assert data['nonce'] == '3'
    assert data['fee'] == '10000000'
    assert data['senderPublicKey'] == SENDER.hex
    assert data['amount'] == '1'
    assert data['recipientId'] == ADDRESS.to_json()
    assert data['expiration'] == 0
    assert data['vendorField'] == 'hello'
    assert data['id'] == (await x.id()).hex
    assert 'signature' not in data
    assert 'asset' not in data


@pytest.mark.asyncio
async def test_entity_transaction_to_json():
    asset = tx.EntityAsset(1, 1, tx.EntityAction.REGISTER, name='my_business', ipfs_data=CID)
    x = tx.Transaction(asset, 1, SENDER)
    data = await x.to_json()
    assert data['typeGroup'] == 2
    assert data['type'] == 6
    assert data['fee'] == '5000000000'
    assert 'registrationId' not in data['asset']
    assert 'vendorField' not in data
