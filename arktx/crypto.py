
from __future__ import annotations
from typing import Generator
from hashlib import sha256 as _sha256, new as _new_hash
from secrets import token_bytes as rand
from struct import pack
from ecdsa import SECP256k1, SigningKey, VerifyingKey, BadSignatureError
from ecdsa.der import UnexpectedDER
from ecdsa.util import (
    sigencode_der_canonize, sigdecode_der,
    sigencode_string_canonize, sigdecode_string, MalformedSignature
)

import asyncio
import base58


def _get_loop(
    loop: asyncio.AbstractEventLoop | None
) -> asyncio.AbstractEventLoop:
    return loop or asyncio.get_running_loop()


class Verifier(object):

    def __init__(self,
        key: bytes, loop: asyncio.AbstractEventLoop | None = None
    ):
        if len(key) != 33:
            raise ValueError('key must be 33 bytes.')
        self.key = key
        self._loop = loop

    @property
    def hex(self) -> str:
        return self.key.hex()

    @classmethod
    def from_hex(cls,
        key: str, loop: asyncio.AbstractEventLoop | None = None
    ) -> Verifier:
        return cls(bytes.fromhex(key), loop)

    def _verify(self, signature: bytes, hash: bytes, compact: bool) -> bool:
        vk = VerifyingKey.from_string(self.key, curve=SECP256k1)
        try:
            return vk.verify_digest(
                signature, hash,
                sigdecode=sigdecode_string if compact else sigdecode_der
            )
        except (BadSignatureError, UnexpectedDER, MalformedSignature):
            return False

    async def verify(self,
        signature: bytes, hash: bytes, compact: bool = False
    ) -> bool:
        return await _get_loop(self._loop).run_in_executor(
            None, self._verify, signature, hash, compact
        )


class Keypair(object):

    def __init__(self,
        seed: bytes | None = None,
        loop: asyncio.AbstractEventLoop | None = None
    ):
        self._seed = rand(32) if seed is None else seed
        self._signing_key: SigningKey | None = None
        self._verifier: bytes | None = None
        self._loop = loop

    @classmethod
    def from_passphrase(cls,
        passphrase: str, loop: asyncio.AbstractEventLoop | None = None
    ) -> Keypair:
        return cls(_sha256(passphrase.encode('utf-8')).digest(), loop)

    def __await__(self) -> Generator[object, object, Keypair]:
        return self.derive().__await__()

    async def derive(self) -> Keypair:
        if self._signing_key is None:
            self._signing_key = await _get_loop(self._loop).run_in_executor(
                None, SigningKey.from_string, self._seed, SECP256k1
            )
            self._verifier = (
                self._signing_key.get_verifying_key().to_string('compressed')
            )
        return self

    def _sign(self, hash: bytes, compact: bool) -> bytes:
        return self._signing_key.sign_digest_deterministic(
            hash, hashfunc=_sha256,
            sigencode=(
                sigencode_string_canonize if compact
                else sigencode_der_canonize
            )
        )

    async def sign(self, hash: bytes, compact: bool = False) -> bytes:
        """
        Sign a 32 byte digest. Sender signatures are DER encoded,
        co-signatures use the fixed 64 byte `r || s` form.
        """
        if self._signing_key is None:
            await self
        return await _get_loop(self._loop).run_in_executor(
            None, self._sign, hash, compact
        )

    async def verifier(self) -> Verifier:
        if self._verifier is None:
            await self
        return Verifier(self._verifier, self._loop)

    async def public_key(self) -> bytes:
        if self._verifier is None:
            await self
        return self._verifier


def _point(key: bytes):
    return VerifyingKey.from_string(key, curve=SECP256k1).pubkey.point


def _scalar(preimage: bytes) -> int:
    return int.from_bytes(_sha256(preimage).digest(), 'big') % SECP256k1.order


def _multisig_public_key(public_keys: list[bytes], min: int) -> bytes:
    if not public_keys:
        raise ValueError('Invalid public key list.')
    if min <= 0 or min > len(public_keys):
        raise ValueError('Invalid threshold.')
    prefix = pack('<HH', len(public_keys), min)
    preimage = b''.join([prefix] + public_keys)
    # Same key as the passphrase hex(min), then one order-bound tweak per key
    point = SECP256k1.generator * _scalar(f'{min:02x}'.encode('utf-8'))
    for i, key in enumerate(public_keys):
        tweak = _scalar(preimage + pack('<H', i) + key)
        point = point + _point(key) * tweak
    return VerifyingKey.from_public_point(
        point, curve=SECP256k1
    ).to_string('compressed')


def _ripemd160(msg: bytes) -> bytes:
    return _new_hash('ripemd160', msg).digest()


def _address(public_key: bytes, version: int) -> str:
    payload = pack('<B', version) + _ripemd160(public_key)
    return base58.b58encode_check(payload).decode('ascii')


def decode_address(address: str) -> bytes:
    try:
        payload = base58.b58decode_check(address)
    except ValueError:
        raise ValueError('Invalid address.')
    if len(payload) != 21:
        raise ValueError('Invalid address.')
    return payload


async def sha256(
    msg: bytes | bytearray,
    loop: asyncio.AbstractEventLoop | None = None
) -> bytes:
    loop = _get_loop(loop)
    return await loop.run_in_executor(
        None, lambda: _sha256(msg).digest()
    )


async def address(
    public_key: bytes,
    version: int,
    loop: asyncio.AbstractEventLoop | None = None
) -> str:
    loop = _get_loop(loop)
    return await loop.run_in_executor(
        None, _address, public_key, version
    )


async def multisig_public_key(
    public_keys: list[bytes],
    min: int,
    loop: asyncio.AbstractEventLoop | None = None
) -> bytes:
    loop = _get_loop(loop)
    return await loop.run_in_executor(
        None, _multisig_public_key, public_keys, min
    )
