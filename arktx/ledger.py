from __future__ import annotations
from typing import Generic, TypeVar
from arktx.config import Settings
from arktx.errors import ExternalLookupError, SubmissionError
from arktx import fixtures

import logging
import random
import httpx


logger = logging.getLogger(__name__)

T = TypeVar('T')

HTLC_LOCK_TYPE = 8


class Lookup(Generic[T]):
    """
    Result of a ledger lookup. When the lookup failed, `value` holds the
    documented default and `degraded` is set, so callers can tell a
    genuinely empty answer from a failed one.
    """

    def __init__(self,
        value: T,
        degraded: bool = False,
        error: ExternalLookupError | None = None
    ):
        self.value = value
        self.degraded = degraded
        self.error = error

    @classmethod
    def fallback(cls, value: T, error: ExternalLookupError) -> Lookup[T]:
        return cls(value, degraded=True, error=error)


class WalletState(object):

    def __init__(self,
        address: str | None = None,
        public_key: str | None = None,
        nonce: int = 0,
        vote: str | None = None,
        second_public_key: str | None = None
    ):
        self.address = address
        self.public_key = public_key
        self.nonce = nonce
        self.vote = vote
        self.second_public_key = second_public_key

    @property
    def cold(self) -> bool:
        return self.public_key is None and not self.nonce

    @classmethod
    def from_json(cls, data: dict) -> WalletState:
        attributes = data.get('attributes') or {}
        return cls(
            address=data.get('address'),
            public_key=data.get('publicKey'),
            nonce=int(data.get('nonce') or 0),
            vote=data.get('vote') or attributes.get('vote'),
            second_public_key=(
                data.get('secondPublicKey')
                or attributes.get('secondPublicKey')
            ),
        )


class SubmitResult(object):

    def __init__(self,
        accepted: list[str],
        invalid: list[str] | None = None,
        errors: dict | None = None
    ):
        self.accepted = accepted
        self.invalid = invalid or []
        self.errors = errors or {}

    @property
    def ok(self) -> bool:
        return not self.invalid and not self.errors

    @classmethod
    def from_json(cls, body: dict) -> SubmitResult:
        data = body.get('data') or {}
        return cls(
            accepted=list(data.get('accept') or []),
            invalid=list(data.get('invalid') or []),
            errors=body.get('errors') or {},
        )


class AbstractLedger(object):

    async def wallet(self, address: str) -> Lookup[WalletState]:
        """
        Get the ledger state of a wallet. Cold wallet on failure.
        """
        raise NotImplementedError()

    async def network_time(self) -> Lookup[int]:
        """
        Get the current network time in seconds. 0 on failure.
        """
        raise NotImplementedError()

    async def latest_lock_transaction(self,
        public_key: str
    ) -> Lookup[str | None]:
        """
        Get the id of the most recent HTLC lock sent by `public_key`.
        """
        raise NotImplementedError()

    async def height(self) -> Lookup[int]:
        """
        Get the current chain height. 0 on failure.
        """
        raise NotImplementedError()

    async def submit(self, transactions: list[dict]) -> SubmitResult:
        raise NotImplementedError()

    async def close(self):
        pass

    async def __aenter__(self) -> AbstractLedger:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()


# Malformed bodies degrade the same way transport failures do
LOOKUP_ERRORS = (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError)


class HttpLedger(AbstractLedger):

    def __init__(self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None
    ):
        self.settings = settings
        self._rng = rng or random.Random()
        self._client = httpx.AsyncClient(
            timeout=settings.timeout, transport=transport
        )

    def peer(self) -> str:
        host = self.settings.peer or self._rng.choice(fixtures.SEEDS)
        return f'http://{host}:{self.settings.port}'

    async def _get(self, path: str, params: dict | None = None) -> dict:
        response = await self._client.get(
            f'{self.peer()}{path}', params=params
        )
        response.raise_for_status()
        return response.json()

    async def wallet(self, address: str) -> Lookup[WalletState]:
        try:
            body = await self._get(f'/api/wallets/{address}')
            return Lookup(WalletState.from_json(body['data']))
        except LOOKUP_ERRORS as e:
            logger.warning(f'Wallet lookup for {address} failed: {e!r}, probably a cold wallet')
            return Lookup.fallback(
                WalletState(address=address), ExternalLookupError(str(e))
            )

    async def network_time(self) -> Lookup[int]:
        try:
            body = await self._get('/api/node/status')
            return Lookup(int(body['data']['timestamp']))
        except LOOKUP_ERRORS as e:
            logger.warning(f'Network time lookup failed: {e!r}')
            return Lookup.fallback(0, ExternalLookupError(str(e)))

    async def latest_lock_transaction(self,
        public_key: str
    ) -> Lookup[str | None]:
        try:
            body = await self._get('/api/transactions', params={
                'type': HTLC_LOCK_TYPE,
                'senderPublicKey': public_key,
            })
            data = body['data']
            return Lookup(data[0]['id'] if data else None)
        except LOOKUP_ERRORS as e:
            logger.warning(f'Lock transaction lookup failed: {e!r}')
            return Lookup.fallback(None, ExternalLookupError(str(e)))

    async def height(self) -> Lookup[int]:
        try:
            body = await self._get('/api/blockchain')
            return Lookup(int(body['data']['block']['height']))
        except LOOKUP_ERRORS as e:
            logger.warning(f'Height lookup failed: {e!r}')
            return Lookup.fallback(0, ExternalLookupError(str(e)))

    async def submit(self, transactions: list[dict]) -> SubmitResult:
        try:
            response = await self._client.post(
                f'{self.peer()}/api/transactions',
                json={'transactions': transactions},
            )
        except httpx.HTTPError as e:
            raise SubmissionError(f'Submission failed: {e!r}')
        try:
            body = response.json()
        except ValueError:
            raise SubmissionError(
                'Invalid submission response.',
                response.status_code, response.text
            )
        if response.status_code != 200:
            raise SubmissionError(
                f'Submission rejected with status {response.status_code}.',
                response.status_code, body
            )
        return SubmitResult.from_json(body)

    async def close(self):
        await self._client.aclose()
