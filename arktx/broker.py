"""
``` python
import asyncio
from arktx.broker import Broker, TransactionBuilt, TransactionFailed

async def subscriber(broker: Broker):
    queue = asyncio.Queue()
    broker.sub(TransactionBuilt, queue)
    broker.sub(TransactionFailed, queue)
    while True:
        match await queue.get():
            case TransactionBuilt() as e:
                print(f"#{e.index}: {e.payload['id']}")
            case TransactionFailed() as e:
                print(f"#{e.index} failed: {e.error.message}")
            case None:
                break
```
"""


from __future__ import annotations
from arktx.errors import ArktxError, SubmissionError
from arktx.ledger import SubmitResult

import asyncio


class AbstractBroker(object):
    pass


class AbstractBrokerEvent(object):
    pass


class TransactionBuilt(AbstractBrokerEvent):

    def __init__(self, index: int, payload: dict):
        self.index = index
        self.payload = payload


class TransactionFailed(AbstractBrokerEvent):

    def __init__(self, index: int, nonce: int | None, error: ArktxError):
        self.index = index
        self.nonce = nonce
        self.error = error


class MultiSignatureDerived(AbstractBrokerEvent):

    def __init__(self, address: str, public_key: str):
        self.address = address
        self.public_key = public_key


class BatchSubmitted(AbstractBrokerEvent):

    def __init__(self, count: int, result: SubmitResult):
        self.count = count
        self.result = result


class SubmissionFailed(AbstractBrokerEvent):

    def __init__(self, error: SubmissionError):
        self.error = error


class Broker(AbstractBroker):

    def __init__(self):
        self.subs: dict[type[AbstractBrokerEvent], set[asyncio.Queue]] = {}
        self._empty = set()

    def sub(self, event: type[AbstractBrokerEvent], queue: asyncio.Queue):
        self.subs.setdefault(event, set()).add(queue)

    def unsub(self, event: type[AbstractBrokerEvent], queue: asyncio.Queue):
        self.subs.setdefault(event, set()).discard(queue)

    def pub(self, event: AbstractBrokerEvent):
        x: list[asyncio.Queue] = list(self.subs.get(type(event), self._empty))
        for q in x:
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                # If the queue is full, we skip this subscriber
                continue
