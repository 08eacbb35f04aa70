from __future__ import annotations


class NonceSequencer(object):
    """
    Issues the next nonce per sender for the lifetime of the process.

    The first request for a sender is seeded from the ledger (or from
    `start_nonce` when that is higher); later requests count up locally
    so a batch never waits on the ledger to catch up. Not safe for
    concurrent mutation: callers build transactions one at a time on a
    single event loop.
    """

    def __init__(self, start_nonce: int | None = None):
        self.start_nonce = start_nonce
        self._nonces: dict[str, int] = {}

    def seeded(self, sender: str) -> bool:
        return sender in self._nonces

    def last(self, sender: str) -> int | None:
        return self._nonces.get(sender)

    def next(self, sender: str, seed_nonce: int | None = None) -> int:
        previous = self._nonces.get(sender)
        if previous is None:
            nonce = max(self.start_nonce or 0, seed_nonce or 0, 0) + 1
        else:
            nonce = previous + 1
        self._nonces[sender] = nonce
        return nonce

    def release(self, sender: str, nonce: int) -> bool:
        """
        Hand back `nonce` if it is still the last one issued for `sender`.
        """
        if self._nonces.get(sender) != nonce:
            return False
        if nonce - 1 > 0:
            self._nonces[sender] = nonce - 1
        else:
            del self._nonces[sender]
        return True
