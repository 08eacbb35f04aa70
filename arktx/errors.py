from __future__ import annotations


class ArktxError(Exception):

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(ArktxError):
    """
    The requested transaction cannot be built from the given input.
    Aborts that transaction only.
    """


class NotSupported(InputError):

    def __init__(self, kind: str, flag: str):
        super().__init__(f'{kind} requires the {flag} milestone.')
        self.kind = kind
        self.flag = flag


class SigningOrderError(ArktxError):
    """
    A signing step was attempted from a state that does not allow it.
    """


class VerificationFailed(ArktxError):

    def __init__(self, transaction_id: str, message: str = 'Signature verification failed.'):
        super().__init__(message)
        self.transaction_id = transaction_id


class ExternalLookupError(ArktxError):
    """
    A ledger lookup failed. Never raised by the ledger client, it is
    carried on the degraded `Lookup` instead.
    """


class SubmissionError(ArktxError):

    def __init__(self,
        message: str,
        status: int | None = None,
        body: dict | str | None = None
    ):
        super().__init__(message)
        self.status = status
        self.body = body
