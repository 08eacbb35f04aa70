"""
Tester settings, read from the environment (prefix ``ARKTX_``, nested
fields separated by ``__``) or a ``.env`` file.

    ARKTX_PASSPHRASE="2.6-wallet1"
    ARKTX_MULTI_SIGNATURE__ENABLED=true
    ARKTX_HTLC__LOCK__EXPIRATION__TYPE=2
"""

from __future__ import annotations
from functools import lru_cache
from hashlib import sha256
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from arktx.transaction import ExpirationType


SECOND_PASSPHRASE = 'second passphrase'
HTLC_SECRET = 'htlc secret'

# The unlock secret is the first 32 hex characters of sha256(secret),
# the lock commits to sha256 of that string.
UNLOCK_SECRET = sha256(HTLC_SECRET.encode()).hexdigest()[:32]
SECRET_HASH = sha256(UNLOCK_SECRET.encode()).hexdigest()


class VendorFieldSettings(BaseModel):

    value: str | None = None
    random: bool = True


class MultiSignatureAssetSettings(BaseModel):

    # Participant passphrases, in signing index order
    participants: list[str] = [
        'multisig participant 1',
        'multisig participant 2',
        'multisig participant 3',
    ]
    min: int = 2


class MultiSignaturePassphrase(BaseModel):

    index: int
    passphrase: str


class MultiSignatureSettings(BaseModel):

    enabled: bool = False
    asset: MultiSignatureAssetSettings = MultiSignatureAssetSettings()
    passphrases: list[MultiSignaturePassphrase] = [
        MultiSignaturePassphrase(index=0, passphrase='multisig participant 1'),
        MultiSignaturePassphrase(index=1, passphrase='multisig participant 2'),
        MultiSignaturePassphrase(index=2, passphrase='multisig participant 3'),
    ]


class PaymentSettings(BaseModel):

    recipient_id: str
    amount: int = 1


class HtlcExpirationSettings(BaseModel):

    type: ExpirationType = ExpirationType.EPOCH_TIMESTAMP
    # Seconds relative to network time, or an absolute block height
    value: int = 52 * 8


class HtlcLockSettings(BaseModel):

    secret_hash: str = SECRET_HASH
    expiration: HtlcExpirationSettings = HtlcExpirationSettings()


class HtlcClaimSettings(BaseModel):

    lock_transaction_id: str | None = None
    unlock_secret: str = UNLOCK_SECRET


class HtlcRefundSettings(BaseModel):

    lock_transaction_id: str | None = None


class HtlcSettings(BaseModel):

    lock: HtlcLockSettings = HtlcLockSettings()
    claim: HtlcClaimSettings = HtlcClaimSettings()
    refund: HtlcRefundSettings = HtlcRefundSettings()


class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_prefix='ARKTX_',
        env_nested_delimiter='__',
        env_file='.env',
        extra='ignore',
    )

    # Print every built payload
    verbose: bool = True
    log_level: str = 'INFO'

    network: str = 'devnet'
    # Random seed node when unset
    peer: str | None = None
    port: int = 4003
    timeout: float = 5.0
    # Skip the height lookup and evaluate milestones at this height
    height: int | None = None

    # Random fixture wallet when unset
    passphrase: str | None = None
    second_passphrase: str | None = None
    # Build and sign, but never submit
    coldrun: bool = False

    recipient_id: str | None = None
    start_nonce: int | None = None
    # Transfer expiration height, 0 means none
    expiration: int | None = None
    amount: int = 1
    # Static fee of the transaction kind when unset
    fee: int | None = None
    vendor_field: VendorFieldSettings = VendorFieldSettings()

    delegate_name: str | None = None
    vote: str | None = None
    unvote: str | None = None

    multi_signature: MultiSignatureSettings = MultiSignatureSettings()
    ipfs: str = 'QmYSK2JyM3RyDyB52caZCTKFR3HKniEcMnNJYdk8DQ6KKB'
    multi_payments: list[PaymentSettings] = Field(default_factory=list)
    htlc: HtlcSettings = HtlcSettings()

    # Roll back the nonce of a transaction that failed to build
    release_failed_nonces: bool = False

    @field_validator('amount')
    @classmethod
    def positive_amount(cls, v: int) -> int:
        if v <= 0:
            raise ValueError('amount must be positive')
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
