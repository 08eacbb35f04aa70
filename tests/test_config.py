from arktx.config import Settings, get_settings, UNLOCK_SECRET, SECRET_HASH
from arktx.transaction import ExpirationType
from hashlib import sha256
from pydantic import ValidationError

import pytest


def test_defaults(monkeypatch):
    monkeypatch.delenv('ARKTX_PASSPHRASE', raising=False)
    x = Settings(_env_file=None)
    assert x.network == 'devnet' and x.port == 4003
    assert x.passphrase is None
    assert not x.coldrun and not x.release_failed_nonces
    assert not x.multi_signature.enabled
    assert [p.index for p in x.multi_signature.passphrases] == [0, 1, 2]
    assert x.htlc.lock.expiration.type == ExpirationType.EPOCH_TIMESTAMP


def test_environment(monkeypatch):
    monkeypatch.setenv('ARKTX_PASSPHRASE', '2.6-wallet1')
    monkeypatch.setenv('ARKTX_COLDRUN', 'true')
    monkeypatch.setenv('ARKTX_MULTI_SIGNATURE__ENABLED', 'true')
    monkeypatch.setenv('ARKTX_HTLC__LOCK__EXPIRATION__TYPE', '2')
    x = Settings(_env_file=None)
    assert x.passphrase == '2.6-wallet1'
    assert x.coldrun
    assert x.multi_signature.enabled
    assert x.multi_signature.asset.min == 2
    assert x.htlc.lock.expiration.type == ExpirationType.BLOCK_HEIGHT


def test_invalid_amount():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, amount=0)


def test_htlc_secret():
    assert len(UNLOCK_SECRET) == 32
    assert SECRET_HASH == sha256(UNLOCK_SECRET.encode()).hexdigest()


def test_get_settings_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
    get_settings.cache_clear()
