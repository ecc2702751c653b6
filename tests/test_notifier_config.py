import pytest

from conftest import VALID_CHAT_ID, VALID_TOKEN
from resilient_notifier import (
    CachedConfig,
    Credentials,
    InvalidChatId,
    InvalidConfig,
    InvalidToken,
    NotifierConfig,
    RetryPolicy,
    load_config_cached,
)
from resilient_notifier.notifierConfig import is_valid_chat_id, is_valid_token


def test_valid_credentials():
    creds = Credentials(VALID_TOKEN, "123456789")
    assert creds.token == VALID_TOKEN
    assert creds.destination_id == "123456789"


@pytest.mark.parametrize(
    "token",
    [
        "invalid_token",
        "123456789",
        "123:ABC",
        "123456789ABC-DEF1234ghIkl-zyx57W2v1u123ew11",
        "12345abc:ABC-DEF1234ghIkl-zyx57W2v1u123ew11",
        ":ABC-DEF1234ghIkl-zyx57W2v1u123ew11xx",
        "1:2:ABC-DEF1234ghIkl-zyx57W2v1u123ew11",
    ],
)
def test_invalid_token_rejected(token):
    assert not is_valid_token(token)
    with pytest.raises(InvalidToken):
        Credentials(token, "123456789")


def test_long_token_secret_accepted():
    assert is_valid_token("123456789:" + "A" * 200)


def test_token_secret_length_boundary():
    assert is_valid_token("1:" + "s" * 35)
    assert not is_valid_token("1:" + "s" * 34)


@pytest.mark.parametrize("chat_id", ["-123456789", "@channel", "123456789", "+42", "9223372036854775807"])
def test_valid_chat_ids(chat_id):
    assert is_valid_chat_id(chat_id)
    Credentials(VALID_TOKEN, chat_id)


@pytest.mark.parametrize("chat_id", ["", "abc", "12 34", "9223372036854775808", "1_000", "123\n", " 123", "-"])
def test_invalid_chat_ids(chat_id):
    assert not is_valid_chat_id(chat_id)
    with pytest.raises(InvalidChatId) as err:
        Credentials(VALID_TOKEN, chat_id)
    assert err.value.chat_id == chat_id


def test_config_defaults():
    config = NotifierConfig.create(VALID_TOKEN, 123456789)
    assert config.chat_id == "123456789"
    assert config.api_base_url == "https://api.telegram.org"
    assert config.timeout_seconds == 30.0
    assert config.max_retries == 3
    assert config.rate_limit_per_second == 30
    assert config.rate_limit_per_minute == 20


def test_config_strips_trailing_slash():
    config = NotifierConfig.create(VALID_TOKEN, VALID_CHAT_ID, api_base_url="http://localhost:8081/")
    assert config.api_base_url == "http://localhost:8081"


@pytest.mark.parametrize(
    "overrides",
    [
        {"timeout_seconds": 0},
        {"max_retries": 0},
        {"rate_limit_per_second": 0},
        {"api_base_url": ""},
    ],
)
def test_config_rejects_bad_values(overrides):
    with pytest.raises(InvalidConfig):
        NotifierConfig.create(VALID_TOKEN, VALID_CHAT_ID, **overrides)


def test_config_is_immutable(config):
    with pytest.raises(AttributeError):
        config.max_retries = 5


def test_from_env_reads_overrides():
    env = {
        "TELEGRAM_BOT_TOKEN": VALID_TOKEN,
        "TELEGRAM_CHAT_ID": "@alerts",
        "TELEGRAM_TIMEOUT_SECONDS": "5.5",
        "TELEGRAM_MAX_RETRIES": "5",
        "TELEGRAM_RATE_LIMIT_PER_MINUTE": "10",
    }
    config = NotifierConfig.from_env(env)
    assert config.chat_id == "@alerts"
    assert config.timeout_seconds == 5.5
    assert config.max_retries == 5
    assert config.rate_limit_per_minute == 10
    assert config.rate_limit_per_second == 30
    assert config.retry_policy().max_attempts == 5


def test_from_env_missing_token():
    with pytest.raises(InvalidConfig) as err:
        NotifierConfig.from_env({"TELEGRAM_CHAT_ID": "1"})
    assert "TELEGRAM_BOT_TOKEN" in str(err.value)


def test_from_env_unparsable_number():
    env = {"TELEGRAM_BOT_TOKEN": VALID_TOKEN, "TELEGRAM_CHAT_ID": "1", "TELEGRAM_MAX_RETRIES": "three"}
    with pytest.raises(InvalidConfig) as err:
        NotifierConfig.from_env(env)
    assert "TELEGRAM_MAX_RETRIES" in str(err.value)


def test_from_env_invalid_token_surfaces_as_invalid_token():
    with pytest.raises(InvalidToken):
        NotifierConfig.from_env({"TELEGRAM_BOT_TOKEN": "nope", "TELEGRAM_CHAT_ID": "1"})


def test_retry_policy_defaults():
    policy = RetryPolicy()
    assert policy.max_attempts == 3
    assert policy.initial_delay == 0.5
    assert policy.max_delay == 30.0
    assert policy.backoff_multiplier == 2.0
    assert policy.retry_fatal_errors is False


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_delay": 0.1, "initial_delay": 1.0},
        {"max_attempts": 0},
        {"initial_delay": -1.0},
        {"backoff_multiplier": 0.5},
    ],
)
def test_retry_policy_rejects_bad_values(kwargs):
    with pytest.raises(InvalidConfig):
        RetryPolicy(**kwargs)


def test_cached_config_expiry(config):
    cache = CachedConfig(value=config, loaded_at=100.0, ttl=300.0)
    assert not cache.is_expired(now=400.0)
    assert cache.is_expired(now=400.1)


def test_load_config_cached_reuses_fresh_cache(config):
    calls = []

    def loader():
        calls.append(1)
        return config

    first = load_config_cached(None, ttl=60.0, loader=loader, now=0.0)
    second = load_config_cached(first, ttl=60.0, loader=loader, now=30.0)
    assert second is first
    assert len(calls) == 1


def test_load_config_cached_reloads_expired_cache(config):
    calls = []

    def loader():
        calls.append(1)
        return config

    first = load_config_cached(None, ttl=60.0, loader=loader, now=0.0)
    second = load_config_cached(first, ttl=60.0, loader=loader, now=61.0)
    assert second is not first
    assert second.loaded_at == 61.0
    assert len(calls) == 2
