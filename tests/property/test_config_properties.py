"""
Property-based tests for configuration module.

Configuration is immutable, validates its credential invariant and keeps
endpoint URLs free of trailing slashes.
"""

import pytest
from hypothesis import given, settings, strategies as st
from pydantic import ValidationError as PydanticValidationError

from cloud_platform_sdk.config import CloudPlatformConfig, TelemetryConfig, WaitConfig

# Strategy for valid identity URLs
valid_identity_url = st.sampled_from([
    "https://identity.example.com",
    "https://identity.api.example.com/v2.0",
    "https://keystone.company.org:5000/v2.0/",
    "https://identity.test.local:8443",
])

# Strategy for valid usernames
valid_username = st.text(min_size=1, max_size=50).filter(lambda x: len(x.strip()) > 0)

secrets = st.text(min_size=1, max_size=40)


class TestConfigurationProperties:
    """Property tests for CloudPlatformConfig."""

    @given(identity_url=valid_identity_url, username=valid_username, api_key=secrets)
    @settings(max_examples=100)
    def test_config_is_immutable(self, identity_url: str, username: str, api_key: str) -> None:
        """Property: configuration cannot be mutated after creation."""
        config = CloudPlatformConfig(
            identity_url=identity_url,
            username=username,
            api_key=api_key,
        )

        with pytest.raises(PydanticValidationError):
            config.username = "other"  # type: ignore[misc]

    @given(identity_url=valid_identity_url, username=valid_username, password=secrets)
    @settings(max_examples=100)
    def test_identity_url_has_no_trailing_slash(
        self, identity_url: str, username: str, password: str
    ) -> None:
        """Property: identity_url_str never ends with a slash."""
        config = CloudPlatformConfig(
            identity_url=identity_url,
            username=username,
            password=password,
        )

        assert not config.identity_url_str.endswith("/")

    @given(
        identity_url=valid_identity_url,
        username=valid_username,
        api_key=st.one_of(st.none(), secrets),
        password=st.one_of(st.none(), secrets),
    )
    @settings(max_examples=100)
    def test_exactly_one_secret(
        self,
        identity_url: str,
        username: str,
        api_key: str | None,
        password: str | None,
    ) -> None:
        """Property: config is valid if and only if exactly one secret is set."""
        kwargs = {"identity_url": identity_url, "username": username}
        if (api_key is None) == (password is None):
            with pytest.raises(PydanticValidationError):
                CloudPlatformConfig(**kwargs, api_key=api_key, password=password)
        else:
            CloudPlatformConfig(**kwargs, api_key=api_key, password=password)


class TestWaitConfigProperties:
    """Property tests for WaitConfig."""

    @given(
        refresh_delay=st.floats(min_value=0, max_value=3600),
        timeout=st.floats(min_value=0.001, max_value=86400),
    )
    @settings(max_examples=100)
    def test_valid_ranges_accepted(self, refresh_delay: float, timeout: float) -> None:
        config = WaitConfig(refresh_delay=refresh_delay, timeout=timeout)

        assert config.refresh_delay == refresh_delay
        assert config.timeout == timeout

    @given(timeout=st.floats(max_value=0, allow_nan=False))
    @settings(max_examples=50)
    def test_non_positive_timeout_rejected(self, timeout: float) -> None:
        with pytest.raises(PydanticValidationError):
            WaitConfig(timeout=timeout)


@given(level=st.sampled_from(["debug", "Info", "WARNING", "error", "critical"]))
@settings(max_examples=20)
def test_log_levels_normalized(level: str) -> None:
    assert TelemetryConfig(log_level=level).log_level == level.upper()
