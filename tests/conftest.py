"""
Pytest configuration and fixtures for carrier gateway tests.
"""
import pytest

from carrier_gateway.core.config import Settings, load_settings
from carrier_gateway.modules.shipping.carriers.base import CarrierOptions
from carrier_gateway.modules.shipping.carriers.ups import UPSCarrier
from carrier_gateway.modules.shipping.carriers.ups_mapper import UPSResponseMapper
from carrier_gateway.services.oauth import OAuthConfig, TokenCache
from tests.fixtures.fakes import FakeClock, FakeTransport

UPS_BASE_URL = "https://wwwcie.ups.com"
UPS_OAUTH_URL = "https://wwwcie.ups.com/security/v1/oauth/token"


@pytest.fixture
def settings() -> Settings:
    """Settings built from explicit values only (no .env file)."""
    return load_settings(
        _env_file=None,
        ENVIRONMENT="test",
        UPS_CLIENT_ID="test-client-id",
        UPS_CLIENT_SECRET="test-client-secret",
        UPS_MERCHANT_ID="test-merchant",
        UPS_ACCOUNT_NUMBER="A1B2C3",
        UPS_BASE_URL=UPS_BASE_URL,
        UPS_OAUTH_URL=UPS_OAUTH_URL,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def oauth_config() -> OAuthConfig:
    return OAuthConfig(
        token_url=UPS_OAUTH_URL,
        client_id="test-client-id",
        client_secret="test-client-secret",
        carrier="UPS",
        additional_headers={"x-merchant-id": "test-merchant"},
    )


@pytest.fixture
def token_cache(fake_transport, oauth_config, clock) -> TokenCache:
    return TokenCache(fake_transport, oauth_config, clock=clock)


@pytest.fixture
def ups_carrier(fake_transport, token_cache) -> UPSCarrier:
    """UPS carrier whose token refresh and rate calls share one fake transport."""
    return UPSCarrier(
        transport=fake_transport,
        token_cache=token_cache,
        base_url=UPS_BASE_URL,
        options=CarrierOptions(account_number="A1B2C3"),
        mapper=UPSResponseMapper(),
    )


@pytest.fixture
def sample_rate_request() -> dict:
    """camelCase payload as it arrives from an API edge."""
    return {
        "origin": {
            "addressLine1": "100 Warehouse Way",
            "city": "Atlanta",
            "stateProvinceCode": "GA",
            "postalCode": "30301",
            "countryCode": "US",
        },
        "destination": {
            "addressLine1": "42 Elm Street",
            "addressLine2": "Apt 3",
            "city": "Portland",
            "stateProvinceCode": "OR",
            "postalCode": "97201",
            "countryCode": "US",
            "isResidential": True,
        },
        "packages": [
            {
                "weight": {"value": 5.5, "unit": "LB"},
                "dimensions": {"length": 12, "width": 10, "height": 8, "unit": "IN"},
            }
        ],
        "shipDate": "2024-01-15",
    }
