"""
UPS Carrier Implementation

Rate shopping against the UPS Rating API:
1. merge request options with carrier defaults
2. get a bearer token from the TokenCache
3. build the UPS payload and send it
4. classify transport/HTTP failures into CarrierErrors
5. reject 200 responses whose embedded ResponseStatus is not success
6. map the rated shipments into a RateResult

Tracking and label creation are not implemented for UPS yet.
"""
import logging
import uuid
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from carrier_gateway.core.config import Settings
from carrier_gateway.core.error_classifier import classify_failure
from carrier_gateway.core.exceptions import (
    AuthenticationError,
    CarrierApiError,
    CarrierError,
    NotImplementedCarrierError,
)
from carrier_gateway.core.http_client import HttpTransport, TransportFailure
from carrier_gateway.models.carrier import CarrierCode
from carrier_gateway.modules.shipping.carriers import register_carrier
from carrier_gateway.modules.shipping.carriers.base import (
    BaseCarrier,
    CarrierOptions,
    LabelResult,
    RateResult,
    TrackingResult,
)
from carrier_gateway.modules.shipping.carriers.ups_constants import (
    RATE_PATH,
    RATE_SHOP_PATH,
    TRANSACTION_SOURCE,
    UPS_SUCCESS_STATUS,
)
from carrier_gateway.modules.shipping.carriers.ups_mapper import UPSResponseMapper, build_rate_request
from carrier_gateway.schemas.shipping import (
    LabelRequest,
    RateRequest,
    RateRequestOptions,
    validate_rate_request,
)
from carrier_gateway.schemas.ups import UPSRateResponse
from carrier_gateway.services.oauth import OAuthConfig, TokenCache

logger = logging.getLogger(__name__)


@register_carrier(CarrierCode.UPS)
class UPSCarrier(BaseCarrier):
    """
    UPS shipping carrier.

    Args:
        transport: HttpTransport for rate calls (usually shared with the token cache)
        token_cache: TokenCache for the UPS OAuth credentials
        base_url: UPS API root, e.g. https://onlinetools.ups.com
        options: carrier-level defaults (account number, negotiated rates)
        mapper: response mapper; defaults to USD fallback currency
        timeout_ms: per-call timeout for rate requests
    """

    def __init__(
        self,
        transport: HttpTransport,
        token_cache: TokenCache,
        base_url: str,
        options: Optional[CarrierOptions] = None,
        mapper: Optional[UPSResponseMapper] = None,
        timeout_ms: Optional[int] = None,
    ):
        self._transport = transport
        self._token_cache = token_cache
        self._base_url = base_url.rstrip("/")
        self._options = options or CarrierOptions()
        self._mapper = mapper or UPSResponseMapper()
        self._timeout_ms = timeout_ms

    @property
    def carrier_code(self) -> CarrierCode:
        return CarrierCode.UPS

    @property
    def carrier_name(self) -> str:
        return "UPS"

    @property
    def token_cache(self) -> TokenCache:
        return self._token_cache

    async def close(self):
        """Close HTTP transport."""
        await self._transport.close()

    # ==================== Rating ====================

    def apply_default_options(self, request: RateRequest) -> RateRequest:
        """Fill unset options from carrier defaults."""
        options = request.options or RateRequestOptions()
        merged = options.model_copy(update={
            "negotiated_rates": (
                options.negotiated_rates
                if options.negotiated_rates is not None
                else self._options.use_negotiated_rates
            ),
            "return_all_services": (
                options.return_all_services
                if options.return_all_services is not None
                else True
            ),
        })
        return request.model_copy(update={"options": merged})

    async def rate(self, request: Union[RateRequest, Mapping[str, Any]]) -> RateResult:
        """Get shipping rates from UPS."""
        request = validate_rate_request(request, carrier=self.carrier_name)
        enriched = self.apply_default_options(request)

        # Token acquisition completes before the carrier call is issued
        token = await self._token_cache.get_token()

        payload = build_rate_request(enriched, self._options.account_number)
        shop = payload["RateRequest"]["Request"]["RequestOption"] == "Shop"
        url = f"{self._base_url}{RATE_SHOP_PATH if shop else RATE_PATH}"
        headers = {
            "Authorization": token.authorization_header,
            "Content-Type": "application/json",
            "transId": uuid.uuid4().hex,
            "transactionSrc": TRANSACTION_SOURCE,
        }

        try:
            response = await self._transport.send(
                "POST", url, headers=headers, body=payload, timeout_ms=self._timeout_ms
            )
        except TransportFailure as e:
            raise classify_failure(e, self.carrier_name) from e
        except CarrierError:
            raise
        except Exception as e:
            raise classify_failure(e, self.carrier_name) from e

        if not response.ok:
            error = classify_failure(response, self.carrier_name)
            if isinstance(error, AuthenticationError):
                # Rejected token must not be handed out again
                self._token_cache.invalidate(token)
            raise error

        ups_response = self._parse_rate_response(response.body, response.status)

        status = ups_response.rate_response.response.response_status
        if status.code != UPS_SUCCESS_STATUS:
            logger.error(f"UPS rate response status {status.code}: {status.description}")
            raise CarrierApiError(
                f"UPS API error: {status.description}",
                response_body=response.body,
                carrier=self.carrier_name,
                context={"ups_status_code": status.code, "http_status": response.status},
            )

        result = self._mapper.map_rate_response(ups_response, request)
        logger.info(
            f"UPS rate {result.request_id}: {len(result.quotes)} quotes"
            + (f", {len(result.warnings)} warnings" if result.warnings else "")
        )
        return result

    def _parse_rate_response(self, body: Any, status: int) -> UPSRateResponse:
        try:
            return UPSRateResponse.model_validate(body)
        except PydanticValidationError as e:
            logger.error(f"UPS rate response failed schema validation: {e.error_count()} errors")
            raise CarrierApiError(
                "Malformed UPS rate response",
                status_code=status,
                response_body=body,
                carrier=self.carrier_name,
                context={"errors": [err["msg"] for err in e.errors()]},
                cause=e,
            ) from e

    # ==================== Not Implemented ====================

    async def track(self, tracking_number: str) -> TrackingResult:
        raise NotImplementedCarrierError(
            "track",
            carrier=self.carrier_name,
            context={"tracking_number": tracking_number},
        )

    async def create_label(self, request: LabelRequest) -> LabelResult:
        raise NotImplementedCarrierError("createLabel", carrier=self.carrier_name)


def create_ups_carrier(
    settings: Settings,
    transport: Optional[HttpTransport] = None,
) -> UPSCarrier:
    """
    Wire a UPSCarrier from settings.

    The same HttpTransport serves the token refresh and the rate calls.
    """
    transport = transport or HttpTransport(timeout_ms=settings.REQUEST_TIMEOUT_MS)
    token_cache = TokenCache(
        transport,
        OAuthConfig(
            token_url=settings.UPS_OAUTH_URL,
            client_id=settings.UPS_CLIENT_ID,
            client_secret=settings.UPS_CLIENT_SECRET,
            carrier=CarrierCode.UPS.value,
            refresh_buffer_seconds=settings.TOKEN_REFRESH_BUFFER_SECONDS,
            timeout_ms=settings.REQUEST_TIMEOUT_MS,
            additional_headers={"x-merchant-id": settings.UPS_MERCHANT_ID},
        ),
    )
    options = CarrierOptions(
        account_number=settings.UPS_ACCOUNT_NUMBER or None,
        use_negotiated_rates=settings.UPS_USE_NEGOTIATED_RATES,
    )
    return UPSCarrier(
        transport=transport,
        token_cache=token_cache,
        base_url=settings.UPS_BASE_URL,
        options=options,
        mapper=UPSResponseMapper(default_currency=settings.DEFAULT_CURRENCY),
        timeout_ms=settings.REQUEST_TIMEOUT_MS,
    )
