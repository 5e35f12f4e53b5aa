"""
UPS wire schemas

Pydantic models for the parts of the UPS Rating and OAuth payloads the
gateway reads. Unknown fields are ignored.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UPSModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ==================== Common ====================


class UPSCharge(UPSModel):
    currency_code: Optional[str] = Field(None, alias="CurrencyCode")
    monetary_value: str = Field(..., alias="MonetaryValue")


class UPSAlert(UPSModel):
    code: str = Field(..., alias="Code")
    description: str = Field(..., alias="Description")


# ==================== Rate Response ====================


class UPSItemizedCharge(UPSModel):
    code: str = Field(..., alias="Code")
    description: Optional[str] = Field(None, alias="Description")
    currency_code: Optional[str] = Field(None, alias="CurrencyCode")
    monetary_value: str = Field(..., alias="MonetaryValue")
    sub_type: Optional[str] = Field(None, alias="SubType")


class UPSService(UPSModel):
    code: str = Field(..., alias="Code")
    description: Optional[str] = Field(None, alias="Description")


class UPSNegotiatedRateCharges(UPSModel):
    total_charge: UPSCharge = Field(..., alias="TotalCharge")


class UPSGuaranteedDelivery(UPSModel):
    business_days_in_transit: Optional[str] = Field(None, alias="BusinessDaysInTransit")
    delivery_by_time: Optional[str] = Field(None, alias="DeliveryByTime")


class UPSArrival(UPSModel):
    date: Optional[str] = Field(None, alias="Date")
    time: Optional[str] = Field(None, alias="Time")


class UPSEstimatedArrival(UPSModel):
    arrival: Optional[UPSArrival] = Field(None, alias="Arrival")
    business_days_in_transit: Optional[str] = Field(None, alias="BusinessDaysInTransit")


class UPSServiceSummary(UPSModel):
    estimated_arrival: Optional[UPSEstimatedArrival] = Field(None, alias="EstimatedArrival")
    saturday_delivery: Optional[str] = Field(None, alias="SaturdayDelivery")
    saturday_delivery_disclaimer: Optional[str] = Field(None, alias="SaturdayDeliveryDisclaimer")


class UPSTimeInTransit(UPSModel):
    service_summary: Optional[UPSServiceSummary] = Field(None, alias="ServiceSummary")


class UPSRatedShipment(UPSModel):
    service: UPSService = Field(..., alias="Service")
    rated_shipment_alert: List[UPSAlert] = Field(default_factory=list, alias="RatedShipmentAlert")
    transportation_charges: UPSCharge = Field(..., alias="TransportationCharges")
    base_service_charge: Optional[UPSCharge] = Field(None, alias="BaseServiceCharge")
    service_options_charges: Optional[UPSCharge] = Field(None, alias="ServiceOptionsCharges")
    total_charges: UPSCharge = Field(..., alias="TotalCharges")
    negotiated_rate_charges: Optional[UPSNegotiatedRateCharges] = Field(None, alias="NegotiatedRateCharges")
    guaranteed_delivery: Optional[UPSGuaranteedDelivery] = Field(None, alias="GuaranteedDelivery")
    time_in_transit: Optional[UPSTimeInTransit] = Field(None, alias="TimeInTransit")
    itemized_charges: List[UPSItemizedCharge] = Field(default_factory=list, alias="ItemizedCharges")

    @field_validator("rated_shipment_alert", "itemized_charges", mode="before")
    @classmethod
    def single_item_as_list(cls, v):
        # UPS sends a bare object instead of a one-element array
        if isinstance(v, dict):
            return [v]
        return v if v is not None else []


class UPSResponseStatus(UPSModel):
    code: str = Field(..., alias="Code")
    description: str = Field("", alias="Description")


class UPSResponseEnvelope(UPSModel):
    response_status: UPSResponseStatus = Field(..., alias="ResponseStatus")
    alert: List[UPSAlert] = Field(default_factory=list, alias="Alert")

    @field_validator("alert", mode="before")
    @classmethod
    def single_alert_as_list(cls, v):
        if isinstance(v, dict):
            return [v]
        return v if v is not None else []


class UPSRateResponseBody(UPSModel):
    response: UPSResponseEnvelope = Field(..., alias="Response")
    rated_shipment: List[UPSRatedShipment] = Field(default_factory=list, alias="RatedShipment")

    @field_validator("rated_shipment", mode="before")
    @classmethod
    def single_shipment_as_list(cls, v):
        if isinstance(v, dict):
            return [v]
        return v if v is not None else []


class UPSRateResponse(UPSModel):
    rate_response: UPSRateResponseBody = Field(..., alias="RateResponse")


# ==================== OAuth ====================


class UPSOAuthResponse(UPSModel):
    """expires_in arrives as a string or a number depending on API version."""
    access_token: str = Field(..., min_length=1)
    token_type: str = "Bearer"
    expires_in: int
    scope: Optional[str] = None
    issued_at: Optional[str] = None
    client_id: Optional[str] = None
    status: Optional[str] = None

    @field_validator("expires_in", mode="before")
    @classmethod
    def coerce_expires_in(cls, v: Union[str, int]) -> int:
        if isinstance(v, str):
            return int(v.strip())
        return v
