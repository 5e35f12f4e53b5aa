"""
Canned UPS API payloads.

Shapes follow the UPS Rating v2403 and OAuth responses, trimmed to the fields
the mapper reads.
"""


def charge(value, currency="USD"):
    return {"CurrencyCode": currency, "MonetaryValue": value}


def rated_shipment(
    code,
    total,
    base=None,
    transportation=None,
    negotiated=None,
    itemized=None,
    guaranteed_days=None,
    transit_days=None,
    arrival_date=None,
    saturday=None,
    description=None,
    currency="USD",
):
    shipment = {
        "Service": {"Code": code},
        "TransportationCharges": charge(transportation or total, currency),
        "TotalCharges": charge(total, currency),
    }
    if description is not None:
        shipment["Service"]["Description"] = description
    if base is not None:
        shipment["BaseServiceCharge"] = charge(base, currency)
    if negotiated is not None:
        shipment["NegotiatedRateCharges"] = {"TotalCharge": charge(negotiated, currency)}
    if itemized is not None:
        shipment["ItemizedCharges"] = itemized
    if guaranteed_days is not None:
        shipment["GuaranteedDelivery"] = {"BusinessDaysInTransit": guaranteed_days}
    if transit_days is not None or arrival_date is not None or saturday is not None:
        estimated = {}
        if transit_days is not None:
            estimated["BusinessDaysInTransit"] = transit_days
        if arrival_date is not None:
            estimated["Arrival"] = {"Date": arrival_date, "Time": "230000"}
        summary = {"EstimatedArrival": estimated}
        if saturday is not None:
            summary["SaturdayDelivery"] = saturday
        shipment["TimeInTransit"] = {"ServiceSummary": summary}
    return shipment


def rate_response(*shipments, status_code="1", description="Success"):
    return {
        "RateResponse": {
            "Response": {
                "ResponseStatus": {"Code": status_code, "Description": description},
                "Alert": [],
            },
            "RatedShipment": list(shipments),
        }
    }


# Three services, deliberately out of price order
SHOP_RESPONSE = rate_response(
    rated_shipment(
        "01",
        "62.99",
        base="58.00",
        guaranteed_days="1",
        transit_days="1",
        arrival_date="20240116",
        itemized=[
            {"Code": "375", "Description": "FUEL SURCHARGE", "CurrencyCode": "USD", "MonetaryValue": "4.99"},
        ],
    ),
    rated_shipment(
        "03",
        "15.99",
        base="13.50",
        transit_days="5",
        arrival_date="20240122",
        itemized=[
            {"Code": "375", "Description": "FUEL", "CurrencyCode": "USD", "MonetaryValue": "2.49"},
            {"Code": "270", "Description": "RESIDENTIAL", "CurrencyCode": "USD", "MonetaryValue": "0.00"},
        ],
    ),
    rated_shipment(
        "02",
        "32.50",
        base="30.00",
        guaranteed_days="2",
        transit_days="2",
        arrival_date="20240117",
        saturday="0",
    ),
)

NEGOTIATED_RESPONSE = rate_response(
    rated_shipment("03", "15.99", negotiated="12.99", transportation="14.00"),
)

FAILED_STATUS_RESPONSE = rate_response(status_code="0", description="Invalid Shipper Number")

ERROR_BODY = {
    "response": {
        "errors": [
            {"code": "111210", "message": "The requested service is unavailable between the selected locations."}
        ]
    }
}


def oauth_token(access_token="ups-access-token-0001", expires_in="14399"):
    return {
        "token_type": "Bearer",
        "issued_at": "1700000000000",
        "client_id": "test-client-id",
        "access_token": access_token,
        "expires_in": expires_in,
        "status": "approved",
    }
