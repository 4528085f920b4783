"""Constants for the NS reisinformatie API adapter.

API portal: https://apiportal.ns.nl/
Every call needs the subscription key header.
"""

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"

TRIPS_PATH = "/v3/trips"  # GET /v3/trips?fromStation=...&toStation=...&dateTime=...
STATIONS_PATH = "/v2/stations"  # GET /v2/stations?q=...

DEFAULT_HEADERS = {
    "Accept": "application/json",
}

# Shortest possible transfers, used by the combination search
EXTREME_TRANSFER_PARAMS: dict[str, str] = {
    "minTransferTime": "0",
    "additionalTransferTime": "0",
    "searchForAccessibleTrip": "false",
}
