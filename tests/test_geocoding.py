# ABOUTME: Contract tests for the Geocoder's forward and reverse lookups.
# ABOUTME: Validates NotFound-as-None, error mapping by status, and best-effort reverse lookups.

import httpx
import pytest
from payloads import API_KEY, BASE_URL, geo_candidate, json_response, routing_client, text_response

from skycast.errors import AuthenticationFailed, GeocodingFailed, UpstreamFailed
from skycast.geocoding import Geocoder, parse_place


def _geocoder(client) -> Geocoder:
    return Geocoder(client, API_KEY, BASE_URL)


class TestGeocodeByName:
    @pytest.mark.asyncio
    async def test_resolves_known_city(self):
        """geocode_by_name returns a PlaceRecord for a known city.

        Implementation: Mocks the direct geocoding API with one Paris candidate.
        Passing implies: Candidate fields map onto PlaceRecord.
        """
        client = routing_client({"/geo/1.0/direct": json_response([geo_candidate(state="Ile-de-France")])})
        place = await _geocoder(client).geocode_by_name("Paris")

        assert place is not None
        assert place.name == "Paris"
        assert place.latitude == 48.85
        assert place.longitude == 2.35
        assert place.country == "FR"
        assert place.admin_region == "Ile-de-France"

    @pytest.mark.asyncio
    async def test_sends_trimmed_query_and_credential(self):
        client = routing_client({"/geo/1.0/direct": json_response([geo_candidate()])})
        await _geocoder(client).geocode_by_name("  Paris ")

        url = client.get.call_args.args[0]
        params = client.get.call_args.kwargs["params"]
        assert url == BASE_URL + "/geo/1.0/direct"
        assert params == {"q": "Paris", "limit": 1, "appid": API_KEY}

    @pytest.mark.asyncio
    async def test_returns_none_for_empty_results(self):
        """An empty candidate list is NotFound, not an error.

        Implementation: Mocks the API to return [].
        Passing implies: Absence is distinguished from failure.
        """
        client = routing_client({"/geo/1.0/direct": json_response([])})
        assert await _geocoder(client).geocode_by_name("Xyzzyville") is None

    @pytest.mark.asyncio
    async def test_401_is_authentication_failure(self):
        """A 401 response raises AuthenticationFailed carrying remediation text.

        Implementation: Mocks a 401 with an OpenWeather error body.
        Passing implies: Credential problems are separated from lookup failures.
        """
        client = routing_client(
            {"/geo/1.0/direct": json_response({"cod": 401, "message": "Invalid API key."}, status_code=401)}
        )
        with pytest.raises(AuthenticationFailed) as exc_info:
            await _geocoder(client).geocode_by_name("Paris")

        assert exc_info.value.provider_message == "Invalid API key."
        assert "api_keys" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_2xx_carries_status_and_provider_message(self):
        client = routing_client(
            {"/geo/1.0/direct": json_response({"cod": "429", "message": "Too many requests"}, status_code=429)}
        )
        with pytest.raises(GeocodingFailed) as exc_info:
            await _geocoder(client).geocode_by_name("Paris")

        assert exc_info.value.http_status == 429
        assert exc_info.value.provider_message == "Too many requests"
        assert str(exc_info.value) == "Geocoding API error (429): Too many requests"

    @pytest.mark.asyncio
    async def test_non_json_error_uses_body_text(self):
        client = routing_client({"/geo/1.0/direct": text_response("bad gateway", 502)})
        with pytest.raises(GeocodingFailed) as exc_info:
            await _geocoder(client).geocode_by_name("Paris")
        assert exc_info.value.provider_message == "bad gateway"

    @pytest.mark.asyncio
    async def test_empty_error_body_falls_back_to_status(self):
        client = routing_client({"/geo/1.0/direct": text_response("", 500)})
        with pytest.raises(GeocodingFailed) as exc_info:
            await _geocoder(client).geocode_by_name("Paris")
        assert exc_info.value.provider_message == "HTTP 500"

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_failure(self):
        client = routing_client({"/geo/1.0/direct": httpx.ConnectError("connection refused")})
        with pytest.raises(UpstreamFailed, match="Failed to geocode city"):
            await _geocoder(client).geocode_by_name("Paris")


class TestReverseGeocode:
    @pytest.mark.asyncio
    async def test_resolves_coordinates(self):
        client = routing_client({"/geo/1.0/reverse": json_response([geo_candidate(name="Montmartre")])})
        place = await _geocoder(client).reverse_geocode(48.88, 2.34)

        assert place is not None
        assert place.name == "Montmartre"
        params = client.get.call_args.kwargs["params"]
        assert params["lat"] == 48.88
        assert params["lon"] == 2.34

    @pytest.mark.asyncio
    async def test_error_status_degrades_to_none(self):
        """Reverse geocoding never raises on a provider error.

        Implementation: Mocks a 500 response.
        Passing implies: A broken label lookup cannot block weather by coordinates.
        """
        client = routing_client({"/geo/1.0/reverse": text_response("oops", 500)})
        assert await _geocoder(client).reverse_geocode(1.0, 2.0) is None

    @pytest.mark.asyncio
    async def test_transport_error_degrades_to_none(self):
        client = routing_client({"/geo/1.0/reverse": httpx.ReadTimeout("slow")})
        assert await _geocoder(client).reverse_geocode(1.0, 2.0) is None

    @pytest.mark.asyncio
    async def test_malformed_body_degrades_to_none(self):
        client = routing_client({"/geo/1.0/reverse": json_response([{"lat": 1.0}])})
        assert await _geocoder(client).reverse_geocode(1.0, 2.0) is None


class TestParsePlace:
    def test_non_list_payload_is_not_found(self):
        assert parse_place({"cod": "404"}) is None
        assert parse_place(None) is None
