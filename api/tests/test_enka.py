"""Tests for the Enka.Network proxy endpoint."""

from fastapi.testclient import TestClient

from core.result import Err
from data_sources.enka_client import FetchError


class TestEnkaProxy:
    def test_returns_raw_payload(self, client: TestClient, mock_enka_client, sample_payload):
        response = client.get("/api/enka/800123456")

        assert response.status_code == 200
        assert response.json() == sample_payload
        mock_enka_client.fetch_raw.assert_called_once_with("800123456")

    def test_relays_upstream_status(self, client: TestClient, mock_enka_client):
        mock_enka_client.fetch_raw.return_value = Err(
            FetchError(404, "Failed to fetch data from Enka.Network: Player does not exist")
        )

        response = client.get("/api/enka/100000000")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Failed to fetch data from Enka.Network: Player does not exist"
        }

    def test_no_upstream_status_becomes_500(self, client: TestClient, mock_enka_client):
        mock_enka_client.fetch_raw.return_value = Err(
            FetchError(None, "Failed to fetch data from Enka.Network: timed out")
        )

        response = client.get("/api/enka/800123456")

        assert response.status_code == 500
        assert "timed out" in response.json()["error"]
