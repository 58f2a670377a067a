"""Tests for build card and scoring endpoints."""

from fastapi.testclient import TestClient

from core.result import Err
from data_sources.enka_client import FetchError


class TestGetBuild:
    def test_first_showcased_character(self, client: TestClient):
        response = client.get("/api/v1/builds/800123456")
        assert response.status_code == 200

        data = response.json()
        assert data["uid"] == "800123456"
        assert data["avatarId"] == 10000089

        build = data["build"]
        assert build["character"]["name"] == "フリーナ"
        assert build["character"]["talents"]["skill"]["level"] == 12
        assert build["weapon"]["refinement"] == 1
        assert build["stats"]["cr"] == 33.1
        assert build["scoreBase"] == "atk"
        assert [a["slot"] for a in build["artifacts"]] == ["flower", "plume", "sands", "goblet", "circlet"]

        score = data["score"]
        assert score["totalScore"] == 150.5
        assert score["totalRank"] == {"label": "B", "color": "#999999"}
        assert score["setBonuses"] == [{"set": "黄金の劇団", "count": 3}]

    def test_selects_avatar_and_score_base(self, client: TestClient):
        response = client.get("/api/v1/builds/800123456?avatar_id=10000089&score_base=hp")
        assert response.status_code == 200

        score = response.json()["score"]
        assert score["scoreBase"] == "hp"
        assert score["artifacts"][0]["score"] == 51.9
        assert score["artifacts"][0]["rank"]["label"] == "SS"

    def test_default_score_base_from_config(self, client: TestClient, mock_config):
        mock_config.score_base = "er"

        score = client.get("/api/v1/builds/800123456").json()["score"]
        assert score["scoreBase"] == "er"

    def test_second_character(self, client: TestClient):
        data = client.get("/api/v1/builds/800123456?avatar_id=10000002").json()

        assert data["build"]["character"]["name"] == "神里綾華"
        assert data["build"]["weapon"]["name"] == "Unknown (12345)"
        assert data["score"]["totalScore"] == 0.0

    def test_character_not_showcased(self, client: TestClient):
        response = client.get("/api/v1/builds/800123456?avatar_id=1")

        assert response.status_code == 404
        assert response.json()["message"] == "Character 1 is not showcased for UID 800123456"

    def test_invalid_score_base(self, client: TestClient):
        response = client.get("/api/v1/builds/800123456?score_base=speed")
        assert response.status_code == 422

    def test_fetch_error_status_is_relayed(self, client: TestClient, mock_enka_client):
        mock_enka_client.fetch_snapshot.return_value = Err(
            FetchError(424, "Failed to fetch data from Enka.Network: Game maintenance or Enka.Network is updating")
        )

        response = client.get("/api/v1/builds/800123456")

        assert response.status_code == 424
        assert "maintenance" in response.json()["message"]


class TestScoreArtifacts:
    def test_scores_submitted_artifacts(self, client: TestClient):
        response = client.post("/api/v1/score", json={
            "scoreBase": "atk",
            "artifacts": [
                {
                    "slot": "goblet",
                    "set": "Troupe",
                    "subStats": [
                        {"label": "会心率", "value": "10.5%"},
                        {"label": "会心ダメージ", "value": "15.0%"},
                    ],
                },
                {"slot": "生の花", "subStats": [{"label": "会心ダメージ", "value": "7.8%"}]},
            ],
        })
        assert response.status_code == 200

        data = response.json()
        by_slot = {a["slot"]: a for a in data["artifacts"]}
        assert by_slot["goblet"]["score"] == 36.0
        assert by_slot["goblet"]["rank"]["label"] == "A"
        assert by_slot["goblet"]["slotName"] == "空の杯"
        assert by_slot["flower"]["score"] == 7.8
        assert by_slot["sands"]["score"] == 0.0
        assert data["totalScore"] == 43.8
        assert data["totalRank"]["label"] == "B"
        assert data["scoreBaseLabel"] == "攻撃力換算"

    def test_score_base_defaults_to_atk(self, client: TestClient):
        data = client.post("/api/v1/score", json={"artifacts": []}).json()
        assert data["scoreBase"] == "atk"
        assert data["totalScore"] == 0.0

    def test_duplicate_slots_rejected(self, client: TestClient):
        response = client.post("/api/v1/score", json={
            "artifacts": [{"slot": "sands"}, {"slot": "sands"}],
        })
        assert response.status_code == 422
        assert response.json()["message"] == "Validation error"

    def test_too_many_substats_rejected(self, client: TestClient):
        subs = [{"label": "会心率", "value": "3.1%"}] * 5
        response = client.post("/api/v1/score", json={"artifacts": [{"slot": "sands", "subStats": subs}]})
        assert response.status_code == 422

    def test_unknown_slot_rejected(self, client: TestClient):
        response = client.post("/api/v1/score", json={"artifacts": [{"slot": "hat"}]})
        assert response.status_code == 422


class TestEditBuild:
    def test_edits_fetched_card_and_rescores(self, client: TestClient):
        card = client.get("/api/v1/builds/800123456").json()["build"]

        response = client.patch("/api/v1/builds/edit", json={
            "build": card,
            "edits": [
                {"op": "weapon", "fields": {"refinement": 5}},
                {"op": "score_base", "fields": {"scoreBase": "hp"}},
            ],
        })
        assert response.status_code == 200

        data = response.json()
        assert data["build"]["character"]["name"] == "フリーナ"
        assert data["build"]["weapon"]["refinement"] == 5
        assert data["build"]["scoreBase"] == "hp"
        assert data["score"]["scoreBase"] == "hp"
        assert data["score"]["artifacts"][0]["score"] == 51.9

    def test_edits_empty_card(self, client: TestClient):
        response = client.patch("/api/v1/builds/edit", json={
            "edits": [
                {"op": "artifact", "slot": "goblet", "fields": {"set": "Troupe", "subStats": [
                    {"label": "会心率", "value": "10.5%"},
                    {"label": "会心ダメージ", "value": "15.0%"},
                ]}},
            ],
        })
        assert response.status_code == 200

        data = response.json()
        goblet = data["build"]["artifacts"][3]
        assert goblet["slot"] == "goblet"
        assert goblet["set"] == "Troupe"
        assert data["score"]["totalScore"] == 36.0

    def test_invalid_edit_is_422(self, client: TestClient):
        response = client.patch("/api/v1/builds/edit", json={
            "build": {},
            "edits": [{"op": "weapon", "fields": {"sharpness": 3}}],
        })

        assert response.status_code == 422
        body = response.json()
        assert body["error"] is True
        assert body["message"].startswith("Edit 0 (weapon):")
        assert "sharpness" in body["message"]

    def test_bad_substat_index_is_422(self, client: TestClient):
        response = client.patch("/api/v1/builds/edit", json={
            "edits": [{"op": "remove_substat", "slot": "flower", "index": 2}],
        })

        assert response.status_code == 422
        assert "No substat 2 on flower" in response.json()["message"]

    def test_unknown_op_fails_request_validation(self, client: TestClient):
        response = client.patch("/api/v1/builds/edit", json={"edits": [{"op": "polish"}]})

        assert response.status_code == 422
        assert response.json()["message"] == "Validation error"
