"""Tests for core.snapshot payload validation."""
from __future__ import annotations

import logging

import pytest

from core.snapshot import EnkaResponse, parse_avatar, parse_snapshot

pytestmark = pytest.mark.unit


class TestParseSnapshot:
    def test_valid_payload(self, sample_payload):
        result = parse_snapshot(sample_payload)
        assert result.is_ok()
        snapshot = result.unwrap()
        assert snapshot.uid == "800123456"
        assert snapshot.ttl == 60
        assert snapshot.player_info.nickname == "Traveler"
        assert len(snapshot.avatar_info_list) == 2

    def test_fight_prop_keys_become_ints(self, snapshot):
        avatar = snapshot.avatar_at(0)
        assert avatar.fight_prop_map[2000] == pytest.approx(41250.7)
        assert avatar.fight_prop_map[20] == pytest.approx(0.331)

    def test_equipment_is_parsed(self, furina):
        weapon = next(e for e in furina.equip_list if e.flat.item_type == "ITEM_WEAPON")
        assert weapon.weapon.affix_map == {"111513": 0}
        assert weapon.flat.weapon_stats[1].append_prop_id == "FIGHT_PROP_CRITICAL_HURT"

        flower = furina.equip_list[0]
        assert flower.flat.equip_type == "EQUIP_BRACER"
        assert flower.reliquary.level == 21
        assert flower.flat.reliquary_mainstat.stat_value == 4780

    def test_non_object_is_rejected(self):
        result = parse_snapshot([1, 2])
        assert result.is_err()
        assert "JSON object" in result.error

    def test_schema_error_is_summarized(self):
        result = parse_snapshot({"uid": [1, 2]})
        assert result.is_err()
        assert result.error.startswith("Invalid snapshot:")
        assert "uid" in result.error

    def test_empty_object_is_a_valid_empty_snapshot(self):
        snapshot = parse_snapshot({}).unwrap()
        assert snapshot.avatar_info_list == []
        assert snapshot.player_info.nickname == ""

    def test_numeric_uid_is_accepted(self):
        assert parse_snapshot({"uid": 800123456}).unwrap().uid == 800123456


class TestFieldLevelDegradation:
    def test_bad_equip_item_in_second_avatar_keeps_snapshot(self, sample_payload):
        del sample_payload["avatarInfoList"][1]["equipList"][0]["flat"]["itemType"]
        result = parse_snapshot(sample_payload)
        assert result.is_ok()
        snapshot = result.unwrap()
        assert len(snapshot.avatar_info_list) == 2
        assert len(snapshot.avatar_at(0).equip_list) == 6
        assert snapshot.avatar_at(1).equip_list == []

    def test_avatar_without_id_is_skipped(self, sample_payload, caplog):
        del sample_payload["avatarInfoList"][0]["avatarId"]
        with caplog.at_level(logging.WARNING, logger="core.snapshot"):
            snapshot = parse_snapshot(sample_payload).unwrap()
        assert [a.avatar_id for a in snapshot.avatar_info_list] == [10000002]
        assert "avatarInfoList[0] skipped" in caplog.text

    def test_malformed_top_level_fields_use_defaults(self, sample_payload):
        sample_payload["ttl"] = "soon"
        sample_payload["playerInfo"] = "Traveler"
        snapshot = parse_snapshot(sample_payload).unwrap()
        assert snapshot.ttl is None
        assert snapshot.player_info.nickname == ""
        assert len(snapshot.avatar_info_list) == 2

    def test_avatar_list_of_wrong_shape(self):
        assert parse_snapshot({"avatarInfoList": {"0": {}}}).unwrap().avatar_info_list == []

    def test_fight_prop_entries_are_checked_one_by_one(self):
        avatar = parse_avatar({
            "avatarId": 10000089,
            "fightPropMap": {"20": None, "22": 1.5, "abc": 1.0, "23": "1.2", "2000": float("nan")},
        }).unwrap()
        assert avatar.fight_prop_map == {22: 1.5, 23: 1.2}

    def test_null_lists_and_maps_become_empty(self):
        avatar = parse_avatar({
            "avatarId": 10000089,
            "talentIdList": None,
            "equipList": None,
            "propMap": None,
            "skillLevelMap": "9",
        }).unwrap()
        assert avatar.talent_id_list == []
        assert avatar.equip_list == []
        assert avatar.prop_map == {}
        assert avatar.skill_level_map == {}

    def test_bad_optional_equipment_fields(self, sample_payload):
        item = sample_payload["avatarInfoList"][0]["equipList"][0]
        item["reliquary"] = {"level": "max"}
        item["flat"]["reliquarySubstats"][1] = {"statValue": 21.0}
        item["flat"]["reliquarySubstats"][2]["statValue"] = None
        flower = parse_avatar(sample_payload["avatarInfoList"][0]).unwrap().equip_list[0]
        assert flower.reliquary.level is None
        assert len(flower.flat.reliquary_substats) == 3
        assert flower.flat.reliquary_substats[1].stat_value == 0.0


class TestAvatarSelection:
    def test_find_avatar(self, snapshot):
        assert snapshot.find_avatar(10000002).avatar_id == 10000002
        assert snapshot.find_avatar(1) is None

    def test_avatar_at(self, snapshot):
        assert snapshot.avatar_at(0).avatar_id == 10000089
        assert snapshot.avatar_at(2) is None
        assert snapshot.avatar_at(-1) is None

    def test_no_showcase(self):
        assert EnkaResponse().avatar_at(0) is None


class TestParseAvatar:
    def test_valid_avatar(self, sample_payload):
        result = parse_avatar(sample_payload["avatarInfoList"][1])
        assert result.unwrap().avatar_id == 10000002

    def test_missing_avatar_id(self):
        result = parse_avatar({"propMap": {}})
        assert result.is_err()
        assert "avatarId" in result.error
