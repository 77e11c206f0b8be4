"""Tests for createdAt/updatedAt stamping."""

from datetime import datetime, timezone

from store_bridge.base.timestamps import (
    CREATED_AT,
    UPDATED_AT,
    carry_created_at,
    stamp_insert,
    stamp_update,
    utcnow,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)


class TestUtcNow:
    def test_aware_millisecond_precision(self):
        now = utcnow()
        assert now.tzinfo is timezone.utc
        assert now.microsecond % 1000 == 0


class TestStampInsert:
    def test_both_stamps_equal(self):
        stamped = stamp_insert({"a": 1}, NOW)
        assert stamped == {CREATED_AT: NOW, UPDATED_AT: NOW, "a": 1}

    def test_caller_values_win(self):
        earlier = datetime(2020, 1, 1, tzinfo=timezone.utc)
        stamped = stamp_insert({CREATED_AT: earlier}, NOW)
        assert stamped[CREATED_AT] == earlier
        assert stamped[UPDATED_AT] == NOW

    def test_input_untouched(self):
        document = {"a": 1}
        stamp_insert(document, NOW)
        assert document == {"a": 1}


class TestStampUpdate:
    def test_replacement(self):
        assert stamp_update({"a": 1}, NOW) == {UPDATED_AT: NOW, "a": 1}

    def test_set_is_merged(self):
        stamped = stamp_update({"$set": {"a": 1}}, NOW)
        assert stamped == {
            "$set": {UPDATED_AT: NOW, "a": 1},
            "$setOnInsert": {CREATED_AT: NOW},
        }

    def test_other_operators_get_set(self):
        stamped = stamp_update({"$inc": {"n": 1}}, NOW)
        assert stamped["$inc"] == {"n": 1}
        assert stamped["$set"] == {UPDATED_AT: NOW}
        assert stamped["$setOnInsert"] == {CREATED_AT: NOW}

    def test_explicit_set_value_wins(self):
        earlier = datetime(2020, 1, 1, tzinfo=timezone.utc)
        stamped = stamp_update({"$set": {UPDATED_AT: earlier}}, NOW)
        assert stamped["$set"] == {UPDATED_AT: earlier}

    def test_conflicting_operator_skips_stamp(self):
        """A stamp field targeted by another operator should be left alone"""
        stamped = stamp_update({"$unset": {UPDATED_AT: ""}, "$set": {CREATED_AT: NOW}}, NOW)
        assert UPDATED_AT not in stamped["$set"]
        assert "$setOnInsert" not in stamped

    def test_input_untouched(self):
        update = {"$set": {"a": 1}}
        stamp_update(update, NOW)
        assert update == {"$set": {"a": 1}}


class TestCarryCreatedAt:
    def test_kept_from_replaced_document(self):
        earlier = datetime(2020, 1, 1, tzinfo=timezone.utc)
        carried = carry_created_at({UPDATED_AT: NOW, "a": 2}, {"_id": 1, CREATED_AT: earlier})
        assert carried == {CREATED_AT: earlier, UPDATED_AT: NOW, "a": 2}

    def test_explicit_value_wins(self):
        carried = carry_created_at({CREATED_AT: NOW}, {CREATED_AT: datetime(2020, 1, 1)})
        assert carried == {CREATED_AT: NOW}

    def test_nothing_to_carry(self):
        assert carry_created_at({"a": 1}, None) == {"a": 1}
        assert carry_created_at({"a": 1}, {"_id": 1}) == {"a": 1}
