from datetime import datetime, time

import pytest

from clinic_booking.services.slot_text import (
    ParseFailure,
    canonical_slots,
    normalize_slot_time,
    parse_slot_time,
    sanitize_slot_text,
    slot_matches_time,
    split_slot_spec,
)


class TestNormalizeSlotTime:
    @pytest.mark.parametrize("raw", ["9:00 AM", "09:00", "09:00:00", "9:00", "9:00am", "09:00 am"])
    def test_nine_oclock_variants(self, raw):
        assert normalize_slot_time(raw) == "09:00"

    def test_pm_converted_to_24_hour(self):
        assert normalize_slot_time("2:30 PM") == "14:30"
        assert normalize_slot_time("12:00 PM") == "12:00"
        assert normalize_slot_time("12:15 AM") == "00:15"

    def test_range_uses_start_only(self):
        assert normalize_slot_time("09:00-10:00") == "09:00"
        assert normalize_slot_time("9:00 AM - 10:00 AM") == "09:00"

    def test_en_dash_matches_ascii_hyphen(self):
        assert normalize_slot_time("09:00–10:00") == normalize_slot_time("09:00-10:00")
        assert normalize_slot_time("16:00—17:00") == "16:00"

    def test_quotes_and_odd_spaces_removed(self):
        assert normalize_slot_time('"10:00-11:00"') == "10:00"
        assert normalize_slot_time("'  11:00 AM  '") == "11:00"
        assert normalize_slot_time("1:00 PM") == "13:00"

    def test_time_inside_surrounding_text(self):
        assert normalize_slot_time("from 8:30 onwards") == "08:30"

    @pytest.mark.parametrize("raw", ["", None, "whenever", "25:00", "9:75", "13:00 PM", "-10:00"])
    def test_unreadable_text_is_failure(self, raw):
        result = normalize_slot_time(raw)
        assert isinstance(result, ParseFailure)

    def test_failure_carries_cleaned_text(self):
        result = parse_slot_time("  “noon”  ")
        assert result == ParseFailure(text="noon")

    def test_parse_returns_minute_precision_time(self):
        assert parse_slot_time("07:05:59") == time(7, 5)


class TestSplitting:
    def test_split_on_commas_and_semicolons(self):
        assert split_slot_spec("09:00, 10:00;11:00 ;; ") == ["09:00", "10:00", "11:00"]

    def test_split_empty(self):
        assert split_slot_spec("") == []
        assert split_slot_spec(None) == []

    def test_sanitize_collapses_whitespace(self):
        assert sanitize_slot_text("  9:00 \t  AM ") == "9:00 AM"


class TestCanonicalSlots:
    def test_keeps_first_text_for_duplicate_times(self):
        slots = canonical_slots(["09:00–10:00", "09:00-10:00", "9:00 AM"])
        assert [s.label for s in slots] == ["09:00"]
        assert slots[0].source_text == "09:00–10:00"

    def test_multi_slot_strings_expand_in_order(self):
        slots = canonical_slots(["14:00-15:00, 9:00 AM; 10:00"])
        assert [s.label for s in slots] == ["14:00", "09:00", "10:00"]
        assert [s.source_text for s in slots] == ["14:00-15:00", "9:00 AM", "10:00"]

    def test_bad_tokens_skipped_not_fatal(self):
        slots = canonical_slots(["garbage", "10:00-11:00", "99:99"])
        assert [s.source_text for s in slots] == ["10:00-11:00"]

    def test_none_is_empty(self):
        assert canonical_slots(None) == []


class TestSlotMatchesTime:
    def test_matches_any_token(self):
        assert slot_matches_time("09:00-10:00, 2:00 PM", time(14, 0))

    def test_accepts_datetime_and_drops_seconds(self):
        assert slot_matches_time("09:00", datetime(2030, 1, 2, 9, 0, 30))

    def test_no_match(self):
        assert not slot_matches_time("09:00-10:00", time(10, 0))
        assert not slot_matches_time(None, time(9, 0))
