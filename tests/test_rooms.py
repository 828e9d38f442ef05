"""
Tests for room aggregation.

Tests:
- Required capacity from room volume, insulation and room type
- Clamping of unusable rows
- Room counting
"""

import pytest

from climatequote.pricing import (
    InsulationClass,
    Room,
    RoomType,
    ROOM_TYPE_FACTORS,
    aggregate_rooms,
)
from climatequote.pricing.rooms import insulation_factor_of, room_watts


class TestAggregateRooms:
    """Test aggregate_rooms."""

    def test_single_living_room(self, living_room):
        """35 m² x 2.5 m x 40 W/m³ x 1.0 = 3500 W."""
        result = aggregate_rooms([living_room], InsulationClass.AVERAGE)

        assert result.required_watts == pytest.approx(3500)
        assert result.required_kw == pytest.approx(3.5)
        assert result.total_area_m2 == 35
        assert result.room_count == 1

    def test_insulation_classes(self, living_room):
        good = aggregate_rooms([living_room], InsulationClass.GOOD)
        poor = aggregate_rooms([living_room], InsulationClass.POOR)

        assert good.required_kw == pytest.approx(35 * 2.5 * 30 / 1000)
        assert poor.required_kw == pytest.approx(35 * 2.5 * 50 / 1000)

    def test_raw_insulation_factor(self, living_room):
        result = aggregate_rooms([living_room], 45)
        assert result.required_watts == pytest.approx(35 * 2.5 * 45)

    def test_room_type_factors(self, living_room, bedroom):
        result = aggregate_rooms([living_room, bedroom])

        expected = 35 * 2.5 * 40 * 1.0 + 14 * 2.5 * 40 * 0.9
        assert result.required_watts == pytest.approx(expected)
        assert result.total_area_m2 == 49
        assert result.room_count == 2

    def test_attic_factor(self):
        attic = Room("Zolder", size_m2=20, ceiling_height_m=2.0, room_type="attic")
        result = aggregate_rooms([attic])
        assert result.required_watts == pytest.approx(20 * 2.0 * 40 * 1.3)

    def test_unknown_room_type_uses_factor_one(self):
        room = Room("Serre", size_m2=10, ceiling_height_m=2.5, room_type="conservatory")
        assert aggregate_rooms([room]).required_watts == pytest.approx(10 * 2.5 * 40)

    def test_factor_override(self, living_room):
        result = aggregate_rooms([living_room], room_type_factors={"living": 1.2})
        assert result.required_watts == pytest.approx(3500 * 1.2)

    def test_empty_rooms(self):
        result = aggregate_rooms([])
        assert result.required_kw == 0
        assert result.room_count == 0


class TestUnusableRows:
    """Rows that cannot contribute add nothing instead of failing."""

    def test_negative_size_is_skipped(self, living_room):
        bad = Room("Fout", size_m2=-20)
        result = aggregate_rooms([living_room, bad])

        assert result.required_kw == pytest.approx(3.5)
        assert result.room_count == 1
        assert result.total_area_m2 == 35

    def test_nan_size_is_skipped(self):
        result = aggregate_rooms([Room("NaN", size_m2=float("nan"))])
        assert result.required_watts == 0
        assert result.room_count == 0

    def test_zero_height_counts_area_but_no_watts(self):
        room = Room("Plat", size_m2=10, ceiling_height_m=0)
        result = aggregate_rooms([room])

        assert result.required_watts == 0
        assert result.total_area_m2 == 10
        assert result.room_count == 1

    def test_missing_height_defaults(self):
        room = Room("Kamer", size_m2=10, ceiling_height_m=None)
        assert aggregate_rooms([room]).required_watts == pytest.approx(10 * 2.5 * 40)

    def test_text_size_is_parsed(self):
        room = Room("Kamer", size_m2="12,5")
        assert aggregate_rooms([room]).total_area_m2 == pytest.approx(12.5)

    def test_negative_insulation_factor_clamps(self, living_room):
        assert aggregate_rooms([living_room], -40).required_watts == 0

    def test_input_rooms_not_mutated(self, living_room):
        rooms = [living_room]
        aggregate_rooms(rooms)
        assert rooms == [living_room]
        assert living_room.size_m2 == 35


class TestHelpers:
    """Test insulation and single-room helpers."""

    def test_insulation_by_name(self):
        assert insulation_factor_of("good") == 30
        assert insulation_factor_of("POOR") == 50

    def test_insulation_default(self):
        assert insulation_factor_of(None) == 40

    def test_room_watts(self, bedroom):
        assert room_watts(bedroom, 40) == pytest.approx(14 * 2.5 * 40 * 0.9)

    def test_room_from_dict(self):
        room = Room.from_dict({"name": "Kantoor", "size_m2": 12, "room_type": "office"})

        assert room.ceiling_height_m == 2.5
        assert room.room_type_key == RoomType.OFFICE.value
        assert ROOM_TYPE_FACTORS[room.room_type_key] == 1.1
