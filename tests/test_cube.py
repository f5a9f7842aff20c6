"""Tests for the card pool: indexing, digest, sampling and tokens."""

import random

import pytest

from cubedraft.models.card import Card, CardRecord
from cubedraft.models.failure import CardNotFoundError, CubeTooSmallError, DecodeError
from cubedraft.services.cube import Cube, decode_varints, encode_varint


class TestConstruction:
    def test_sorted_by_name(self, bolt_cube: Cube) -> None:
        names = [card.name for card in bolt_cube.cards]

        assert names == sorted(names)
        assert names[0] == "Counterspell"

    def test_index_is_position(self, cube: Cube) -> None:
        assert all(card.index == position for position, card in enumerate(cube.cards))
        assert len(cube) == 400

    def test_fields_copied_from_record(self, bolt_cube: Cube) -> None:
        bolt = bolt_cube.get_card("Lightning Bolt")

        assert bolt.set_code == "lea"
        assert bolt.collector_number == "161"
        assert bolt.mana_value == 1

    def test_missing_mana_value_rejected(self) -> None:
        with pytest.raises(ValueError, match="no mana value"):
            Cube([CardRecord("Mountain", "lea", "290")])

    def test_contains_is_identity(self, bolt_cube: Cube) -> None:
        bolt = bolt_cube.get_card("Lightning Bolt")
        copy = Card(bolt.name, bolt.set_code, bolt.collector_number, bolt.mana_value, bolt.index)

        assert bolt in bolt_cube
        assert copy not in bolt_cube
        assert "Lightning Bolt" not in bolt_cube


class TestDigest:
    def test_independent_of_order(self, records: list[CardRecord]) -> None:
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)

        assert Cube(records).digest == Cube(shuffled).digest

    def test_changes_when_card_added(self, records: list[CardRecord]) -> None:
        extra = [*records, CardRecord("Extra Card", "tst", "999", 3)]

        assert Cube(records).digest != Cube(extra).digest

    def test_changes_when_card_removed(self, records: list[CardRecord]) -> None:
        assert Cube(records).digest != Cube(records[1:]).digest

    def test_changes_when_card_renamed(self, records: list[CardRecord]) -> None:
        renamed = [CardRecord("Renamed", "tst", "1", 0), *records[1:]]

        assert Cube(records).digest != Cube(renamed).digest

    def test_ignores_printing(self, records: list[CardRecord]) -> None:
        reprinted = [CardRecord(records[0].name, "new", "77", 0), *records[1:]]

        assert Cube(records).digest == Cube(reprinted).digest

    def test_is_md5_hex(self, cube: Cube) -> None:
        assert len(cube.digest) == 32
        int(cube.digest, 16)


class TestGetCard:
    def test_exact_name(self, bolt_cube: Cube) -> None:
        assert bolt_cube.get_card("Shock").name == "Shock"

    def test_same_instance_every_time(self, bolt_cube: Cube) -> None:
        assert bolt_cube.get_card("Shock") is bolt_cube.get_card("Shock")

    def test_no_fuzzy_matching(self, bolt_cube: Cube) -> None:
        with pytest.raises(CardNotFoundError, match="isn't in the cube"):
            bolt_cube.get_card("shock")


class TestGetRandomCards:
    def test_distinct_cards(self, cube: Cube) -> None:
        cards = cube.get_random_cards(360)

        assert len(cards) == 360
        assert len({id(card) for card in cards}) == 360
        assert all(card in cube for card in cards)

    def test_whole_cube(self, bolt_cube: Cube) -> None:
        cards = bolt_cube.get_random_cards(len(bolt_cube))

        assert sorted(card.index for card in cards) == list(range(len(bolt_cube)))

    def test_seeded(self, cube: Cube) -> None:
        first = cube.get_random_cards(10, random.Random(1))
        second = cube.get_random_cards(10, random.Random(1))

        assert first == second

    def test_too_many(self, bolt_cube: Cube) -> None:
        with pytest.raises(CubeTooSmallError) as exc_info:
            bolt_cube.get_random_cards(6)

        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5

    def test_negative(self, bolt_cube: Cube) -> None:
        with pytest.raises(ValueError):
            bolt_cube.get_random_cards(-1)


class TestVarint:
    @pytest.mark.parametrize(
        ("value", "encoded"),
        [
            (0, b"\x00"),
            (1, b"\x01"),
            (127, b"\x7f"),
            (128, b"\x80\x01"),
            (300, b"\xac\x02"),
            (16384, b"\x80\x80\x01"),
        ],
    )
    def test_encoding(self, value: int, encoded: bytes) -> None:
        assert encode_varint(value) == encoded
        assert decode_varints(encoded) == [value]

    def test_concatenated(self) -> None:
        assert decode_varints(b"\x05\xac\x02\x00") == [5, 300, 0]

    def test_truncated(self) -> None:
        with pytest.raises(ValueError, match="truncated"):
            decode_varints(b"\x05\xac")

    def test_negative(self) -> None:
        with pytest.raises(ValueError):
            encode_varint(-1)


class TestTokens:
    def test_round_trip_preserves_order(self, cube: Cube) -> None:
        cards = [cube.cards[399], cube.cards[0], cube.cards[128], cube.cards[127]]

        assert cube.decode_cards(cube.encode_cards(cards)) == cards

    def test_round_trip_random_subsets(self, cube: Cube) -> None:
        rng = random.Random(42)
        for size in (1, 2, 15, 45, 400):
            cards = cube.get_random_cards(size, rng)
            decoded = cube.decode_cards(cube.encode_cards(cards))
            assert all(a is b for a, b in zip(decoded, cards, strict=True))

    def test_known_token(self, cube: Cube) -> None:
        # indexes 0, 1, 300 -> 00 01 ac 02 -> base64 "AAGsAg=="
        cards = [cube.cards[0], cube.cards[1], cube.cards[300]]

        assert cube.encode_cards(cards) == "AAGsAg=="

    def test_url_safe_alphabet(self) -> None:
        big = Cube([CardRecord(f"Card {i:05d}", "tst", str(i), 0) for i in range(16384)])

        # indexes 16379, 16383 -> fb 7f ff 7f -> standard base64 "+3//fw=="
        token = big.encode_cards([big.cards[16379], big.cards[16383]])

        assert token == ".3__fw=="
        assert [card.index for card in big.decode_cards(token)] == [16379, 16383]

    def test_standard_alphabet_rejected(self, cube: Cube) -> None:
        # 00 00 3f: indexes 0, 0, 63
        assert [card.index for card in cube.decode_cards("AAA_")] == [0, 0, 63]

        with pytest.raises(DecodeError, match="not valid base64"):
            cube.decode_cards("AAA/")
        with pytest.raises(DecodeError, match="not valid base64"):
            cube.decode_cards(".3+_fw==")

    def test_empty_sequence(self, cube: Cube) -> None:
        assert cube.encode_cards([]) == ""
        assert cube.decode_cards("") == []

    def test_foreign_card_rejected(self, cube: Cube, bolt_cube: Cube) -> None:
        with pytest.raises(CardNotFoundError):
            cube.encode_cards([bolt_cube.cards[0]])

    def test_decode_out_of_range(self, bolt_cube: Cube) -> None:
        # index 9 in a five-card cube
        with pytest.raises(DecodeError, match="out of range"):
            bolt_cube.decode_cards("CQ==")

    def test_decode_truncated(self, cube: Cube) -> None:
        # single byte 0x80 has its continuation bit set
        with pytest.raises(DecodeError, match="truncated"):
            cube.decode_cards("gA==")

    def test_decode_bad_base64(self, cube: Cube) -> None:
        with pytest.raises(DecodeError):
            cube.decode_cards("not a token!")
