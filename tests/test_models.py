from datetime import UTC, datetime

import pytest

from cubedraft.models.card import Card, CardRecord
from cubedraft.models.seat import Seat


def _card(name: str, mana_value: int = 1, index: int = 0) -> Card:
    return Card(
        name=name, set_code="tst", collector_number="1", mana_value=mana_value, index=index
    )


class TestCard:
    def test_card_creation(self) -> None:
        card = Card(
            name="Lightning Bolt",
            set_code="lea",
            collector_number="161",
            mana_value=1,
            index=3,
        )
        assert card.name == "Lightning Bolt"
        assert card.set_code == "lea"
        assert card.index == 3

    def test_card_immutable(self) -> None:
        card = _card("Lightning Bolt")
        with pytest.raises(AttributeError):
            card.index = 4  # type: ignore[misc]

    def test_equality_is_identity(self) -> None:
        """Two cards with identical fields are still different cards."""
        first = _card("Lightning Bolt")
        second = _card("Lightning Bolt")

        assert first == first
        assert first != second
        assert len({first, second}) == 2

    def test_urls(self) -> None:
        card = Card("Lightning Bolt", "lea", "161", 1, 0)

        assert card.url == "https://scryfall.com/card/lea/161"
        assert card.image_url == (
            "https://api.scryfall.com/cards/lea/161?format=image&version=png"
        )


class TestCardRecord:
    def test_mana_value_optional(self) -> None:
        record = CardRecord(name="Mountain", set_code="lea", collector_number="290")
        assert record.mana_value is None


class TestPileByCmc:
    def test_groups_in_increasing_order(self) -> None:
        two = _card("Counterspell", 2)
        one = _card("Lightning Bolt", 1)
        zero = _card("Ornithopter", 0)

        piles = Card.pile_by_cmc([two, one, zero])

        assert piles == [[zero], [one], [two]]

    def test_omits_empty_piles(self) -> None:
        one = _card("Lightning Bolt", 1)
        five = _card("Baneslayer Angel", 5)

        assert Card.pile_by_cmc([five, one]) == [[one], [five]]

    def test_clamps_seven_and_above(self) -> None:
        seven = _card("Ulamog", 10)
        fifteen = _card("Emrakul, the Aeons Torn", 15)
        exactly_seven = _card("Wurmcoil Engine", 7)
        six = _card("Grave Titan", 6)

        piles = Card.pile_by_cmc([seven, six, fifteen, exactly_seven])

        assert piles == [[six], [seven, fifteen, exactly_seven]]

    def test_empty(self) -> None:
        assert Card.pile_by_cmc([]) == []


class TestSeat:
    @pytest.fixture
    def pack(self) -> tuple[Card, ...]:
        return tuple(_card(f"Card {i}", index=i) for i in range(3))

    def test_current_pack(self, pack: tuple[Card, ...]) -> None:
        assert Seat().current_pack == ()
        assert Seat(pack_backlog=(pack,)).current_pack == pack

    def test_take_card_passes_rest(self, pack: tuple[Card, ...]) -> None:
        seat = Seat(pack_backlog=(pack,), unopened_packs=((pack[0],),))

        updated, outgoing = seat.take_card(pack[1])

        assert updated.drafted == (pack[1],)
        assert outgoing == (pack[0], pack[2])
        assert updated.pack_backlog == ()
        assert len(updated.unopened_packs) == 1

    def test_take_card_to_sideboard(self, pack: tuple[Card, ...]) -> None:
        seat = Seat(pack_backlog=(pack,))

        updated, _ = seat.take_card(pack[0], to_sideboard=True)

        assert updated.sideboard == (pack[0],)
        assert updated.drafted == ()

    def test_last_card_opens_next_pack_in_front(self) -> None:
        last = _card("Last", index=0)
        waiting = (_card("Waiting", index=1),)
        unopened = (_card("Fresh", index=2),)
        seat = Seat(pack_backlog=((last,), waiting), unopened_packs=(unopened,))

        updated, outgoing = seat.take_card(last)

        assert outgoing is None
        assert updated.pack_backlog == (unopened, waiting)
        assert updated.unopened_packs == ()

    def test_last_card_without_unopened(self) -> None:
        last = _card("Last")
        seat = Seat(pack_backlog=((last,),))

        updated, outgoing = seat.take_card(last)

        assert outgoing is None
        assert updated.pack_backlog == ()

    def test_take_card_not_in_pack(self, pack: tuple[Card, ...]) -> None:
        seat = Seat(pack_backlog=(pack,))

        with pytest.raises(ValueError, match="not in the current pack"):
            seat.take_card(_card("Card 0"))

    def test_receive_appends(self, pack: tuple[Card, ...]) -> None:
        other = (_card("Other"),)
        seat = Seat(pack_backlog=(pack,)).receive(other)

        assert seat.pack_backlog == (pack, other)

    def test_toggle_sideboard(self, pack: tuple[Card, ...]) -> None:
        seat = Seat(drafted=pack)

        seat = seat.toggle_sideboard(pack[1])
        assert seat.drafted == (pack[0], pack[2])
        assert seat.sideboard == (pack[1],)

        seat = seat.toggle_sideboard(pack[1])
        assert seat.drafted == (pack[0], pack[2], pack[1])
        assert seat.sideboard == ()

    def test_toggle_unpicked_card(self, pack: tuple[Card, ...]) -> None:
        with pytest.raises(ValueError):
            Seat().toggle_sideboard(pack[0])

    def test_substitute_everywhere(self, pack: tuple[Card, ...]) -> None:
        a, b, c = pack
        seat = Seat(
            drafted=(a, c),
            sideboard=(b,),
            pack_backlog=((c, b, a),),
            unopened_packs=((a,), (c,)),
        )

        swapped = seat.substitute(a, b)

        assert swapped.drafted == (b, c)
        assert swapped.sideboard == (a,)
        assert swapped.pack_backlog == ((c, a, b),)
        assert swapped.unopened_packs == ((b,), (c,))

    def test_counts(self, pack: tuple[Card, ...]) -> None:
        seat = Seat(
            drafted=pack[:1],
            sideboard=pack[1:2],
            pack_backlog=(pack,),
            unopened_packs=(pack,),
        )

        assert seat.picked_count == 2
        assert seat.total_cards == 8
        assert seat.pack_number(3) == 2

    def test_shown_at(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=UTC)
        assert Seat().shown_at(now).last_shown == now
