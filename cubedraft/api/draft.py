"""
Draft API endpoints.

Exposes seat views and the pick, swap, fix and seat-selection operations.
Failures raise KnownError and are rendered by the app's error handler.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cubedraft.api.dependencies import get_context
from cubedraft.models.card import Card
from cubedraft.services.context import DraftContext
from cubedraft.services.draft import Draft

router = APIRouter(prefix="/draft", tags=["draft"])


class CardResponse(BaseModel):
    """A single card."""

    name: str
    set_code: str
    collector_number: str
    mana_value: int
    url: str
    image_url: str

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(
            name=card.name,
            set_code=card.set_code,
            collector_number=card.collector_number,
            mana_value=card.mana_value,
            url=card.url,
            image_url=card.image_url,
        )


class SeatResponse(BaseModel):
    """Everything needed to render one seat."""

    seat: int
    pack: list[CardResponse] = Field(default_factory=list)
    drafted: list[CardResponse] = Field(default_factory=list)
    sideboard: list[CardResponse] = Field(default_factory=list)
    pack_number: int
    pick_number: int
    images: dict[str, str] = Field(
        default_factory=dict,
        description="Image URLs for the drafted (grid and curve) and sideboard piles",
    )


class StatusResponse(BaseModel):
    """Overall draft progress."""

    done: bool
    picked: list[int] = Field(..., description="Cards picked per seat")
    cube_size: int
    digest: str


class PickRequest(BaseModel):
    """Request model for a pick."""

    card: str = Field(..., min_length=1, description="Full or partial card name")
    sideboard: bool = Field(default=False, description="Put the pick in the sideboard")


class SwapRequest(BaseModel):
    """Request model for moving a pick between deck and sideboard."""

    card: str = Field(..., min_length=1, description="Full or partial card name")


class FixRequest(BaseModel):
    """Request model for exchanging two cards everywhere in the draft."""

    card1: str = Field(..., min_length=1)
    card2: str = Field(..., min_length=1)


class MoveResponse(BaseModel):
    """Response model for pick and swap."""

    card: CardResponse
    seat: SeatResponse


class FixResponse(BaseModel):
    """Response model for a card fix."""

    swapped: list[CardResponse]


def _seat_response(draft: Draft, seat: int) -> SeatResponse:
    view = draft.seat_view(seat)
    return SeatResponse(
        seat=view.seat,
        pack=[CardResponse.from_card(card) for card in view.pack],
        drafted=[CardResponse.from_card(card) for card in view.drafted],
        sideboard=[CardResponse.from_card(card) for card in view.sideboard],
        pack_number=view.pack_number,
        pick_number=view.pick_number,
        images=view.images,
    )


def _status_response(draft: Draft) -> StatusResponse:
    return StatusResponse(
        done=draft.is_done,
        picked=[seat.picked_count for seat in draft.seats],
        cube_size=len(draft.cube),
        digest=draft.cube.digest,
    )


@router.get("/seat", response_model=SeatResponse)
async def show_next_seat(
    context: Annotated[DraftContext, Depends(get_context)],
) -> SeatResponse:
    """
    Choose the seat that most needs a pick and return its view.

    Seats with fewer picks come first, then the one shown least recently.
    """
    async with context.mutation() as draft:
        seat = await draft.seat_to_show()
        return _seat_response(draft, seat)


@router.get("/status", response_model=StatusResponse)
async def draft_status(
    context: Annotated[DraftContext, Depends(get_context)],
) -> StatusResponse:
    """Get overall draft progress."""
    return _status_response(context.draft)


@router.post("/reload", response_model=StatusResponse)
async def reload_cube(
    context: Annotated[DraftContext, Depends(get_context)],
) -> StatusResponse:
    """
    Reload the cube list.

    The draft is reset only if the list changed since it was dealt.
    """
    draft = await context.reload()
    return _status_response(draft)


@router.post("/reset", response_model=StatusResponse)
async def reset_draft(
    context: Annotated[DraftContext, Depends(get_context)],
) -> StatusResponse:
    """Discard the current draft and deal a new one."""
    draft = await context.reset()
    return _status_response(draft)


@router.post("/fix", response_model=FixResponse)
async def fix_cards(
    request: FixRequest,
    context: Annotated[DraftContext, Depends(get_context)],
) -> FixResponse:
    """Exchange two cube cards everywhere they appear in the draft."""
    async with context.mutation() as draft:
        first, second = await draft.fix_cards(request.card1, request.card2)
    return FixResponse(swapped=[CardResponse.from_card(first), CardResponse.from_card(second)])


@router.get("/{seat}", response_model=SeatResponse)
async def get_seat(
    seat: int,
    context: Annotated[DraftContext, Depends(get_context)],
) -> SeatResponse:
    """Get a seat's current pack and picks."""
    return _seat_response(context.draft, seat)


@router.post("/{seat}/pick", response_model=MoveResponse)
async def pick_card(
    seat: int,
    request: PickRequest,
    context: Annotated[DraftContext, Depends(get_context)],
) -> MoveResponse:
    """Pick a card from the seat's current pack."""
    async with context.mutation() as draft:
        card = await draft.pick(seat, request.card, to_sideboard=request.sideboard)
        return MoveResponse(card=CardResponse.from_card(card), seat=_seat_response(draft, seat))


@router.post("/{seat}/swap", response_model=MoveResponse)
async def swap_card(
    seat: int,
    request: SwapRequest,
    context: Annotated[DraftContext, Depends(get_context)],
) -> MoveResponse:
    """Move a picked card between the seat's deck and sideboard."""
    async with context.mutation() as draft:
        card = await draft.swap(seat, request.card)
        return MoveResponse(card=CardResponse.from_card(card), seat=_seat_response(draft, seat))
