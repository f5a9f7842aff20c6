"""Card pile images for encoded card tokens."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response

from cubedraft.api.dependencies import get_context
from cubedraft.services.context import DraftContext
from cubedraft.services.image_cache import CMC_SUFFIX

router = APIRouter(prefix="/image", tags=["images"])


@router.get(
    "/{token}",
    response_class=Response,
    responses={200: {"content": {"image/webp": {}}}},
)
async def get_image(
    token: str,
    context: Annotated[DraftContext, Depends(get_context)],
    layout: Annotated[Literal["grid", "cmc"], Query()] = "grid",
) -> Response:
    """
    Render the cards in a token as one WebP image.

    The grid layout shows five cards per row; the cmc layout stacks one
    column per mana value.
    """
    key = f"{token}{CMC_SUFFIX}" if layout == "cmc" else token
    image = await context.images.get(key)
    return Response(
        content=image,
        media_type="image/webp",
        headers={"Cache-Control": "public, max-age=86400"},
    )
