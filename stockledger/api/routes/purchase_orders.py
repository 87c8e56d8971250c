"""Purchase order receiving endpoint."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import get_receive_goods_use_case
from stockledger.application.dto.requests import ReceiveGoodsBody, ReceiveGoodsRequest
from stockledger.application.dto.responses import ErrorResponse, ReceiveGoodsResponse
from stockledger.application.use_cases.receive_goods import ReceiveGoodsUseCase

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])


@router.post(
    "/{purchase_order_id}/receive",
    response_model=ReceiveGoodsResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def receive_goods(
    purchase_order_id: int,
    body: ReceiveGoodsBody,
    use_case: ReceiveGoodsUseCase = Depends(get_receive_goods_use_case),
) -> ReceiveGoodsResponse:
    """Receive goods against a purchase order into stock."""
    result = await use_case.execute(
        ReceiveGoodsRequest(
            purchase_order_id=purchase_order_id,
            items=body.items,
            user_id=body.user_id,
            location_id=body.location_id,
        )
    )
    return use_case.to_response(result)
