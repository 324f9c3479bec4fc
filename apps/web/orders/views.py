"""
Order API views - checkout, order history and status tracking.

All endpoints require a JWT.
"""

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.web.accounts.decorators import jwt_required
from apps.web.core.decorators import idempotent
from apps.web.core.exceptions import NotFound, ValidationFailed
from apps.web.core.models import Restaurant
from apps.web.core.responses import paginate, success_response

from . import services
from .serializers import OrderCreateRequest, OrderStatusUpdateRequest


@csrf_exempt
@require_POST
@jwt_required
@idempotent
def create_order(request: HttpRequest) -> JsonResponse:
    """
    POST /api/v1/orders

    Creates an order from cart lines. An optional Idempotency-Key header
    replays the first response for retried submissions.
    """
    data = OrderCreateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )

    restaurant = getattr(request, "restaurant", None)
    if data.restaurant_id:
        restaurant = Restaurant.objects.filter(pk=data.restaurant_id).first()
        if restaurant is None:
            raise NotFound("Restaurant not found")
    if restaurant is None:
        raise ValidationFailed(
            errors=[{"field": "restaurant_id", "message": "Restaurant is required"}]
        )

    order = services.create_order(request.user, restaurant, data)
    return success_response(
        services.serialize_order(order).model_dump(mode="json"),
        "Order created",
        status=201,
    )


@csrf_exempt
@require_GET
@jwt_required
def my_orders(request: HttpRequest) -> JsonResponse:
    """GET /api/v1/orders/my-orders"""
    orders, meta = paginate(
        services.user_orders(request.user),
        request.GET.get("page", 1),
        request.GET.get("limit", 20),
    )
    return success_response(
        [services.serialize_order(o).model_dump(mode="json") for o in orders],
        "Orders retrieved",
        meta=meta,
    )


@csrf_exempt
@require_GET
@jwt_required
def get_order(request: HttpRequest, order_id: int) -> JsonResponse:
    """GET /api/v1/orders/{id}"""
    order = services.get_order_for(request.user, order_id)
    return success_response(
        services.serialize_order(order).model_dump(mode="json"), "Order retrieved"
    )


@jwt_required
def update_order_status(request: HttpRequest, order_id: int) -> JsonResponse:
    """PATCH /api/v1/orders/{id}/status"""
    order = services.get_order_for(request.user, order_id)
    data = OrderStatusUpdateRequest.model_validate(
        request.payload  # type: ignore[attr-defined]
    )
    order = services.update_status(request.user, order, data.status)
    return success_response(
        services.serialize_order(order).model_dump(mode="json"),
        "Order status updated",
    )
