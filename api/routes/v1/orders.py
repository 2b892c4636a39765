"""
api/routes/v1/orders.py -- Order CRUD routes.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /orders                       -- list all orders
  GET    /orders/client/{client_id}    -- orders for one client (empty list if none)
  GET    /orders/{order_id}            -- order detail; 404 if absent
  POST   /orders                       -- create; 201, 400 invalid_amount or
                                          referenced_entity_not_found
  PUT    /orders/{order_id}            -- change total; 204, 400 invalid_amount, 404
  DELETE /orders/{order_id}            -- delete; 204, 404 if absent
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import OrderCreate, OrderResponse, OrderUpdate
from auth.dependencies import get_current_user
from sales.service import OrderService

# All order routes require authentication.
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/orders", response_model=list[OrderResponse])
def list_orders(request: Request) -> list[OrderResponse]:
    service: OrderService = request.app.state.order_service
    return [OrderResponse.from_order(o) for o in service.list_orders()]


@router.get("/orders/client/{client_id}", response_model=list[OrderResponse])
def list_orders_for_client(request: Request, client_id: int) -> list[OrderResponse]:
    service: OrderService = request.app.state.order_service
    return [OrderResponse.from_order(o) for o in service.list_orders_for_client(client_id)]


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(request: Request, order_id: int) -> OrderResponse:
    service: OrderService = request.app.state.order_service
    order = service.get_order(order_id)
    if order is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": f"Order with id {order_id} was not found."},
        )
    return OrderResponse.from_order(order)


@router.post("/orders", response_model=OrderResponse, status_code=201)
def create_order(request: Request, body: OrderCreate, response: Response) -> OrderResponse:
    """Place an order for an existing client.

    OrderService checks the amount, then the client reference, before the
    insert -- a rejected order writes nothing.
    """
    service: OrderService = request.app.state.order_service
    order = service.create_order(body.client_id, body.total_amount)
    response.headers["Location"] = f"{request.url.path}/{order.id}"
    return OrderResponse.from_order(order)


@router.put("/orders/{order_id}", status_code=204)
def update_order(request: Request, order_id: int, body: OrderUpdate) -> Response:
    service: OrderService = request.app.state.order_service
    service.update_order(order_id, body.total_amount)
    return Response(status_code=204)


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(request: Request, order_id: int) -> Response:
    service: OrderService = request.app.state.order_service
    service.delete_order(order_id)
    return Response(status_code=204)
