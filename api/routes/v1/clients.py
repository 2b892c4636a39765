"""
api/routes/v1/clients.py -- Client CRUD routes.

Routes:
  GET    /clients               -- list all clients
  GET    /clients/{client_id}   -- client detail; 404 if absent
  POST   /clients               -- create; 201
  PUT    /clients/{client_id}   -- replace name/email; 204, 404 if absent
  DELETE /clients/{client_id}   -- delete; 204, 404 if absent,
                                   400 dependency_conflict if it has orders

Service errors (NotFoundError, DependencyConflictError) propagate to the
app-level DomainError handler in api/main.py.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import ClientCreate, ClientResponse, ClientUpdate
from auth.dependencies import get_current_user
from sales.service import ClientService

# All client routes require authentication.
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/clients", response_model=list[ClientResponse])
def list_clients(request: Request) -> list[ClientResponse]:
    service: ClientService = request.app.state.client_service
    return [ClientResponse.from_client(c) for c in service.list_clients()]


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(request: Request, client_id: int) -> ClientResponse:
    service: ClientService = request.app.state.client_service
    client = service.get_client(client_id)
    if client is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": f"Client with id {client_id} was not found."},
        )
    return ClientResponse.from_client(client)


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(request: Request, body: ClientCreate, response: Response) -> ClientResponse:
    """Create a client. The Location header points at the new resource."""
    service: ClientService = request.app.state.client_service
    client = service.create_client(body.name, body.email)
    response.headers["Location"] = f"{request.url.path}/{client.id}"
    return ClientResponse.from_client(client)


@router.put("/clients/{client_id}", status_code=204)
def update_client(request: Request, client_id: int, body: ClientUpdate) -> Response:
    service: ClientService = request.app.state.client_service
    service.update_client(client_id, body.name, body.email)
    return Response(status_code=204)


@router.delete("/clients/{client_id}", status_code=204)
def delete_client(request: Request, client_id: int) -> Response:
    """Delete a client that has no orders."""
    service: ClientService = request.app.state.client_service
    service.delete_client(client_id)
    return Response(status_code=204)
