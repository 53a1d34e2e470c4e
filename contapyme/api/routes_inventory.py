"""
Inventory API Routes.

- Products (create, list, deactivate)
- Stock movement history
"""
from typing import Annotated

from fastapi import APIRouter, Query

from contapyme.api.dependencies import InventoryServiceDep
from contapyme.models import inventory_schemas as schemas

router = APIRouter()


@router.get("/products", response_model=list[schemas.ProductOut])
def list_products(service: InventoryServiceDep, include_inactive: bool = False):
    return service.list_products(include_inactive)


@router.post("/products", response_model=schemas.ProductOut, status_code=201)
def create_product(data: schemas.ProductCreate, service: InventoryServiceDep):
    """Create a product; initial stock is logged as an opening entry."""
    return service.create_product(data)


@router.delete("/products/{id}", response_model=schemas.ProductOut)
def deactivate_product(id: int, service: InventoryServiceDep):
    return service.deactivate_product(id)


@router.get("/movements", response_model=list[schemas.StockMovementOut])
def list_movements(filters: Annotated[schemas.MovementListFilter, Query()], service: InventoryServiceDep):
    return service.list_movements(filters)
