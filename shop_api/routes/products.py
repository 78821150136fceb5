import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .. import models, schemas
from ..deps import current_user, get_product_repository, validated
from ..errors import Forbidden, NotFound
from ..repository import ProductRepository
from ..sanitizer import sanitize_input
from ..validation import PRODUCT_RULES, PRODUCT_UPDATE_RULES

logger = logging.getLogger("shop_api.products")

router = APIRouter(prefix="/api/products", tags=["products"])

# request field -> record attribute for partial updates
UPDATABLE = {
    "name": "name",
    "description": "description",
    "price": "price",
    "category": "category",
    "quantity": "quantity",
    "inStock": "in_stock",
}


def path_product_id(product_id: str) -> int:
    value = sanitize_input(product_id)
    try:
        return int(value)
    except ValueError:
        raise NotFound("Product not found")


def existing_product(
    product_id: int = Depends(path_product_id),
    products: ProductRepository = Depends(get_product_repository),
) -> models.Product:
    product = products.get(product_id)
    if not product:
        raise NotFound("Product not found")
    return product


def ensure_can_modify(product: models.Product, user: models.User):
    if product.created_by != user.id and user.role != "admin":
        logger.warning("forbidden product_id=%s user_id=%s", product.id, user.id)
        raise Forbidden("Insufficient permissions for this product")


@router.get("", response_model=schemas.ProductPage)
async def list_products(
    category: Optional[str] = None,
    in_stock: Optional[str] = Query(default=None, alias="inStock"),
    search: Optional[str] = None,
    sort: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    products: ProductRepository = Depends(get_product_repository),
):
    query = schemas.ProductQuery(
        category=category, in_stock=in_stock, search=search, sort=sort, page=page, limit=limit
    )
    result = products.query(query)
    return schemas.ProductPage(
        count=len(result.items),
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
        has_next_page=result.has_next,
        has_prev_page=result.has_prev,
        data=result.items,
    )


@router.get("/user/my-products", response_model=schemas.ProductList)
async def my_products(
    user: models.User = Depends(current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    owned = products.by_owner(user.id)
    return schemas.ProductList(count=len(owned), data=owned)


@router.get("/{product_id}", response_model=schemas.ProductResponse)
async def get_product(product: models.Product = Depends(existing_product)):
    return schemas.ProductResponse(data=product)


@router.post("", response_model=schemas.ProductWriteResponse, status_code=201)
async def create_product(
    data: dict = Depends(validated(PRODUCT_RULES)),
    user: models.User = Depends(current_user),
    products: ProductRepository = Depends(get_product_repository),
):
    quantity = data.get("quantity", 0)
    product = products.create(
        name=data["name"],
        description=data["description"],
        price=data["price"],
        category=data["category"],
        quantity=quantity,
        in_stock=quantity > 0,
        created_by=user.id,
    )
    logger.info("created product_id=%s user_id=%s", product.id, user.id)
    return schemas.ProductWriteResponse(message="Product created successfully", data=product)


@router.put("/{product_id}", response_model=schemas.ProductWriteResponse)
async def update_product(
    data: dict = Depends(validated(PRODUCT_UPDATE_RULES)),
    user: models.User = Depends(current_user),
    product: models.Product = Depends(existing_product),
    products: ProductRepository = Depends(get_product_repository),
):
    ensure_can_modify(product, user)
    changes = {attr: data[field] for field, attr in UPDATABLE.items() if field in data}
    updated = products.update(product.id, **changes)
    if not updated:
        raise NotFound("Product not found")
    return schemas.ProductWriteResponse(message="Product updated successfully", data=updated)


@router.delete("/{product_id}", response_model=schemas.MessageResponse)
async def delete_product(
    user: models.User = Depends(current_user),
    product: models.Product = Depends(existing_product),
    products: ProductRepository = Depends(get_product_repository),
):
    ensure_can_modify(product, user)
    if not products.delete(product.id):
        raise NotFound("Product not found")
    return schemas.MessageResponse(message="Product deleted successfully")
