from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import QueryParams
from typing import Any, Callable, Dict, List, Tuple, Type
import json
import logging

from api.middleware.store import get_item_store
from core.exceptions import (
    Conflict,
    DuplicateKeyError,
    InvalidInput,
    ItemNotFoundError,
    MethodNotAllowed,
    NotFound,
    StorageFailure,
)
from modules.inventory.service import ItemStore
from modules.inventory.schemas import (
    BulkDeleteRequest,
    CreateItemResponse,
    DeleteResponse,
    ErrorResponse,
    ItemCreate,
    ItemResponse,
    ItemUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ActionHandler = Callable[[ItemStore, QueryParams, bytes], Any]


def _validation_message(exc: ValidationError, missing_message: str) -> str:
    errors = exc.errors()
    if any(error["type"] == "missing" for error in errors):
        return missing_message

    first = errors[0]
    if first["type"] == "value_error":
        return first["msg"].replace("Value error, ", "", 1)
    field = ".".join(str(part) for part in first["loc"])
    return f"{field}: {first['msg']}" if field else first["msg"]


def _parse_body(body: bytes, model: Type[BaseModel], missing_message: str):
    """Decode a JSON body and validate it against a request model"""
    try:
        data = json.loads(body)
    except ValueError:
        raise InvalidInput("Invalid JSON data")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        details = [
            {"loc": [str(part) for part in error["loc"]], "msg": error["msg"]}
            for error in exc.errors()
        ]
        raise InvalidInput(_validation_message(exc, missing_message), details=details)


def _required_barcode(params: QueryParams) -> str:
    barcode = params.get("barcode")
    if not barcode:
        raise InvalidInput("Barcode parameter is required")
    return barcode


def _records(items) -> List[ItemResponse]:
    return [ItemResponse.model_validate(item) for item in items]


def create_item(store: ItemStore, params: QueryParams, body: bytes) -> CreateItemResponse:
    item_data = _parse_body(body, ItemCreate, "Barcode and name are required")
    item = store.insert(item_data)
    return CreateItemResponse(id=item.id, item=ItemResponse.model_validate(item))


def get_all_items(store: ItemStore, params: QueryParams, body: bytes) -> List[ItemResponse]:
    return _records(store.get_all())


def get_item_by_barcode(store: ItemStore, params: QueryParams, body: bytes) -> ItemResponse:
    barcode = _required_barcode(params)
    item = store.get_by_barcode(barcode)
    if not item:
        raise ItemNotFoundError(barcode)
    return ItemResponse.model_validate(item)


def update_item(store: ItemStore, params: QueryParams, body: bytes) -> ItemResponse:
    barcode = _required_barcode(params)
    item_data = _parse_body(body, ItemUpdate, "Missing required fields")
    return ItemResponse.model_validate(store.update(barcode, item_data))


def delete_item(store: ItemStore, params: QueryParams, body: bytes) -> DeleteResponse:
    barcode = _required_barcode(params)
    count = store.delete(barcode)
    return DeleteResponse(message="Item deleted successfully", count=count)


def delete_multiple_items(store: ItemStore, params: QueryParams, body: bytes) -> DeleteResponse:
    request_data = _parse_body(body, BulkDeleteRequest, "No barcodes provided")
    count = store.delete_many(request_data.barcodes)
    return DeleteResponse(message="Items deleted successfully", count=count)


def search_items(store: ItemStore, params: QueryParams, body: bytes) -> List[ItemResponse]:
    return _records(store.search(params.get("term")))


ACTIONS: Dict[str, Tuple[str, ActionHandler]] = {
    "create": ("POST", create_item),
    "getAll": ("GET", get_all_items),
    "getByBarcode": ("GET", get_item_by_barcode),
    "update": ("PUT", update_item),
    "delete": ("DELETE", delete_item),
    "deleteMultiple": ("DELETE", delete_multiple_items),
    "search": ("GET", search_items),
}


ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 404, 405, 409, 500)}


@router.api_route(
    "/inventory",
    methods=["GET", "POST", "PUT", "DELETE"],
    responses=ERROR_RESPONSES,
)
async def inventory_action(
    request: Request,
    action: str = "",
    store: ItemStore = Depends(get_item_store)
):
    """Dispatch one inventory action selected by the `action` query parameter"""
    logger.info(f"Received {request.method} request with action: {action}")

    entry = ACTIONS.get(action)
    if entry is None:
        raise InvalidInput("Invalid action")

    verb, handler = entry
    if request.method != verb:
        raise MethodNotAllowed("Method not allowed")

    body = await request.body()

    try:
        return handler(store, request.query_params, body)
    except DuplicateKeyError as e:
        logger.warning(str(e))
        raise Conflict("Item with this barcode already exists")
    except ItemNotFoundError as e:
        logger.info(str(e))
        raise NotFound("Item not found")
    except SQLAlchemyError:
        logger.exception(f"Database error during action {action}")
        raise StorageFailure("Database error")
