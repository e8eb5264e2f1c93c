from pydantic import BaseModel, Field, validator, root_validator
from typing import Optional, List, Any
from datetime import datetime

def _accept_legacy_condition(values):
    # Older clients send the column name instead of the field name
    if isinstance(values, dict) and "condition" not in values and "item_condition" in values:
        values = dict(values)
        values["condition"] = values.pop("item_condition")
    return values

def _not_blank(v, field_name):
    if not v.strip():
        raise ValueError(f'{field_name} cannot be empty')
    return v

class ItemCreate(BaseModel):
    barcode: str = Field(..., max_length=64)
    name: str = Field(..., max_length=100)
    condition: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=50)

    @root_validator(pre=True)
    def accept_legacy_condition(cls, values):
        return _accept_legacy_condition(values)

    @validator('barcode')
    def validate_barcode(cls, v):
        return _not_blank(v, 'Barcode')

    @validator('name')
    def validate_name(cls, v):
        return _not_blank(v, 'Name')

class ItemUpdate(BaseModel):
    """Full replacement of the mutable fields; every key must be present."""
    name: str = Field(..., max_length=100)
    condition: Optional[str] = Field(..., max_length=50)
    location: Optional[str] = Field(..., max_length=50)

    @root_validator(pre=True)
    def accept_legacy_condition(cls, values):
        return _accept_legacy_condition(values)

    @validator('name')
    def validate_name(cls, v):
        return _not_blank(v, 'Name')

class BulkDeleteRequest(BaseModel):
    barcodes: List[str]

    @validator('barcodes')
    def validate_barcodes(cls, v):
        if not v:
            raise ValueError('At least one barcode is required')
        return v

class ItemResponse(BaseModel):
    id: int
    barcode: str
    name: str
    condition: Optional[str] = None
    location: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class CreateItemResponse(BaseModel):
    success: bool = True
    message: str = "Item created successfully"
    id: int
    item: ItemResponse

class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    count: int

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    error_code: str
    details: Optional[List[Any]] = None
