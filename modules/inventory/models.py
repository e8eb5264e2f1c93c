from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from core.database import Base

class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    barcode = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    # "condition" is reserved in some SQL dialects
    condition = Column("item_condition", String(50))
    location = Column(String(50))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<InventoryItem(barcode='{self.barcode}', name='{self.name}')>"
