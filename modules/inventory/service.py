from sqlalchemy import or_, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import func
from typing import Iterable, List, Optional
import logging

from .models import InventoryItem
from .schemas import ItemCreate, ItemUpdate
from core.exceptions import DuplicateKeyError, ItemNotFoundError

logger = logging.getLogger(__name__)

class ItemStore:
    """Persistence for inventory items, keyed by barcode.

    The store is bound to one session; every mutating call commits its own
    transaction and rolls back on failure before re-raising.
    """

    def __init__(self, db: Session):
        self.db = db

    def _ordered(self, query):
        return query.order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc())

    def get_all(self) -> List[InventoryItem]:
        """Get all items, newest first"""
        return self._ordered(self.db.query(InventoryItem)).all()

    def get_by_barcode(self, barcode: str) -> Optional[InventoryItem]:
        """Get item by exact barcode"""
        return self.db.query(InventoryItem).filter(InventoryItem.barcode == barcode).first()

    def search(self, term: Optional[str] = None) -> List[InventoryItem]:
        """Case-insensitive substring search over barcode and name"""
        term = (term or "").strip()
        if not term:
            return self.get_all()

        query = self.db.query(InventoryItem).filter(
            or_(
                InventoryItem.barcode.icontains(term, autoescape=True),
                InventoryItem.name.icontains(term, autoescape=True),
            )
        )
        return self._ordered(query).all()

    def insert(self, item_data: ItemCreate) -> InventoryItem:
        """Insert a new item; the unique constraint on barcode rejects duplicates"""
        item = InventoryItem(
            barcode=item_data.barcode,
            name=item_data.name,
            condition=item_data.condition,
            location=item_data.location
        )

        self.db.add(item)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateKeyError(item_data.barcode)
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(item)
        logger.info(f"Inserted item {item.id} with barcode {item.barcode}")
        return item

    def update(self, barcode: str, item_data: ItemUpdate) -> InventoryItem:
        """Overwrite name, condition and location of an existing item"""
        item = self.get_by_barcode(barcode)
        if not item:
            raise ItemNotFoundError(barcode)

        for field, value in item_data.dict().items():
            setattr(item, field, value)
        # Refresh even when no column value changed
        item.updated_at = func.now()

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(item)
        return item

    def delete(self, barcode: str) -> int:
        """Delete one item by barcode"""
        try:
            count = self.db.query(InventoryItem).filter(
                InventoryItem.barcode == barcode
            ).delete(synchronize_session=False)
            if count == 0:
                raise ItemNotFoundError(barcode)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return count

    def delete_many(self, barcodes: Iterable[str]) -> int:
        """Delete every item whose barcode is listed, in a single statement.

        Barcodes that do not exist are ignored; the returned count is the
        number of rows actually removed.
        """
        barcodes = list(dict.fromkeys(barcodes))
        if not barcodes:
            return 0

        try:
            count = self.db.query(InventoryItem).filter(
                InventoryItem.barcode.in_(barcodes)
            ).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Bulk delete removed {count} of {len(barcodes)} requested items")
        return count

    def ping(self) -> bool:
        """Verify the database connection is alive"""
        self.db.execute(text("SELECT 1"))
        return True
