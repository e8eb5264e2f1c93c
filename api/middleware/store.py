from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from modules.inventory.service import ItemStore

def get_item_store(db: Session = Depends(get_db)) -> ItemStore:
    """Item store bound to the request's database session"""
    return ItemStore(db)
