import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db.storage import Storage, get_storage
from app.models.category import Category, CategoryCreate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[Category])
def list_categories(store: Storage = Depends(get_storage)):
    try:
        return store.get_categories()
    except Exception as e:
        logger.error(f"Failed to fetch categories: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, store: Storage = Depends(get_storage)):
    category = store.get_category(category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, store: Storage = Depends(get_storage)):
    try:
        return store.create_category(category)
    except Exception as e:
        logger.error(f"Failed to create category: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create category")
