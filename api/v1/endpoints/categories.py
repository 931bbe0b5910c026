# api/v1/endpoints/categories.py
from typing import List

from fastapi import APIRouter, Depends, Query

from core.exceptions import NotFoundError
from models.records import CategoryRecord, ContentRecord
from services.pipeline.content_handler import ContentHandler

from .deps import get_content_handler

router = APIRouter()


@router.get("/categories", response_model=List[CategoryRecord])
async def list_categories(handler: ContentHandler = Depends(get_content_handler)):
    return await handler.list_categories()


@router.get("/categories/{category_id}/content", response_model=List[ContentRecord])
async def get_category_content(
    category_id: int,
    handler: ContentHandler = Depends(get_content_handler),
):
    if await handler.get_category(category_id) is None:
        raise NotFoundError(f"Category {category_id} not found")
    return await handler.get_content_for_category(category_id)


@router.get("/search", response_model=List[ContentRecord])
async def search_content(
    q: str = Query(..., min_length=1, description="Substring matched against title or summary"),
    handler: ContentHandler = Depends(get_content_handler),
):
    return await handler.search(q)
