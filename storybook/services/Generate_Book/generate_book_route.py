import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from storybook.dependencies import get_generate_book, get_storage
from storybook.utils.errors import StoryGenerationError
from storybook.utils.mem_storage import MemStorage
from storybook.utils.storage_schema import Book
from .generate_book import GenerateBook
from .generate_book_schema import BookGenerationRequest, GenerateBookResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/books/generate", response_model=GenerateBookResponse)
async def generate_book(
    request: BookGenerationRequest,
    generate_book_service: GenerateBook = Depends(get_generate_book),
):
    """Generate story text and illustrations for a personalised book and store it"""
    try:
        return await asyncio.to_thread(generate_book_service.generate_book, request)
    except StoryGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Error generating book")
        raise HTTPException(status_code=500, detail="Failed to generate book")


@router.get("/books/{book_id}", response_model=Book)
async def get_book(book_id: int, storage: MemStorage = Depends(get_storage)):
    book = storage.get_book(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book
