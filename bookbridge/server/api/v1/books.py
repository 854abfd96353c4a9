"""
Book listing endpoints.

Browsing and detail are public. Creating a listing needs a signed-in caller,
and only the owner may edit or remove it.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from bookbridge.core.database.entities.books import BookMode, BookType
from bookbridge.core.models.io.books import BookCreate, BookListItem, BookRead, BookUpdate
from bookbridge.server.services.deps import BookServiceDep, UserDep

router = APIRouter()


@router.get(
    "",
    response_model=List[BookListItem],
    summary="Browse Books",
    description="List books newest first, optionally filtered by text, mode, type or owner.",
)
async def browse_books(
    books: BookServiceDep,
    q: Optional[str] = Query(default=None, max_length=200, description="Matches title, author or category"),
    mode: Optional[BookMode] = None,
    book_type: Optional[BookType] = None,
    user_id: Optional[str] = Query(default=None, description="Only books listed by this user"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> List[BookRead]:
    """
    Browse listings.

    - **q**: case-insensitive search on title, author and category.
    - **mode**: sell, donate or exchange.
    - **book_type**: textbook, novel, storybook, comics, biography or other.
    - **user_id**: restrict to one owner (the "my books" view).
    """
    return await books.browse(q=q, mode=mode, book_type=book_type, user_id=user_id, limit=limit, offset=offset)


@router.post(
    "",
    response_model=BookRead,
    status_code=status.HTTP_201_CREATED,
    summary="List a Book",
    description="Create a listing owned by the caller.",
    responses={401: {"description": "Sign in required"}, 422: {"description": "Invalid listing"}},
)
async def create_book(payload: BookCreate, caller: UserDep, books: BookServiceDep) -> BookRead:
    return await books.create(payload)


@router.get(
    "/{book_id}",
    response_model=BookRead,
    summary="Get Book",
    description="Retrieve one listing with its owner's name and avatar.",
    responses={404: {"description": "Book not found"}},
)
async def get_book(book_id: str, books: BookServiceDep) -> BookRead:
    return await books.get(book_id)


@router.patch(
    "/{book_id}",
    response_model=BookRead,
    summary="Update Book",
    description="Edit a listing. Only its owner may do this.",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Book not found"}},
)
async def update_book(book_id: str, payload: BookUpdate, caller: UserDep, books: BookServiceDep) -> BookRead:
    return await books.update(book_id, payload)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Book",
    description="Remove a listing. Only its owner may do this.",
    responses={403: {"description": "Not the owner"}, 404: {"description": "Book not found"}},
)
async def delete_book(book_id: str, caller: UserDep, books: BookServiceDep) -> None:
    await books.delete(book_id)
