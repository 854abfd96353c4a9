"""
Object storage endpoints.

Uploads take the raw request body, read as a stream and refused once it
passes the configured size. The ``filename`` query parameter only supplies
the extension. Objects are served publicly.
"""

from typing import Optional

from fastapi import APIRouter, Header, Query, Request, status
from fastapi.responses import FileResponse

from bookbridge.core.models.io.storage import StoredObjectRead
from bookbridge.server.services.deps import StorageServiceDep, UserDep
from bookbridge.server.services.storage import content_type_for

router = APIRouter()


@router.put(
    "/{bucket}",
    response_model=StoredObjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Object",
    description="Store the request body in a public bucket and return its public URL.",
    responses={400: {"description": "File type or size not accepted"}, 404: {"description": "Unknown bucket"}},
)
async def upload_object(
    bucket: str,
    request: Request,
    caller: UserDep,
    storage: StorageServiceDep,
    filename: str = Query(min_length=1, max_length=255, description="Original file name, used for its extension"),
    content_length: Optional[int] = Header(default=None, ge=0),
) -> StoredObjectRead:
    return await storage.upload_stream(bucket, filename, request.stream(), content_length)


@router.get(
    "/{bucket}/{key:path}",
    summary="Download Object",
    response_class=FileResponse,
    responses={404: {"description": "Object not found"}},
)
async def get_object(bucket: str, key: str, storage: StorageServiceDep):
    return FileResponse(storage.open(bucket, key), media_type=content_type_for(key))


@router.delete(
    "/{bucket}/{key:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Object",
    responses={404: {"description": "Object not found"}},
)
async def delete_object(bucket: str, key: str, caller: UserDep, storage: StorageServiceDep) -> None:
    await storage.delete(bucket, key)
