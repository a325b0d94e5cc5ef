from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.models import DocumentUpload, UploadStatus
from techintel.db.repositories.ingestion import UploadRepo

router = APIRouter()


class UploadCreate(ApiModel):
    file_name: str = Field(min_length=1, max_length=512)
    file_type: str = Field(min_length=1, max_length=64)
    file_size: int = Field(default=0, ge=0)
    mapping_template: str | None = None


class UploadUpdate(ApiModel):
    status: UploadStatus | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    documents_extracted: int | None = Field(default=None, ge=0)
    mapping_template: str | None = None
    errors: list[str] | None = None


@router.get("")
async def list_uploads(
    status: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=1000),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (upload_status := parse_enum(UploadStatus, status, field="status")) is not None:
        where.append(DocumentUpload.status == upload_status)

    with db_errors("Failed to fetch uploads"):
        uploads = await UploadRepo(session).find(
            *where, order_by=[DocumentUpload.upload_date.desc()], limit=limit
        )
    return data(rows(uploads))


@router.post("", status_code=HTTP_201_CREATED)
async def create_upload(
    body: UploadCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create upload"):
        upload = await UploadRepo(session).create(
            **body.model_dump(), status=UploadStatus.uploading, progress=0, errors=[]
        )
        await session.commit()
    return data(upload.to_dict())


@router.patch("/{upload_id}")
async def update_upload(
    upload_id: uuid.UUID,
    body: UploadUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = UploadRepo(session)
    with db_errors("Failed to update upload"):
        upload = await repo.get(upload_id)
        if upload is None:
            raise not_found("Upload")
        await repo.update(upload, body.changes())
        await session.commit()
    return data(upload.to_dict())


@router.delete("/{upload_id}")
async def delete_upload(
    upload_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = UploadRepo(session)
    with db_errors("Failed to delete upload"):
        upload = await repo.get(upload_id)
        if upload is None:
            raise not_found("Upload")
        await repo.delete(upload)
        await session.commit()
    return {"message": "Upload deleted successfully"}
