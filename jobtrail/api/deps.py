"""Shared dependencies for API endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.core.database import get_db
from jobtrail.services.document_storage import DocumentStorage, get_storage

DbSession = Annotated[AsyncSession, Depends(get_db)]
Storage = Annotated[DocumentStorage, Depends(get_storage)]
