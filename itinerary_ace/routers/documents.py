from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.db.dal import Database
from itinerary_ace.models.document import DocumentIn, DocumentOut, DocumentUpdateIn

from .deps import get_db

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/", response_model=List[DocumentOut], summary="List documents")
async def list_documents(db: Database = Depends(get_db)):
    return [DocumentOut(**r) for r in db.list_documents()]


@router.get("/{document_id}", response_model=DocumentOut, summary="Get document")
async def get_document(document_id: int, db: Database = Depends(get_db)):
    row = db.get_document(document_id)
    if not row:
        raise HTTPException(status_code=404, detail="document not found")
    return DocumentOut(**row)


@router.post(
    "/",
    response_model=DocumentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create document",
)
async def create_document(payload: DocumentIn, db: Database = Depends(get_db)):
    document_id = db.create_document(payload.title, payload.body)
    row = db.get_document(document_id)
    if not row:
        raise HTTPException(status_code=500, detail="document not found after creation")
    return DocumentOut(**row)


@router.patch("/{document_id}", response_model=DocumentOut, summary="Update document")
async def update_document(
    document_id: int, payload: DocumentUpdateIn, db: Database = Depends(get_db)
):
    if not db.update_document(document_id, title=payload.title, body=payload.body):
        raise HTTPException(status_code=404, detail="document not found")
    row = db.get_document(document_id)
    if not row:
        raise HTTPException(status_code=404, detail="document not found")
    return DocumentOut(**row)


@router.delete("/{document_id}", summary="Delete document")
async def delete_document(document_id: int, db: Database = Depends(get_db)):
    if not db.delete_document(document_id):
        raise HTTPException(status_code=404, detail="document not found")
    return {"status": "deleted", "id": document_id}
