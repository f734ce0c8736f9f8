from fastapi import APIRouter, Depends, Form, HTTPException, Response, status
from db.database import get_store
from errors import NotFoundError, StorageError, ValidationError
from models.line import Line
from models.text import Text, TextUpdate
from utils.ingest import add_text_with_lines, delete_text_and_lines, get_all_texts, normalize_author
from utils.selection import get_due_lines_for_text, get_lines_for_text
from typing import List, Optional

router = APIRouter()

def require_text(store, text_id: int) -> Text:
    text = store.get_text(text_id)
    if text is None:
        raise HTTPException(status_code=404, detail="Text not found")
    return text

@router.get("/", response_model=List[Text])
async def list_texts(store = Depends(get_store)):
    """All texts, newest first."""
    return get_all_texts(store)

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_text(
    title: Optional[str] = Form(None, description="Text title"),
    content: Optional[str] = Form(None, description="Full text, one reviewable line per line"),
    author: Optional[str] = Form(None, description="Optional author"),
    store = Depends(get_store),
):
    """Split content into lines and store text + lines together."""
    try:
        text_id = add_text_with_lines(store, title or "", content or "", author)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Failed to add text: {e}")
    return {"id": text_id}

@router.get("/{text_id}", response_model=Text)
async def get_text(text_id: int, store = Depends(get_store)):
    return require_text(store, text_id)

@router.patch("/{text_id}", response_model=Text)
async def update_text(text_id: int, payload: TextUpdate, store = Depends(get_store)):
    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes:
        if not changes["title"] or not changes["title"].strip():
            raise HTTPException(status_code=400, detail="Title is required")
        changes["title"] = changes["title"].strip()
    if "author" in changes:
        changes["author"] = normalize_author(changes["author"])
    try:
        with store.atomic():
            require_text(store, text_id)
            if changes.get("max_unlocked_line_number") is not None:
                line_count = store.count_lines(text_id)
                if changes["max_unlocked_line_number"] >= line_count:
                    raise HTTPException(
                        status_code=400,
                        detail=f"max_unlocked_line_number must be below {line_count}",
                    )
            elif "max_unlocked_line_number" in changes:
                raise HTTPException(status_code=400, detail="max_unlocked_line_number cannot be null")
            store.update_text(text_id, changes)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update text: {e}")
    return store.get_text(text_id)

@router.delete("/{text_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_text(text_id: int, store = Depends(get_store)):
    """Delete a text together with all of its lines."""
    try:
        delete_text_and_lines(store, text_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Text not found")
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete text: {e}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{text_id}/lines", response_model=List[Line])
async def text_lines(text_id: int, store = Depends(get_store)):
    require_text(store, text_id)
    return get_lines_for_text(store, text_id)

@router.get("/{text_id}/lines/due", response_model=List[Line])
async def due_lines(text_id: int, store = Depends(get_store)):
    """Due lines regardless of unlock state; the review queue applies the gate."""
    require_text(store, text_id)
    return get_due_lines_for_text(store, text_id)
