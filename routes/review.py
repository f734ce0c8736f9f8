from fastapi import APIRouter, Depends, Form, HTTPException
from db.database import get_store
from config import load_config
from errors import NotFoundError, StorageError, ValidationError
from models.line import Line, Outcome
from utils.masking import mask_line
from utils.unlock import build_review_queue, next_review_line, record_review
from typing import Dict

router = APIRouter()

def line_payload(line: Line, placeholder: str) -> Dict:
    data = line.model_dump(mode="json")
    data["display_text"] = mask_line(line.original_line_text, line.mask_level, placeholder)
    return data

@router.get("/{text_id}/queue")
async def review_queue(text_id: int, store = Depends(get_store)):
    """Due lines within the unlocked range, ordered by line number."""
    config = load_config()
    placeholder = config["review"]["mask_placeholder"]
    text = store.get_text(text_id)
    if text is None:
        raise HTTPException(status_code=404, detail="Text not found")
    queue = build_review_queue(store, text_id, text=text)
    return {
        "text_id": text_id,
        "max_unlocked_line_number": text.max_unlocked_line_number,
        "lines": [line_payload(line, placeholder) for line in queue],
    }

@router.get("/{text_id}/next")
async def next_line(text_id: int, store = Depends(get_store)):
    config = load_config()
    try:
        line = next_review_line(store, text_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Text not found")
    if line is None:
        return {"line": None}
    return {"line": line_payload(line, config["review"]["mask_placeholder"])}

@router.post("/{text_id}/lines/{line_id}")
async def submit_review(
    text_id: int,
    line_id: int,
    outcome: Outcome = Form(..., description="remembered or forgotten"),
    store = Depends(get_store),
):
    """Record an outcome, reschedule the line and maybe unlock the next one."""
    config = load_config()
    try:
        result = record_review(
            store, text_id, line_id, outcome, auto_unlock=config["review"]["auto_unlock"]
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Failed to record review: {e}")
    return {
        "line": line_payload(result.line, config["review"]["mask_placeholder"]),
        "max_unlocked_line_number": result.max_unlocked_line_number,
    }
