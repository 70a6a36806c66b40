"""
Translation route (English <-> Bahasa Malaysia).
"""

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse

from core.dependencies import get_translator, read_json_body
from core.outcome import Err
from services.translation import LANGUAGE_NAMES

router = APIRouter()


@router.post("/api/translate")
async def translate_text(request: Request, translator=Depends(get_translator)):
    body = await read_json_body(request)
    text = body.get('text')
    target_lang = body.get('targetLang')

    if not text or not target_lang:
        raise HTTPException(status_code=400, detail="Missing text or targetLang")
    if target_lang not in LANGUAGE_NAMES:
        raise HTTPException(status_code=400, detail=f"Unsupported targetLang: {target_lang}")

    if not translator.is_available:
        raise HTTPException(status_code=503, detail="Translation service unavailable")

    outcome = translator.translate(str(text), target_lang)
    if isinstance(outcome, Err):
        raise HTTPException(status_code=500, detail=f"Translation failed: {outcome.cause}")

    return JSONResponse(outcome.value)
