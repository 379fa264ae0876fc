"""Language preference routes. The choice is persisted in a cookie."""

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.shared.preferences.language import (
    STORAGE_KEY,
    Language,
    html_lang,
    parse_language,
    toggle_language,
)

router = APIRouter(prefix="/api/preferences", tags=["preferences"])

COOKIE_MAX_AGE = 60 * 60 * 24 * 365


class LanguageUpdate(BaseModel):
    language: str


def _current_language(request: Request) -> Language:
    return parse_language(request.cookies.get(STORAGE_KEY))


def _language_response(language: Language) -> JSONResponse:
    response = JSONResponse(content={"language": language.value, "htmlLang": html_lang(language)})
    response.set_cookie(STORAGE_KEY, language.value, max_age=COOKIE_MAX_AGE, samesite="lax")
    return response


@router.get("/language")
async def get_language(request: Request):
    """Current language, Korean when nothing (or something unknown) is stored."""
    return _language_response(_current_language(request))


@router.put("/language")
async def set_language(update: LanguageUpdate):
    try:
        language = Language(update.language.strip().lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": "invalid_language"})
    return _language_response(language)


@router.post("/language/toggle")
async def toggle(request: Request):
    return _language_response(toggle_language(_current_language(request)))
