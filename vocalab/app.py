"""FastAPI application with all routes."""
from __future__ import annotations

import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from vocalab.ai_client import AIGenerationClient, create_llm
from vocalab.config import LLM_PROVIDERS, Settings, load_settings, save_settings
from vocalab.db import Database
from vocalab.errors import AIProviderExhaustedError, InsufficientDataError, UnparsableResponse
from vocalab.lookup import lookup_word, lookup_words
from vocalab.question_generator import generate_list_questions, generate_quiz

app = FastAPI(title="VocaLab")

_log = logging.getLogger("vocalab.api")

# Global state (initialized in startup)
_db: Database | None = None
_settings: Settings | None = None


def get_db() -> Database:
    assert _db is not None
    return _db


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_llm():
    return create_llm(get_settings())


def _get_ai_client() -> AIGenerationClient:
    """A fresh fallback client per request."""
    s = get_settings()
    return AIGenerationClient(
        _get_llm(), s.ai_models, timeout=s.ai_timeout, temperature=s.ai_temperature,
    )


def _optional_ai_client() -> AIGenerationClient | None:
    """Client for best-effort AI distractors; None when AI is misconfigured."""
    try:
        return _get_ai_client()
    except (ValueError, ImportError) as e:
        _log.warning("AI distractors unavailable, using random ones: %s", e)
        return None


def _required_ai_client() -> AIGenerationClient:
    try:
        return _get_ai_client()
    except (ValueError, ImportError) as e:
        _log.warning("AI is not configured: %s", e)
        raise HTTPException(503, f"AI is not configured: {e}")


def _ai_error(e: Exception) -> JSONResponse:
    _log.warning("AI request failed: %s", e)
    if isinstance(e, UnparsableResponse):
        return JSONResponse(
            {"error": "Failed to parse AI response", "raw": e.raw}, status_code=502,
        )
    details = str(e.last_error) if isinstance(e, AIProviderExhaustedError) else str(e)
    return JSONResponse(
        {"error": "Failed to reach any AI model", "details": details}, status_code=502,
    )


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_count(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        count = int(value)
    except ValueError:
        raise HTTPException(400, f"Invalid count: {value!r}")
    if count < 1:
        raise HTTPException(400, "count must be at least 1")
    return count


async def _json_body(request: Request) -> dict:
    body = await request.json() if await request.body() else {}
    if not isinstance(body, dict):
        raise HTTPException(400, "Expected a JSON object")
    return body


def _require_list(list_id: str) -> dict:
    wl = get_db().get_word_list(list_id)
    if wl is None:
        raise HTTPException(404, "List not found")
    return wl


@app.on_event("startup")
async def startup():
    global _db, _settings
    if _db is not None:
        return  # Already initialized (e.g. by tests)
    _settings = load_settings()
    _db = Database(_settings.db_full_path)


@app.on_event("shutdown")
async def shutdown():
    if _db:
        _db.close()


# ── API: Stats ────────────────────────────────────────────────────────────

@app.get("/api/stats")
async def api_stats():
    return get_db().get_stats()


# ── API: Quiz ─────────────────────────────────────────────────────────────

async def _quiz(request: Request, list_id: str | None = None):
    s = get_settings()
    params = request.query_params
    mode = params.get("mode") or s.quiz_mode
    count = _parse_count(params.get("count"), s.quiz_count)
    use_ai = _parse_bool(params.get("useAI"), s.use_ai_distractors)

    client = _optional_ai_client() if use_ai else None
    try:
        questions = await generate_quiz(
            get_db(), mode=mode, count=count, use_ai=use_ai, client=client, list_id=list_id,
        )
    except InsufficientDataError as e:
        raise HTTPException(400, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return [q.to_dict() for q in questions]


@app.get("/api/quiz/generate")
async def api_quiz_generate(request: Request):
    return await _quiz(request)


# ── API: Word lists ───────────────────────────────────────────────────────

@app.get("/api/word-lists")
async def api_word_lists():
    return get_db().get_word_lists()


@app.post("/api/word-lists")
async def api_create_word_list(request: Request):
    body = await _json_body(request)
    title = (body.get("title") or "").strip()
    if not title:
        raise HTTPException(400, "Title is required")
    tags = body.get("tags") or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(",") if t.strip()]
    return get_db().create_word_list(title, body.get("description"), tags)


@app.get("/api/word-lists/{list_id}")
async def api_get_word_list(list_id: str):
    wl = _require_list(list_id)
    db = get_db()
    wl["words"] = db.get_list_words(list_id)
    wl["question_count"] = len(db.get_list_questions(list_id))
    return wl


@app.post("/api/word-lists/{list_id}")
async def api_add_word(list_id: str, request: Request):
    _require_list(list_id)
    body = await _json_body(request)
    word = (body.get("word") or "").strip()
    if not word:
        raise HTTPException(400, "Word is required")
    return get_db().add_word(
        list_id,
        word,
        meaning=body.get("meaning"),
        part_of_speech=body.get("partOfSpeech"),
        example=body.get("example"),
    )


@app.patch("/api/word-lists/{list_id}")
async def api_update_word_list(list_id: str, request: Request):
    _require_list(list_id)
    body = await _json_body(request)
    return get_db().update_word_list(list_id, body.get("title"), body.get("description"))


@app.delete("/api/word-lists/{list_id}")
async def api_delete_word_list(list_id: str):
    if not get_db().delete_word_list(list_id):
        raise HTTPException(404, "List not found")
    return {"success": True}


@app.post("/api/word-lists/{list_id}/generate-questions")
async def api_generate_list_questions(list_id: str):
    _require_list(list_id)
    db = get_db()
    if not db.get_list_words(list_id):
        raise HTTPException(400, "Word list is empty")
    try:
        questions = await generate_list_questions(db, list_id, _required_ai_client())
    except InsufficientDataError as e:
        raise HTTPException(400, str(e))
    except (AIProviderExhaustedError, UnparsableResponse) as e:
        return _ai_error(e)
    return {"count": len(questions)}


@app.get("/api/word-lists/{list_id}/quiz")
async def api_list_quiz(list_id: str):
    _require_list(list_id)
    return get_db().get_list_questions(list_id)


@app.get("/api/word-lists/{list_id}/practice")
async def api_list_practice(list_id: str, request: Request):
    _require_list(list_id)
    return await _quiz(request, list_id=list_id)


# ── API: Words ────────────────────────────────────────────────────────────

# request key -> column
WORD_BODY_FIELDS = (
    ("word", "word"),
    ("meaning", "meaning"),
    ("partOfSpeech", "part_of_speech"),
    ("example", "example"),
)


@app.patch("/api/words/{word_id}")
async def api_update_word(word_id: str, request: Request):
    db = get_db()
    if db.get_word(word_id) is None:
        raise HTTPException(404, "Word not found")
    body = await _json_body(request)
    fields = {}
    if "word" in body:
        word = str(body["word"] or "").strip()
        if not word:
            raise HTTPException(400, "Word cannot be empty")
        body["word"] = word
    for key, column in WORD_BODY_FIELDS:
        if key in body:
            fields[column] = body[key]
    return db.update_word(word_id, **fields)


@app.delete("/api/words/{word_id}")
async def api_delete_word(word_id: str):
    if not get_db().delete_word(word_id):
        raise HTTPException(404, "Word not found")
    return {"success": True}


# ── API: AI lookup ────────────────────────────────────────────────────────

@app.post("/api/ai/word-lookup")
async def api_word_lookup(request: Request):
    body = await _json_body(request)
    word = (body.get("word") or "").strip()
    if not word:
        raise HTTPException(400, "Word is required")
    try:
        info = await lookup_word(_required_ai_client(), word)
    except (AIProviderExhaustedError, UnparsableResponse) as e:
        return _ai_error(e)
    return info.to_dict()


@app.post("/api/ai/batch-word-lookup")
async def api_batch_word_lookup(request: Request):
    body = await _json_body(request)
    words = body.get("words")
    if not isinstance(words, list) or not words:
        raise HTTPException(400, "Words array is required")
    try:
        result = await lookup_words(_required_ai_client(), [str(w) for w in words])
    except (AIProviderExhaustedError, UnparsableResponse) as e:
        return _ai_error(e)
    return {
        "results": [info.to_dict() for info in result.found],
        "missing": result.missing,
    }


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


def _validate_ai_settings(body: dict) -> None:
    if "ai_models" in body:
        models = body["ai_models"]
        if (
            not isinstance(models, list)
            or not models
            or not all(isinstance(m, str) and m.strip() for m in models)
        ):
            raise HTTPException(400, "ai_models must be a non-empty list of model names")
    if "llm_provider" in body and body["llm_provider"] not in LLM_PROVIDERS:
        expected = ", ".join(LLM_PROVIDERS)
        raise HTTPException(400, f"Unknown LLM provider: {body['llm_provider']!r} (expected one of {expected})")


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await _json_body(request)
    _validate_ai_settings(body)
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)
    return s.to_dict()
