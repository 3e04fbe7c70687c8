"""FastAPI application for the divorce forms system.

Exposes the questionnaire engine, the response store and the document
generation pipeline over HTTP. Authentication is handled upstream; the
caller identifies the user with the ``X-User-Id`` header.

Usage (from project root, after installing fastapi and uvicorn):

    uvicorn divorce_forms.api.app:app --reload
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse, Response

from ..config.config_manager import ConfigurationManager
from ..engine.questionnaire import evaluate
from ..errors import (
    ConfigurationError,
    DocumentGenerationError,
    PersistenceError,
    ResponseNotFoundError,
    SubmissionBlockedError,
    UnsupportedDocumentTypeError,
)
from ..models.schema import Question, Schema, Section
from ..pipeline import DocumentGenerationPipeline, PipelineConfig, parse_generation_mode
from ..storage.database import DatabaseManager
from ..storage.response_store import ResponseStore

logger = logging.getLogger(__name__)

app = FastAPI(title="Divorce Forms API", version="0.1.0")

# Questionnaire whose answers feed each document type
DOCUMENT_SOURCES: Dict[str, str] = {
    "petition": "petition",
    "petition-no-children": "petition",
    "petition-with-children": "petition",
    "marital-settlement-agreement": "marital-settlement",
    "marital-settlement": "marital-settlement",
}


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

_config_manager: Optional[ConfigurationManager] = None
_response_store: Optional[ResponseStore] = None
_pipeline: Optional[DocumentGenerationPipeline] = None


def get_config_manager() -> ConfigurationManager:
    """Get the configuration manager with the built-in questionnaires loaded.

    Questionnaires and mapping tables found in the pipeline's configuration
    directory are loaded on top; tables go into the pipeline's registry.
    """
    global _config_manager
    if _config_manager is None:
        manager = ConfigurationManager()
        manager.load_builtin_schemas()
        pipeline = get_pipeline()
        if pipeline.config.config_dir:
            result = manager.load_from_directory(pipeline.config.config_dir, registry=pipeline.registry)
            if not result.is_valid:
                raise ConfigurationError("Configuration directory is invalid", validation_result=result)
        _config_manager = manager
    return _config_manager


def get_pipeline() -> DocumentGenerationPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = DocumentGenerationPipeline(config=PipelineConfig())
    return _pipeline


def get_response_store() -> ResponseStore:
    """Get the response store, creating the schema on first use."""
    global _response_store
    if _response_store is None:
        db_manager = DatabaseManager(database_url=get_pipeline().config.database_url)
        db_manager.init_database()
        _response_store = ResponseStore(db_manager)
    return _response_store


def _require_schema(manager: ConfigurationManager, questionnaire_type: str) -> Schema:
    schema = manager.get_schema(questionnaire_type)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"Unknown questionnaire '{questionnaire_type}'")
    return schema


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def _question_payload(question: Question) -> Dict[str, Any]:
    return {
        "id": question.id,
        "type": question.type.value,
        "label": question.label,
        "required": question.required,
        "placeholder": question.placeholder,
        "help_text": question.help_text,
        "default_value": question.default_value,
        "options": [{"value": o.value, "label": o.label} for o in question.options],
        "validation_rules": [
            {"kind": rule.kind.value, "value": rule.value, "message": rule.message}
            for rule in question.validation_rules
        ],
        "conditions": [
            {
                "source_question_id": c.source_question_id,
                "operator": c.operator.value,
                "value": c.value,
                "effect": c.effect.value,
            }
            for c in question.conditions
        ],
    }


def _section_payload(section: Section) -> Dict[str, Any]:
    return {
        "id": section.id,
        "title": section.title,
        "description": section.description,
        "questions": [_question_payload(q) for q in section.questions],
    }


def _schema_payload(schema: Schema) -> Dict[str, Any]:
    metadata = schema.metadata
    return {
        "id": schema.id,
        "name": schema.name,
        "description": schema.description,
        "sections": [_section_payload(s) for s in schema.sections],
        "metadata": {
            "estimated_minutes": metadata.estimated_minutes,
            "required_supporting_documents": list(metadata.required_supporting_documents),
            "help_resources": [
                {"title": r.title, "url": r.url} for r in metadata.help_resources
            ],
        },
    }


def _responses_from(payload: Dict[str, Any]) -> Dict[str, Any]:
    responses = payload.get("responses", {})
    if not isinstance(responses, dict):
        raise HTTPException(status_code=400, detail="responses must be an object")
    return responses


# ---------------------------------------------------------------------------
# Questionnaires
# ---------------------------------------------------------------------------

@app.get("/api/questionnaires")
async def list_questionnaires(
    manager: ConfigurationManager = Depends(get_config_manager),
) -> JSONResponse:
    """List the available questionnaires."""
    items = []
    for schema_id in manager.configuration.schema_ids():
        schema = manager.get_schema(schema_id)
        items.append({
            "id": schema.id,
            "name": schema.name,
            "description": schema.description,
            "section_count": len(schema.sections),
            "estimated_minutes": schema.metadata.estimated_minutes,
        })
    return JSONResponse(status_code=200, content={"questionnaires": items})


@app.get("/api/questionnaires/{questionnaire_type}")
async def get_questionnaire(
    questionnaire_type: str,
    manager: ConfigurationManager = Depends(get_config_manager),
) -> JSONResponse:
    """Return the full structure of one questionnaire."""
    schema = _require_schema(manager, questionnaire_type)
    return JSONResponse(status_code=200, content=_schema_payload(schema))


@app.post("/api/questionnaires/{questionnaire_type}/evaluate")
async def evaluate_questionnaire(
    questionnaire_type: str,
    payload: Dict[str, Any] = Body(...),
    manager: ConfigurationManager = Depends(get_config_manager),
) -> JSONResponse:
    """Evaluate visibility, requiredness, validation and progress for posted answers.

    Nothing is stored; the answers in the request body are the whole
    snapshot.
    """
    schema = _require_schema(manager, questionnaire_type)
    snapshot = evaluate(schema, _responses_from(payload))
    return JSONResponse(status_code=200, content=snapshot.to_dict())


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

@app.get("/api/responses/{questionnaire_type}")
async def load_responses(
    questionnaire_type: str,
    x_user_id: str = Header(...),
    store: ResponseStore = Depends(get_response_store),
) -> JSONResponse:
    """Return the stored answers of the calling user."""
    try:
        stored = store.load(x_user_id, questionnaire_type)
    except ResponseNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc
    return JSONResponse(status_code=200, content=stored.to_dict())


@app.put("/api/responses/{questionnaire_type}")
async def save_responses(
    questionnaire_type: str,
    payload: Dict[str, Any] = Body(...),
    x_user_id: str = Header(...),
    manager: ConfigurationManager = Depends(get_config_manager),
    store: ResponseStore = Depends(get_response_store),
) -> JSONResponse:
    """Save a draft. Incomplete or invalid answers are accepted."""
    _require_schema(manager, questionnaire_type)
    section_index = payload.get("current_section_index")
    if section_index is not None and (not isinstance(section_index, int) or section_index < 0):
        raise HTTPException(status_code=400, detail="current_section_index must be a non-negative integer")
    try:
        stored = store.save(
            x_user_id,
            questionnaire_type,
            _responses_from(payload),
            current_section_index=section_index,
        )
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc
    return JSONResponse(status_code=200, content=stored.to_dict())


@app.post("/api/responses/{questionnaire_type}/submit")
async def submit_responses(
    questionnaire_type: str,
    payload: Dict[str, Any] = Body(...),
    x_user_id: str = Header(...),
    manager: ConfigurationManager = Depends(get_config_manager),
    store: ResponseStore = Depends(get_response_store),
) -> JSONResponse:
    """Validate and submit answers; blocked submissions return 422."""
    schema = _require_schema(manager, questionnaire_type)
    try:
        stored = store.submit(x_user_id, questionnaire_type, _responses_from(payload), schema)
    except SubmissionBlockedError as exc:
        return JSONResponse(status_code=422, content=exc.to_dict())
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc
    return JSONResponse(status_code=200, content=stored.to_dict())


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@app.post("/api/documents/generate")
async def generate_document(
    payload: Dict[str, Any] = Body(...),
    x_user_id: str = Header(...),
    store: ResponseStore = Depends(get_response_store),
    pipeline: DocumentGenerationPipeline = Depends(get_pipeline),
) -> Response:
    """Generate a document from the user's completed answers.

    The request names a ``document_type``, optionally the
    ``questionnaire_type`` whose answers feed it, and optionally a
    ``generation_mode`` of ``official`` or ``summary``. The PDF bytes are
    returned as is; stored answers are never modified.
    """
    document_type = payload.get("document_type")
    if not isinstance(document_type, str) or not document_type:
        raise HTTPException(status_code=400, detail="document_type is required")
    mode = payload.get("generation_mode")
    if mode is not None:
        try:
            mode = parse_generation_mode(mode)
        except DocumentGenerationError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc
    questionnaire_type = payload.get("questionnaire_type") or DOCUMENT_SOURCES.get(document_type)
    if not questionnaire_type:
        raise HTTPException(status_code=400, detail="questionnaire_type is required")

    try:
        stored = store.load(x_user_id, questionnaire_type)
    except ResponseNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc

    if not stored.is_completed:
        raise HTTPException(
            status_code=409,
            detail=f"Questionnaire '{questionnaire_type}' must be submitted before generating documents",
        )

    try:
        document = pipeline.generate(document_type, stored.responses, mode=mode)
    except UnsupportedDocumentTypeError as exc:
        raise HTTPException(
            status_code=404,
            detail={"message": exc.message, "supported_types": exc.get_supported_types()},
        ) from exc
    except DocumentGenerationError as exc:
        status_code = 502 if exc.retryable else 500
        raise HTTPException(
            status_code=status_code,
            detail={"message": exc.message, "retryable": exc.retryable},
        ) from exc

    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "X-Document-Type": document.document_type,
            "X-Generation-Mode": document.mode.value,
        },
    )


@app.get("/api/documents/types")
async def list_document_types(
    pipeline: DocumentGenerationPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """List the document types the pipeline can generate."""
    return JSONResponse(
        status_code=200,
        content={"document_types": pipeline.registry.supported_document_types()},
    )
