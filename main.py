import logging
from typing import Any, Optional

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from prompts import build_messages
from provider import create_chat_completion, get_api_key, get_message_content
from routine import parse_routine_content

logger = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate routine"


# ------------------------------------------------------------------
# Request/Response Models
# ------------------------------------------------------------------
class GenerateRequest(BaseModel):
    prompt: str
    image: Optional[str] = None  # base64 data URI, "" means no image


class GenerateResponse(BaseModel):
    routine: Any


class ErrorResponse(BaseModel):
    error: str
    message: str


# ------------------------------------------------------------------
# Generation Logic
# ------------------------------------------------------------------
async def generate_routine(
    prompt: str,
    image: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """
    One round trip to the model. Hard failures raise GenerationError;
    unparseable output comes back as the fallback routine.
    """
    api_key = get_api_key()
    messages = build_messages(prompt, image)

    data = await create_chat_completion(messages, api_key, transport=transport)
    content = get_message_content(data)

    return parse_routine_content(content)


def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport for the provider call; None uses the network."""
    return None


def error_response(detail: str) -> JSONResponse:
    body = ErrorResponse(error=GENERATION_FAILED, message=detail)
    return JSONResponse(status_code=500, content=body.model_dump())


# ------------------------------------------------------------------
# FastAPI App
# ------------------------------------------------------------------
app = FastAPI(title="Routine Generator")

app.add_middleware(
    CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Invalid generate request: {exc.errors()}")
    return error_response(str(exc))


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post(
    "/api/generate",
    response_model=GenerateResponse,
    responses={500: {"model": ErrorResponse}},
)
async def generate_endpoint(
    request: GenerateRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    try:
        routine = await generate_routine(request.prompt, request.image, transport)
        return GenerateResponse(routine=routine)
    except Exception as e:
        logger.exception(f"Error in generate function: {str(e)}")
        return error_response(str(e))


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=True)
