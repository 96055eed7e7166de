"""
Reply proxy: holds the Gemini API key server-side so the browser never sees it.
POST /generate {prompt, history} -> {text}
"""

import sys
from functools import lru_cache
from typing import List, Literal, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from eli5.config import settings
from eli5.config.logging import bind_context, clear_context, configure_logging, get_logger
from eli5.errors import Eli5Error
from eli5.interfaces import ReplyGenerator
from eli5.models import Message
from eli5.services.reply import build_direct_generator

logger = get_logger(__name__)


class HistoryTurn(BaseModel):
    role: Literal["user", "model"] = Field(..., description="Who sent the message")
    content: str = Field(default="")


class GenerateRequest(BaseModel):
    prompt: Optional[str] = Field(default=None, description="Latest user input")
    history: List[HistoryTurn] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    text: str


@lru_cache(maxsize=1)
def get_generator() -> ReplyGenerator:
    return build_direct_generator(settings)


app = FastAPI(title=f"{settings.PROJECT_NAME} proxy", version=settings.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Eli5Error)
async def eli5_error_handler(request: Request, exc: Eli5Error):
    # e.g. no API key while the generator is being built
    logger.error("proxy_generate_failed", error=str(exc))
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.middleware("http")
async def logging_context(request: Request, call_next):
    clear_context()
    bind_context(path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/generate", response_model=GenerateResponse)
def generate(req: GenerateRequest, generator: ReplyGenerator = Depends(get_generator)):
    if not (req.prompt or "").strip():
        return JSONResponse(status_code=400, content={"error": "Missing prompt"})

    history = [
        Message(id=str(i), role=turn.role, content=turn.content, timestamp=0)
        for i, turn in enumerate(req.history)
    ]
    try:
        text = generator.generate(req.prompt, history)
    except Exception as e:
        logger.error("proxy_generate_failed", error=str(e), exc_info=True)
        return JSONResponse(status_code=500, content={"error": str(e)})

    return GenerateResponse(text=text)


def main() -> None:
    configure_logging()
    if not settings.has_direct_credentials:
        logger.error(
            "proxy_missing_api_key",
            hint="Set GEMINI_API_KEY (or API_KEY) before running this server.",
        )
        sys.exit(1)
    logger.info("proxy_listening", port=settings.PROXY_PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PROXY_PORT)


if __name__ == "__main__":
    main()
