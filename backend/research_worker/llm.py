"""
Prism Research Worker — LLM Interactions

Summarization of raw research into structured JSON via litellm, plus the
JSON extraction helpers used on the model's free-text answer.
"""

import json
import re
import time

import litellm

from research_worker import prompts
from research_worker.config import Settings, generate_error_code, log

litellm.suppress_debug_info = True
litellm.drop_params = True  # Prevent unsupported-param errors across providers

SUMMARIZER_TIMEOUT_SECONDS = 300

# Only ```json or an untagged fence; other tags fall through to the bare-object search.
_FENCED_BLOCK_RE = re.compile(r"```(?:json)?[ \t]*\n(.*?)\n?[ \t]*```", re.DOTALL | re.IGNORECASE)


# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions
# ─────────────────────────────────────────────────────────────────────────────


class LLMError(Exception):
    """The summarizer call failed or returned no content."""

    pass


class LLMParseError(Exception):
    """The summarizer answered, but no JSON object could be extracted."""

    def __init__(self, raw_output: str, error: str):
        self.raw_output = raw_output
        super().__init__(f"LLM output parse failed: {error}")


# ─────────────────────────────────────────────────────────────────────────────
# Core Functions
# ─────────────────────────────────────────────────────────────────────────────


async def call_llm(settings: Settings, messages: list[dict], job_id: str | None = None) -> str:
    """
    Call the summarizer model through its OpenAI-compatible gateway.

    Returns:
        Raw response content string from the LLM.

    Raises:
        LLMError: On any provider error or an empty answer.
    """
    model = f"openai/{settings.summarizer_model}"
    log("INFO", "llm call started", job_id=job_id, provider=model)
    start = time.perf_counter()

    try:
        response = await litellm.acompletion(
            model=model,
            messages=messages,
            api_base=settings.summarizer_base_url,
            api_key=settings.summarizer_api_key,
            timeout=SUMMARIZER_TIMEOUT_SECONDS,
        )
    except Exception as e:
        raise LLMError(f"Summarizer call failed: {e}") from e

    duration_ms = int((time.perf_counter() - start) * 1000)

    content = ""
    if response.choices:
        content = response.choices[0].message.content or ""

    tokens_used = None
    if hasattr(response, "usage") and response.usage:
        tokens_used = getattr(response.usage, "total_tokens", None)

    if not content:
        raise LLMError(f"Provider {model} returned empty content")

    log("INFO", "llm call succeeded", job_id=job_id, provider=model, duration_ms=duration_ms, tokens_used=tokens_used)
    return content


async def summarize_research(
    settings: Settings,
    raw_research: str,
    job_id: str | None = None,
    total_citations: int | None = None,
) -> dict | None:
    """
    Turn raw research text into the structured summary, best effort.

    Returns None, without raising, when no summarizer key is configured or
    when anything goes wrong: provider errors, empty answers, text with no
    JSON object in it. A missing summary never fails a job.

    Args:
        total_citations: Written into the summary (dual-phase mode only).
    """
    if not settings.summarizer_api_key:
        log("INFO", "summarizer not configured, skipping structured parse", job_id=job_id)
        return None

    try:
        messages = prompts.build_summarize_prompt(raw_research, settings.research_mode)
        raw = await call_llm(settings, messages, job_id=job_id)
        parsed = extract_json(raw)
        if settings.research_mode == "dual" and total_citations is not None:
            parsed["total_citations"] = total_citations
        log("INFO", "parsed research successfully", job_id=job_id, keys=len(parsed))
        return parsed
    except Exception as e:
        code = generate_error_code()
        log("WARN", "parse failed (non-fatal)", job_id=job_id, error=str(e)[:300], error_code=code)
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions
# ─────────────────────────────────────────────────────────────────────────────


def extract_json(text: str) -> dict:
    """
    Pull a JSON object out of free-form model output.

    1. A fenced code block (```json ... ``` or ``` ... ```) anywhere in the
       text: its contents are parsed. Fences tagged with another language
       are not treated as JSON blocks.
    2. Otherwise the first "{" starts a JSON object; text after the object
       is ignored.
    3. Otherwise, or if the parsed value is not an object: LLMParseError.
    """
    if not text or not isinstance(text, str):
        raise LLMParseError(raw_output=text or "", error="empty output")

    match = _FENCED_BLOCK_RE.search(text)
    if match:
        candidate = match.group(1).strip()
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise LLMParseError(raw_output=text, error=str(e)) from e
    else:
        start = text.find("{")
        if start == -1:
            raise LLMParseError(raw_output=text, error="no JSON object found")
        try:
            parsed, _ = json.JSONDecoder().raw_decode(text, start)
        except json.JSONDecodeError as e:
            raise LLMParseError(raw_output=text, error=str(e)) from e

    if not isinstance(parsed, dict):
        raise LLMParseError(raw_output=text, error=f"expected a JSON object, got {type(parsed).__name__}")
    return parsed
