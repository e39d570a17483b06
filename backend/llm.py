# llm.py  (google-generativeai directly, no LangChain wrapper)
import json
import logging
import re

import google.generativeai as genai
import requests
from google.api_core import exceptions as google_exceptions

import config
from errors import GenerationFailure, GenerationParseFailure, GenerationTimeout

logger = logging.getLogger(__name__)

# Some models wrap JSON in ``` blocks
_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?|\n?\s*```$", re.I)


def strip_code_fence(content: str) -> str:
    return _FENCE_RE.sub("", content.strip()).strip()


def parse_json(content: str):
    """Decode generator text as JSON. Raises GenerationParseFailure."""
    text = strip_code_fence(content or "")
    try:
        return json.loads(text)
    except ValueError as e:
        raise GenerationParseFailure(f"non-JSON or bad JSON: {e}\nRaw: {text[:400]}")


class GeminiGenerator:
    """
    Quiz-content generator backed by Gemini. The context and task segments
    go out as separate content parts; each call is attempted exactly once.
    """

    def __init__(self, api_key: str = None, model_name: str = None, timeout: float = None):
        api_key = api_key or config.GOOGLE_API_KEY
        if not api_key:
            raise RuntimeError("GOOGLE_API_KEY is missing in .env")
        genai.configure(api_key=api_key)
        self.model_name = model_name or config.GEMINI_MODEL
        self.timeout = timeout or config.GENERATION_TIMEOUT
        self.model = genai.GenerativeModel(self.model_name)

    def generate(self, context: str, task: str) -> str:
        # retry=None: the SDK would otherwise re-send on 503
        logger.info("[LLM] Calling model %s", self.model_name)
        try:
            resp = self.model.generate_content(
                [context, task],
                request_options={"timeout": self.timeout, "retry": None},
            )
        except (google_exceptions.DeadlineExceeded, requests.Timeout, TimeoutError) as e:
            raise GenerationTimeout(f"Model {self.model_name} timed out after {self.timeout}s: {e}")
        except google_exceptions.GoogleAPIError as e:
            raise GenerationFailure(f"Model {self.model_name} request failed: {e}")

        # Blocked responses have no parts; .text raises ValueError
        try:
            text = resp.text
        except ValueError as e:
            raise GenerationParseFailure(f"Model {self.model_name} returned no text: {e}")
        if not text or not text.strip():
            raise GenerationParseFailure(f"Model {self.model_name} returned empty response.")
        return text
