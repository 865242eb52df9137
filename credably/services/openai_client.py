"""
OpenAI chat-completion helper.

Every AI feature makes a single JSON-mode chat completion, parses it and,
where a schema is given, validates it with pydantic. Failures are logged and
surface as AIAnalysisError; nothing is retried.
"""
import json
from typing import Any, Dict, List, Optional, Type

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from credably.config import get_settings
from credably.utils.errors import AIAnalysisError, AIConfigurationError
from credably.utils.logger import get_logger
from credably.utils.metrics import track_duration

logger = get_logger()

_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> AsyncOpenAI:
    """Lazily create the shared client so imports never need the API key."""
    global _client
    if _client is None:
        api_key = get_settings().openai_api_key
        if not api_key:
            raise AIConfigurationError("OPENAI_API_KEY environment variable is required")
        _client = AsyncOpenAI(api_key=api_key)
    return _client


async def complete_json(
    operation: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float = 0.3,
    max_tokens: int = 2000,
) -> Dict[str, Any]:
    client = get_openai_client()
    messages: List[Dict[str, str]] = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]

    async with track_duration("openai", operation):
        response = await client.chat.completions.create(
            model=get_settings().openai_model,
            messages=messages,
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=max_tokens,
        )

    content = response.choices[0].message.content or "{}"
    return json.loads(content)


async def complete_model(
    operation: str,
    schema: Type[BaseModel],
    system_prompt: str,
    user_prompt: str,
    error_message: str,
    temperature: float = 0.3,
    max_tokens: int = 2000,
) -> BaseModel:
    """JSON completion validated against ``schema``; any failure becomes AIAnalysisError(error_message)."""
    try:
        data = await complete_json(operation, system_prompt, user_prompt, temperature, max_tokens)
        return schema.model_validate(data)
    except AIConfigurationError:
        raise
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"[OpenAI] {operation} returned unusable output: {e}")
        raise AIAnalysisError(error_message) from e
    except Exception as e:
        logger.error(f"[OpenAI] {operation} failed: {e}", exc_info=True)
        raise AIAnalysisError(error_message) from e
