"""LLM API client utilities."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Dict, Optional
from enum import Enum

from openai import (
    AsyncOpenAI,
    APIConnectionError,
    RateLimitError,
    AuthenticationError,
    BadRequestError,
    APIStatusError,
)

from .errors import ConfigurationError, TranslationFailure

logger = logging.getLogger(__name__)


class APIErrorType(Enum):
    """API 错误类型分类。"""
    RATE_LIMIT = "rate_limit"      # 429 - 可重试
    CONNECTION = "connection"       # 网络问题 - 可重试
    AUTH = "auth"                   # 401 - 不可重试
    BAD_REQUEST = "bad_request"     # 400 - 不可重试
    SERVER = "server"               # 500+ - 可重试
    UNKNOWN = "unknown"


def classify_error(error: Exception) -> tuple[APIErrorType, bool]:
    """
    分类 API 错误并判断是否可重试。

    Returns:
        (错误类型, 是否可重试)
    """
    if isinstance(error, RateLimitError):
        return APIErrorType.RATE_LIMIT, True
    elif isinstance(error, APIConnectionError):
        return APIErrorType.CONNECTION, True
    elif isinstance(error, AuthenticationError):
        return APIErrorType.AUTH, False
    elif isinstance(error, BadRequestError):
        return APIErrorType.BAD_REQUEST, False
    elif isinstance(error, APIStatusError):
        if error.status_code >= 500:
            return APIErrorType.SERVER, True
        return APIErrorType.UNKNOWN, False
    else:
        return APIErrorType.UNKNOWN, False


def backoff_delay(error_type: APIErrorType, attempt: int) -> int:
    """Seconds to wait before retry number ``attempt + 1``."""
    if error_type == APIErrorType.RATE_LIMIT:
        # Rate limit 使用更长的退避时间
        return min(2 ** (attempt + 2), 60)  # 4, 8, 16... max 60
    return 2 ** (attempt + 1)  # 2, 4, 8


async def call_llm_async(
    client: AsyncOpenAI,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float = 0.3,
    max_retries: int = 3,
) -> str:
    """
    Make async call to LLM API with retry logic.

    Args:
        client: AsyncOpenAI client instance
        model: Model name to use
        messages: List of message dictionaries
        temperature: Sampling temperature
        max_retries: Maximum attempts

    Returns:
        Response content, stripped

    Raises:
        TranslationFailure: the request failed or the model answered with nothing
    """
    last_error: Optional[Exception] = None

    for attempt in range(max_retries):
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
            content = response.choices[0].message.content
            content = content.strip() if content else ""
            if not content:
                raise TranslationFailure("Model returned an empty response")
            return content

        except TranslationFailure:
            raise
        except Exception as e:
            last_error = e
            error_type, retryable = classify_error(e)

            if not retryable:
                logger.error(f"Non-retryable error ({error_type.value}): {e}")
                raise TranslationFailure(f"Error during translation: {e}", cause=e) from e

            if attempt + 1 >= max_retries:
                break

            delay = backoff_delay(error_type, attempt)
            logger.warning(
                f"Retryable error ({error_type.value}): {e}. "
                f"Retry {attempt + 1}/{max_retries} in {delay}s..."
            )
            await asyncio.sleep(delay)

    logger.error(f"All {max_retries} attempts failed. Last error: {last_error}")
    raise TranslationFailure(f"Error during translation: {last_error}", cause=last_error)


def create_client(
    api_key: Optional[str],
    base_url: str,
    timeout: float = 60.0
) -> AsyncOpenAI:
    """
    Create an AsyncOpenAI client.

    Args:
        api_key: API key for authentication
        base_url: API base URL
        timeout: Default timeout for requests

    Returns:
        Configured AsyncOpenAI client

    Raises:
        ConfigurationError: no API key was supplied
    """
    if not api_key:
        raise ConfigurationError(
            "Gemini API client not initialized. API Key may be missing."
        )
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        # 重试由 call_llm_async 负责
        max_retries=0,
    )
