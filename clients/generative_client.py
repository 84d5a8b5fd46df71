"""
Boundary client for the external generative models.

One call is one model invocation: no retry, no streaming, no caching.
Every call is bounded by GENERATION_TIMEOUT and any provider or transport
failure surfaces as GenerationError.
"""

import os
import logging
from typing import Any, Dict, List, Optional

from groq import AsyncGroq
from openai import AsyncOpenAI

from models.study_models import Attachment
from utils.exceptions import GenerationError, UnsupportedTypeError, ValidationError
from utils.model_config import ModelConfig, ModelProvider
from utils.settings import get_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert educational content creator. Respond with ONLY the JSON requested, no markdown code blocks, no extra text."


class GenerativeClient:
    """Send a prompt plus at most one inline attachment and return the raw text reply"""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or get_settings().generation_timeout

    async def generate(
        self,
        prompt: str,
        attachment: Optional[Attachment] = None,
        model: Optional[str] = None,
    ) -> str:
        try:
            model_config = ModelConfig.get_config(model)
        except ValueError as e:
            raise ValidationError(str(e), error_code="INVALID_MODEL", context={"model": model})

        if attachment and not ModelConfig.supports_attachment(model_config["key"], attachment.mime_type):
            raise UnsupportedTypeError(
                f"Model {model_config['key']} cannot read {attachment.mime_type} attachments",
                context={"model": model_config["key"], "mime_type": attachment.mime_type},
            )

        provider = model_config["provider"]
        try:
            if provider == ModelProvider.OPENAI:
                text = await self._call_openai(prompt, attachment, model_config)
            elif provider == ModelProvider.GROQ:
                text = await self._call_groq(prompt, attachment, model_config)
            else:
                raise ValidationError(f"Unknown provider: {provider}", error_code="INVALID_MODEL")
        except (GenerationError, ValidationError):
            raise
        except Exception as e:
            logger.error(f"{provider.value} generation failed for model {model_config['key']}: {e}")
            raise GenerationError(
                f"Generative model request failed: {e}",
                context={"model": model_config["key"], "provider": provider.value},
            ) from e

        logger.info(f"Generated {len(text)} chars with {model_config['key']} (attachment={attachment is not None})")
        return text

    def _build_user_content(self, prompt: str, attachment: Optional[Attachment]) -> Any:
        """Plain string for text prompts, content parts when an attachment rides along"""
        if attachment is None:
            return prompt

        parts: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        if attachment.is_pdf:
            parts.append({
                "type": "file",
                "file": {
                    "filename": attachment.filename or "notes.pdf",
                    "file_data": attachment.data_url(),
                },
            })
        else:
            parts.append({"type": "image_url", "image_url": {"url": attachment.data_url()}})
        return parts

    async def _call_openai(
        self,
        prompt: str,
        attachment: Optional[Attachment],
        model_config: Dict[str, Any],
    ) -> str:
        """Call OpenAI Chat Completions"""
        client = AsyncOpenAI(
            api_key=os.getenv("OPENAI_API_KEY"),
            timeout=self.timeout,
            max_retries=0,
        )
        response = await client.chat.completions.create(
            model=model_config["model"],
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self._build_user_content(prompt, attachment)},
            ],
            max_tokens=model_config["max_tokens"],
            temperature=model_config.get("temperature", 0.7),
        )
        self._log_usage(response, model_config)
        return response.choices[0].message.content or ""

    async def _call_groq(
        self,
        prompt: str,
        attachment: Optional[Attachment],
        model_config: Dict[str, Any],
    ) -> str:
        """Call Groq Chat Completions"""
        client = AsyncGroq(
            api_key=os.getenv("GROQ_API_KEY"),
            timeout=self.timeout,
            max_retries=0,
        )
        response = await client.chat.completions.create(
            model=model_config["model"],
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": self._build_user_content(prompt, attachment)},
            ],
            max_tokens=model_config["max_tokens"],
            temperature=model_config.get("temperature", 0.7),
            stream=False,
        )
        self._log_usage(response, model_config)
        if response.choices[0].finish_reason == "length":
            logger.warning(f"Groq response truncated for model {model_config['key']}")
        return response.choices[0].message.content or ""

    def _log_usage(self, response: Any, model_config: Dict[str, Any]) -> None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return
        cost = ModelConfig.estimate_cost(model_config["key"], usage.prompt_tokens, usage.completion_tokens)
        logger.info(
            f"{model_config['key']} usage: {usage.prompt_tokens} in / {usage.completion_tokens} out, "
            f"est. ${cost}"
        )
