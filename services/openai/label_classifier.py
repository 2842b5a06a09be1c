"""Description: Camera frame label detection using OpenAI's Responses API."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from models.frame_state import DetectionLabel
from services.openai.label_prompts import build_system_prompt, build_user_prompt
from services.openai.label_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.media_inputs import build_inputs
from services.openai.response_parser import parse_labels
from utils.errors import UpstreamError

logger = logging.getLogger(__name__)


class LabelClassifier:
    """Turn JPEG bytes into an ordered list of ``DetectionLabel``."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        *,
        model: str = "gpt-4o-mini",
        timeout_seconds: float = 15.0,
        max_labels: int = 10,
    ) -> None:
        """Initialize with a shared async client; ``None`` makes every call fail."""
        self.client = client
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_labels = max_labels
        self.system_prompt = build_system_prompt()

    async def classify(self, image_bytes: bytes) -> List[DetectionLabel]:
        """Label one frame.

        Raises:
            UpstreamError: On a missing client, transport error, quota error,
                timeout, or unparseable output.
        """
        if self.client is None:
            raise UpstreamError("Label classifier is not configured (OPENAI_API_KEY missing).")
        inputs = build_inputs(self.system_prompt, build_user_prompt(self.max_labels), image_bytes=image_bytes)
        response = await self._create_response(inputs)
        try:
            return parse_labels(response, tool_name=FUNCTION_NAME, limit=self.max_labels)
        except Exception as exc:
            logger.error("Error parsing OpenAI response: %s", exc)
            raise UpstreamError(f"Unreadable classifier output: {exc}") from exc

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the labeling request, bounded by ``timeout_seconds``."""
        try:
            return await asyncio.wait_for(
                self.client.responses.create(
                    model=self.model,
                    input=inputs,
                    tools=[FUNCTION_DEFINITION],
                    tool_choice={"type": "function", "name": FUNCTION_NAME},
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error("OpenAI label detection timed out after %.1fs", self.timeout_seconds)
            raise UpstreamError("Label detection timed out.") from exc
        except Exception as exc:
            logger.error("Error during OpenAI Responses API call: %s", exc)
            raise UpstreamError(f"Label detection failed: {exc}") from exc
