"""Description: Object detection for image URLs using OpenAI's Responses API."""

import hashlib
import logging
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from services.openai.detection_prompts import build_system_prompt, build_user_prompt
from services.openai.detection_schema import FUNCTION_DEFINITION, FUNCTION_NAME
from services.openai.response_parser import extract_usage, normalize_labels, parse_function_call

logger = logging.getLogger(__name__)


def caller_identifier(authorization: Optional[str]) -> Optional[str]:
    """Return a stable, non-reversible identifier for the caller's token."""
    if not authorization:
        return None
    return hashlib.sha256(authorization.encode("utf-8")).hexdigest()


class ObjectDetector:
    """Detect the objects in an image with a vision model."""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-5") -> None:
        """Initialize the detector with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def detect_objects(self, image_url: str, *, authorization: Optional[str] = None) -> List[str]:
        """Return the labels of the objects visible at `image_url`.

        Args:
            image_url: Dereferenceable URL of the image.
            authorization: Caller token; only its SHA-256 digest leaves the process.
        """
        start_time = time.time()
        response = await self._create_response(self._build_inputs(image_url), caller_identifier(authorization))
        try:
            args = parse_function_call(response, tool_name=FUNCTION_NAME)
        except Exception as exc:
            logger.error("Error parsing OpenAI response: %s", exc)
            logger.error("Full response object: %r", response)
            raise

        objects = normalize_labels(args.get("objects"))
        usage = extract_usage(response)
        logger.info(
            "Detected %d objects in %.2fs (input_tokens=%s, output_tokens=%s)",
            len(objects),
            time.time() - start_time,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return objects

    def _build_inputs(self, image_url: str) -> List[Dict[str, Any]]:
        return [
            {
                "type": "message",
                "role": "system",
                "content": [{"type": "input_text", "text": self.system_prompt}],
            },
            {
                "type": "message",
                "role": "user",
                "content": [
                    {"type": "input_text", "text": build_user_prompt()},
                    {"type": "input_image", "image_url": image_url},
                ],
            },
        ]

    async def _create_response(self, inputs: List[Dict[str, Any]], safety_identifier: Optional[str]) -> Any:
        """Send the detection request to the OpenAI Responses API."""
        kwargs: Dict[str, Any] = {}
        if safety_identifier:
            kwargs["safety_identifier"] = safety_identifier
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
                **kwargs,
            )
        except Exception as exc:
            logger.error("Error during OpenAI Responses API call: %s", exc)
            raise
