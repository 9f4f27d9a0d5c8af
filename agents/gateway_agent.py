# agents/gateway_agent.py
# Boundary to the remote text-generation service. Everything that can go wrong
# on the way out or back is reported as RemoteUnavailable so callers can fall
# through to the deterministic rules.

import json
import logging
from typing import Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError

from utils.config import TradeConfig
from utils.errors import RemoteUnavailable
from utils.llm_utils import get_llm, clean_json_response

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class RemoteClassificationGateway:
    """
    Sends a single prompt per call to the configured chat model.

    The LLM client is created lazily from the configuration; tests (or callers
    with their own client) can pass any object exposing ``invoke(prompt)``.
    """

    def __init__(self, config: TradeConfig, llm=None):
        self.config = config
        self._llm = llm

    @property
    def available(self) -> bool:
        return self._llm is not None or self.config.has_api_key

    def _client(self):
        if self._llm is None:
            if not self.config.has_api_key:
                raise RemoteUnavailable("AI API key not configured")
            try:
                self._llm = get_llm(self.config)
            except Exception as e:
                raise RemoteUnavailable(f"Could not create AI client: {e}") from e
        return self._llm

    def generate_text(self, prompt: str) -> str:
        """Returns the model's raw text answer for a prompt."""
        llm = self._client()
        try:
            response = llm.invoke(prompt)
        except Exception as e:
            # Network, auth, rate limit and timeout errors all surface here
            raise RemoteUnavailable(f"Remote AI call failed: {e}") from e

        text = getattr(response, "content", response)
        if not isinstance(text, str) or not text.strip():
            raise RemoteUnavailable("Remote AI returned an empty response")
        return text

    def try_remote_classify(self, prompt: str, schema: Type[SchemaT]) -> SchemaT:
        """
        Ask the model for JSON and validate it against ``schema``.

        Raises:
            RemoteUnavailable: on any transport failure, invalid JSON or a
                payload that does not satisfy the schema.
        """
        text = self.generate_text(prompt)
        try:
            payload = json.loads(clean_json_response(text))
        except json.JSONDecodeError as e:
            raise RemoteUnavailable(f"Remote AI returned malformed JSON: {e}") from e

        if not isinstance(payload, dict):
            raise RemoteUnavailable("Remote AI returned JSON that is not an object")

        try:
            return schema.model_validate(payload)
        except ValidationError as e:
            raise RemoteUnavailable(
                f"Remote AI response failed {schema.__name__} validation: {e.error_count()} error(s)"
            ) from e


def remote_or_none(gateway: Optional[RemoteClassificationGateway], prompt: str, schema: Type[SchemaT]) -> Optional[SchemaT]:
    """Runs a remote classification, logging and swallowing RemoteUnavailable."""
    if gateway is None or not gateway.available:
        return None
    try:
        return gateway.try_remote_classify(prompt, schema)
    except RemoteUnavailable as e:
        logger.warning("Remote %s unavailable, using rules fallback: %s", schema.__name__, e)
        return None
