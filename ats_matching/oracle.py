"""
Text Oracle Module

Thin client around a PhiData agent backed by an OpenAI chat model. The rest of
the package only sees `complete(prompt, temperature) -> str`.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from phi.agent import Agent
from phi.model.openai import OpenAIChat

from .config import LLM_CONFIG
from .errors import OracleCallError, OracleTimeoutError

logger = logging.getLogger(__name__)


def get_model_config(model_name: str, temperature: float = 0, api_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Get model configuration with temperature support check.
    Some models don't support custom temperature.
    """
    config: Dict[str, Any] = {"id": model_name}
    if api_key:
        config["api_key"] = api_key

    # Models that don't support temperature customization
    models_without_temperature = ["o1", "o1-mini", "o1-preview", "gpt-5-mini", "gpt-5"]

    model_lower = model_name.lower()
    supports_temperature = not any(no_temp in model_lower for no_temp in models_without_temperature)

    if supports_temperature:
        config["temperature"] = temperature

    return config


def response_text(response: Any) -> str:
    """Pull the text out of a phi RunResponse (or anything string-like)."""
    if response is None:
        return ""
    if hasattr(response, "content"):
        content = response.content
    elif hasattr(response, "messages") and response.messages:
        last_msg = response.messages[-1]
        content = last_msg.content if hasattr(last_msg, "content") else last_msg
    else:
        content = response
    return "" if content is None else str(content)


class TextOracle:
    """
    Best-effort text completion service.

    Each call builds a fresh single-turn agent so no conversation state leaks
    between prompts or between concurrent analysis runs.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.model_name = model_name or LLM_CONFIG["model"]
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds or LLM_CONFIG["timeout_seconds"]

    def build_agent(self, temperature: float) -> Agent:
        model_config = get_model_config(self.model_name, temperature=temperature, api_key=self.api_key)
        return Agent(
            name="ATS Oracle",
            role="Answer ATS analysis prompts exactly as instructed",
            model=OpenAIChat(**model_config),
            show_tool_calls=False,
            markdown=False,
        )

    def complete(self, prompt: str, temperature: float) -> str:
        """
        Send one prompt and return the raw response text.

        Raises:
            ValueError: temperature outside [0, 1]
            OracleCallError: the request failed or returned no text
        """
        if not 0 <= temperature <= 1:
            raise ValueError(f"temperature must be within [0, 1], got {temperature}")

        agent = self.build_agent(temperature)
        try:
            response = agent.run(prompt)
        except Exception as e:
            raise OracleCallError(f"AI service request failed: {e}") from e

        text = response_text(response).strip()
        if not text:
            raise OracleCallError("No content received from AI.")

        logger.debug(f"Raw oracle response: {text[:500]}...")
        return text

    async def acomplete(self, prompt: str, temperature: float) -> str:
        """
        Run `complete` in a worker thread, bounded by the caller-side timeout.

        Raises:
            OracleTimeoutError: no answer within `timeout_seconds`
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.complete, prompt, temperature),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise OracleTimeoutError(
                f"AI service did not respond within {self.timeout_seconds} seconds"
            ) from e
