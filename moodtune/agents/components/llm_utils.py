"""
Shared LLM Utilities for MoodTune Agents

Structured (JSON) generation on top of the Gemini client: prompt layout,
JSON extraction from free-form model output, and bounded retries.
"""

import json
import re
from typing import Any, Dict, Optional

import structlog

from ...errors import LLMError, StructuredResponseError

logger = structlog.get_logger(__name__)

FENCED_JSON_PATTERN = re.compile(r"```json\s*\n(.*?)\n\s*```", re.DOTALL)
FENCED_PLAIN_PATTERN = re.compile(r"```\s*\n(.*?)\n\s*```", re.DOTALL)


class LLMUtils:
    """
    Shared utilities for LLM interactions across the agents.

    Consolidates:
    - Structured prompt layout
    - JSON extraction and cleaning
    - Retry on parse failures and API errors
    """

    def __init__(self, llm_client, max_retries: int = 2):
        """
        Initialize LLM utilities with client.

        Args:
            llm_client: Client exposing ``async generate_content(prompt) -> str``
            max_retries: Retries after the first attempt
        """
        self.llm_client = llm_client
        self.max_retries = max_retries
        self.logger = logger.bind(component="LLMUtils")

    async def generate_structured_response(
        self,
        task: str,
        context: Dict[str, Any],
        output_format: Dict[str, Any],
        max_retries: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Ask the model for a JSON object and parse it.

        Each attempt re-issues the same prompt; attempts stop at the first
        parsable object.

        Args:
            task: Task description
            context: Input data rendered into the prompt
            output_format: Example of the required JSON shape
            max_retries: Override for the instance retry budget

        Returns:
            Parsed JSON object

        Raises:
            StructuredResponseError: If no attempt produced a JSON object
        """
        if not self.llm_client:
            raise LLMError("LLM client not initialized")

        retries = self.max_retries if max_retries is None else max_retries
        prompt = self.create_structured_prompt(task, context, output_format)
        last_error: Optional[Exception] = None

        for attempt in range(retries + 1):
            try:
                response_text = await self.llm_client.generate_content(prompt)
                data = self.parse_json_response(response_text)
            except (LLMError, ValueError) as e:
                last_error = e
                self.logger.warning(
                    "Structured response attempt failed",
                    attempt=attempt + 1,
                    max_attempts=retries + 1,
                    error=str(e)
                )
                continue

            self.logger.debug(
                "Structured response parsed",
                attempt=attempt + 1,
                keys=list(data.keys())
            )
            return data

        raise StructuredResponseError(
            f"Failed to generate structured response after {retries + 1} attempts: {last_error}"
        )

    def create_structured_prompt(
        self,
        task: str,
        context: Dict[str, Any],
        output_format: Dict[str, Any]
    ) -> str:
        """Lay out task, context and required format for a JSON-only answer."""
        return "\n".join([
            f"Task: {task.strip()}",
            "",
            "Context:",
            json.dumps(context, indent=2),
            "",
            "IMPORTANT INSTRUCTIONS:",
            "1. You must provide a response in the exact JSON format specified below.",
            "2. Do not include any explanations, notes, or markdown formatting.",
            "3. Only include songs that are appropriate for all audiences.",
            "4. Focus on well-known songs that are likely to be available on YouTube.",
            "5. Do not include any songs with explicit content.",
            "",
            "Required JSON format:",
            json.dumps(output_format, indent=2),
            "",
            "Response:",
        ])

    def parse_json_response(self, response_text: str) -> Dict[str, Any]:
        """
        Extract and parse the JSON object in a model response.

        Accepts a ```json fenced block, a plain fenced block, or a bare
        object anywhere in the text.

        Raises:
            ValueError: If no JSON object can be parsed (includes JSONDecodeError)
        """
        json_str = self.extract_json_block(response_text or "")
        data = json.loads(self._clean_json_string(json_str))

        if not isinstance(data, dict):
            raise ValueError("Structured response is not a JSON object")

        return data

    def extract_json_block(self, text: str) -> str:
        for pattern in (FENCED_JSON_PATTERN, FENCED_PLAIN_PATTERN):
            match = pattern.search(text)
            if match:
                return match.group(1)

        return self._extract_json_boundaries(text)

    def _extract_json_boundaries(self, text: str) -> str:
        """Return the first brace-balanced object in ``text``."""
        start_idx = text.find('{')
        if start_idx == -1:
            raise ValueError("No JSON object found in response")

        depth = 0
        in_string = False
        escaped = False
        for i in range(start_idx, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return text[start_idx:i + 1]

        raise ValueError("Unmatched braces in JSON response")

    def _clean_json_string(self, json_str: str) -> str:
        """Fix the trailing commas models like to leave behind."""
        return re.sub(r',(\s*[}\]])', r'\1', json_str.strip())
