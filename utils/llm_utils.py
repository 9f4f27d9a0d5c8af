# utils/llm_utils.py
# LLM client construction and response clean-up shared by the remote gateway.

from langchain_openai import ChatOpenAI
from langchain_core.prompts import PromptTemplate
from typing import Optional
import re

from utils.config import TradeConfig

HS_CODE_REGEX = re.compile(r"^\d{4}(\.\d{2}){1,3}$")


def get_llm(config: TradeConfig, temperature: float = 0.0, max_tokens: Optional[int] = None):
    """
    Get configured LLM instance.

    Args:
        config: Trade configuration holding key, endpoint and model
        temperature: Sampling temperature (0.0 for deterministic)
        max_tokens: Maximum tokens in response, defaults to the configured value

    Returns:
        Configured ChatOpenAI instance
    """
    return ChatOpenAI(
        api_key=config.api_key,
        base_url=config.base_url,
        model=config.model,
        temperature=temperature,
        max_completion_tokens=max_tokens or config.max_tokens,
        timeout=config.timeout,
        max_retries=1,
    )


def clean_json_response(response: str) -> str:
    """
    Strip markdown code fences the model sometimes wraps JSON in.

    Args:
        response: Raw text returned by the model

    Returns:
        The text between the fences, or the stripped text when there are none
    """
    response = response.strip()
    if response.startswith("```json"):
        response = response[7:]
    elif response.startswith("```"):
        response = response[3:]
    if response.endswith("```"):
        response = response[:-3]
    return response.strip()


def validate_hs_code(hs_code: str) -> bool:
    """
    Validate if a string is a dot-delimited HS code (e.g. 8518.30.00).

    Args:
        hs_code: HS code string to validate

    Returns:
        True if valid format, False otherwise
    """
    return bool(HS_CODE_REGEX.match(hs_code.strip()))


def format_hs_code(hs_code: str) -> str:
    """
    Format an HS code in the standard 8-digit format: XXXX.XX.XX

    Args:
        hs_code: Raw HS code string

    Returns:
        Formatted HS code string, or the input unchanged if it is not numeric
    """
    # Remove any existing formatting
    clean_code = hs_code.replace(".", "").replace(" ", "").replace("-", "")
    if not clean_code.isdigit():
        return hs_code

    # Pad with zeros if needed
    clean_code = clean_code.ljust(8, "0")[:8]
    return f"{clean_code[:4]}.{clean_code[4:6]}.{clean_code[6:8]}"


def render_prompt(template: str, **values) -> str:
    """Fill a prompt template; every placeholder must be supplied."""
    prompt = PromptTemplate.from_template(template)
    return prompt.format(**values)
