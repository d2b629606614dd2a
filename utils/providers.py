"""
Provider abstraction for different AI providers
Supports OpenAI and OpenRouter APIs
"""

from openai import OpenAI
from typing import Dict, Optional
from utils.config import (
    load_api_key, get_current_provider, get_provider_config,
    SUPPORTED_PROVIDERS, APP_TITLE, APP_URL
)


class ProviderError(Exception):
    """Base exception for provider-related errors"""
    pass


def _attribution_headers(provider: str) -> Dict[str, str]:
    """App attribution headers, only sent to OpenRouter"""
    if provider == "openrouter":
        return {
            "HTTP-Referer": APP_URL,
            "X-Title": APP_TITLE,
        }
    return {}


def resolve_provider(provider: str = None) -> str:
    """Return a supported provider name, defaulting to the configured one"""
    if provider is None:
        provider = get_current_provider()

    if provider not in SUPPORTED_PROVIDERS:
        raise ProviderError(f"Unsupported provider: {provider}. Supported: {SUPPORTED_PROVIDERS}")
    return provider


def get_provider_api_key(provider: str = None) -> str:
    """Return the API key for a provider or raise ProviderError"""
    provider = resolve_provider(provider)
    api_key = load_api_key(provider)
    if not api_key:
        raise ProviderError(f"No API key found for provider: {provider}")
    return api_key


def create_client(provider: str = None, **kwargs) -> OpenAI:
    """
    Create an API client for the specified provider.
    OpenRouter is compatible with OpenAI's API, so we can use the same client.

    Args:
        provider: Provider name ("openai" or "openrouter"). If None, uses current provider.
        **kwargs: Additional parameters passed to the OpenAI client constructor

    Returns:
        OpenAI client configured for the specified provider

    Raises:
        ProviderError: If provider is not supported or API key is missing
    """
    provider = resolve_provider(provider)
    api_key = get_provider_api_key(provider)
    config = get_provider_config(provider)

    client_kwargs = {"api_key": api_key}
    if config.get("base_url"):
        client_kwargs["base_url"] = config["base_url"]

    headers = _attribution_headers(provider)
    if headers:
        client_kwargs["default_headers"] = headers

    client_kwargs.update(kwargs)

    return OpenAI(**client_kwargs)


def get_model_for_task(task: str, provider: str = None) -> str:
    """
    Get the appropriate model for a specific task.

    Args:
        task: Task type ("vision", "analysis", "evaluation", "chat")
        provider: Provider name. If None, uses current provider.

    Returns:
        Model name for the specified task

    Raises:
        ProviderError: If task is not supported for the provider
    """
    provider = resolve_provider(provider)
    config = get_provider_config(provider)

    if task not in config or task == "base_url":
        raise ProviderError(f"Task '{task}' not supported for provider '{provider}'")

    return config[task]


def get_api_call_params(
    model: str,
    messages: list,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    response_format: Optional[Dict] = None,
    **kwargs
) -> Dict:
    """
    Build chat completion parameters, leaving out anything that was not set.

    Args:
        model: Model name to use
        messages: List of messages for the conversation
        temperature: Sampling temperature (0.0 to 2.0)
        max_tokens: Maximum tokens to generate
        response_format: Output format specification
        **kwargs: Additional parameters

    Returns:
        Dictionary of API call parameters
    """
    params = {
        "model": model,
        "messages": messages
    }

    optional_params = {
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": response_format,
    }

    for key, value in optional_params.items():
        if value is not None:
            params[key] = value

    params.update(kwargs)

    return params


def get_token_count(response) -> str:
    """Extract token count from an API response, 'n/a' if not available"""
    usage_info = getattr(response, 'usage', None)
    if usage_info:
        if hasattr(usage_info, 'total_tokens'):
            return str(usage_info.total_tokens)
        elif isinstance(usage_info, dict):
            return str(usage_info.get('total_tokens', 'n/a'))
    return 'n/a'
