from __future__ import annotations

try:
    from openai import AsyncAzureOpenAI as _AsyncAzureOpenAI
    from openai import AsyncOpenAI as _AsyncOpenAI
except ImportError:
    _AsyncOpenAI = None  # type: ignore[assignment,misc]
    _AsyncAzureOpenAI = None  # type: ignore[assignment,misc]

from prsieve_core.providers.base import BaseReviewer

_INSTALL_HINT = "The 'openai' package is required for this provider. Install it with: pip install 'prsieve[openai]'"


class OpenAIReviewer(BaseReviewer):
    MODEL = "gpt-4o-mini"
    # temperature=0 keeps the JSON contract as deterministic as the API allows.
    TEMPERATURE = 0

    def __init__(self, api_key: str, model: str | None = None, max_input_tokens: int | None = None):
        super().__init__(max_input_tokens=max_input_tokens)
        if _AsyncOpenAI is None:
            raise ImportError(_INSTALL_HINT)
        self.model = model or self.MODEL
        self.client = _AsyncOpenAI(api_key=api_key)

    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.TEMPERATURE,
            max_completion_tokens=self.MAX_OUTPUT_TOKENS,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class AzureOpenAIReviewer(OpenAIReviewer):
    """Same wire protocol as OpenAI, addressed to an Azure deployment."""

    API_VERSION = "2024-10-21"

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        deployment: str,
        api_version: str | None = None,
        max_input_tokens: int | None = None,
    ):
        BaseReviewer.__init__(self, max_input_tokens=max_input_tokens)
        if _AsyncAzureOpenAI is None:
            raise ImportError(_INSTALL_HINT)
        # Azure routes on the deployment name; the SDK still expects it as "model".
        self.model = deployment
        self.client = _AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=endpoint,
            azure_deployment=deployment,
            api_version=api_version or self.API_VERSION,
        )
