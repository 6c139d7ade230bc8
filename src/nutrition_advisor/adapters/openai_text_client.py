"""OpenAI Responses API client for recommendation text."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_advisor.services.generation import TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation backed by the OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAITextClient":
        """Create an OpenAI text client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
        store: bool,
    ) -> str:
        """Return the model's text output for the prompt."""
        response = await self.client.responses.create(
            model=model,
            instructions=instructions,
            input=prompt,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            store=store,
        )
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
