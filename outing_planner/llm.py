# outing_planner/llm.py
from __future__ import annotations

from typing import Optional

from openai import AsyncOpenAI

from outing_planner.config import PlannerConfig, load_config
from outing_planner.log import get_logger

logger = get_logger(__name__)

USER_TEMPLATE = """User Request:
```json
{request_json}
```

Permutation:
```json
{candidate_json}
```

Score this plan."""


class GroqScoringOracle:
    """Scores one itinerary through a Groq-hosted chat model.

    Groq serves an OpenAI-compatible API, so the ``openai`` SDK is pointed at
    its base URL. The raw reply text is returned untouched; parsing and the
    fallback score live with the scorer.
    """

    def __init__(self, config: Optional[PlannerConfig] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config or load_config()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.scoring_api_key:
                raise RuntimeError("GROQ_API_KEY environment variable not configured")
            self._client = AsyncOpenAI(
                api_key=self.config.scoring_api_key,
                base_url=self.config.scoring_base_url,
                timeout=self.config.scoring_timeout,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __call__(self, rubric: str, request_json: str, candidate_json: str) -> str:
        logger.debug("Invoking scoring model %s", self.config.scoring_model)
        resp = await self.client.chat.completions.create(
            model=self.config.scoring_model,
            temperature=0,
            top_p=1,
            messages=[
                {"role": "system", "content": rubric},
                {
                    "role": "user",
                    "content": USER_TEMPLATE.format(request_json=request_json, candidate_json=candidate_json),
                },
            ],
        )
        return resp.choices[0].message.content or ""
