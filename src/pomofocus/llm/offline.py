# src/pomofocus/llm/offline.py

from __future__ import annotations

import json
import re

from ..core.ports import ChatMessage

_ORIGINAL_TITLE = re.compile(r'Original Task:\s*"(?P<title>.*)"')


class OfflineLLMClient:
    """
    Offline deterministic LLM client used for demos when no external API is configured.

    Behavior:
    - Enhancement prompts -> a valid enhancement JSON payload built from the original title
    - Normal chat -> a friendly offline demo response
    """

    def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        user_text = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_text = m["content"]
                break

        # The enhancement service must get JSON it can validate.
        if "always respond with valid json" in (system_prompt or "").lower():
            m = _ORIGINAL_TITLE.search(user_text)
            title = m.group("title").strip() if m else "Task"
            return json.dumps(
                {
                    "enhancedTitle": title,
                    "enhancedDescription": f"1. Define the first concrete step for: {title}\n"
                    "2. Work through it in focused sessions.",
                    "estimatedPomodoros": 1,
                    "reasoning": "Offline demo mode: the task was kept as is.",
                }
            )

        return (
            "Offline demo mode: no external LLM is configured.\n"
            "Set POMOFOCUS_OPENAI_API_KEY to enable real responses.\n\n"
            f"You said: {user_text}"
        )
