"""
AI summary pipeline.

Turns a post (title + markdown content) into a short TL;DR and 3-5 key
takeaways with an OpenAI chat model driven through LangChain.

Flow
----
1) Build the chat prompt (system: concise JSON-only summarizer; user: the post).
2) Invoke `ChatOpenAI` (temperature 0.2).
3) Parse the reply as JSON, stripping code fences and repairing it with
   `json_repair` when the model returns almost-JSON.
4) Normalise to `{"tldr": str, "keyTakeaways": list[str]}`.

The route layer owns the summary state machine (processing → ready/error);
this module only talks to the model.
"""

import json
import logging
import re
from typing import Optional

from json_repair import repair_json
from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from portal.database.config.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a concise technical summarizer. Respond only with JSON."

SUMMARY_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_PROMPT),
        (
            "human",
            "Summarize the following post. Return JSON with keys: tldr (string) and "
            "keyTakeaways (array of 3-5 short bullet strings).\n\nTitle: {title}\n\nContent:\n{content}",
        ),
    ]
)


def lc_text_from_content(content) -> str:
    """Normalize LangChain message content to plain text.

    - If string → return as-is.
    - If list of content parts → concatenates only 'text' parts.
    - Else → str(content).
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text")
    return str(content)


def parse_llm_json(resp) -> dict:
    """Parse a model response into JSON with optional repair.

    Steps:
        1) Extract text from the LangChain message (handling code fences).
        2) Try `json.loads`.
        3) Fallback: `json_repair.repair_json` then `json.loads`.

    Raises:
        ValueError with the first 500 chars of raw text if parsing still fails.
    """
    raw = lc_text_from_content(resp.content).strip()
    if raw.startswith("```"):
        raw = re.sub(r"^```(?:json)?\n", "", raw)
        raw = re.sub(r"\n```$", "", raw)

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        try:
            parsed = json.loads(repair_json(raw))
        except (json.JSONDecodeError, TypeError) as e:
            raise ValueError(f"Failed to parse LLM JSON: {e}\nRAW:\n{raw[:500]}")
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object from the model\nRAW:\n{raw[:500]}")
    return parsed


class SummaryPipeline:
    """
    Wraps the chat model used for post summaries.

    The model is created on first use, so building a pipeline never requires
    an API key; `settings.API_KEY` is checked by the service layer before any
    summary request reaches `summarize`.
    """

    def __init__(self, model: Optional[ChatOpenAI] = None):
        self._model = model

    @property
    def model_name(self) -> str:
        return settings.OPEN_AI_MODEL

    @property
    def model(self) -> ChatOpenAI:
        if self._model is None:
            self._model = ChatOpenAI(model=settings.OPEN_AI_MODEL, api_key=settings.API_KEY, temperature=0.2)
        return self._model

    def summarize(self, title: str, content: str) -> dict:
        """
        Summarize a post.

        Parameters
        ----------
        title : str
            Post title.
        content : str
            Markdown body.

        Returns
        -------
        dict
            `{"tldr": str, "keyTakeaways": list[str]}`.

        Raises
        ------
        ValueError
            When the model reply is not usable JSON or has an empty TL;DR.
        """
        response = self.model.invoke(SUMMARY_PROMPT.format_messages(title=title, content=content))
        parsed = parse_llm_json(response)

        tldr = str(parsed.get("tldr") or "").strip()
        takeaways = parsed.get("keyTakeaways")
        key_takeaways = [str(item).strip() for item in takeaways if str(item).strip()] if isinstance(takeaways, list) else []
        if not tldr:
            raise ValueError("Model returned an empty tldr")
        logger.info(f"Generated summary with {len(key_takeaways)} takeaways")
        return {"tldr": tldr, "keyTakeaways": key_takeaways}


def get_summary_pipeline() -> SummaryPipeline:
    """FastAPI dependency providing the summary pipeline."""
    return SummaryPipeline()
