"""Pre-configured agents for summarization, analysis, generation, extraction, Q&A and translation."""

import dataclasses
import logging
from typing import Any, ClassVar, Optional, Sequence

from agentcore.agents.config import AgentConfig
from agentcore.agents.languages import format_language_for_prompt
from agentcore.agents.openai_agent import OpenAIAgent
from agentcore.agents.parsing import extract_json
from agentcore.agents.prompt_template import PromptTemplate
from agentcore.models.agent_schemas import GenerateOptions, SummarizeOptions
from agentcore.models.enums import SummaryFormat, SummaryLength

logger = logging.getLogger(__name__)


class SpecializedAgent(OpenAIAgent):
    """OpenAIAgent with class-level AgentConfig defaults.

    Keyword overrides replace individual AgentConfig fields, e.g.
    SummarizationAgent(model="gpt-4o", max_tokens=500).
    """

    defaults: ClassVar[dict[str, Any]] = {}

    def __init__(self, config: Optional[AgentConfig] = None, *, provider=None, rate_limiter=None,
                 retry_options=None, **overrides: Any) -> None:
        if config is None:
            config = AgentConfig(**{**self.defaults, **overrides})
        elif overrides:
            config = dataclasses.replace(config, **overrides)
        super().__init__(config, provider=provider, rate_limiter=rate_limiter, retry_options=retry_options)


# ── Summarization ──────────────────────────────────────────────

class SummarizationAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Summarization Agent",
        description="Specializes in creating concise summaries of content",
        temperature=0.3,
        max_tokens=1000,
        system_prompt=(
            "You are a professional content summarization expert. Your role is to:\n"
            "- Create clear, concise summaries that capture key points\n"
            "- Organize information in a logical structure\n"
            "- Highlight important facts and insights\n"
            "- Use bullet points when appropriate\n"
            "- Maintain objectivity and accuracy\n"
            "- Keep summaries between 200-500 words unless specified otherwise"
        ),
    )

    LENGTH_GUIDE: ClassVar[dict[SummaryLength, str]] = {
        SummaryLength.SHORT: "100-200 words",
        SummaryLength.MEDIUM: "300-500 words",
        SummaryLength.LONG: "600-1000 words",
    }
    FORMAT_GUIDE: ClassVar[dict[SummaryFormat, str]] = {
        SummaryFormat.PARAGRAPH: "as flowing paragraphs",
        SummaryFormat.BULLETS: "as bullet points",
        SummaryFormat.STRUCTURED: "with clear sections and headings",
    }

    async def summarize(
        self,
        content: str,
        *,
        length: SummaryLength | str = SummaryLength.MEDIUM,
        format: SummaryFormat | str = SummaryFormat.PARAGRAPH,
        source_language: Optional[str] = None,
        target_language: Optional[str] = None,
    ) -> str:
        options = SummarizeOptions(
            length=length, format=format,
            source_language=source_language, target_language=target_language,
        )
        prompt = (
            f"Please summarize the following content in {self.LENGTH_GUIDE[options.length]} "
            f"{self.FORMAT_GUIDE[options.format]}"
        )

        if options.target_language:
            target = format_language_for_prompt(options.target_language)
            if options.source_language and options.source_language != options.target_language:
                source = format_language_for_prompt(options.source_language)
                prompt += (
                    f".\n\nThe content is in {source}. Please provide the summary in {target}, "
                    f"translating from the source language."
                )
            else:
                prompt += f".\n\nPlease provide the summary in {target}."
            prompt += (
                f"\n\nIMPORTANT: Your entire response must be in {target}. All text, headings, "
                f"bullet points, and explanations should be written in {target}."
            )

        prompt += f"\n\nContent:\n{content}"
        response = await self.process(prompt)
        return response.content


# ── Analysis ───────────────────────────────────────────────────

class AnalysisAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Analysis Agent",
        description="Analyzes content and provides insights",
        temperature=0.5,
        max_tokens=1500,
        system_prompt=(
            "You are an expert content analyst. Your role is to:\n"
            "- Identify key themes and patterns\n"
            "- Extract actionable insights\n"
            "- Highlight strengths and weaknesses\n"
            "- Provide data-driven observations\n"
            "- Suggest improvements or opportunities\n"
            "- Present analysis in a structured format"
        ),
    )

    async def analyze(self, content: str, aspects: Optional[Sequence[str]] = None) -> str:
        prompt = "Please analyze the following content:"
        if aspects:
            prompt += f"\n\nFocus on these areas: {', '.join(aspects)}"
        prompt += f"\n\n{content}"

        response = await self.process(prompt)
        return response.content


# ── Content generation ─────────────────────────────────────────

class ContentGenerationAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Content Generation Agent",
        description="Creates original content based on prompts",
        temperature=0.8,
        max_tokens=2000,
        system_prompt=(
            "You are a creative content writer. Your role is to:\n"
            "- Generate original, engaging content\n"
            "- Match the requested tone and style\n"
            "- Ensure coherence and flow\n"
            "- Use vivid language and compelling narratives\n"
            "- Adapt to different content types (articles, scripts, descriptions, etc.)\n"
            "- Maintain consistency throughout the piece"
        ),
    )

    async def generate(
        self,
        prompt: str,
        *,
        tone: Optional[str] = None,
        style: Optional[str] = None,
        length: Optional[int] = None,
    ) -> str:
        options = GenerateOptions(tone=tone, style=style, length=length)

        enhanced = prompt
        if options.tone:
            enhanced += f"\n\nTone: {options.tone.value}"
        if options.style:
            enhanced += f"\nStyle: {options.style}"
        if options.length:
            enhanced += f"\nTarget length: approximately {options.length} words"

        response = await self.process(enhanced)
        return response.content


# ── Extraction ─────────────────────────────────────────────────

class ExtractionAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Extraction Agent",
        description="Extracts specific information from content",
        temperature=0.1,
        max_tokens=1000,
        system_prompt=(
            "You are a data extraction specialist. Your role is to:\n"
            "- Accurately identify and extract requested information\n"
            "- Present extracted data in structured format (JSON)\n"
            "- Maintain precision and completeness\n"
            "- Handle various content types\n"
            "- Validate extracted information\n"
            "- Provide null values when information is not found"
        ),
    )

    PROMPT: ClassVar[PromptTemplate] = PromptTemplate(
        "Extract the following information from the content:\n\n"
        "Fields to extract: {{fields}}\n\n"
        "Content:\n{{content}}\n\n"
        "Respond with a single JSON object whose keys are exactly the requested fields. "
        "Use null for any field that is not present in the content."
    )

    async def extract(self, content: str, fields: Sequence[str]) -> dict[str, Any]:
        """Return one entry per requested field; unanswerable fields map to None."""
        fields = list(dict.fromkeys(fields))
        if not fields:
            return {}

        response = await self.process(self.PROMPT.format(fields=", ".join(fields), content=content))
        parsed = extract_json(response.content)
        if not isinstance(parsed, dict):
            logger.warning("Extraction response was not a JSON object agent=%s", self.name)
            parsed = {}

        missing = [f for f in fields if f not in parsed]
        if missing:
            logger.debug("Extraction missing fields agent=%s fields=%s", self.name, missing)
        return {f: parsed.get(f) for f in fields}


# ── Question answering ─────────────────────────────────────────

class QAAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Q&A Agent",
        description="Answers questions based on provided context",
        temperature=0.4,
        max_tokens=800,
        system_prompt=(
            "You are a knowledgeable assistant that answers questions accurately. Your role is to:\n"
            "- Provide clear, direct answers to questions\n"
            "- Base answers on the provided context when there is one\n"
            "- Admit when you don't know something\n"
            "- Ask for clarification when questions are ambiguous\n"
            "- Cite relevant information from the context\n"
            "- Keep answers concise but complete"
        ),
    )

    async def answer(self, question: str, context: Optional[str] = None) -> str:
        prompt = f"Context:\n{context}\n\nQuestion: {question}" if context else question
        response = await self.process(prompt)
        return response.content


# ── Translation ────────────────────────────────────────────────

class TranslationAgent(SpecializedAgent):
    defaults: ClassVar[dict[str, Any]] = dict(
        name="Translation Agent",
        description="Translates content between languages",
        temperature=0.3,
        max_tokens=2000,
        system_prompt=(
            "You are a professional translator. Your role is to:\n"
            "- Provide accurate translations between languages\n"
            "- Maintain the original meaning and tone\n"
            "- Adapt idiomatic expressions appropriately\n"
            "- Preserve formatting and structure\n"
            "- Consider cultural context\n"
            "- Ensure natural-sounding output in the target language"
        ),
    )

    async def translate(self, text: str, target_language: str, source_language: Optional[str] = None) -> str:
        target = format_language_for_prompt(target_language)
        if source_language:
            source = format_language_for_prompt(source_language)
            prompt = f"Translate the following text from {source} to {target}:\n\n{text}"
        else:
            prompt = (
                f"Detect the language of the following text and translate it to {target}:\n\n{text}"
            )
        response = await self.process(prompt)
        return response.content
