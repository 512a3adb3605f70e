"""
AI Reasoning Layer for TalentPool

Handles all AI-powered operations:
- Interview question generation
- Interview transcript summary and category scoring
- CV analysis
- Professional summary suggestions

Talks to an OpenAI-compatible chat completions gateway over httpx.
Integrated with Langfuse for observability and tracing.
"""

import json
import logging
from typing import Any

import httpx
from langfuse import Langfuse

from talentpool.config.settings import Settings, get_settings
from talentpool.core.errors import ConfigurationError, ExternalServiceError
from talentpool.models.question import (
    CVAnalysis,
    InterviewQuestions,
    QuestionGenerationInput,
)
from talentpool.models.report import SummaryRequest
from talentpool.prompts.evaluator import EvaluatorPrompts
from talentpool.prompts.interviewer import InterviewerPrompts
from talentpool.prompts.profile import ProfilePrompts

logger = logging.getLogger(__name__)


class AIReasoningLayer:
    """
    Central AI reasoning component.

    Every call either returns validated structured output or raises
    ExternalServiceError; callers decide whether a failure blocks a
    transition or becomes a fallback report.

    Observability:
    - Langfuse spans around each generation, when keys are configured
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize AI reasoning layer with gateway configuration.

        Args:
            settings: Application settings (defaults to cached settings)
            transport: Optional httpx transport, used to stub the gateway
        """
        self.settings = settings or get_settings()
        self.base_url = self.settings.ai_gateway_host.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {self.settings.ai_gateway_token}",
            "Content-Type": "application/json",
        }

        # HTTP client for API calls
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.settings.ai_timeout_seconds,
            transport=transport,
        )

        # Prompt templates
        self.interviewer_prompts = InterviewerPrompts()
        self.evaluator_prompts = EvaluatorPrompts()
        self.profile_prompts = ProfilePrompts()

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                try:
                    self.langfuse = Langfuse(
                        secret_key=self.settings.langfuse_secret_key,
                        public_key=self.settings.langfuse_public_key,
                        host=self.settings.langfuse_base_url,
                    )
                    logger.info("Langfuse initialized for LLM observability")
                except Exception as e:
                    logger.warning(f"Failed to initialize Langfuse: {e}")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    async def close(self):
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # CORE AI OPERATIONS
    # =========================================================================

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        content = result.get("choices", [{}])[0].get("message", {}).get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        return content if isinstance(content, str) else str(content)

    def _parse_json(self, response: str) -> dict[str, Any]:
        """Pull the outermost JSON object out of a model response."""
        json_start = response.find("{")
        json_end = response.rfind("}") + 1
        if json_start < 0 or json_end <= json_start:
            raise ExternalServiceError("AI response did not contain a JSON object.")
        try:
            data = json.loads(response[json_start:json_end])
        except json.JSONDecodeError as e:
            raise ExternalServiceError(f"AI response was not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ExternalServiceError("AI response JSON was not an object.")
        return data

    def _start_span(self, name: str, metadata: dict[str, Any]):
        if not self.langfuse:
            return None
        try:
            return self.langfuse.start_span(name=name, metadata=metadata)
        except Exception as lf_err:
            logger.warning(f"Langfuse span start failed: {lf_err}")
            return None

    def _end_span(self, span, output: dict[str, Any]) -> None:
        if not span:
            return
        try:
            span.update(output=output)
            span.end()
        except Exception as lf_err:
            logger.warning(f"Langfuse span end failed: {lf_err}")

    async def _call_model(
        self,
        prompt: str,
        max_tokens: int = 2048,
        temperature: float = 0.7,
    ) -> str:
        """
        Call the chat completions gateway.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature

        Returns:
            Model response text

        Raises:
            ConfigurationError: If the gateway host or token is missing
            ExternalServiceError: On transport or HTTP status failure
        """
        if not self.settings.ai_configured:
            raise ConfigurationError("AI gateway host or token is not configured.")

        payload = {
            "model": self.settings.ai_model,
            "messages": [
                {"role": "user", "content": prompt}
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            response = await self.client.post(
                self.settings.ai_chat_endpoint,
                json=payload,
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            logger.error(f"AI gateway error: {e}")
            raise ExternalServiceError(f"AI gateway request failed: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("AI gateway returned a non-JSON body.") from e

        return self._extract_content(result)

    # =========================================================================
    # QUESTION GENERATION
    # =========================================================================

    async def generate_interview_questions(
        self,
        candidate: QuestionGenerationInput,
    ) -> InterviewQuestions:
        """
        Generate the behavioural/situational/technical question bundle.

        No partial acceptance: all three lists must come back non-empty.

        Raises:
            ExternalServiceError: On call failure or incomplete output
        """
        span = self._start_span(
            "generate_interview_questions",
            {"role": candidate.role, "skills": len(candidate.skills)},
        )
        prompt = self.interviewer_prompts.generate_questions_prompt(candidate)

        try:
            response = await self._call_model(prompt, max_tokens=1024)
            data = self._parse_json(response)
        except ExternalServiceError as e:
            self._end_span(span, {"error": str(e)})
            raise

        questions = InterviewQuestions(
            behavioural_questions=self._string_list(data.get("behaviouralQuestions")),
            situational_questions=self._string_list(data.get("situationalQuestions")),
            technical_questions=self._string_list(data.get("technicalQuestions")),
        )
        if not questions.is_complete():
            logger.error(f"Question generator returned incomplete data: {data}")
            self._end_span(span, {"error": "incomplete"})
            raise ExternalServiceError(
                "AI question generator returned invalid or incomplete data. "
                "Please check your profile and try again."
            )

        logger.info(
            f"Generated questions | behavioural={len(questions.behavioural_questions)} "
            f"situational={len(questions.situational_questions)} "
            f"technical={len(questions.technical_questions)}"
        )
        self._end_span(span, {"questions": sum(len(q) for _, q in questions.sections())})
        return questions

    @staticmethod
    def _string_list(value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value if str(item).strip()]

    # =========================================================================
    # TRANSCRIPT SUMMARY
    # =========================================================================

    async def generate_interview_summary(self, request: SummaryRequest) -> dict[str, Any]:
        """
        Score an interview transcript.

        Returns the raw parsed JSON; shape validation and category
        normalization belong to the scoring engine.

        Raises:
            ExternalServiceError: On call failure or non-JSON output
        """
        span = self._start_span(
            "generate_interview_summary",
            {
                "candidate": request.candidate_name,
                "job_title": request.job_title,
                "transcript_length": len(request.transcript_with_context),
            },
        )
        prompt = self.evaluator_prompts.generate_summary_prompt(
            candidate_name=request.candidate_name,
            job_title=request.job_title,
            interviewer_label=request.interviewer_label,
            interview_date=request.interview_date,
            transcript_with_context=request.transcript_with_context,
        )

        try:
            response = await self._call_model(prompt, max_tokens=2048, temperature=0.3)
            data = self._parse_json(response)
        except ExternalServiceError as e:
            self._end_span(span, {"error": str(e)})
            raise

        self._end_span(span, {"categories": len(data.get("categoryScores") or [])})
        return data

    def record_score(self, name: str, value: float, comment: str) -> None:
        """Log a score to Langfuse, if enabled."""
        if not self.langfuse:
            return
        try:
            self.langfuse.create_score(name=name, value=value, comment=comment)
        except Exception as lf_err:
            logger.warning(f"Langfuse score failed: {lf_err}")

    # =========================================================================
    # PROFILE ASSISTANCE
    # =========================================================================

    async def analyze_cv(self, cv_text: str) -> CVAnalysis:
        """
        Extract skills, experience, education and a summary from CV text.

        Raises:
            ExternalServiceError: On call failure or unusable output
        """
        response = await self._call_model(
            self.profile_prompts.analyze_cv_prompt(cv_text),
            max_tokens=2048,
            temperature=0.2,
        )
        data = self._parse_json(response)

        analysis = CVAnalysis(
            skills=self._string_list(data.get("skills")),
            experience=[e for e in data.get("experience") or [] if isinstance(e, dict)],
            education=[e for e in data.get("education") or [] if isinstance(e, dict)],
            summary=str(data.get("summary") or ""),
        )
        if not analysis.summary and not analysis.skills:
            raise ExternalServiceError("Could not analyze the uploaded CV.")

        logger.info(f"CV analyzed: {len(analysis.skills)} skills, {len(analysis.experience)} roles")
        return analysis

    async def suggest_professional_summaries(self, headline: str) -> list[str]:
        """Suggest 3-5 professional summaries for a headline."""
        response = await self._call_model(
            self.profile_prompts.summary_suggestions_prompt(headline),
            max_tokens=1024,
            temperature=0.8,
        )
        suggestions = self._string_list(self._parse_json(response).get("suggestions"))
        if not suggestions:
            raise ExternalServiceError("AI returned no summary suggestions.")
        return suggestions[:5]
