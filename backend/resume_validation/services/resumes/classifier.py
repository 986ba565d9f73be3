# resume_validation/services/resumes/classifier.py
"""Resume classifier client for the local Ollama /api/generate endpoint.

One prompt template serves both evaluation modes. The model is asked for raw JSON only and
the reply is parsed strictly: anything that is not a JSON object carrying the keys required
by the mode raises ClassifierError.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests
from pydantic import ValidationError

from resume_validation.core.config import Settings
from resume_validation.core.errors import ClassifierError
from resume_validation.schemas.validation import EvaluationMode, Verdict

logger = logging.getLogger("ai.classifier")


REQUIRED_KEYS: Dict[EvaluationMode, Tuple[str, ...]] = {
    EvaluationMode.BINARY: ("valid", "confidence", "reason"),
    EvaluationMode.SCORED: ("valid", "score", "confidence", "reason"),
}

_TASKS = {
    EvaluationMode.BINARY: "classify whether the provided text data belongs to a valid professional Resume/CV or not",
    EvaluationMode.SCORED: "evaluate the provided resume text",
}

_EXAMPLES = {
    EvaluationMode.BINARY: (
        '{ "valid": true, "confidence": 0.95, "reason": "Contains clear education and skills sections." }',
        '{ "valid": false, "confidence": 0.9, "reason": "Text appears to be a random essay/article." }',
    ),
    EvaluationMode.SCORED: (
        '{ "valid": true, "score": 8, "confidence": 0.95, "reason": "Good structure, but lacks specific impact metrics." }',
        '{ "valid": false, "score": 0, "confidence": 0.9, "reason": "Text appears to be random." }',
    ),
}


def _reject_constant(name: str) -> Any:
    # NaN, Infinity, -Infinity are accepted by json.loads but are not JSON
    raise ValueError(f"non-JSON constant {name}")


PROMPT_TEMPLATE = """You are an expert HR AI Resume Validator. Your task is to {task}.

Rules:
{rules}

Input Text:
\"\"\"{text}\"\"\"
"""


class ClassifierClient:
    """Stateless per call; safe to share between concurrent jobs."""

    def __init__(
        self,
        base_url: str,
        *,
        scored_model: str,
        binary_model: str,
        max_chars: int = 3000,
        timeout: Optional[float] = None,
    ):
        self.generate_url = f"{base_url.rstrip('/')}/api/generate"
        self.models = {
            EvaluationMode.SCORED: scored_model,
            EvaluationMode.BINARY: binary_model,
        }
        self.max_chars = max_chars
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClassifierClient":
        return cls(
            settings.OLLAMA_BASE_URL,
            scored_model=settings.LLM_CHAT_MODEL,
            binary_model=settings.LLM_SCREENING_MODEL,
            max_chars=settings.CLASSIFIER_MAX_CHARS,
            timeout=settings.CLASSIFIER_TIMEOUT_SECONDS,
        )

    def build_prompt(self, text: str, mode: EvaluationMode) -> str:
        valid_example, invalid_example = _EXAMPLES[mode]
        rules = [
            "A Resume/CV MUST contain: Contact Information (Email/Phone), Education History, and Skills or Experience.",
            "Reject random text, code snippets, essays, generic articles, or unrelated documents.",
            f"If it is a Resume, output rigid JSON: {valid_example}",
        ]
        if mode is EvaluationMode.SCORED:
            rules.append('"score" should be an integer from 0 to 10 based on quality, completeness, and professionalism.')
        rules.append('"confidence" is a number between 0 and 1.')
        rules.append(f"If NOT a Resume, output rigid JSON: {invalid_example}")
        rules.append("Required keys: " + ", ".join(f'"{k}"' for k in REQUIRED_KEYS[mode]) + ".")
        rules.append("Do NOT output markdown. Output ONLY JSON.")

        return PROMPT_TEMPLATE.format(
            task=_TASKS[mode],
            rules="\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, 1)),
            text=(text or "")[: self.max_chars],
        )

    def classify(self, text: str, mode: EvaluationMode = EvaluationMode.SCORED) -> Verdict:
        payload = {
            "model": self.models[mode],
            "prompt": self.build_prompt(text, mode),
            "stream": False,
            "format": "json",
        }
        try:
            response = requests.post(self.generate_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            logger.error("Ollama generate call failed (%s): %s", payload["model"], e)
            raise ClassifierError(f"Ollama API Error: {e}") from e
        except ValueError as e:
            raise ClassifierError(f"Ollama returned a non-JSON body: {e}") from e

        raw = body.get("response") if isinstance(body, dict) else None
        if not isinstance(raw, str):
            raise ClassifierError("Ollama reply has no 'response' string")

        verdict = self.parse_verdict(raw, mode)
        logger.info(
            "🤖 %s verdict from %s: valid=%s score=%s confidence=%s",
            mode.value, payload["model"], verdict.valid, verdict.score, verdict.confidence,
        )
        return verdict

    @staticmethod
    def parse_verdict(raw: str, mode: EvaluationMode) -> Verdict:
        try:
            data: Any = json.loads(raw, parse_constant=_reject_constant)
        except ValueError as e:
            logger.error("Model output is not valid JSON: %r", raw[:300])
            raise ClassifierError(f"Model output is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ClassifierError(f"Model output is a JSON {type(data).__name__}, expected an object")

        missing = [key for key in REQUIRED_KEYS[mode] if key not in data]
        if missing:
            raise ClassifierError(f"Model output is missing required keys: {', '.join(missing)}")

        try:
            return Verdict.model_validate(data)
        except ValidationError as e:
            raise ClassifierError(f"Model output does not match the verdict shape: {e}") from e
