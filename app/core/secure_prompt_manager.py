"""
Secure Prompt Manager Module

This module provides a secure way to manage AI prompts by isolating them from user data
to prevent injection attacks. It implements a template-based system with explicit
placeholders and comprehensive sanitization.

The module contains:
- PromptTemplate: A dataclass for secure prompt templates with placeholders
- SecurePromptManager: Main class for managing secure prompts
- sanitize_text: Utility function for text sanitization

Dependencies:
- dataclasses: For template data structures
- typing: For type hints
- re: For regex-based sanitization
- html: For HTML entity encoding

Author: @kcaparas1630
"""

from typing import Dict, Iterable, Optional
from dataclasses import dataclass
import re
import html
import json
from loguru import logger

TECHNICAL_ROLE_KEYWORDS = [
    'developer', 'engineer', 'scientist', 'analyst', 'architect', 'programmer', 'data',
    'software', 'backend', 'frontend', 'fullstack', 'flutter', 'devops', 'sre',
    'machine learning', 'ai engineer',
]

def sanitize_text(text: str, max_length: int = 1000, escape_html: bool = True) -> str:
    """
    Sanitize text input to prevent injection attacks and ensure data safety.

    This function performs multiple sanitization steps:
    1. Optional HTML entity encoding to prevent XSS
    2. Strips leading/trailing whitespace
    3. Removes null bytes and other control characters
    4. Configurable length limiting to prevent DoS attacks
    5. Normalizes unicode characters

    Args:
        text (str): The text to sanitize
        max_length (int): Maximum allowed length (default: 1000)
        escape_html (bool): Whether to HTML escape the text (default: True)

    Returns:
        str: The sanitized text

    Raises:
        ValueError: If text is None or empty after sanitization
    """
    if text is None:
        raise ValueError("Text cannot be None")

    text = str(text)

    if escape_html:
        text = html.escape(text)

    text = text.strip()

    # Remove null bytes and other control characters (except newlines and tabs)
    text = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', text)

    if len(text) > max_length:
        text = text[:max_length]
        logger.warning(f"Text truncated to {max_length} characters for security")

    text = text.encode('utf-8', errors='ignore').decode('utf-8')

    if not text:
        raise ValueError("Text cannot be empty after sanitization")

    return text

def is_technical_role(*fields: Optional[str]) -> bool:
    """True when any of the given role/field strings contains a technical keyword."""
    lowered = " ".join(field.lower() for field in fields if field)
    return any(keyword in lowered for keyword in TECHNICAL_ROLE_KEYWORDS)

@dataclass
class PromptTemplate:
    """Secure prompt template with placeholders for safe data injection."""
    template: str
    placeholders: Dict[str, str]
    sanitization_config: Dict[str, Dict] = None  # Per-placeholder sanitization config

    def render(self, **kwargs) -> str:
        """
        Safely render the template with provided data.

        Args:
            **kwargs: Data to inject into placeholders

        Returns:
            str: Rendered prompt with sanitized data

        Raises:
            ValueError: If required placeholders are missing or data is invalid
        """
        missing_placeholders = set(self.placeholders.keys()) - set(kwargs.keys())
        if missing_placeholders:
            raise ValueError(f"Missing required placeholders: {missing_placeholders}")

        sanitized_data = {}
        for key, value in kwargs.items():
            if key in self.placeholders:
                config = self.sanitization_config.get(key, {}) if self.sanitization_config else {}
                max_length = config.get('max_length', 1000)
                escape_html = config.get('escape_html', True)

                sanitized_data[key] = sanitize_text(str(value), max_length=max_length, escape_html=escape_html)
            else:
                # Skip unknown keys to prevent injection
                logger.warning(f"Unknown placeholder key: {key}")
                continue

        try:
            return self.template.format(**sanitized_data)
        except KeyError as e:
            raise ValueError(f"Template rendering error: {e}") from e

_LONG_TEXT = {"max_length": 30000, "escape_html": False}

class SecurePromptManager:
    """
    Secure prompt manager that isolates prompts from user data to prevent injection attacks.

    This class provides a secure way to manage AI prompts by:
    1. Using predefined templates with explicit placeholders
    2. Sanitizing all user data before injection
    3. Validating data types and content
    """

    def __init__(self):
        self._templates = self._initialize_templates()

    def _initialize_templates(self) -> Dict[str, PromptTemplate]:
        """Initialize secure prompt templates with explicit placeholders."""
        return {
            "simple_feedback": PromptTemplate(
                template="""You are an AI-powered interview performance analyzer. Analyze the interview transcript, job description, and candidate profile and provide detailed, constructive feedback on the candidate's performance.

<output_format>
Return ONLY valid JSON with this exact structure - NO thought process, explanations, or additional text:
{{
  "overallScore": 72,
  "overallFeedback": "General impressions and summary",
  "correctAnswers": "Strengths, well-answered questions, positive aspects",
  "incorrectAnswers": "Weaknesses, poorly answered questions, missed opportunities",
  "areasForImprovement": "Specific, actionable advice"
}}
"overallScore" is a number from 0 to 100. Omit it if a score cannot be confidently assigned.
</output_format>

Job Description: {job_description}
Candidate Profile: {candidate_profile}
Expected Answer Guidelines (if available): {expected_answers}
Interview Transcript:
{transcript}""",
                placeholders={
                    "job_description": "Role the candidate interviewed for",
                    "candidate_profile": "Candidate summary",
                    "expected_answers": "Optional answer guidance",
                    "transcript": "Interview transcript",
                },
                sanitization_config={
                    "candidate_profile": _LONG_TEXT,
                    "expected_answers": _LONG_TEXT,
                    "transcript": _LONG_TEXT,
                },
            ),
            "detailed_feedback": PromptTemplate(
                template="""You are an expert interview coach. Evaluate the candidate's complete interview and every individual answer. Be constructive and specific; the goal is to help the candidate learn and improve.

<output_format>
Return ONLY valid JSON with this exact structure - NO thought process, explanations, or additional text:
{{
  "overallScore": 72,
  "overallFeedback": "Summary of overall performance",
  "strengthsSummary": "What the candidate did well",
  "weaknessesSummary": "Where the candidate struggled",
  "overallAreasForImprovement": "Specific, actionable advice",
  "detailedQuestionFeedback": [
    {{
      "questionId": "q1",
      "questionText": "The question",
      "userAnswer": "The candidate's answer",
      "idealAnswer": "What a strong answer would contain",
      "refinementSuggestions": "How to improve this answer",
      "score": 7
    }}
  ]
}}
"overallScore" is a number from 0 to 100; every "score" is a number from 0 to 10.
Include exactly one detailedQuestionFeedback entry per question listed below, in the same order.
</output_format>

Job Description: {job_description}
Candidate Profile: {candidate_profile}
Expected Answer Guidelines (if available): {expected_answers}
Questions (JSON):
{questions}
Interview Transcript:
{transcript}""",
                placeholders={
                    "job_description": "Role the candidate interviewed for",
                    "candidate_profile": "Candidate summary",
                    "expected_answers": "Optional answer guidance",
                    "questions": "Questions with ids and answers as JSON",
                    "transcript": "Interview transcript",
                },
                sanitization_config={
                    "candidate_profile": _LONG_TEXT,
                    "expected_answers": _LONG_TEXT,
                    "questions": _LONG_TEXT,
                    "transcript": _LONG_TEXT,
                },
            ),
            "question_generation": PromptTemplate(
                template="""You are an expert AI Interview Question Generator. Create high-quality, relevant interview questions, including those frequently asked for the specified role and field, tailored to the candidate and the total interview duration.

Candidate Profile Field: {profile_field}
Candidate Role: {role}
Interview Duration: {duration} minutes
Technical role: {technical}

Question stages:
1. "oral": answered verbally. Types "conversational" (e.g. "Tell me about yourself") or "behavioral" (e.g. "Describe a time you faced a challenge").
2. "technical_written": ONLY for technical roles, after all oral questions. Types "technical" (explain a concept) or "coding" (write a function or solve a problem).

Distribution by duration:
- 15 minutes: non-technical 3-4 oral; technical 2 oral + 1 technical_written.
- 30 minutes: non-technical 5-6 oral; technical 3 oral + 1-2 technical_written.
- 45 minutes: non-technical 7-8 oral; technical 3-4 oral + 2 technical_written.

<output_format>
Return ONLY valid JSON with this exact structure - NO thought process, explanations, or additional text:
{{
  "questions": [
    {{"id": "q1", "text": "Question text", "stage": "oral", "type": "conversational"}}
  ]
}}
Ids are unique and sequential ("q1", "q2", ...). All oral questions come first.
</output_format>""",
                placeholders={
                    "profile_field": "Candidate profile field",
                    "role": "Candidate role",
                    "duration": "Interview duration in minutes",
                    "technical": "Whether the role is technical",
                },
            ),
        }

    def get_simple_feedback_prompt(self, job_description: str, candidate_profile: str, transcript: str, expected_answers: Optional[str] = None) -> str:
        """
        Get a secure transcript analysis prompt with sanitized user data.

        Raises:
            ValueError: If data validation fails
        """
        return self._templates["simple_feedback"].render(
            job_description=job_description,
            candidate_profile=candidate_profile,
            expected_answers=expected_answers or "Not provided",
            transcript=transcript,
        )

    def get_detailed_feedback_prompt(self, job_description: str, candidate_profile: str, transcript: str, questions: Iterable[dict], expected_answers: Optional[str] = None) -> str:
        """
        Get a secure per-question feedback prompt with sanitized user data.

        Raises:
            ValueError: If data validation fails
        """
        return self._templates["detailed_feedback"].render(
            job_description=job_description,
            candidate_profile=candidate_profile,
            expected_answers=expected_answers or "Not provided",
            questions=json.dumps(list(questions), ensure_ascii=False),
            transcript=transcript,
        )

    def get_question_generation_prompt(self, profile_field: str, role: str, duration: int) -> str:
        return self._templates["question_generation"].render(
            profile_field=profile_field,
            role=role,
            duration=duration,
            technical="yes" if is_technical_role(role, profile_field) else "no",
        )

# Global instance for reuse across the application
secure_prompt_manager = SecurePromptManager()
