#!/usr/bin/env python3
"""
External Name Suggestions
=========================
Asks Claude for first-name ideas that fit a family and turns the free-text
reply into validated ExternalSuggestion objects.

Replies are untrusted: markdown fences are stripped, numeric fields are
clamped into [0, 1] and missing or malformed numbers default to 0.5.
Transport, API and parse failures are raised as SuggestionServiceError so
the caller can fall back to local recommendations.

Requires ANTHROPIC_API_KEY (environment or .env).
"""

import json
import logging
import math
import re
from typing import Any, List, Optional

import anthropic

from namestore import Sex
from prenomkit.settings import get_setting
from prenomkit.config import get_config
from prenomkit.models import Compatibility, ExternalSuggestion, FamilyContext, PopularityBracket, SiblingStyle

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a French baby name expert specializing in name recommendations. "
    "You have deep knowledge of French naming traditions, phonetics, and "
    "cultural significance. Always respond with valid JSON format."
)

_FENCE = re.compile(r'```(?:json)?\s*', re.IGNORECASE)
_OBJECT = re.compile(r'\{.*\}', re.DOTALL)


class SuggestionServiceError(Exception):
    """The suggestion service failed or returned an unusable reply."""


# =============================================================================
# Prompt
# =============================================================================

def _gender_text(sex: Optional[Sex]) -> str:
    if sex is Sex.MALE:
        return "boy"
    if sex is Sex.FEMALE:
        return "girl"
    return "any gender"


def build_prompt(context: FamilyContext, count: Optional[int] = None) -> str:
    """Natural-language request describing the family."""
    if count is None:
        count = get_setting("suggestions.max_suggestions", 5)
    prefs = context.preferences
    gender = _gender_text(prefs.gender)

    if context.existing_children:
        children = ', '.join(
            f"{child.name} ({child.sex.value})" if child.sex else child.name
            for child in context.existing_children
        )
        sibling_text = f"existing children: {children}"
    else:
        sibling_text = "no existing children"

    lines = [
        f"- Last name: {context.last_name}",
        f"- {sibling_text}",
        f"- Target gender: {gender}",
    ]
    if prefs.popularity is not PopularityBracket.ANY:
        lines.append(f"- Popularity preference: {prefs.popularity.value}")
    if prefs.style is not SiblingStyle.ANY:
        lines.append(f"- Style preference: {prefs.style.value} to existing names")
    if prefs.max_letters:
        lines.append(f"- At most {prefs.max_letters} letters")
    if prefs.meaning_weight:
        lines.append(f"- Importance of the name's meaning: {prefs.meaning_weight}")
    family = "\n".join(lines)

    return f"""Please suggest {count} French baby names for a {gender} with the last name "{context.last_name}".

Family context:
{family}

Consider:
1. Phonetic harmony with the last name "{context.last_name}"
2. Sibling name compatibility (avoid similar sounds, maintain family style)
3. French cultural appropriateness and pronunciation
4. Modern French naming trends
5. Avoid names that are too similar to existing siblings

Respond with JSON in this exact format:
{{
  "suggestions": [
    {{
      "name": "suggested name",
      "reasoning": "detailed explanation of why this name fits",
      "confidence": 0.85,
      "compatibility": {{
        "lastName": 0.9,
        "siblings": 0.8,
        "overall": 0.85
      }}
    }}
  ]
}}

Confidence and compatibility scores should be between 0.0 and 1.0."""


# =============================================================================
# Reply parsing
# =============================================================================

def extract_json(content: str) -> str:
    """Strip markdown code fences and return the outermost {...} block."""
    cleaned = _FENCE.sub('', content).strip()
    if cleaned.startswith('{') and cleaned.endswith('}'):
        return cleaned
    match = _OBJECT.search(cleaned)
    return match.group(0) if match else cleaned


def clamp_score(value: Any, default: Optional[float] = None) -> float:
    """
    Clamp an untrusted number into [0, 1].

    Missing, non-numeric, boolean and NaN values give the default (0.5).
    """
    if default is None:
        default = get_setting("suggestions.default_score", 0.5)
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0.0, min(1.0, number))


def parse_suggestions(payload: Any, limit: Optional[int] = None) -> List[ExternalSuggestion]:
    """
    Validate a decoded reply ({"suggestions": [...]}) or its raw text.

    Entries without a usable name are skipped; at most `limit` (5) are kept.
    """
    if limit is None:
        limit = get_setting("suggestions.max_suggestions", 5)

    if isinstance(payload, str):
        try:
            payload = json.loads(extract_json(payload))
        except json.JSONDecodeError as e:
            raise SuggestionServiceError(f"Unparseable suggestion reply: {e}") from e

    items = payload.get('suggestions') if isinstance(payload, dict) else None
    if not isinstance(items, list):
        raise SuggestionServiceError("Suggestion reply has no 'suggestions' list")

    suggestions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get('name')
        if not isinstance(name, str) or not name.strip():
            continue

        compat = item.get('compatibility')
        if not isinstance(compat, dict):
            compat = {}

        try:
            sex = Sex.coerce(item.get('sex') or item.get('gender'))
        except ValueError:
            sex = None

        reasoning = item.get('reasoning')
        suggestions.append(ExternalSuggestion(
            name=name.strip(),
            reasoning=reasoning.strip() if isinstance(reasoning, str) else "",
            confidence=clamp_score(item.get('confidence')),
            compatibility=Compatibility(
                last_name=clamp_score(compat.get('lastName')),
                siblings=clamp_score(compat.get('siblings')),
                overall=clamp_score(compat.get('overall')),
            ),
            sex=sex,
        ))
        if len(suggestions) >= limit:
            break

    return suggestions


# =============================================================================
# Client
# =============================================================================

class SuggestionClient:
    """
    Claude-backed suggestion service.

    Usage:
        client = SuggestionClient()
        suggestions = client.suggest(context)
    """

    def __init__(self, api_key: str = None, model: str = None, max_tokens: int = None,
                 temperature: float = None, timeout: float = None, client=None):
        if client is None:
            if api_key is None:
                api_key = get_config().anthropic_api_key
            if not api_key:
                raise SuggestionServiceError("ANTHROPIC_API_KEY not configured")
            if timeout is None:
                timeout = get_setting("suggestions.timeout_seconds", 30)
            client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

        self.client = client
        self.model = model or get_setting("suggestions.model", "claude-3-haiku-20240307")
        self.max_tokens = max_tokens or get_setting("suggestions.max_tokens", 1000)
        self.temperature = temperature if temperature is not None else get_setting("suggestions.temperature", 0.7)

    def complete(self, prompt: str) -> str:
        """Send one prompt and return the reply text."""
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=SYSTEM_PROMPT,
                messages=[
                    {"role": "user", "content": prompt}
                ]
            )
        except anthropic.APIError as e:
            raise SuggestionServiceError(f"Suggestion request failed: {e}") from e

        if not message.content:
            raise SuggestionServiceError("Empty reply from suggestion service")
        text = getattr(message.content[0], 'text', '') or ''
        if not text.strip():
            raise SuggestionServiceError("Empty reply from suggestion service")
        return text.strip()

    def suggest(self, context: FamilyContext) -> List[ExternalSuggestion]:
        content = self.complete(build_prompt(context))
        logger.debug(f"Raw suggestion reply: {content}")
        suggestions = parse_suggestions(content)
        logger.info(f"Received {len(suggestions)} external suggestions for '{context.last_name}'")
        return suggestions


__all__ = [
    'SYSTEM_PROMPT',
    'SuggestionServiceError',
    'build_prompt',
    'extract_json',
    'clamp_score',
    'parse_suggestions',
    'SuggestionClient',
]
