#!/usr/bin/env python3
"""
Recommendation Data Types
=========================
Family context supplied with a recommendation request, suggestions from
the external generative service, and the ranked candidates returned to
the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from namestore import NameRecord, Sex


class PopularityBracket(Enum):
    """Requested popularity tier, judged on the latest year's births"""
    RARE = "rare"
    UNCOMMON = "uncommon"
    MODERATE = "moderate"
    POPULAR = "popular"
    ANY = "any"

    @classmethod
    def coerce(cls, value) -> 'PopularityBracket':
        if isinstance(value, PopularityBracket):
            return value
        if value is None:
            return cls.ANY
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(b.value for b in cls)
            raise ValueError(f"Unknown popularity bracket '{value}'. Available: {valid}") from None


class SiblingStyle(Enum):
    """How a new name should relate to the siblings' names"""
    SIMILAR = "similar"
    COMPLEMENTARY = "complementary"
    ANY = "any"

    @classmethod
    def coerce(cls, value) -> 'SiblingStyle':
        if isinstance(value, SiblingStyle):
            return value
        if value is None:
            return cls.ANY
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown sibling style '{value}'. Available: {valid}") from None


@dataclass
class Child:
    """An existing child of the family"""
    name: str
    sex: Optional[Sex] = None

    def __post_init__(self):
        self.name = self.name.strip()
        self.sex = Sex.coerce(self.sex)


@dataclass
class Preferences:
    """Recommendation preferences. gender=None means either sex."""
    gender: Optional[Sex] = None
    popularity: PopularityBracket = PopularityBracket.ANY
    max_letters: Optional[int] = None
    meaning_weight: str = "medium"
    style: SiblingStyle = SiblingStyle.ANY

    def __post_init__(self):
        self.gender = Sex.coerce(self.gender)
        self.popularity = PopularityBracket.coerce(self.popularity)
        self.style = SiblingStyle.coerce(self.style)


@dataclass
class FamilyContext:
    """Everything known about the family for one recommendation request"""
    last_name: str
    existing_children: List[Child] = field(default_factory=list)
    preferences: Preferences = field(default_factory=Preferences)

    def __post_init__(self):
        self.last_name = self.last_name.strip()
        children = []
        for child in self.existing_children:
            if isinstance(child, dict):
                child = Child(child.get('name', ''), child.get('sex') or child.get('gender'))
            if child.name:
                children.append(child)
        self.existing_children = children

    @property
    def sibling_names(self) -> List[str]:
        return [child.name for child in self.existing_children]


@dataclass(frozen=True)
class Compatibility:
    """Compatibility estimates from the external service, each in [0, 1]"""
    last_name: float
    siblings: float
    overall: float

    def to_dict(self) -> dict:
        return {
            'lastName': self.last_name,
            'siblings': self.siblings,
            'overall': self.overall,
        }


@dataclass(frozen=True)
class ExternalSuggestion:
    """A name proposed by the external generative service (already clamped)"""
    name: str
    reasoning: str
    confidence: float
    compatibility: Compatibility
    sex: Optional[Sex] = None

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'reasoning': self.reasoning,
            'confidence': self.confidence,
            'compatibility': self.compatibility.to_dict(),
            'sex': self.sex.value if self.sex else None,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Local sub-scores of a candidate and their weighted total"""
    last_name: float
    siblings: float
    popularity: float
    trend: float
    total: float

    def to_dict(self) -> dict:
        return {
            'lastName': self.last_name,
            'siblings': self.siblings,
            'popularity': self.popularity,
            'trend': self.trend,
            'total': self.total,
        }


class CandidateSource(Enum):
    """Where a ranked candidate came from"""
    LOCAL = "local"            # local scoring only
    EXTERNAL = "external"      # external suggestion only (corpus match or placeholder)
    BOTH = "both"              # locally scored and suggested externally


@dataclass
class ScoredCandidate:
    """
    A ranked name.

    LOCAL candidates carry no insight; EXTERNAL and BOTH always do.
    """
    record: NameRecord
    score: float
    source: CandidateSource = CandidateSource.LOCAL
    insight: Optional[ExternalSuggestion] = None
    breakdown: Optional[ScoreBreakdown] = None
    is_placeholder: bool = False

    def __post_init__(self):
        if self.source is CandidateSource.LOCAL and self.insight is not None:
            raise ValueError("local candidates cannot carry an external insight")
        if self.source is not CandidateSource.LOCAL and self.insight is None:
            raise ValueError(f"{self.source.value} candidates need an external insight")
        self.score = max(0.0, min(1.0, float(self.score)))

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def is_externally_sourced(self) -> bool:
        return self.source is not CandidateSource.LOCAL

    def to_dict(self) -> dict:
        return {
            'name': self.record.name,
            'sex': self.record.sex.value,
            'score': self.score,
            'source': self.source.value,
            'isExternallySourced': self.is_externally_sourced,
            'isPlaceholder': self.is_placeholder,
            'recentBirths': self.record.most_recent_count,
            'breakdown': self.breakdown.to_dict() if self.breakdown else None,
            'insight': self.insight.to_dict() if self.insight else None,
        }


__all__ = [
    'PopularityBracket',
    'SiblingStyle',
    'Child',
    'Preferences',
    'FamilyContext',
    'Compatibility',
    'ExternalSuggestion',
    'ScoreBreakdown',
    'CandidateSource',
    'ScoredCandidate',
]
