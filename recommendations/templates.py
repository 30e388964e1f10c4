"""
Recommendation Engine - Templates.

Static vocabulary used to phrase recommendations:
- WORD_REPLACEMENTS: milder alternatives for charged words
- DIMENSION_GUIDANCE: tone guidance per controversy dimension
- GENERIC_SUGGESTIONS: broadening suggestions used to reach the
  category minimum when specific triggers run out
"""

from typing import Dict, List, Tuple

from risk_scoring.types import ControversyDimension

from .types import RecommendationKind


# Charged word -> milder alternative
WORD_REPLACEMENTS: Dict[str, str] = {
    "hate": "strongly dislike",
    "hates": "strongly dislikes",
    "stupid": "misguided",
    "idiot": "person",
    "idiots": "people",
    "idiotic": "ill-considered",
    "moron": "person",
    "morons": "people",
    "disgusting": "disappointing",
    "disgraceful": "concerning",
    "pathetic": "underwhelming",
    "worst": "weakest",
    "terrible": "poor",
    "horrible": "unfortunate",
    "awful": "poor",
    "liar": "person who misspoke",
    "liars": "people who misspoke",
    "lies": "inaccurate claims",
    "evil": "harmful",
    "insane": "surprising",
    "crazy": "unexpected",
    "trash": "low quality",
    "garbage": "low quality",
    "destroy": "challenge",
    "destroyed": "challenged",
    "never": "rarely",
    "always": "often",
    "everyone": "many people",
    "nobody": "few people",
    "furious": "frustrated",
    "outrageous": "surprising",
    "ridiculous": "questionable",
}


DIMENSION_GUIDANCE: Dict[ControversyDimension, str] = {
    ControversyDimension.POLITICAL: (
        "Present political points as opinion, attribute claims to sources, "
        "and avoid partisan labels"
    ),
    ControversyDimension.RELIGIOUS: (
        "Avoid generalizations about faith groups and keep references to "
        "beliefs descriptive rather than evaluative"
    ),
    ControversyDimension.SOCIAL: (
        "Use inclusive language and avoid framing social groups in opposition "
        "to each other"
    ),
    ControversyDimension.CULTURAL: (
        "Check cultural references for stereotypes and give context for "
        "culture-specific humor"
    ),
    ControversyDimension.ECONOMIC: (
        "Qualify financial claims, avoid blaming groups for economic outcomes, "
        "and cite data where possible"
    ),
}


# (kind, suggested text, rationale), in the order they are used
GENERIC_SUGGESTIONS: List[Tuple[RecommendationKind, str, str]] = [
    (
        RecommendationKind.TONE_ADJUSTMENT,
        "Soften absolute statements with qualified language (\"often\", \"in my view\")",
        "Absolute claims invite pile-on corrections",
    ),
    (
        RecommendationKind.ADDITION,
        "Add a sentence of context explaining the intent behind the post",
        "Context reduces the chance of the message being read in the worst light",
    ),
    (
        RecommendationKind.ADDITION,
        "Acknowledge that readers may hold different views on this topic",
        "Acknowledging other perspectives lowers defensive reactions",
    ),
    (
        RecommendationKind.ADDITION,
        "Cite a source or data point for the main claim",
        "Sourced claims are less likely to be challenged as misinformation",
    ),
    (
        RecommendationKind.TONE_ADJUSTMENT,
        "Replace sarcasm or irony with a direct statement",
        "Sarcasm is frequently misread out of context",
    ),
    (
        RecommendationKind.TONE_ADJUSTMENT,
        "Lead with the constructive point before any criticism",
        "Opening with criticism frames the whole post as an attack",
    ),
    (
        RecommendationKind.ADDITION,
        "Add a clear call to respectful discussion",
        "Setting the tone for replies discourages hostile threads",
    ),
]


def replacement_for(word: str) -> str:
    """Milder alternative for a charged word, or '' when none is known."""
    replacement = WORD_REPLACEMENTS.get(word.lower(), "")
    if replacement and word[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement
