"""System instructions sent to the AI gateway by the remote tiers."""

from __future__ import annotations

SEMANTIC_VECTOR_PROMPT = """\
You are a semantic feature extractor. Given a text, produce EXACTLY {dimension} \
numeric features, each a decimal between -1 and 1, that represent the meaning \
of the text.

Spread the features across these aspects:
- main topics
- mentioned entities
- sentiment and tone
- abstract concepts
- relations and actions
- context and domain
- weighted keywords
- general characteristics

Reply ONLY with a JSON array of {dimension} numbers, no explanations, \
for example: [0.1, -0.3, 0.8, ...]
"""

SEMANTIC_VECTOR_TEMPLATE = """\
Produce the embedding vector for this text:

{text}
"""

KEYWORD_PROMPT = """\
Extract the {max_keywords} most important keywords or key phrases from the \
text. Reply ONLY with a JSON array of strings, most important first, no \
explanations.
"""


def build_vector_prompt(dimension: int) -> str:
    return SEMANTIC_VECTOR_PROMPT.format(dimension=dimension)


def build_keyword_prompt(max_keywords: int) -> str:
    return KEYWORD_PROMPT.format(max_keywords=max_keywords)
