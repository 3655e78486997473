"""
Prompt assembly for the Mon translator.
Base instruction, then learned corrections, then caller vocabulary.
"""

import json
from typing import Any, Iterable, Mapping

from .schema import CorrectionRecord, ScoredCandidate, VocabularyItem

# JSON schema for the model response; also passed to the generator as the output format
RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "source_language": {
            "type": "string",
            "description": 'The detected source language (e.g., "English" or "Mon").'
        },
        "translation": {
            "type": "string",
            "description": "The translated text."
        },
        "romanization": {
            "type": ["string", "null"],
            "description": "Phonetic reading (optional)."
        },
        "notes": {
            "type": ["string", "null"],
            "description": "Optional cultural notes."
        }
    },
    "required": ["source_language", "translation"]
}

BASE_SYSTEM_INSTRUCTION = """
You are "Ramanya," an expert AI translator specializing in the Mon language (ISO 639-3: mnw).
You have deep knowledge of Mon grammar, vocabulary, and cultural nuances.

### MON LANGUAGE PRIMER (STRICT RULES):
- **Script**: Use standard Myanmar script for Mon (e.g., use 'ၜ' not 'ဗ' where appropriate for the Mon 'ba').
- **Sentence Structure**: Typically Subject-Verb-Object (SVO).
- **Particles**:
  - Statement End: '... ရ' (Ra)
  - Polite Request: '... ညိ' (Nyi)
  - Question: '... ရော' (Rao) / '... ဟာ' (Ha)
  - Past Tense: '... တုဲ' (Toe)
  - Future: '... ရောင်' (Raung)
  - Continuous: '... မံင်' (Mang)

### FEW-SHOT TRAINING EXAMPLES:

**Example 1 (English -> Mon):**
Input: "Where are you going?"
Output: {"source_language": "English", "translation": "မၞး အာ အလဵု ရော?"}

**Example 2 (English -> Mon):**
Input: "I am eating rice."
Output: {"source_language": "English", "translation": "အဲ စမံင် ပုင် ရ။"}

**Example 3 (Mon -> English):**
Input: "မၞး မံင်မိပ်မံင်ဟာ"
Output: {"source_language": "Mon", "translation": "How are you doing?"}

**Example 4 (English -> Mon):**
Input: "Thank you very much."
Output: {"source_language": "English", "translation": "တင်ဂုဏ် ဗွဲမလောန် ရ။"}

### INSTRUCTIONS:
IF INPUT IS ENGLISH:
1. Translate it into Formal, Written Mon (Unicode).
2. Ensure the tone is polite.
3. Provide a Romanization (phonetic reading) if helpful.

IF INPUT IS MON:
1. Translate it into Natural, Fluent English.
2. Explain cultural context in the notes if needed.

You must always reply in valid JSON format matching this schema:
""".strip() + "\n" + json.dumps(RESPONSE_SCHEMA, indent=2, ensure_ascii=False)

LEARNED_SECTION_HEADER = "### LEARNED CORRECTIONS (most relevant first):"
VOCABULARY_SECTION_HEADER = "### USER DEFINED VOCABULARY:"


def _example_fields(example: Any):
    """Pull (original, suggestion, context) out of a candidate, record or mapping."""
    if isinstance(example, ScoredCandidate):
        example = example.record
    if isinstance(example, CorrectionRecord):
        return example.original, example.suggestion, example.context
    if isinstance(example, Mapping):
        return example.get("original", ""), example.get("suggestion", ""), example.get("context")
    return getattr(example, "original", ""), getattr(example, "suggestion", ""), getattr(example, "context", None)


def format_learned_section(ranked_examples: Iterable[Any]) -> str:
    lines = [LEARNED_SECTION_HEADER]
    for i, example in enumerate(ranked_examples, start=1):
        original, suggestion, context = _example_fields(example)
        line = f'{i}. When the input resembles "{original}", the correct output is "{suggestion}".'
        if context:
            line += f" (Context: {context})"
        lines.append(line)
    return "\n".join(lines)


def format_vocabulary_section(vocabulary: Iterable[Any]) -> str:
    lines = [VOCABULARY_SECTION_HEADER]
    for i, raw in enumerate(vocabulary, start=1):
        item = VocabularyItem.from_any(raw)
        line = f'{i}. "{item.original}" → "{item.suggestion}"'
        if item.context:
            line += f" (Context: {item.context})"
        lines.append(line)
    return "\n".join(lines)


def assemble(base_instruction: str, ranked_examples=None, vocabulary_overrides=None) -> str:
    """
    Build the final system instruction.

    Learned corrections always come before the caller's vocabulary so the
    explicitly declared entries sit closest to the end of the prompt. The two
    sections are not deduplicated against each other.
    """
    ranked_examples = list(ranked_examples or [])
    vocabulary_overrides = list(vocabulary_overrides or [])

    instruction = base_instruction
    if ranked_examples:
        instruction += "\n\n" + format_learned_section(ranked_examples)
    if vocabulary_overrides:
        instruction += "\n\n" + format_vocabulary_section(vocabulary_overrides)
    return instruction
