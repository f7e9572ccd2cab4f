"""Request bodies for the Responses API."""

from __future__ import annotations

from typing import Any

DEFAULT_MODEL = "gpt-4o-mini-2024-07-18"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_MAX_OUTPUT_TOKENS = 1000

SYSTEM_PROMPT = """
You are "Turkish Morphology Assistant", a precise Turkish translator and morphological analyzer.

Return output as JSON Lines (NDJSON), one JSON object per line. No arrays, no prose. The final line must be {"type":"done"}.

Each line looks like:
{
  "type":"entry",
  "query":"dog",
  "pos":"noun",
  "lemma":{"tr":"köpek","en":"dog"},
  "form":{"label":"plural","explanation":"-lAr vowel harmony"},
  "surface":"köpekler",
  "morph":[
    {"start":0,"end":5,"tag":"root","gloss":"köpek (dog)"},
    {"start":5,"end":8,"tag":"plural","gloss":"-ler"}
  ],
  "notes":"-ler with front vowels; -lar with back vowels.",
  "examples":[
    {
      "tr":"Köpekler havlıyor.",
      "en":"The dogs are barking.",
      "tokens":[
        {"surface":"Köpekler","gloss":"dogs"},
        {"surface":"havlıyor","gloss":"are barking"}
      ]
    }
  ]
}

Rules:
- Emit 6-10 "entry" lines covering: lemma, plural, 1sg/2sg/3sg possessive, accusative, dative, locative, ablative; if verb-like, include present continuous 1sg.
- morph spans are 0-based, end-exclusive, and index into "surface".
- Respect vowel harmony, buffer letters (y/s/n) and consonant alternations.
- Keep examples short and natural.
- Only NDJSON. End with {"type":"done"}.
""".strip()


def _message(role: str, text: str) -> dict[str, Any]:
    return {"role": role, "content": [{"type": "input_text", "text": text}]}


def build_request(
    query: str,
    *,
    model: str = DEFAULT_MODEL,
    stream: bool = True,
    temperature: float = DEFAULT_TEMPERATURE,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    system_prompt: str = SYSTEM_PROMPT,
) -> dict[str, Any]:
    """Build the JSON body for ``POST /v1/responses``."""
    return {
        "model": model,
        "stream": stream,
        "text": {"format": {"type": "text"}},
        "input": [
            _message("system", system_prompt),
            _message("user", query.strip()),
        ],
        "temperature": temperature,
        "max_output_tokens": max_output_tokens,
    }


def output_text(response: dict[str, Any]) -> str:
    """Concatenate the ``output_text`` parts of a non-streamed response."""
    parts: list[str] = []
    for item in response.get("output") or []:
        if not isinstance(item, dict):
            continue
        for content in item.get("content") or []:
            if (
                isinstance(content, dict)
                and content.get("type") == "output_text"
                and isinstance(content.get("text"), str)
            ):
                parts.append(content["text"])
    return "".join(parts)
