# prompts.py
"""
Prompt text for the quiz generator.

A prompt is two parts: the context segment describes the source page and is
identical for every call against the same Webpage (initial generation and
every later revision), so a generator that caches prompt prefixes can reuse
it. The task segment carries the per-call instructions.
"""
from typing import Iterable

from schemas import ITEMS_PER_QUIZ

CONTEXT_TEMPLATE = """You write multiple-choice quizzes about web pages.

<webpage>
<title>{title}</title>
<content>
{text}
</content>
</webpage>
"""

ITEM_FORMAT = """{
      "stem": "Question text here?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctOption": 0,
      "sourceSnippet": "Relevant snippet copied exactly from the webpage content"
    }"""

CREATE_TASK_TEMPLATE = """Create a BuzzFeed-style multiple-choice quiz with exactly {n} questions based on the webpage above.

The quiz should be engaging, fun, and test knowledge about the content. Each question has 4 options with exactly one correct answer.

Return your response as valid JSON in this exact format:
{{
  "title": "Quiz title here",
  "slug": "short-url-friendly-quiz-name",
  "items": [
    {item_format}
  ]
}}

Important requirements:
{requirements}
- Make the quiz title catchy and BuzzFeed-style
- The slug is a few lower-case words joined by hyphens
"""

REVISE_TASK_TEMPLATE = """Write exactly {n} new multiple-choice questions about the webpage above to complete an existing quiz.

The quiz already contains these questions. Do not ask them again or ask near-duplicates of them:
{existing}

These questions were rejected earlier. Do not write them or close variants of them:
{excluded}

Additional instructions from the editor:
{extra}

Return your response as a valid JSON array in this exact format:
[
    {item_format}
]

Important requirements:
{requirements}
"""


def _requirements(n: int) -> str:
    return "\n".join([
        f"- Exactly {n} questions",
        "- Exactly 4 options per question",
        "- correctOption is the index (0-3) of the correct answer",
        "- Each question is based on actual content from the webpage",
        "- sourceSnippet is copied verbatim from the webpage content",
        "- Return ONLY the JSON, no other text",
    ])


def _render_stems(stems: Iterable[str]) -> str:
    lines = [f"- {s}" for s in stems]
    return "\n".join(lines) if lines else "(none)"


def build_context(title: str, text: str) -> str:
    return CONTEXT_TEMPLATE.format(title=title, text=text)


def build_create_task(n: int = ITEMS_PER_QUIZ) -> str:
    return CREATE_TASK_TEMPLATE.format(n=n, item_format=ITEM_FORMAT, requirements=_requirements(n))


def build_revise_task(n: int, existing_stems, excluded_stems, extra_instructions: str = "") -> str:
    return REVISE_TASK_TEMPLATE.format(
        n=n,
        existing=_render_stems(existing_stems),
        excluded=_render_stems(excluded_stems),
        extra=(extra_instructions or "").strip() or "(none)",
        item_format=ITEM_FORMAT,
        requirements=_requirements(n),
    )
