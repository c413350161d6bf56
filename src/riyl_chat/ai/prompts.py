"""Fixed instruction template wrapped around the user's query."""

from __future__ import annotations

RIYL_TEMPLATE = "Give me {count} related music recommendations RIYL {prompt}"


def build_riyl_prompt(prompt: str, count: int = 9) -> str:
    return RIYL_TEMPLATE.format(count=count, prompt=prompt)
