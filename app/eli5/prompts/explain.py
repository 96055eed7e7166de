"""Explanation prompts: system instruction, reading levels, canned reply, starters."""

from __future__ import annotations
from textwrap import dedent

from eli5.models import ReadingLevel


SYSTEM_INSTRUCTION = dedent(
    """\
    You are the "Explain Like I'm 5 Bot" (ELI5 Bot).
    Your sole purpose is to take complex, academic, or technical text and explain it in simple, intuitive terms.

    Guidelines:
    1. Adhere strictly to the requested reading level provided by the user.
    2. Use analogies, metaphors, and simple everyday examples.
    3. Avoid jargon entirely. If a complex term is necessary, explain it immediately in simple words.
    4. Keep explanations concise but thorough enough to be useful.
    5. If the user's input is already simple, acknowledge it and offer a deeper or different simple perspective.
    6. For 'Toddler' level: Use very short sentences, simple concepts like "blocks", "toys", or "animals".
    7. For 'Teenager' level: You can use slightly more advanced analogies (tech, social media, sports) but keep the core explanation clear.
    8. For 'Cynical Skeptic': Explain it simply but with a touch of dry humor and real-world "no-nonsense" grounding.

    Always maintain a helpful, friendly, and patient persona."""
)

# Per-level templates. Replies do not use them yet; the level only labels the user message.
READING_LEVEL_PROMPTS: dict[ReadingLevel, str] = {
    ReadingLevel.TODDLER: "Explain this to me like I am a 3-year-old using simple words and colors.",  # noqa: E501
    ReadingLevel.CHILD: "Explain this to me like I am a 10-year-old. Use a cool analogy.",
    ReadingLevel.TEEN: "Explain this to me like a high schooler. Make it relatable.",
    ReadingLevel.NON_EXPERT: "Explain this to an adult who has no background in this specific field.",  # noqa: E501
    ReadingLevel.SKEPTIC: "Explain this to me simply, but cut the fluff and be a bit direct.",
}

# Every reply is this text, whatever the input or reading level.
CANNED_REPLY = (
    "Quantum computing is like a magical playground where tiny things called "
    "quantum bits, or qubits, can be both 0 and 1 at the same time, like a "
    "spinning coin that is both heads and tails until you look. Because qubits "
    "can do many things at once, quantum computers can try lots of answers "
    "quickly for certain puzzles. They use special rules from quantum physics, "
    "like being extra tiny and sharing secrets (we call it entanglement), to "
    "help solve tricky problems. It's a bit like asking many friends to try "
    "puzzle pieces at the same time and seeing which fits first.\n\n"
    "(That's quantum computing: tiny, magical bits doing many things together "
    "to solve hard puzzles!)"
)

EXAMPLE_PROMPTS = [
    "How do black holes work?",
    "Explain quantum computing",
    "What is inflation?",
    "Why is the sky blue?",
]
