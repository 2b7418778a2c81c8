"""Simulated agent test runs.

Nothing is executed: the response is assembled from the configuration flags
and a keyword scan of the test input. The generated source is not consulted.
"""

from __future__ import annotations

from typing import Sequence

from .models import AgentConfig, TestHistoryEntry

TOOLS_MARKER = "[Using tools to process request]"
RETRIEVAL_MARKER = "[Retrieving relevant information]"

# First match wins, in this order.
CANNED_COMPLETIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("weather",),
        "The weather information you requested shows sunny conditions with a temperature of 72°F.",
    ),
    (
        ("search", "find"),
        "I've searched for the information and found 5 relevant results that match your query.",
    ),
    (
        ("calculate", "math"),
        "I've calculated the result: 42",
    ),
)
FALLBACK_COMPLETION = (
    "I've processed your request and completed the necessary tasks. "
    "Is there anything else you need help with?"
)


def canned_completion(text: str) -> str:
    lowered = (text or "").lower()
    for keywords, completion in CANNED_COMPLETIONS:
        if any(keyword in lowered for keyword in keywords):
            return completion
    return FALLBACK_COMPLETION


def simulate_response(config: AgentConfig, text: str) -> str:
    customization = config.customization
    output = f'Agent "{config.name}" response:\n\n'

    if customization.use_tools:
        output += f"{TOOLS_MARKER}\n"
    if customization.use_retrieval:
        output += f"{RETRIEVAL_MARKER}\n"

    if config.tasks:
        output += "\nExecuting tasks:\n"
        for task in config.tasks:
            output += f"- {task}: Completed\n"
        output += "\n"

    output += (
        f'Based on your input "{text}", I\'ve analyzed the request and prepared '
        f"a response using the {config.model} model.\n\n"
    )
    output += canned_completion(text)
    return output


def run_simulated_test(
    config: AgentConfig,
    text: str,
    history: Sequence[TestHistoryEntry] = (),
) -> tuple[str, list[TestHistoryEntry]]:
    """Simulate one run and return the output with a new, one-longer history."""
    output = simulate_response(config, text)
    return output, [*history, TestHistoryEntry(input=text, output=output)]
