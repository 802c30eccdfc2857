"""Prompt templates.

- The classification prompt asks the completion model whether a memo carries
  information absent from the transaction description. The model answers with
  a single token; only an exact ``"Yes"`` marks the memo unsafe.
- The training prompt is the prefix of each fine-tuning example; the memo is
  the completion that follows it.
"""

from __future__ import annotations

CLASSIFICATION_TEMPLATE: str = (
    "I'm mapping bank account transaction descriptions to human readable memos. "
    "Tell me if the memo includes information that is not included in the transaction "
    "description and needs extra context.\n"
    "\n"
    "Transaction Description: {description}\n"
    "Human-Readable Memo: {memo}\n"
    "Needs Extra Context (Yes/No):"
)

NEEDS_CONTEXT_ANSWER: str = "Yes"

TRAINING_PROMPT_TEMPLATE: str = (
    "Amount: ${amount}\nTransaction Description: {description}\nHuman-Readable Memo:"
)

# Fine-tuned completions start with a space after the prompt's trailing colon.
COMPLETION_PREFIX: str = " "


def build_classification_prompt(description: str, memo: str) -> str:
    return CLASSIFICATION_TEMPLATE.format(description=description, memo=memo)


def build_training_prompt(amount_dollars: float, description: str) -> str:
    """Return the training prompt for a debit of ``amount_dollars``.

    Stored debits are negative; the prompt shows the spend as a positive
    amount with two decimals (``-42.5`` -> ``"42.50"``).
    """

    return TRAINING_PROMPT_TEMPLATE.format(amount=f"{-amount_dollars:.2f}", description=description)


def build_completion(memo: str) -> str:
    return COMPLETION_PREFIX + memo


__all__ = [
    "CLASSIFICATION_TEMPLATE",
    "NEEDS_CONTEXT_ANSWER",
    "build_classification_prompt",
    "build_completion",
    "build_training_prompt",
]
