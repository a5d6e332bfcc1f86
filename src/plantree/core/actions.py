# src/plantree/core/actions.py
"""
Helpers for plan lines such as '(move r2d2 kitchen bedroom):5'.

The optional ':<time>' suffix is the start time of the action in the plan.
"""

import re


def _reduce(text: str) -> str:
    """Lowercase and collapse whitespace, as plan lines are compared."""
    text = re.sub(r"\s+", " ", text.strip().lower())
    text = re.sub(r"\(\s+", "(", text)
    return re.sub(r"\s+\)", ")", text)


def parse_action(text: str) -> tuple[str, int]:
    """Split a plan line into (expression, time). time is -1 when absent."""
    action = _reduce(text)
    time = -1

    if ":" in action:
        action, time_str = action.split(":", 1)
        try:
            time = int(time_str.strip())
        except ValueError:
            raise ValueError(f"Invalid action time: {time_str}")
        action = action.strip()

    if not (action.startswith("(") and action.endswith(")")):
        raise ValueError(f"Expected action: (name arg ...), got: {text}")

    return action[1:-1].strip(), time


def get_action_expression(text: str) -> str:
    return parse_action(text)[0]


def get_action_time(text: str) -> int:
    return parse_action(text)[1]


def get_action_name(text: str) -> str:
    return get_action_expression(text).split(" ")[0]


def get_action_params(text: str) -> list[str]:
    parts = get_action_expression(text).split(" ")
    return [p for p in parts[1:] if p]
