def strip_trigger(text: str, trigger: str) -> str | None:
    """Extracts the query from launcher input.

    Args:
        text: Raw input, e.g. "brew wget".
        trigger: Keyword prefix including its trailing space, e.g. "brew ".

    Returns:
        The trimmed remainder, or None if the input does not start with the
        trigger. The keyword alone (without the space) counts as an empty query.
    """
    if text.startswith(trigger):
        return text[len(trigger) :].strip()
    if text == trigger.rstrip():
        return ""
    return None
