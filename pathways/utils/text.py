"""Text cleanup for model output."""
import re


_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F-\x9F]')


def sanitize_text(text: str) -> str:
    """Strip control characters and tidy whitespace in generated text.

    Newlines survive (runs of three or more collapse to a paragraph break),
    so JSON embedded in the reply stays parseable.

    Examples:
        >>> sanitize_text("  Ana's score: 95%\\x07  ")
        "Ana's score: 95%"
        >>> sanitize_text(None)
        ''
    """
    if text is None:
        return ""

    text = _CONTROL_CHARS.sub('', str(text))
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    lines = [line.strip() for line in text.split('\n')]
    return '\n'.join(lines).strip()
