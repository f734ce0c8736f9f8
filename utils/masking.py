import re

DEFAULT_PLACEHOLDER = "____"


def mask_line(text: str, mask_level: int, placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    """Replace the last `mask_level` words with a placeholder, keeping spacing."""
    if mask_level <= 0:
        return text
    tokens = re.split(r"(\s+)", text)
    word_total = sum(1 for token in tokens if token and not token.isspace())
    first_hidden = word_total - min(mask_level, word_total)
    word_index = 0
    masked_tokens = []
    for token in tokens:
        if not token or token.isspace():
            masked_tokens.append(token)
            continue
        masked_tokens.append(placeholder if word_index >= first_hidden else token)
        word_index += 1
    return "".join(masked_tokens)
