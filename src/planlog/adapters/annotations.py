import re

from ..core.ports import AnnotationParser

# Hangul syllables, on top of ASCII letters, digits, "_" and "-"
DEFAULT_EXTRA_LETTERS = "가-힣"

# [[Name]]: no "]" allowed inside, so nesting and escaping are impossible
LINK_RE = re.compile(r"\[\[([^\]]+)\]\]")


def tag_pattern(extra_letters: str = DEFAULT_EXTRA_LETTERS) -> re.Pattern[str]:
    """#word at start of text or after whitespace."""
    return re.compile(r"(?:^|(?<=\s))#([a-zA-Z0-9_\-" + extra_letters + r"]+)")


TAG_RE = tag_pattern()


def _distinct(values) -> list[str]:
    return list(dict.fromkeys(values))


def extract_tags(text: str, pattern: re.Pattern[str] = TAG_RE) -> list[str]:
    return _distinct(m.group(1) for m in pattern.finditer(text or ""))


def extract_links(text: str) -> list[str]:
    names = (m.group(1).strip() for m in LINK_RE.finditer(text or ""))
    return _distinct(n for n in names if n)


class RegexAnnotationParser(AnnotationParser):
    def __init__(self, extra_letters: str = DEFAULT_EXTRA_LETTERS):
        self.extra_letters = extra_letters
        self.tag_re = tag_pattern(extra_letters)

    def tags(self, text: str) -> list[str]:
        return extract_tags(text, self.tag_re)

    def links(self, text: str) -> list[str]:
        return extract_links(text)
