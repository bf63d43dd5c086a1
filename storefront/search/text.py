"""
Language-aware text normalization for search vectors and queries.

The tokenizer splits text into words (letters and digits, optionally joined by
hyphens). Every word consumes one position, stop words included, so phrase
distances stay stable. Hyphenated words emit the whole compound followed by
its parts. Words containing digits are kept verbatim (serial numbers, carat
weights); other words go through the Snowball stemmer of their script.
"""

import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional
from nltk.stem.snowball import SnowballStemmer

# Positions above this value collapse onto it
MAX_POSITION = 16383

_WORD = re.compile(r"[^\W_]+(?:-[^\W_]+)*")
_DIGIT = re.compile(r"\d")

# Characters folded or preserved before combining marks are stripped
_FOLD = {"ё": "е", "Ё": "Е"}
_KEEP = frozenset("йЙ")

STOP_WORDS: Dict[str, frozenset] = {
    "en": frozenset("""
        i me my myself we our ours ourselves you your yours yourself yourselves
        he him his himself she her hers herself it its itself they them their
        theirs themselves what which who whom this that these those am is are
        was were be been being have has had having do does did doing a an the
        and but if or because as until while of at by for with about against
        between into through during before after above below to from up down
        in out on off over under again further then once here there when where
        why how all any both each few more most other some such no nor not only
        own same so than too very s t can will just don should now
    """.split()),
    "ru": frozenset("""
        и в во не что он на я с со как а то все она так его но да ты к у же вы
        за бы по только ее мне было вот от меня еще нет о из ему теперь когда
        даже ну вдруг ли если уже или ни быть был него до вас нибудь опять уж
        вам ведь там потом себя ничего ей может они тут где есть надо ней для
        мы тебя их чем была сам чтоб без будто чего раз тоже себе под будет ж
        тогда кто этот того потому этого какой совсем ним здесь этом один почти
        мой тем чтобы нее сейчас были куда зачем всех никогда можно при наконец
        два об другой хоть после над больше тот через эти нас про всего них
        какая много разве три эту моя впрочем хорошо свою этой перед иногда
        лучше чуть том нельзя такой им более всегда конечно всю между
    """.split()),
}

_STEMMER_LANGUAGES = {"en": "english", "ru": "russian"}


@dataclass(frozen=True)
class Token:
    """A normalized word occurrence. Stop words carry no lexeme."""
    position: int
    lexeme: Optional[str]
    word: int


def unaccent(text: str) -> str:
    """Strip diacritics, fold ё to е and keep й intact."""
    chars = []
    for ch in text:
        if ch in _KEEP:
            chars.append(ch)
        elif ch in _FOLD:
            chars.append(_FOLD[ch])
        elif ch.isascii():
            chars.append(ch)
        else:
            decomposed = unicodedata.normalize("NFKD", ch)
            chars.append("".join(c for c in decomposed if not unicodedata.combining(c)))
    return "".join(chars)


@lru_cache(maxsize=None)
def _stemmer(language: str) -> SnowballStemmer:
    return SnowballStemmer(_STEMMER_LANGUAGES[language])


class TextNormalizer:
    """Turns free text into positioned lexemes for one search language."""

    def __init__(self, language: str):
        if language not in _STEMMER_LANGUAGES:
            raise ValueError(f"Unsupported search language: {language}")
        self.language = language

    def tokenize(self, text: Optional[str], start: int = 1) -> List[Token]:
        """
        Split text into positioned tokens.

        Args:
            text: Source text, may be None
            start: Position assigned to the first token

        Returns:
            Tokens in text order
        """
        tokens: List[Token] = []
        if not text:
            return tokens

        position = start
        for word_index, match in enumerate(_WORD.finditer(unaccent(text).lower())):
            word = match.group(0)
            parts = [word]
            if "-" in word:
                parts.extend(word.split("-"))
            for part in parts:
                tokens.append(Token(min(position, MAX_POSITION), self.lexeme(part), word_index))
                position += 1
        return tokens

    def lexeme(self, word: str) -> Optional[str]:
        """Normalize one lower-cased word, returning None for stop words."""
        if _DIGIT.search(word):
            return word

        # Latin words always use the English rules, as PostgreSQL's russian config does
        language = "en" if word.isascii() else self.language
        if word in STOP_WORDS[language]:
            return None
        return _stemmer(language).stem(word)


@lru_cache(maxsize=None)
def get_normalizer(language: str) -> TextNormalizer:
    """Return the shared normalizer for a search language."""
    return TextNormalizer(language)
