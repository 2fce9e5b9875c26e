"""Keyword/emoji emotion classifier.

A small fixed lexicon maps each emotion to its trigger keywords. For every
emotion, intensity is the fraction of its keywords present in the text
(case-insensitive substring match) and confidence equals intensity.

Tie-break: when several emotions share the highest intensity, the one
declared first in the lexicon wins. The order carries no meaning beyond
making the result deterministic.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence

from heart.affect.state import EmotionSample


# Declaration order is the tie-break order
EMOTION_LEXICON: Dict[str, Sequence[str]] = {
    "happy": ("happy", "joy", "excited", "great", "wonderful", "amazing", "love", "❤️", "😊", "😄"),
    "sad": ("sad", "depressed", "unhappy", "cry", "tears", "😢", "😭", "💔"),
    "angry": ("angry", "mad", "furious", "hate", "annoyed", "😠", "😡", "💢"),
    "surprised": ("wow", "omg", "amazing", "incredible", "😲", "😱", "🤯"),
    "calm": ("calm", "peaceful", "relaxed", "chill", "😌", "🧘"),
    "excited": ("excited", "thrilled", "pumped", "energetic", "🤩", "⚡"),
}

DEFAULT_SAMPLE = EmotionSample(emotion="calm", intensity=0.3, confidence=0.5)


class EmotionClassifier:
    """Pure text -> EmotionSample classifier. Holds no mutable state."""

    def __init__(
        self,
        lexicon: Optional[Mapping[str, Sequence[str]]] = None,
        default: EmotionSample = DEFAULT_SAMPLE,
    ):
        source = lexicon if lexicon is not None else EMOTION_LEXICON
        # Copy into tuples so callers cannot mutate the lexicon afterwards
        self._lexicon: Dict[str, tuple] = {
            emotion: tuple(k.lower() for k in keywords)
            for emotion, keywords in source.items()
            if keywords
        }
        self.default = default

    @property
    def emotions(self) -> List[str]:
        return list(self._lexicon)

    def scores(self, text: str) -> List[EmotionSample]:
        """All matching emotions, strongest first (stable on ties)."""
        lowered = (text or "").lower()
        matches = []
        for emotion, keywords in self._lexicon.items():
            hits = sum(1 for keyword in keywords if keyword in lowered)
            if hits:
                ratio = hits / len(keywords)
                matches.append(EmotionSample(emotion=emotion, intensity=ratio, confidence=ratio))

        # sorted() is stable, so equal intensities keep declaration order
        return sorted(matches, key=lambda s: s.intensity, reverse=True)

    def classify(self, text: str) -> EmotionSample:
        """Best-matching emotion, or the calm default when nothing matches."""
        ranked = self.scores(text)
        return ranked[0] if ranked else self.default
