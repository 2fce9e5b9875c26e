"""Response generation seam."""
from heart.speech.responder import FALLBACK_RESPONSES, Responder, ResponseGenerator, SpeechSettings

__all__ = ["FALLBACK_RESPONSES", "Responder", "ResponseGenerator", "SpeechSettings"]
