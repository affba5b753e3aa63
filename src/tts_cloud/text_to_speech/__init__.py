"""Text to Speech v1 client."""
from tts_cloud.text_to_speech.constants import Accept, Language, PartOfSpeech, PronunciationFormat, Voice
from tts_cloud.text_to_speech.v1 import TextToSpeechV1

__all__ = ["Accept", "Language", "PartOfSpeech", "PronunciationFormat", "TextToSpeechV1", "Voice"]
