"""
Text to Speech v1 client.

Operations map one-to-one onto the service's REST endpoints:

    Voices          GET    /v1/voices, /v1/voices/{voice}
    Synthesis       POST   /v1/synthesize                  (binary audio)
    Pronunciation   GET    /v1/pronunciation
    Custom models   POST/GET/DELETE /v1/customizations[/{customization_id}]
    Custom words    PUT/POST/GET/DELETE
                           /v1/customizations/{customization_id}/words[/{word}]

Required arguments default to None so that every missing one is reported
together, as a MissingParameterError, before anything is sent.

Usage:
    async with TextToSpeechV1({"iam_apikey": key}) as tts:
        voices = (await tts.list_voices()).result["voices"]
        audio = await tts.synthesize("Hello", voice=Voice.EN_US_ALLISON,
                                     accept=Accept.WAV)
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from tts_cloud.service.base import BaseService, require_params
from tts_cloud.service.transport import DetailedResponse, RequestSpec
from tts_cloud.text_to_speech.constants import enum_value

JSON_ACCEPT = {"Accept": "application/json"}
JSON_BODY = {"Accept": "application/json", "Content-Type": "application/json"}


def _headers(defaults: Mapping[str, str], extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
    merged = dict(defaults)
    merged.update(extra or {})
    return merged


def _body(**fields: Any) -> Dict[str, Any]:
    return {k: enum_value(v) for k, v in fields.items() if v is not None}


class TextToSpeechV1(BaseService):
    """Client for the Text to Speech v1 API."""

    name = "text_to_speech"
    default_url = "https://stream.watsonplatform.net/text-to-speech/api"

    # ─────────────────────────────────────────────────────────────────────────
    # Voices
    # ─────────────────────────────────────────────────────────────────────────

    async def get_voice(
        self,
        voice: Optional[str] = None,
        *,
        customization_id: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """Information about one voice, optionally with a custom model applied."""
        require_params({"voice": voice}, ["voice"])
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/voices/{voice}",
            path_params={"voice": enum_value(voice)},
            params={"customization_id": customization_id},
            headers=_headers(JSON_ACCEPT, headers),
        ))

    async def list_voices(self, *, headers: Optional[Mapping[str, str]] = None) -> DetailedResponse:
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/voices",
            headers=_headers(JSON_ACCEPT, headers),
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Synthesis
    # ─────────────────────────────────────────────────────────────────────────

    async def synthesize(
        self,
        text: Optional[str] = None,
        *,
        accept: Optional[str] = None,
        voice: Optional[str] = None,
        customization_id: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """
        Synthesize text (plain or SSML) to audio.

        Args:
            text: Text to speak, at most 5 KB.
            accept: Audio format (see Accept); the service default is
                audio/ogg;codecs=opus.
            voice: Voice name; the service default is en-US_MichaelVoice.
            customization_id: Custom voice model matching the voice's language.

        Returns:
            DetailedResponse whose ``result`` is the audio as bytes.
        """
        require_params({"text": text}, ["text"])
        defaults = {"Content-Type": "application/json"}
        if accept is not None:
            defaults["Accept"] = enum_value(accept)
        return await self.dispatch(RequestSpec(
            method="POST",
            url="/v1/synthesize",
            params={"voice": enum_value(voice), "customization_id": customization_id},
            json={"text": text},
            headers=_headers(defaults, headers),
            stream=True,
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Pronunciation
    # ─────────────────────────────────────────────────────────────────────────

    async def get_pronunciation(
        self,
        text: Optional[str] = None,
        *,
        voice: Optional[str] = None,
        format: Optional[str] = None,
        customization_id: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """Phonetic pronunciation of a word in the ipa or ibm format."""
        require_params({"text": text}, ["text"])
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/pronunciation",
            params={
                "text": text,
                "voice": enum_value(voice),
                "format": enum_value(format),
                "customization_id": customization_id,
            },
            headers=_headers(JSON_ACCEPT, headers),
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Custom voice models
    # ─────────────────────────────────────────────────────────────────────────

    async def create_voice_model(
        self,
        name: Optional[str] = None,
        *,
        language: Optional[str] = None,
        description: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"name": name}, ["name"])
        return await self.dispatch(RequestSpec(
            method="POST",
            url="/v1/customizations",
            json=_body(name=name, language=language, description=description),
            headers=_headers(JSON_BODY, headers),
        ))

    async def delete_voice_model(
        self,
        customization_id: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id}, ["customization_id"])
        return await self.dispatch(RequestSpec(
            method="DELETE",
            url="/v1/customizations/{customization_id}",
            path_params={"customization_id": customization_id},
            headers=_headers({}, headers),
        ))

    async def get_voice_model(
        self,
        customization_id: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id}, ["customization_id"])
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/customizations/{customization_id}",
            path_params={"customization_id": customization_id},
            headers=_headers(JSON_ACCEPT, headers),
        ))

    async def list_voice_models(
        self,
        *,
        language: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """Custom models owned by these credentials, optionally for one language."""
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/customizations",
            params={"language": enum_value(language)},
            headers=_headers(JSON_ACCEPT, headers),
        ))

    async def update_voice_model(
        self,
        customization_id: Optional[str] = None,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        words: Optional[List[Mapping[str, Any]]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """
        Rename or re-describe a custom model and add or update its words.

        ``words`` is a list of ``{"word": ..., "translation": ...}`` entries;
        an empty list changes no words.
        """
        require_params({"customization_id": customization_id}, ["customization_id"])
        return await self.dispatch(RequestSpec(
            method="POST",
            url="/v1/customizations/{customization_id}",
            path_params={"customization_id": customization_id},
            json=_body(name=name, description=description, words=_words(words)),
            headers=_headers(JSON_BODY, headers),
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Custom words
    # ─────────────────────────────────────────────────────────────────────────

    async def add_word(
        self,
        customization_id: Optional[str] = None,
        word: Optional[str] = None,
        translation: Optional[str] = None,
        *,
        part_of_speech: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        """Add or replace one word; ``part_of_speech`` applies to Japanese only."""
        require_params(
            {"customization_id": customization_id, "word": word, "translation": translation},
            ["customization_id", "word", "translation"],
        )
        return await self.dispatch(RequestSpec(
            method="PUT",
            url="/v1/customizations/{customization_id}/words/{word}",
            path_params={"customization_id": customization_id, "word": word},
            json=_body(translation=translation, part_of_speech=part_of_speech),
            headers=_headers({"Content-Type": "application/json"}, headers),
        ))

    async def add_words(
        self,
        customization_id: Optional[str] = None,
        words: Optional[List[Mapping[str, Any]]] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id, "words": words}, ["customization_id", "words"])
        return await self.dispatch(RequestSpec(
            method="POST",
            url="/v1/customizations/{customization_id}/words",
            path_params={"customization_id": customization_id},
            json={"words": _words(words)},
            headers=_headers(JSON_BODY, headers),
        ))

    async def delete_word(
        self,
        customization_id: Optional[str] = None,
        word: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id, "word": word}, ["customization_id", "word"])
        return await self.dispatch(RequestSpec(
            method="DELETE",
            url="/v1/customizations/{customization_id}/words/{word}",
            path_params={"customization_id": customization_id, "word": word},
            headers=_headers({}, headers),
        ))

    async def get_word(
        self,
        customization_id: Optional[str] = None,
        word: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id, "word": word}, ["customization_id", "word"])
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/customizations/{customization_id}/words/{word}",
            path_params={"customization_id": customization_id, "word": word},
            headers=_headers(JSON_ACCEPT, headers),
        ))

    async def list_words(
        self,
        customization_id: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> DetailedResponse:
        require_params({"customization_id": customization_id}, ["customization_id"])
        return await self.dispatch(RequestSpec(
            method="GET",
            url="/v1/customizations/{customization_id}/words",
            path_params={"customization_id": customization_id},
            headers=_headers(JSON_ACCEPT, headers),
        ))


def _words(words: Optional[List[Mapping[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    if words is None:
        return None
    return [_body(**dict(w)) for w in words]
