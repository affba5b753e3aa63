"""
Text to Speech v1 constants.

Every operation that takes one of these also accepts a plain string, so
voices and formats the service adds later work without a client release.
"""
from __future__ import annotations

from enum import Enum


class Voice(str, Enum):
    EN_US_ALLISON = "en-US_AllisonVoice"
    EN_US_LISA = "en-US_LisaVoice"
    EN_US_MICHAEL = "en-US_MichaelVoice"
    EN_GB_KATE = "en-GB_KateVoice"
    ES_ES_ENRIQUE = "es-ES_EnriqueVoice"
    ES_ES_LAURA = "es-ES_LauraVoice"
    ES_LA_SOFIA = "es-LA_SofiaVoice"
    ES_US_SOFIA = "es-US_SofiaVoice"
    DE_DE_DIETER = "de-DE_DieterVoice"
    DE_DE_BIRGIT = "de-DE_BirgitVoice"
    FR_FR_RENEE = "fr-FR_ReneeVoice"
    IT_IT_FRANCESCA = "it-IT_FrancescaVoice"
    JA_JP_EMI = "ja-JP_EmiVoice"
    PT_BR_ISABELA = "pt-BR_IsabelaVoice"


class Accept(str, Enum):
    """Audio formats for ``synthesize``. Replace ``nnnn`` with a sampling rate."""
    BASIC = "audio/basic"
    FLAC = "audio/flac"
    L16_RATE_NNNN = "audio/l16;rate=nnnn"
    OGG = "audio/ogg"
    OGG_CODECS_OPUS = "audio/ogg;codecs=opus"
    OGG_CODECS_VORBIS = "audio/ogg;codecs=vorbis"
    MP3 = "audio/mp3"
    MPEG = "audio/mpeg"
    MULAW_RATE_NNNN = "audio/mulaw;rate=nnnn"
    WAV = "audio/wav"
    WEBM = "audio/webm"
    WEBM_CODECS_OPUS = "audio/webm;codecs=opus"
    WEBM_CODECS_VORBIS = "audio/webm;codecs=vorbis"


class PronunciationFormat(str, Enum):
    IPA = "ipa"
    IBM = "ibm"


class Language(str, Enum):
    DE_DE = "de-DE"
    EN_US = "en-US"
    EN_GB = "en-GB"
    ES_ES = "es-ES"
    ES_LA = "es-LA"
    ES_US = "es-US"
    FR_FR = "fr-FR"
    IT_IT = "it-IT"
    JA_JP = "ja-JP"
    PT_BR = "pt-BR"


class PartOfSpeech(str, Enum):
    """Japanese part-of-speech tags for custom words."""
    JOSI = "Josi"
    MESI = "Mesi"
    KIGO = "Kigo"
    GOBI = "Gobi"
    DOSI = "Dosi"
    JODO = "Jodo"
    KOYU = "Koyu"
    STBI = "Stbi"
    SUJI = "Suji"
    KEDO = "Kedo"
    FUKU = "Fuku"
    KEYO = "Keyo"
    STTO = "Stto"
    RETA = "Reta"
    STZO = "Stzo"
    KATO = "Kato"
    HOKA = "Hoka"


def enum_value(value):
    """Plain string for an enum member or a string; None passes through."""
    if isinstance(value, Enum):
        return value.value
    return value
