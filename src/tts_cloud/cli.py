"""
Command-Line Interface for tts-cloud.

Talks to the Text to Speech service with credentials discovered the same
way the library does (flags > environment > VCAP_SERVICES).

Usage Examples:
    # Show which credentials and scheme would be used (no network)
    tts-cloud credentials

    # List voices
    tts-cloud voices --json

    # Synthesize to a file
    tts-cloud synthesize "Hello world" --voice en-US_AllisonVoice \\
        --accept audio/wav --out hello.wav

    # Pronunciation of a word
    tts-cloud pronounce tomato --format ipa

Environment Variables:
    TEXT_TO_SPEECH_PLATFORM_API_KEY: IAM API key
    TEXT_TO_SPEECH_USERNAME / TEXT_TO_SPEECH_PASSWORD: Basic credentials
    TEXT_TO_SPEECH_URL: Service URL override
    TTS_CLOUD_SETTINGS: Settings YAML (timeouts, IAM endpoint, logging)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from tts_cloud.core.config import ClientConfig, ConfigValidationError, load_settings
from tts_cloud.core.logging import configure_logging, get_logger, info, new_request_id, redact_fields
from tts_cloud.errors import TTSCloudError
from tts_cloud.text_to_speech import TextToSpeechV1

_OPTION_FLAGS = ("url", "username", "password", "api_key", "iam_apikey", "iam_url", "access_token")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="tts-cloud", description="Text to Speech cloud client")

    # Credentials (override environment and VCAP_SERVICES)
    parser.add_argument("--url", help="Service URL")
    parser.add_argument("--username", help="Basic-auth username")
    parser.add_argument("--password", help="Basic-auth password")
    parser.add_argument("--api-key", dest="api_key", help="Static API key")
    parser.add_argument("--iam-apikey", dest="iam_apikey", help="IAM API key")
    parser.add_argument("--iam-url", dest="iam_url", help="IAM token endpoint")
    parser.add_argument("--access-token", dest="access_token", help="Caller-managed bearer token")
    parser.add_argument("--opt-out", action="store_true",
                        help="Send X-Watson-Learning-Opt-Out: true")

    parser.add_argument("--settings", default=os.getenv("TTS_CLOUD_SETTINGS"),
                        help="Settings YAML file")
    parser.add_argument("--json", action="store_true", help="Print JSON output")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("credentials", help="Print resolved credentials (masked)")

    sub.add_parser("voices", help="List available voices")

    synth = sub.add_parser("synthesize", help="Synthesize text to an audio file")
    synth.add_argument("text", help="Text or SSML to synthesize")
    synth.add_argument("--voice", help="Voice name, e.g. en-US_AllisonVoice")
    synth.add_argument("--accept", default="audio/wav", help="Audio format (default: audio/wav)")
    synth.add_argument("--customization-id", dest="customization_id", help="Custom voice model GUID")
    synth.add_argument("--out", default="out.wav", help="Output path (default: out.wav)")

    pron = sub.add_parser("pronounce", help="Show the pronunciation of a word")
    pron.add_argument("word", help="Word to look up")
    pron.add_argument("--voice", help="Voice that selects the language")
    pron.add_argument("--format", choices=["ipa", "ibm"], help="Phoneme format")

    return parser.parse_args(argv)


def _options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {name: getattr(args, name) for name in _OPTION_FLAGS if getattr(args, name)}
    if args.opt_out:
        options["headers"] = {"X-Watson-Learning-Opt-Out": True}
    return options


def _load_config(settings_path: Optional[str]) -> ClientConfig:
    if not settings_path:
        return ClientConfig()
    return load_settings(settings_path).get_client_config()


def _emit(payload: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(payload)


async def _run(client: TextToSpeechV1, args: argparse.Namespace, log) -> Dict[str, Any]:
    async with client:
        if args.command == "voices":
            response = await client.list_voices()
            voices = response.result.get("voices", []) if isinstance(response.result, dict) else []
            return {"ok": True, "voices": [v.get("name") for v in voices]}

        if args.command == "synthesize":
            info(log, "synth_start", chars=len(args.text), out=args.out)
            response = await client.synthesize(
                args.text,
                voice=args.voice,
                accept=args.accept,
                customization_id=args.customization_id,
            )
            out_path = Path(args.out)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(response.result)
            return {"ok": True, "out": str(out_path), "bytes": len(response.result)}

        if args.command == "pronounce":
            response = await client.get_pronunciation(args.word, voice=args.voice, format=args.format)
            return {"ok": True, "word": args.word, **(response.result or {})}

    raise SystemExit(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for configuration or service errors).
    """
    args = _parse_args(argv)

    configure_logging()
    log = get_logger("tts-cloud.cli")
    new_request_id()

    try:
        config = _load_config(args.settings)
        if args.settings and not os.getenv("TTS_CLOUD_LOG_LEVEL"):
            configure_logging(config.logging.level, force=True)
        client = TextToSpeechV1(_options_from_args(args), config=config)
    except (ConfigValidationError, FileNotFoundError) as e:
        _emit({"ok": False, "error": "CONFIGURATION", "message": str(e)}, args.json)
        return 1
    except TTSCloudError as e:
        _emit(e.to_dict(), args.json)
        return 1

    if args.command == "credentials":
        _emit({
            "ok": True,
            "service": client.name,
            "scheme": client.scheme.value,
            "credentials": redact_fields(client.get_credentials()),
        }, args.json)
        return 0

    try:
        payload = asyncio.run(_run(client, args, log))
    except TTSCloudError as e:
        _emit(e.to_dict(), args.json)
        return 1

    _emit(payload, args.json)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
