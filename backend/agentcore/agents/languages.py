"""Language codes understood by the summarization and translation prompts."""

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
    "nl": "Dutch",
    "pl": "Polish",
    "tr": "Turkish",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
    "cs": "Czech",
    "el": "Greek",
    "hu": "Hungarian",
    "ro": "Romanian",
    "uk": "Ukrainian",
    "hi": "Hindi",
    "bn": "Bengali",
    "ta": "Tamil",
    "te": "Telugu",
    "ur": "Urdu",
    "th": "Thai",
    "vi": "Vietnamese",
    "id": "Indonesian",
    "ms": "Malay",
    "tl": "Filipino",
    "ar": "Arabic",
    "he": "Hebrew",
    "fa": "Persian",
}

_BY_LOWER_CODE = {code.lower(): name for code, name in SUPPORTED_LANGUAGES.items()}


def format_language_for_prompt(language: str) -> str:
    """'es' -> 'Spanish'. Unknown codes and free-form names pass through unchanged."""
    return _BY_LOWER_CODE.get(language.strip().lower(), language.strip())
