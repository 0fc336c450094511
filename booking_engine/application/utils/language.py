from __future__ import annotations

import re

# Script ranges only; this tells Hebrew and Arabic script apart from
# everything else and says nothing about the actual language.
_HEBREW = re.compile(r"[\u0590-\u05FF]")
_ARABIC = re.compile(r"[\u0600-\u06FF\u0750-\u077F]")

SUPPORTED_LANGUAGES = ("en", "he", "ar")


def detect_language(text: str | None) -> str:
    if not text:
        return "en"
    if _HEBREW.search(text):
        return "he"
    if _ARABIC.search(text):
        return "ar"
    return "en"
