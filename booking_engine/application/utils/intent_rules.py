from __future__ import annotations

import re

# Latin keywords use word boundaries; Hebrew/Arabic words take prefixes
# (ו, ה, ل, ال ...) so they are matched as substrings.
PENDING_STATUS_PATTERNS = {
    "en": re.compile(r"\b(status|confirm(ed)?|approved?|pending|update)\b"),
    "he": re.compile(r"(סטטוס|אישור|אושר|מאושר|ממתין|עדכון)"),
    "ar": re.compile(r"(حالة|تأكيد|موافقة|معلق|تحديث)"),
}

CANCEL_PATTERNS = {
    "en": re.compile(r"(\bcancel\w*|can't make it|cannot make it|\breschedul\w*)"),
    "he": re.compile(r"(ביטול|לבטל|לא אוכל להגיע|לדחות)"),
    "ar": re.compile(r"(إلغاء|الغاء|ألغي|الغي|لا أستطيع الحضور)"),
}

BOOKING_PATTERNS = {
    "en": re.compile(r"\b(book\w*|appointments?|schedul\w*|available|availability|slots?|times?|openings?)\b"),
    "he": re.compile(r"(תור|לקבוע|להזמין|פנוי|זמינות)"),
    "ar": re.compile(r"(موعد|مواعيد|حجز|احجز|متاح)"),
}

GREETING_PATTERNS = {
    "en": re.compile(r"\b(hi|hello|hey|thanks|thank you)\b"),
    "he": re.compile(r"(שלום|היי|תודה)"),
    "ar": re.compile(r"(مرحبا|السلام|شكرا|شكراً)"),
}


def _matches(patterns: dict[str, re.Pattern[str]], text: str, language: str) -> bool:
    lowered = text.lower()
    if patterns["en"].search(lowered):
        return True
    pattern = patterns.get(language)
    return bool(pattern and language != "en" and pattern.search(lowered))


def asks_pending_status(text: str, language: str = "en") -> bool:
    return _matches(PENDING_STATUS_PATTERNS, text, language)


def asks_to_cancel(text: str, language: str = "en") -> bool:
    return _matches(CANCEL_PATTERNS, text, language)


def asks_for_availability(text: str, language: str = "en") -> bool:
    return _matches(BOOKING_PATTERNS, text, language)


def is_greeting_or_thanks(text: str, language: str = "en") -> bool:
    return _matches(GREETING_PATTERNS, text, language)
