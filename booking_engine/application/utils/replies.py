from __future__ import annotations

from typing import Any

from booking_engine.domain.entities.intent import IntentAction

REPLIES: dict[str, dict[str, str]] = {
    "got_it": {
        "en": "Got it ✅",
        "he": "קיבלנו ✅",
        "ar": "تم الاستلام ✅",
    },
    "slot_unreadable": {
        "en": "Sorry, I couldn't understand that slot.",
        "he": "מצטערים, לא הצלחנו להבין את הזמן שנבחר.",
        "ar": "عذراً، لم أتمكن من فهم هذا الموعد.",
    },
    "nothing_pending": {
        "en": "No pending booking.",
        "he": "אין הזמנה ממתינה.",
        "ar": "لا يوجد حجز معلق.",
    },
    "choose_service": {
        "en": "Which service would you like? Here are some options:",
        "he": "איזה שירות תרצה? הנה כמה אפשרויות:",
        "ar": "أي خدمة ترغب بها؟ إليك بعض الخيارات:",
    },
    "fully_booked": {
        "en": "Sorry, we're fully booked right now. Try another time or contact the salon directly.",
        "he": "מצטערים, אין לנו תורים פנויים כרגע. נסה זמן אחר או צור קשר עם הסלון.",
        "ar": "عذراً، لا توجد مواعيد متاحة حالياً. جرّب وقتاً آخر أو تواصل مع الصالون مباشرة.",
    },
    "pick_time": {
        "en": "Pick a time ({timezone})",
        "he": "בחר שעה ({timezone})",
        "ar": "اختر وقتاً ({timezone})",
    },
    "awaiting_approval": {
        "en": "Thanks! Waiting for approval for {service} on {label}.",
        "he": "תודה! ממתינים לאישור עבור {service} בתאריך {label}.",
        "ar": "شكراً! بانتظار الموافقة على {service} في {label}.",
    },
    "approved": {
        "en": "Approved ✅ {service} on {label}",
        "he": "אושר ✅ {service} בתאריך {label}",
        "ar": "تمت الموافقة ✅ {service} في {label}",
    },
    "rejected": {
        "en": "Cancelled ❌ {service} on {label} is now open.",
        "he": "בוטל ❌ {service} בתאריך {label} פנוי כעת.",
        "ar": "تم الإلغاء ❌ {service} في {label} أصبح متاحاً الآن.",
    },
    "pending_status": {
        "en": "We're still waiting for approval for {label}.",
        "he": "אנחנו עדיין ממתינים לאישור עבור {label}.",
        "ar": "ما زلنا ننتظر الموافقة على {label}.",
    },
    "no_pending_invite": {
        "en": "I don't see a pending booking. Want me to show the next openings?",
        "he": "אין הזמנה ממתינה. להציג את התורים הפנויים הקרובים?",
        "ar": "لا أرى حجزاً معلقاً. هل تريد أن أعرض أقرب المواعيد المتاحة؟",
    },
    "cancel_prompt": {
        "en": "Cancel this booking?",
        "he": "לבטל את ההזמנה?",
        "ar": "هل تريد إلغاء هذا الحجز؟",
    },
    "nothing_to_cancel": {
        "en": "I don't see an upcoming booking to cancel.",
        "he": "אין הזמנה קרובה לביטול.",
        "ar": "لا أرى حجزاً قادماً لإلغائه.",
    },
    "option_approve": {
        "en": "Approve (Owner)",
        "he": "אישור (בעלים)",
        "ar": "موافقة (المالك)",
    },
    "option_reject": {
        "en": "Reject",
        "he": "דחייה",
        "ar": "رفض",
    },
    "option_other_times": {
        "en": "See other times",
        "he": "זמנים אחרים",
        "ar": "أوقات أخرى",
    },
    # resolver responses
    "show_availability": {
        "en": "Sure! Here are the next available slots.",
        "he": "בשמחה! הנה התורים הפנויים הקרובים.",
        "ar": "بالتأكيد! إليك أقرب المواعيد المتاحة.",
    },
    "pending_wait": {
        "en": "We're still waiting for the owner to approve your booking for {label}. We'll send an update soon.",
        "he": "אנחנו עדיין ממתינים לאישור הבעלים עבור {label}. נעדכן בקרוב.",
        "ar": "ما زلنا ننتظر موافقة المالك على حجزك في {label}. سنرسل لك تحديثاً قريباً.",
    },
    "pending_none": {
        "en": "I couldn't find a pending booking. Would you like to book a new appointment?",
        "he": "לא מצאתי הזמנה ממתינה. לקבוע תור חדש?",
        "ar": "لم أجد حجزاً معلقاً. هل ترغب في حجز موعد جديد؟",
    },
    "cancel_hint": {
        "en": "No problem. Tap 'Reject' to cancel the pending booking, or let us know a better time.",
        "he": "אין בעיה. לחץ על 'דחייה' כדי לבטל את ההזמנה הממתינה, או ספר לנו מה זמן נוח יותר.",
        "ar": "لا مشكلة. اضغط 'رفض' لإلغاء الحجز المعلق، أو أخبرنا بوقت أنسب.",
    },
    "escalate": {
        "en": "I'll let the salon know you'd like to speak with someone. Expect a follow-up soon.",
        "he": "אעביר לסלון שתרצה לדבר עם מישהו. יחזרו אליך בקרוב.",
        "ar": "سأُبلغ الصالون أنك ترغب في التحدث مع أحد. توقع متابعة قريباً.",
    },
    "greeting": {
        "en": "Hi! I'm the assistant for {name}. I can help you book or answer questions.",
        "he": "היי! אני העוזר של {name}. אפשר לקבוע תור או לשאול שאלות.",
        "ar": "مرحباً! أنا مساعد {name}. يمكنني مساعدتك في الحجز أو الإجابة عن أسئلتك.",
    },
    "unavailable": {
        "en": "I'm struggling to understand that request right now. Try asking about booking a time or our services.",
        "he": "קשה לי להבין את הבקשה כרגע. נסה לשאול על קביעת תור או על השירותים שלנו.",
        "ar": "أجد صعوبة في فهم هذا الطلب حالياً. جرّب السؤال عن حجز موعد أو عن خدماتنا.",
    },
}

_ACTION_DEFAULTS = {
    IntentAction.SHOW_AVAILABILITY: "show_availability",
    IntentAction.CANCEL_BOOKING: "cancel_hint",
    IntentAction.ESCALATE: "escalate",
    IntentAction.ANSWER: "greeting",
    IntentAction.UNKNOWN: "unavailable",
}


def reply(key: str, language: str = "en", **values: Any) -> str:
    table = REPLIES[key]
    template = table.get(language) or table["en"]
    return template.format(**values)


def default_reply_for_action(
    action: IntentAction,
    language: str,
    business_name: str,
    pending_label: str | None,
) -> str:
    """Canned reply used when a classifier answer carries no usable text."""
    if action is IntentAction.PENDING_STATUS:
        if pending_label:
            return reply("pending_wait", language, label=pending_label)
        return reply("pending_none", language)
    return reply(_ACTION_DEFAULTS[action], language, name=business_name)
