"""User-facing texts. Everything the bot says to a chat lives here."""

from typing import Dict

TONE_LABELS: Dict[str, str] = {
    "friendly": "دوستانه",
    "formal": "رسمی",
    "technical": "فنی",
}

AI_DISCLOSURE = "🔈 این صدا توسط هوش مصنوعی تولید شده است."

NO_ANSWER_RECEIVED = "پاسخی از مدل دریافت نشد."
OPENAI_QUOTA_EXHAUSTED = (
    "متأسفیم، سهمیهٔ سرویس هوش مصنوعی فعلاً تمام شده است. لطفاً کمی بعد دوباره تلاش کنید."
)
OPENAI_UNAVAILABLE = "در حال حاضر امکان پاسخ‌گویی وجود ندارد. لطفاً بعداً دوباره تلاش کنید."
OPENAI_CONNECTION_FAILED = "خطایی در برقراری ارتباط با سرویس هوش مصنوعی رخ داد."

DEBUG_DEFAULT_PROMPT = "سلام"


def help_text(daily_quota: int) -> str:
    return "\n".join(
        [
            "سلام! هر پیامی بفرستید، با هوش مصنوعی پاسخ می‌دهم.",
            "",
            "دستورها:",
            "/help - نمایش همین راهنما",
            "/settings - نمایش تنظیمات فعلی",
            "/settings_tone formal|friendly|technical - تغییر لحن پاسخ‌ها",
            "/quota - وضعیت سهمیهٔ امروز",
            "/debug متن - پاسخ کامل مدل به صورت JSON",
            "",
            f"سقف استفادهٔ رایگان: {daily_quota} پیام در روز.",
        ]
    )


def settings_text(tone: str) -> str:
    label = TONE_LABELS.get(tone, tone)
    return "\n".join(
        [
            f"لحن فعلی پاسخ‌ها: {label} ({tone})",
            "برای تغییر: /settings_tone formal|friendly|technical",
        ]
    )


def tone_updated_text(tone: str) -> str:
    label = TONE_LABELS.get(tone, tone)
    return f"لحن پاسخ‌ها به «{label}» ({tone}) تغییر کرد."


TONE_USAGE = "استفاده: /settings_tone formal|friendly|technical"


def quota_status_text(used: int, daily_quota: int) -> str:
    remaining = max(0, daily_quota - used)
    return "\n".join(
        [
            f"سهمیهٔ امروز شما: {used} از {daily_quota} پیام مصرف شده است.",
            f"پیام‌های باقی‌مانده برای امروز: {remaining}.",
            "سهمیهٔ روزانه در نیمه‌شب UTC (حدود ساعت ۳:۳۰ به وقت ایران) مجدداً شارژ می‌شود.",
        ]
    )


def quota_exceeded_text(used: int, daily_quota: int) -> str:
    return (
        f"سقف استفادهٔ رایگان روزانه {daily_quota} پیام است و شما امروز {used} پیام "
        "مصرف کرده‌اید. لطفاً فردا دوباره تلاش کنید."
    )


def backoff_active_text(minutes_left: int) -> str:
    return (
        "سرویس هوش مصنوعی موقتاً در دسترس نیست. "
        f"لطفاً حدود {minutes_left} دقیقهٔ دیگر دوباره تلاش کنید."
    )
