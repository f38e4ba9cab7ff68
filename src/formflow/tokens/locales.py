"""Locale-level date and time formats (strftime syntax).

Used by the {date}, {time} and {datetime} tokens when neither the token nor
the form supplies a format. Unknown locales fall back to the language part
(``fr_CA`` -> ``fr``), then to ``en``.
"""

from typing import NamedTuple


class LocaleFormats(NamedTuple):
    date_format: str
    time_format: str
    datetime_format: str


LOCALES: dict[str, LocaleFormats] = {
    "en": LocaleFormats("%b %d, %Y", "%I:%M %p", "%b %d, %Y %I:%M %p"),
    "en_GB": LocaleFormats("%d %b %Y", "%H:%M", "%d %b %Y %H:%M"),
    "de": LocaleFormats("%d.%m.%Y", "%H:%M", "%d.%m.%Y %H:%M"),
    "es": LocaleFormats("%d/%m/%Y", "%H:%M", "%d/%m/%Y %H:%M"),
    "fr": LocaleFormats("%d/%m/%Y", "%H:%M", "%d/%m/%Y %H:%M"),
    "it": LocaleFormats("%d/%m/%Y", "%H:%M", "%d/%m/%Y %H:%M"),
    "nl": LocaleFormats("%d-%m-%Y", "%H:%M", "%d-%m-%Y %H:%M"),
    "pt_BR": LocaleFormats("%d/%m/%Y", "%H:%M", "%d/%m/%Y %H:%M"),
    "ja": LocaleFormats("%Y/%m/%d", "%H:%M", "%Y/%m/%d %H:%M"),
}


def get_locale(code: str) -> LocaleFormats:
    if code in LOCALES:
        return LOCALES[code]
    language = code.replace("-", "_").split("_")[0]
    return LOCALES.get(language, LOCALES["en"])
