"""Platform languages, seeded by setup_database."""

from .models import Language

# (code, name, native name, flag, display order)
LANGUAGES = (
    ("pt-BR", "Brazilian Portuguese", "Português Brasileiro", "br.svg", 10),
    ("en", "English", "English", "us.svg", 20),
    ("es", "Spanish", "Español", "es.svg", 30),
    ("ja", "Japanese", "日本語", "jp.svg", 40),
    ("zh", "Chinese", "中文", "cn.svg", 50),
    ("ar", "Arabic", "العربية", "sa.svg", 60),
    ("he", "Hebrew", "עברית", "il.svg", 70),
    ("tr", "Turkish", "Türkçe", "tr.svg", 80),
    ("fr", "French", "Français", "fr.svg", 90),
    ("de", "German", "Deutsch", "de.svg", 100),
    ("it", "Italian", "Italiano", "it.svg", 110),
    ("ru", "Russian", "Русский", "ru.svg", 120),
    ("ko", "Korean", "한국어", "kr.svg", 130),
    ("nl", "Dutch", "Nederlands", "nl.svg", 140),
    ("sv", "Swedish", "Svenska", "se.svg", 150),
)


def seed_languages() -> int:
    """Create or refresh the platform languages. Returns the number created."""
    created = 0
    for code, name, native_name, flag_file, display_order in LANGUAGES:
        _language, was_created = Language.objects.update_or_create(
            code=code,
            defaults={
                "name": name,
                "native_name": native_name,
                "flag_file": flag_file,
                "display_order": display_order,
                "is_active": True,
            },
        )
        created += int(was_created)
    return created
