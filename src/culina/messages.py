"""User-facing messages returned by the HTTP layer, per locale."""

MESSAGES: dict[str, dict[str, str]] = {
    "fr": {
        "quota_exceeded": (
            "Quota de génération gratuit dépassé. "
            "Passez à Pro pour des générations illimitées."
        ),
        "invalid_request": "Il manque la demande ou l'identifiant utilisateur.",
        "generic": "Désolé, une erreur est survenue. Veuillez réessayer.",
        "degraded": "Recette créée, mais certains détails n'ont pas pu être enregistrés.",
    },
    "en": {
        "quota_exceeded": (
            "Free generation quota exceeded. "
            "Upgrade to Pro for unlimited generations."
        ),
        "invalid_request": "Missing prompt or userId.",
        "generic": "Sorry, something went wrong. Please try again.",
        "degraded": "Recipe created, but some details could not be saved.",
    },
}

DEFAULT_LOCALE = "fr"


def get_message(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up a message, falling back to the default locale."""
    catalog = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    return catalog.get(key) or MESSAGES[DEFAULT_LOCALE][key]
