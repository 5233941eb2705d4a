"""Localized instruction templates for route segments."""

from __future__ import annotations

import re
from typing import Any, Mapping, Protocol

DEFAULT_LANGUAGE = "en"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

CATALOG: dict[str, dict[str, str]] = {
    "en": {
        "goTo": "Take the {destination} to floor {floor}",
        "proceedTo": "Arrived at {destination}. Proceed to your next stop.",
        "arrivedAt": "You have arrived at {destination}",
        "navigationComplete": "Navigation complete",
        "stairs": "stairs",
        "escalator": "escalator",
        "lift": "lift",
    },
    "hi": {
        "goTo": "मंज़िल {floor} के लिए {destination} लें",
        "proceedTo": "{destination} पहुँच गए। अगले पड़ाव की ओर बढ़ें।",
        "arrivedAt": "आप {destination} पहुँच गए हैं",
        "navigationComplete": "नेविगेशन पूरा हुआ",
        "stairs": "सीढ़ियाँ",
        "escalator": "एस्केलेटर",
        "lift": "लिफ्ट",
    },
    "kn": {
        "goTo": "ಮಹಡಿ {floor} ಗೆ {destination} ಬಳಸಿ",
        "proceedTo": "{destination} ತಲುಪಿದ್ದೀರಿ. ಮುಂದಿನ ನಿಲ್ದಾಣಕ್ಕೆ ಮುಂದುವರಿಯಿರಿ.",
        "arrivedAt": "ನೀವು {destination} ತಲುಪಿದ್ದೀರಿ",
        "navigationComplete": "ನ್ಯಾವಿಗೇಷನ್ ಪೂರ್ಣಗೊಂಡಿದೆ",
        "stairs": "ಮೆಟ್ಟಿಲುಗಳು",
        "escalator": "ಎಸ್ಕಲೇಟರ್",
        "lift": "ಲಿಫ್ಟ್",
    },
}


class Translate(Protocol):
    """Callable the route composer uses to build instruction text."""

    def __call__(self, key: str, **params: Any) -> str: ...


class Translator:
    """Template lookup with English fallback and `{name}` substitution."""

    def __init__(self, language: str = DEFAULT_LANGUAGE, catalog: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self.catalog = catalog if catalog is not None else CATALOG
        if language not in self.catalog:
            raise ValueError(f"Unsupported language '{language}'")
        self.language = language

    @property
    def languages(self) -> list[str]:
        return sorted(self.catalog.keys())

    def __call__(self, key: str, **params: Any) -> str:
        return self.translate(key, **params)

    def translate(self, key: str, **params: Any) -> str:
        template = self.catalog[self.language].get(key)
        if template is None:
            template = self.catalog.get(DEFAULT_LANGUAGE, {}).get(key, key)
        # Single pass so substituted values are never re-expanded.
        return _PLACEHOLDER.sub(lambda m: str(params[m.group(1)]) if m.group(1) in params else m.group(0), template)
