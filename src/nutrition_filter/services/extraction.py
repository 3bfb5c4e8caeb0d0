"""Heuristic nutrition extraction from product page markup."""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from nutrition_filter.domain.nutrition import NutritionRecord

# kJ is roughly 4.184 x kcal, so of two numbers within this ratio the larger is kJ.
KJ_TO_KCAL_MAX_RATIO = 10

_NUMBER = r"(\d+(?:[.,]\d+)?)"
_CALORIES_PATTERN = re.compile(rf"{_NUMBER}\s*/\s*{_NUMBER}?")
_MACRO_FIELDS = ("protein", "fat", "carbs")
_ALL_FIELDS = (*_MACRO_FIELDS, "calories")


@dataclass(frozen=True)
class FieldLabels:
    """Vocabulary used to locate nutrition facts on a page."""

    section_header: str = "харчова цінність"
    protein: str = "Білки"
    fat: str = "Жири"
    carbs: str = "Вуглеводи"
    gram_unit: str = "г"


@dataclass(frozen=True)
class TextNode:
    """Element text with its position in document order."""

    position: int
    text: str


def parse_number(raw: str) -> float:
    """Parse a decimal that may use a comma separator."""
    return float(raw.replace(",", "."))


def disambiguate_calories(first: float, second: float | None) -> float | None:
    """Pick the kcal value out of a "kcal / kJ" pair given in either order.

    Returns None when neither ordering is plausible.
    """
    if second is None:
        return first
    if first < second < first * KJ_TO_KCAL_MAX_RATIO:
        return first
    if second < first < second * KJ_TO_KCAL_MAX_RATIO:
        return second
    return None


def parse_calories(text: str) -> float | None:
    """Find the first "NUMBER / [NUMBER]" fragment and resolve its kcal value.

    The slash is required during extraction: a bare "150" with no slash yields
    None, otherwise every gram value or price would read as calories. Call
    disambiguate_calories(150, None) directly to resolve a lone number.
    """
    match = _CALORIES_PATTERN.search(text)
    if match is None:
        return None
    first = parse_number(match.group(1))
    second = parse_number(match.group(2)) if match.group(2) else None
    return disambiguate_calories(first, second)


def text_nodes(markup: str) -> list[TextNode]:
    """Return the full text of every element in document order."""
    soup = BeautifulSoup(markup, "html.parser")
    return [
        TextNode(position=index, text=element.get_text())
        for index, element in enumerate(soup.find_all(True))
    ]


@dataclass
class NutritionExtractor:
    """Extracts protein, fat, carbs and calories from raw markup."""

    labels: FieldLabels = field(default_factory=FieldLabels)

    def __post_init__(self) -> None:
        self._patterns = {
            "protein": self._label_pattern(self.labels.protein),
            "fat": self._label_pattern(self.labels.fat),
            "carbs": self._label_pattern(self.labels.carbs),
        }

    def extract(self, markup: str) -> NutritionRecord | None:
        """Return the nutrition record, or None when facts are incomplete."""
        nodes = text_nodes(markup)
        found: dict[str, float] = {}

        sections = sorted(
            (node for node in nodes if self._is_section(node.text)),
            key=lambda node: len(node.text),
        )
        self._scan(sections, found)
        if any(name not in found for name in _MACRO_FIELDS):
            self._scan(nodes, found)

        if any(name not in found for name in _MACRO_FIELDS):
            return None
        return NutritionRecord(
            protein=found["protein"],
            fat=found["fat"],
            carbs=found["carbs"],
            calories=found.get("calories", 0.0),
        )

    def read_field(self, name: str, text: str) -> float | None:
        """Read a single field from a block of text."""
        if name == "calories":
            return parse_calories(text)
        match = self._patterns[name].search(text)
        if match is None:
            return None
        return parse_number(match.group(1))

    def _scan(self, nodes: list[TextNode], found: dict[str, float]) -> None:
        for node in nodes:
            for name in _ALL_FIELDS:
                if name in found:
                    continue
                value = self.read_field(name, node.text)
                if value is not None:
                    found[name] = value
            if len(found) == len(_ALL_FIELDS):
                return

    def _is_section(self, text: str) -> bool:
        return (
            self.labels.section_header.casefold() in text.casefold()
            and self.labels.protein in text
        )

    def _label_pattern(self, label: str) -> re.Pattern[str]:
        unit = re.escape(self.labels.gram_unit)
        return re.compile(
            rf"{re.escape(label)}[^\d]*?\(\s*{unit}\s*\)[^\d]*{_NUMBER}",
            re.IGNORECASE,
        )
