"""Search filters and the filter groups shown in the search screen.

Each filter enum member carries its API value (None for "any", which sends
no parameter) and a display label.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class FilterType(Enum):
    """Filter categories; values are the API query parameter names."""

    ORDER_BY = "order_by"
    ORIENTATION = "orientation"
    COLOR = "color"

    @property
    def title(self) -> str:
        return _FILTER_TYPE_TITLES[self]


_FILTER_TYPE_TITLES = {
    FilterType.ORDER_BY: "Ordered by",
    FilterType.ORIENTATION: "Orientation",
    FilterType.COLOR: "Color",
}


class OrderedByFilter(Enum):
    RELEVANCE = "relevance"
    NEWEST = "latest"

    @property
    def filter_type(self) -> FilterType:
        return FilterType.ORDER_BY

    @property
    def api_value(self) -> str | None:
        return self.value

    @property
    def label(self) -> str:
        return "Relevance" if self is OrderedByFilter.RELEVANCE else "Newest"


class OrientationFilter(Enum):
    ANY = "any"
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "squarish"

    @property
    def filter_type(self) -> FilterType:
        return FilterType.ORIENTATION

    @property
    def api_value(self) -> str | None:
        return None if self is OrientationFilter.ANY else self.value

    @property
    def label(self) -> str:
        return "Square" if self is OrientationFilter.SQUARE else self.value.capitalize()


class ColorFilter(Enum):
    ANY = "any"
    BLACK_AND_WHITE = "black_and_white"
    WHITE = "white"
    BLACK = "black"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    PURPLE = "purple"
    MAGENTA = "magenta"
    GREEN = "green"
    TEAL = "teal"
    BLUE = "blue"

    @property
    def filter_type(self) -> FilterType:
        return FilterType.COLOR

    @property
    def api_value(self) -> str | None:
        return None if self is ColorFilter.ANY else self.value

    @property
    def label(self) -> str:
        if self is ColorFilter.BLACK_AND_WHITE:
            return "Black and White"
        return self.value.capitalize()

    @property
    def hex(self) -> list[str]:
        """Swatch colors for the filter chip."""
        return list(_COLOR_HEX[self])


_COLOR_HEX: dict[ColorFilter, tuple[str, ...]] = {
    ColorFilter.ANY: (),
    ColorFilter.BLACK_AND_WHITE: ("#000000", "#FFFFFF"),
    ColorFilter.WHITE: ("#FFFFFF",),
    ColorFilter.BLACK: ("#000000",),
    ColorFilter.YELLOW: ("#FCDC00",),
    ColorFilter.ORANGE: ("#FE9200",),
    ColorFilter.RED: ("#F44E3B",),
    ColorFilter.PURPLE: ("#7B64FF",),
    ColorFilter.MAGENTA: ("#AB149E",),
    ColorFilter.GREEN: ("#A4DD00",),
    ColorFilter.TEAL: ("#68CCCA",),
    ColorFilter.BLUE: ("#009CE0",),
}

SearchFilter = Union[OrderedByFilter, OrientationFilter, ColorFilter]

FILTERS_BY_TYPE: dict[FilterType, tuple[SearchFilter, ...]] = {
    FilterType.ORDER_BY: tuple(OrderedByFilter),
    FilterType.ORIENTATION: tuple(OrientationFilter),
    FilterType.COLOR: tuple(ColorFilter),
}


def filter_from_value(filter_type: FilterType, api_value: str | None) -> SearchFilter | None:
    """Find the filter of ``filter_type`` with the given API value.

    None maps to the category's "any" member, when it has one.
    """
    for candidate in FILTERS_BY_TYPE[filter_type]:
        if candidate.api_value == api_value:
            return candidate
    return None


@dataclass(frozen=True)
class FilterOption:
    filter: SearchFilter
    is_selected: bool

    @property
    def label(self) -> str:
        return self.filter.label

    @property
    def swatch(self) -> list[str]:
        if isinstance(self.filter, ColorFilter):
            return self.filter.hex
        return []


@dataclass(frozen=True)
class FilterGroup:
    filter_type: FilterType
    options: tuple[FilterOption, ...]

    @property
    def title(self) -> str:
        return self.filter_type.title

    @property
    def selected(self) -> SearchFilter | None:
        for option in self.options:
            if option.is_selected:
                return option.filter
        return None


class FilterGroupsBuilder:
    """Builds one group per filter category, marking the query's selection."""

    def build_filter_groups(self, filters: dict[FilterType, SearchFilter]) -> list[FilterGroup]:
        groups: list[FilterGroup] = []
        for filter_type in FilterType:
            selected = filters.get(filter_type)
            options = tuple(
                FilterOption(
                    filter=candidate,
                    is_selected=selected is not None and candidate.api_value == selected.api_value,
                )
                for candidate in FILTERS_BY_TYPE[filter_type]
            )
            groups.append(FilterGroup(filter_type=filter_type, options=options))
        return groups
