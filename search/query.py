"""Search queries and the builder the search screen edits them through."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from search.filters import (
    FilterType,
    OrderedByFilter,
    OrientationFilter,
    SearchFilter,
    filter_from_value,
)


@dataclass(frozen=True)
class SearchQuery:
    """Query text plus at most one selected filter per category."""

    text: str
    filters: Mapping[FilterType, SearchFilter] = field(default_factory=dict)

    def api_params(self) -> dict[str, str]:
        """Query parameters for the search endpoint; "any" filters are omitted."""
        params: dict[str, str] = {}
        for filter_type, selected in self.filters.items():
            if selected.api_value is not None:
                params[filter_type.value] = selected.api_value
        params["query"] = self.text
        return params

    def to_dict(self) -> dict[str, Any]:
        """Serializable form, as kept by the recent-queries store."""
        return {
            "text": self.text,
            "filters": {
                filter_type.value: selected.api_value
                for filter_type, selected in self.filters.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SearchQuery":
        """Rebuild a query from ``to_dict`` output, skipping unknown filters."""
        filters: dict[FilterType, SearchFilter] = {}
        for type_value, api_value in dict(data.get("filters", {})).items():
            try:
                filter_type = FilterType(type_value)
            except ValueError:
                continue
            selected = filter_from_value(filter_type, api_value)
            if selected is not None:
                filters[filter_type] = selected
        return cls(text=str(data.get("text", "")), filters=filters)


def default_filters() -> dict[FilterType, SearchFilter]:
    return {
        FilterType.ORDER_BY: OrderedByFilter.NEWEST,
        FilterType.ORIENTATION: OrientationFilter.ANY,
    }


class SearchQueryBuilder:
    """Mutable accumulator for the query being edited.

    Starts with newest-first ordering and any orientation.
    """

    def __init__(self) -> None:
        self._text = ""
        self._filters = default_filters()

    def text(self, text: str) -> "SearchQueryBuilder":
        self._text = text
        return self

    def filter(self, selected: SearchFilter) -> "SearchQueryBuilder":
        self._filters[selected.filter_type] = selected
        return self

    def reset(self) -> "SearchQueryBuilder":
        self._text = ""
        self._filters = default_filters()
        return self

    def query(self, query: SearchQuery) -> "SearchQueryBuilder":
        """Adopt a query's text and overlay its filters on the current ones."""
        self._text = query.text
        self._filters.update(query.filters)
        return self

    def build(self) -> SearchQuery:
        return SearchQuery(text=self._text, filters=dict(self._filters))
