"""Compilador de saved views a query params de búsqueda.

Una saved view guarda sort + una lista ordenada de `FilterRule` (tipo entero,
valor string). Aquí se traduce a los MISMOS params que produciría
`build_document_search_params` para una búsqueda equivalente.

Limitación conocida:
- Solo se entienden los tipos de regla de `RULE_PARAMETERS`. El resto se
  omite (nunca se lanza error), así que el resultado puede filtrar MENOS que
  la vista real. `find_untranslated_rules` permite avisar al usuario.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Mapping

from core.domain.models import FilterRule, SavedView
from core.domain.queries import Pagination
from core.services.query_builder import (
    PARAM_CORRESPONDENT,
    PARAM_CREATED_AFTER,
    PARAM_CREATED_BEFORE,
    PARAM_DOCUMENT_TYPE,
    PARAM_ORDERING,
    PARAM_TAGS_ALL,
    PARAM_TITLE_CONTAINS,
    QueryParams,
    build_pagination_params,
)

logger = logging.getLogger(__name__)


class FilterRuleType(IntEnum):
    TITLE_CONTAINS = 0
    CORRESPONDENT_IS = 3
    DOCUMENT_TYPE_IS = 4
    HAS_TAGS_ALL = 6
    CREATED_AFTER = 17
    CREATED_BEFORE = 18


# Añadir un tipo de regla = una entrada aquí + un test.
RULE_PARAMETERS: Mapping[int, str] = {
    FilterRuleType.TITLE_CONTAINS: PARAM_TITLE_CONTAINS,
    FilterRuleType.CORRESPONDENT_IS: PARAM_CORRESPONDENT,
    FilterRuleType.DOCUMENT_TYPE_IS: PARAM_DOCUMENT_TYPE,
    FilterRuleType.HAS_TAGS_ALL: PARAM_TAGS_ALL,
    FilterRuleType.CREATED_AFTER: PARAM_CREATED_AFTER,
    FilterRuleType.CREATED_BEFORE: PARAM_CREATED_BEFORE,
}


def _is_inactive(rule: FilterRule) -> bool:
    return rule.value is None or rule.value == ""


def compile_saved_view(view: SavedView, pagination: Pagination | None = None) -> QueryParams:
    """Traduce sort + filter rules de `view` a query params.

    - Reglas con valor nulo/vacío se saltan (regla inactiva).
    - Tipos desconocidos se saltan.
    - Si dos reglas caen en el mismo param, gana la última.
    - Nunca lanza.
    """

    params: QueryParams = build_pagination_params(pagination or Pagination())

    if view.sort_field:
        prefix = "-" if view.sort_reverse else ""
        params[PARAM_ORDERING] = f"{prefix}{view.sort_field}"

    for rule in view.filter_rules:
        if _is_inactive(rule):
            continue
        name = RULE_PARAMETERS.get(rule.rule_type)
        if name is None:
            logger.debug(
                "Saved view %s: skipping unsupported rule_type=%s", view.id, rule.rule_type
            )
            continue
        params[name] = rule.value  # type: ignore[assignment]

    return params


def find_untranslated_rules(view: SavedView) -> list[FilterRule]:
    """Reglas activas que `compile_saved_view` no sabe traducir."""

    return [
        rule
        for rule in view.filter_rules
        if not _is_inactive(rule) and rule.rule_type not in RULE_PARAMETERS
    ]
