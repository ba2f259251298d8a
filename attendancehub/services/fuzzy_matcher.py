"""
Fuzzy name suggestions for unmatched report rows.

Rows are matched by exact document id only. When a document id is unknown,
the operator gets a short list of existing employees whose name is close to
the name printed by the device (thefuzz.token_sort_ratio), so a typo in the
DNI can be told apart from a genuinely new hire. Suggestions never link a
row on their own.
"""

import logging
import re
from collections.abc import Iterable

from thefuzz import fuzz

from attendancehub.core.config import settings
from attendancehub.schemas.attendance import (
    EmployeeSuggestion,
    KnownEmployee,
    ParsedBiometricReport,
)

logger = logging.getLogger(__name__)

_ws_re = re.compile(r"\s+")

MAX_SUGGESTIONS = 3


def _clean_name(raw: str) -> str:
    """Strip and collapse whitespace."""
    return _ws_re.sub(" ", raw.strip())


def suggest_employees(
    raw_name: str,
    employees: Iterable[KnownEmployee],
    threshold: int | None = None,
    limit: int = MAX_SUGGESTIONS,
) -> list[EmployeeSuggestion]:
    """Return up to ``limit`` employees scoring at least ``threshold``, best first."""
    threshold = settings.FUZZY_MATCH_THRESHOLD if threshold is None else threshold
    cleaned = _clean_name(raw_name)
    if not cleaned:
        return []

    scored: list[EmployeeSuggestion] = []
    for emp in employees:
        if not emp.name:
            continue
        score = fuzz.token_sort_ratio(cleaned, emp.name)
        if score >= threshold:
            scored.append(
                EmployeeSuggestion(
                    employee_id=emp.id,
                    name=emp.name,
                    document_id=emp.document_id,
                    score=score,
                )
            )

    scored.sort(key=lambda s: s.score, reverse=True)
    return scored[:limit]


def attach_suggestions(
    report: ParsedBiometricReport,
    employees: list[KnownEmployee],
    threshold: int | None = None,
) -> int:
    """Fill ``suggestions`` on every unmatched stat record; returns how many got any."""
    with_suggestions = 0
    for record in report.unmatched_records:
        record.suggestions = suggest_employees(record.employee_name, employees, threshold)
        if record.suggestions:
            with_suggestions += 1
            best = record.suggestions[0]
            logger.debug(
                "DNI '%s' sin coincidencia: '%s' se parece a '%s' (score=%d)",
                record.document_id, record.employee_name, best.name, best.score,
            )
        else:
            logger.info(
                "DNI '%s' sin coincidencia y sin sugerencias para '%s'",
                record.document_id, record.employee_name,
            )
    return with_suggestions
