"""
Name suggestions for unmatched report rows.

Tests:
  - test_similar_name_is_suggested     : word order / spacing / typo variants score ≥ threshold
  - test_different_name_not_suggested  : unrelated names → no suggestion
  - test_suggestions_sorted_and_limited
  - test_attach_only_touches_unmatched : matched rows never get suggestions
"""

from __future__ import annotations

import datetime as dt
import uuid

from attendancehub.schemas.attendance import (
    BiometricStatRecord,
    KnownEmployee,
    ParsedBiometricReport,
    ReportPeriod,
)
from attendancehub.services.fuzzy_matcher import attach_suggestions, suggest_employees

DIRECTORY = [
    KnownEmployee(id=uuid.uuid4(), document_id="12345678", name="Ana Torres Vega"),
    KnownEmployee(id=uuid.uuid4(), document_id="87654321", name="Luis Pérez Soto"),
    KnownEmployee(id=uuid.uuid4(), document_id="11223344", name="Ana Torres Vegas"),
]


class TestSuggestEmployees:
    def test_similar_name_is_suggested(self) -> None:
        for variant in ("Torres Vega Ana", "Ana  Torres   Vega ", "ana torres vega"):
            suggestions = suggest_employees(variant, DIRECTORY, threshold=90)
            assert suggestions, variant
            assert suggestions[0].document_id == "12345678"

    def test_different_name_not_suggested(self) -> None:
        assert suggest_employees("Carlos Mendoza Ruiz", DIRECTORY, threshold=90) == []

    def test_blank_name(self) -> None:
        assert suggest_employees("   ", DIRECTORY, threshold=0) == []

    def test_suggestions_sorted_and_limited(self) -> None:
        suggestions = suggest_employees("Ana Torres Vega", DIRECTORY, threshold=50, limit=2)
        assert len(suggestions) == 2
        assert suggestions[0].score == 100
        assert suggestions[0].score >= suggestions[1].score
        assert suggestions[1].document_id == "11223344"


class TestAttachSuggestions:
    def test_attach_only_touches_unmatched(self) -> None:
        matched = BiometricStatRecord(
            employee_id=DIRECTORY[1].id, employee_name="Luis Pérez Soto", document_id="87654321",
        )
        typo_dni = BiometricStatRecord(employee_name="Ana Torres Vega", document_id="12345687")
        new_hire = BiometricStatRecord(employee_name="Rosa Huamán Paz", document_id="44556677")
        report = ParsedBiometricReport(
            period=ReportPeriod(start=dt.date(2026, 1, 1), end=dt.date(2026, 1, 31)),
            records=[matched, typo_dni, new_hire],
        )

        assert attach_suggestions(report, DIRECTORY, threshold=90) == 1
        assert matched.suggestions == []
        assert typo_dni.suggestions[0].employee_id == DIRECTORY[0].id
        assert new_hire.suggestions == []
        # suggestions never link the row
        assert typo_dni.employee_id is None
