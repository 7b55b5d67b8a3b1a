"""Tests for correctors, the transform engine and identifier tagging."""

from datetime import date
from typing import Any

import pytest

from conformer.config.settings import CorrectionConfig, LimitsConfig, SourcesConfig
from conformer.transform.correctors import (
    BirthDateCorrector,
    EmailCorrector,
    EventDateCorrector,
    NameCorrector,
    PhoneCorrector,
    VocabularyCorrector,
)
from conformer.transform.engine import TransformEngine
from conformer.transform.identifiers import SourcePrefixer
from conformer.utils.events import Events, MemorySink
from conformer.validation.engine import RuleEngine


def _correct(corrector: Any, value: Any) -> Any:
    return corrector.correct(value, {}, [])


class TestCorrectors:
    """Tests for single-field correctors."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("nguyen van an", "Nguyen Van An"),
            ("  TRẦN   thị   mai ", "Trần Thị Mai"),
            ("le t nga", "Le Thị Nga"),
            ("an", "Không Rõ An"),
            (None, "Không Rõ"),
        ],
    )
    def test_name(self, value: Any, expected: str) -> None:
        assert _correct(NameCorrector(CorrectionConfig()), value) == expected

    def test_name_repairs_mojibake(self) -> None:
        assert _correct(NameCorrector(CorrectionConfig()), "Ä‘inh Lan") == "Đinh Lan"

    def test_email(self) -> None:
        corrector = EmailCorrector()
        assert _correct(corrector, "  An.Nguyen@GMIAL.com ") == "an.nguyen@gmail.com"
        assert _correct(corrector, None) is None

    def test_phone(self) -> None:
        corrector = PhoneCorrector()
        assert _correct(corrector, "+84 912 345 678") == "0912345678"
        assert _correct(corrector, "123") is None

    def test_birth_date(self) -> None:
        corrector = BirthDateCorrector(
            LimitsConfig(), CorrectionConfig(), today=lambda: date(2025, 6, 1)
        )
        assert _correct(corrector, "12/04/1990") == "1990-04-12"
        assert _correct(corrector, None) == "2004-05-29"
        assert _correct(corrector, "garbage") == "2004-05-29"
        assert _correct(corrector, "2030-01-01") == "2004-05-29"

    def test_vocabulary_prefers_suggestion(self, rule_engine: RuleEngine) -> None:
        errors = rule_engine.validate_record(
            {"order_id": "DH1", "status": "da giao"}
        ).errors
        assert VocabularyCorrector().correct("da giao", {}, errors) == "Đã giao"

    def test_vocabulary_fallbacks(self) -> None:
        assert _correct(VocabularyCorrector("Thường"), "Gold") == "Thường"
        assert _correct(VocabularyCorrector(), "Gold") == "Gold"

    def test_event_date(self) -> None:
        corrector = EventDateCorrector()
        assert _correct(corrector, "05/03/2024") == "2024-03-05"
        assert _correct(corrector, "never") == "never"


class TestTransformEngine:
    """Tests for TransformEngine."""

    def _run(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        record: dict[str, Any],
    ) -> Any:
        return transform_engine.transform_record(
            record, rule_engine.validate_record(record)
        )

    def test_valid_record_untouched(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        result = self._run(rule_engine, transform_engine, valid_customer)
        assert not result.was_transformed
        assert result.record == valid_customer
        assert result.record is not valid_customer
        assert result.log == []

    def test_fixable_record_corrected_and_revalidates(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        """Correcting every fixable error yields a valid record."""
        record = {
            **valid_customer,
            "full_name": "le t nga",
            "email": " Nga.Le@Gmial.com",
            "phone": "+84 912 345 678",
            "date_of_birth": "12/04/1990",
            "gender": "nu",
            "customer_type": None,
            "registered_on": "10/01/2023",
        }
        result = self._run(rule_engine, transform_engine, record)

        assert result.was_transformed
        assert result.record["full_name"] == "Le Thị Nga"
        assert result.record["email"] == "nga.le@gmail.com"
        assert result.record["phone"] == "0912345678"
        assert result.record["date_of_birth"] == "1990-04-12"
        assert result.record["gender"] == "Nữ"
        assert result.record["customer_type"] == "Thường"
        assert result.record["registered_on"] == "2023-01-10"
        assert rule_engine.validate_record(result.record).is_valid

    def test_input_not_mutated(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        record = {**valid_customer, "phone": "091 234 5678"}
        snapshot = dict(record)
        self._run(rule_engine, transform_engine, record)
        assert record == snapshot

    def test_unfixable_record_untouched(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        """Fixable errors are not repaired while an unfixable one remains."""
        record = {**valid_customer, "full_name": "an", "email": "broken"}
        result = self._run(rule_engine, transform_engine, record)
        assert not result.was_transformed
        assert result.record == record

    def test_unexpandable_initial_rejected(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        """A name whose initial has no expansion is left for the error report."""
        record = {**valid_customer, "full_name": "lê a bình"}
        result = self._run(rule_engine, transform_engine, record)
        assert not result.was_transformed
        assert not rule_engine.validate_record(result.record).can_fix

    def test_idempotent(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        """Transforming a transformed record changes nothing."""
        record = {**valid_customer, "full_name": "nguyen van an", "gender": "NAM"}
        first = self._run(rule_engine, transform_engine, record)
        second = self._run(rule_engine, transform_engine, first.record)
        assert first.was_transformed
        assert not second.was_transformed
        assert second.record == first.record

    def test_log_entries(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        sink: MemorySink,
        valid_customer: dict[str, Any],
    ) -> None:
        record = {**valid_customer, "phone": "091 234 5678"}
        result = self._run(rule_engine, transform_engine, record)

        assert len(result.log) == 1
        entry = result.log[0]
        assert entry.field == "phone"
        assert entry.original == "091 234 5678"
        assert entry.corrected == "0912345678"
        assert entry.action == "normalize_phone"

        events = sink.of_kind(Events.RECORD_TRANSFORMED)
        assert events == [{"fields": ["phone"], "changes": [entry.to_dict()]}]

    def test_batch(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        records = [valid_customer, {**valid_customer, "gender": "nu"}]
        batch = transform_engine.transform_batch(
            records, rule_engine.validate_batch(records)
        )
        assert batch.total == 2
        assert batch.transformed == 1
        assert batch.untouched == 1
        assert batch.records()[1]["gender"] == "Nữ"
        assert [e.field for e in batch.log()] == ["gender"]

    def test_batch_length_mismatch(
        self,
        rule_engine: RuleEngine,
        transform_engine: TransformEngine,
        valid_customer: dict[str, Any],
    ) -> None:
        validation = rule_engine.validate_batch([valid_customer])
        with pytest.raises(ValueError, match="validation results"):
            transform_engine.transform_batch([valid_customer] * 2, validation)


class TestSourcePrefixer:
    """Tests for source identity tagging."""

    @pytest.fixture
    def prefixer(self) -> SourcePrefixer:
        return SourcePrefixer(SourcesConfig())

    def test_tags_identifiers(self, prefixer: SourcePrefixer) -> None:
        record = {"order_id": "DH1", "customer_id": "KH1", "source": "postgresql"}
        tagged = prefixer.apply(record)
        assert tagged["order_id"] == "PG_DH1"
        assert tagged["customer_id"] == "PG_KH1"
        assert record["order_id"] == "DH1"

    def test_idempotent(self, prefixer: SourcePrefixer) -> None:
        record = {"customer_id": "KH1", "source": "csv"}
        once = prefixer.apply(record)
        assert prefixer.apply(once) == once
        assert once["customer_id"] == "CSV_KH1"

    def test_foreign_prefix_kept(self, prefixer: SourcePrefixer) -> None:
        """Values tagged by another source are not double-tagged."""
        tagged = prefixer.apply({"customer_id": "CSV_KH1", "source": "postgresql"})
        assert tagged["customer_id"] == "CSV_KH1"

    def test_unknown_source_unchanged(self, prefixer: SourcePrefixer) -> None:
        record = {"customer_id": "KH1", "source": "excel"}
        assert prefixer.apply(record) == record
        assert prefixer.apply({"customer_id": "KH1"}) == {"customer_id": "KH1"}

    def test_blank_and_absent_fields(self, prefixer: SourcePrefixer) -> None:
        tagged = prefixer.apply({"customer_id": None, "source": "csv"})
        assert tagged == {"customer_id": None, "source": "csv"}

    def test_non_identifier_fields_untouched(self, prefixer: SourcePrefixer) -> None:
        tagged = prefixer.apply({"email": "a@b.vn", "source": "csv"})
        assert tagged["email"] == "a@b.vn"

    def test_apply_all(self, prefixer: SourcePrefixer) -> None:
        data = {
            "customer": [{"customer_id": "KH1", "source": "csv"}],
            "order": [],
        }
        tagged = prefixer.apply_all(data)
        assert tagged == {
            "customer": [{"customer_id": "CSV_KH1", "source": "csv"}],
            "order": [],
        }
