"""Tests for the field rules."""

from datetime import date
from typing import Any

import pytest

from conformer.config.settings import CorrectionConfig, LimitsConfig
from conformer.constants import ErrorCode
from conformer.validation.rules import (
    CategoricalRule,
    DateOfBirthRule,
    EmailRule,
    EventDateRule,
    FullNameRule,
    NumericRangeRule,
    PhoneRule,
    StatusRule,
)


def _check(rule: Any, value: Any, record: dict[str, Any] | None = None) -> list:
    return rule.check("field", value, record or {})


class TestFullNameRule:
    """Tests for person names."""

    @pytest.fixture
    def rule(self) -> FullNameRule:
        return FullNameRule(LimitsConfig())

    def test_valid_name(self, rule: FullNameRule) -> None:
        """A capitalized multi-word name passes."""
        assert _check(rule, "Nguyễn Văn An") == []

    def test_null_is_unfixable(self, rule: FullNameRule) -> None:
        """Missing names cannot be invented."""
        errors = _check(rule, None)
        assert len(errors) == 1
        assert errors[0].code == ErrorCode.NULL_VALUE
        assert not errors[0].fixable

    @pytest.mark.parametrize("value", ["Nguyễn Văn 3", "Lê Văn @n", "Trần; Bình"])
    def test_digits_and_special_characters_unfixable(
        self, rule: FullNameRule, value: str
    ) -> None:
        """Digits and punctuation make a name unrecoverable."""
        errors = _check(rule, value)
        assert errors
        assert any(not e.fixable for e in errors)

    def test_too_long_is_out_of_range(self) -> None:
        """Names over the limit are unfixable."""
        rule = FullNameRule(LimitsConfig(max_name_length=10))
        errors = _check(rule, "Nguyễn Thị Hoàng Anh")
        assert any(e.code == ErrorCode.OUT_OF_RANGE and not e.fixable for e in errors)

    def test_long_name_with_single_letter_unfixable(self, rule: FullNameRule) -> None:
        """A single letter inside a long name is ambiguous."""
        errors = _check(rule, "Nguyễn Thị T Hoàng Anh Thư")
        assert any(not e.fixable for e in errors)

    def test_single_word_fixable(self, rule: FullNameRule) -> None:
        """A lone given name gets a placeholder family name."""
        errors = _check(rule, "An")
        assert len(errors) == 1
        assert errors[0].fixable

    def test_lowercase_and_abbreviation_fixable(self, rule: FullNameRule) -> None:
        """Short abbreviated names are repairable."""
        errors = _check(rule, "le t nga")
        assert errors
        assert all(e.fixable for e in errors)
        assert any("abbreviated" in e.message for e in errors)
        assert any("capital" in e.message for e in errors)

    @pytest.mark.parametrize("value", ["Lê A Bình", "Trần Thị B", "N Văn An"])
    def test_unknown_abbreviation_unfixable(
        self, rule: FullNameRule, value: str
    ) -> None:
        """Initials without a known expansion, or leading ones, cannot be fixed."""
        errors = _check(rule, value)
        assert any(
            "unknown abbreviations" in e.message and not e.fixable for e in errors
        )

    def test_irregular_whitespace_suggests_collapsed(self, rule: FullNameRule) -> None:
        """Irregular whitespace is fixable with the collapsed form."""
        errors = _check(rule, "  Trần   Thị Mai ")
        assert len(errors) == 1
        assert errors[0].fixable
        assert errors[0].suggestion == "Trần Thị Mai"

    def test_mojibake_fixable(self, rule: FullNameRule) -> None:
        """Double-encoded text is repaired, not rejected."""
        errors = _check(rule, "Nguyá»…n VÄ‘n")
        assert errors
        assert any("encoding" in e.message for e in errors)


class TestEmailRule:
    """Tests for e-mail addresses."""

    @pytest.fixture
    def rule(self) -> EmailRule:
        return EmailRule(LimitsConfig())

    def test_valid_email(self, rule: EmailRule) -> None:
        assert _check(rule, "an.nguyen@gmail.com") == []

    def test_null_is_unfixable(self, rule: EmailRule) -> None:
        errors = _check(rule, "  ")
        assert [e.code for e in errors] == [ErrorCode.NULL_VALUE]
        assert not errors[0].fixable

    def test_whitespace_and_case_fixable(self, rule: EmailRule) -> None:
        """Surrounding space and upper case are repaired."""
        errors = _check(rule, "  An.Nguyen@Gmail.com ")
        assert len(errors) == 2
        assert all(e.fixable for e in errors)
        assert {e.suggestion for e in errors} == {"an.nguyen@gmail.com"}

    def test_domain_typo_fixable(self, rule: EmailRule) -> None:
        """Known misspelled domains are replaced."""
        errors = _check(rule, "an@gmial.com")
        assert len(errors) == 1
        assert errors[0].fixable
        assert errors[0].suggestion == "an@gmail.com"

    @pytest.mark.parametrize("value", ["an.nguyen", "a@b", "an@@gmail.com", "a,b@x.vn"])
    def test_structurally_broken_unfixable(self, rule: EmailRule, value: str) -> None:
        errors = _check(rule, value)
        assert errors
        assert any(not e.fixable for e in errors)

    def test_too_long_unfixable(self) -> None:
        rule = EmailRule(LimitsConfig(max_email_length=10))
        errors = _check(rule, "an.nguyen@gmail.com")
        assert [e.code for e in errors] == [ErrorCode.OUT_OF_RANGE]


class TestPhoneRule:
    """Tests for phone numbers."""

    @pytest.fixture
    def rule(self) -> PhoneRule:
        return PhoneRule(LimitsConfig())

    @pytest.mark.parametrize("value", [None, "", "0912345678", "+84912345678"])
    def test_valid_or_absent(self, rule: PhoneRule, value: Any) -> None:
        """Phones are optional; domestic and international forms pass."""
        assert _check(rule, value) == []

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("091 234 5678", "0912345678"),
            ("091.234.5678", "0912345678"),
            ("84912345678", "0912345678"),
            ("+84 91 234 5678", "0912345678"),
        ],
    )
    def test_fixable_with_normalized_suggestion(
        self, rule: PhoneRule, value: str, expected: str
    ) -> None:
        errors = _check(rule, value)
        assert len(errors) == 1
        assert errors[0].fixable
        assert errors[0].suggestion == expected

    @pytest.mark.parametrize("value", ["12345", "hotline", "0912-345"])
    def test_unrecoverable(self, rule: PhoneRule, value: str) -> None:
        errors = _check(rule, value)
        assert len(errors) == 1
        assert not errors[0].fixable


class TestDateOfBirthRule:
    """Tests for birth dates, checked against a fixed clock."""

    @pytest.fixture
    def rule(self) -> DateOfBirthRule:
        return DateOfBirthRule(
            LimitsConfig(), CorrectionConfig(), today=lambda: date(2025, 6, 1)
        )

    def test_valid_date(self, rule: DateOfBirthRule) -> None:
        assert _check(rule, "1990-04-12") == []

    def test_missing_suggests_default(self, rule: DateOfBirthRule) -> None:
        """A missing birth date is replaced by the configured default."""
        errors = _check(rule, None)
        assert [e.code for e in errors] == [ErrorCode.NULL_VALUE]
        assert errors[0].fixable
        assert errors[0].suggestion == "2004-05-29"

    def test_unreadable_is_fixable(self, rule: DateOfBirthRule) -> None:
        errors = _check(rule, "not a date")
        assert [e.code for e in errors] == [ErrorCode.INVALID_DATE]
        assert errors[0].fixable

    def test_other_format_suggests_iso(self, rule: DateOfBirthRule) -> None:
        """Day-first dates are re-written as YYYY-MM-DD."""
        errors = _check(rule, "12/04/1990")
        assert len(errors) == 1
        assert errors[0].code == ErrorCode.INVALID_FORMAT
        assert errors[0].suggestion == "1990-04-12"

    def test_future_date_unfixable(self, rule: DateOfBirthRule) -> None:
        errors = _check(rule, "2030-01-01")
        assert any(e.code == ErrorCode.INVALID_DATE for e in errors)
        assert any(not e.fixable for e in errors)

    def test_too_young_unfixable(self, rule: DateOfBirthRule) -> None:
        errors = _check(rule, "2020-01-01")
        assert [e.code for e in errors] == [ErrorCode.OUT_OF_RANGE]
        assert not errors[0].fixable

    def test_too_old_unfixable(self, rule: DateOfBirthRule) -> None:
        """Implausible ages also fail the minimum birth year."""
        errors = _check(rule, "1850-01-01")
        codes = {e.code for e in errors}
        assert codes == {ErrorCode.OUT_OF_RANGE, ErrorCode.INVALID_DATE}
        assert not any(e.fixable for e in errors)

    def test_age_boundary(self, rule: DateOfBirthRule) -> None:
        """Turning 13 on the day itself is old enough."""
        assert _check(rule, "2012-06-01") == []
        assert _check(rule, "2012-06-02") != []


class TestEventDateRule:
    """Tests for business event dates."""

    def test_optional_missing_is_valid(self) -> None:
        assert _check(EventDateRule(), None) == []

    def test_required_missing_is_unfixable(self) -> None:
        errors = _check(EventDateRule(required=True), "")
        assert [e.code for e in errors] == [ErrorCode.NULL_VALUE]
        assert not errors[0].fixable

    @pytest.mark.parametrize("value", ["2024-03-05", "2024-03-05T10:20:00"])
    def test_iso_values_valid(self, value: str) -> None:
        assert _check(EventDateRule(), value) == []

    def test_other_format_fixable(self) -> None:
        errors = _check(EventDateRule(), "05/03/2024")
        assert len(errors) == 1
        assert errors[0].fixable
        assert errors[0].suggestion == "2024-03-05"

    def test_unreadable_unfixable(self) -> None:
        errors = _check(EventDateRule(), "yesterday")
        assert [e.code for e in errors] == [ErrorCode.INVALID_DATE]
        assert not errors[0].fixable


class TestCategoricalRule:
    """Tests for fixed vocabularies."""

    @pytest.fixture
    def genders(self) -> CategoricalRule:
        return CategoricalRule(("Nam", "Nữ", "Khác"), 0.3)

    def test_member_valid(self, genders: CategoricalRule) -> None:
        assert _check(genders, "Nữ") == []

    def test_missing_optional_is_valid(self, genders: CategoricalRule) -> None:
        assert _check(genders, None) == []

    def test_case_mismatch_suggests_member(self, genders: CategoricalRule) -> None:
        errors = _check(genders, "nam")
        assert len(errors) == 1
        assert errors[0].fixable
        assert errors[0].suggestion == "Nam"

    def test_missing_diacritics_suggests_member(self, genders: CategoricalRule) -> None:
        errors = _check(genders, "nu")
        assert errors[0].fixable
        assert errors[0].suggestion == "Nữ"

    def test_unknown_value_unfixable(self, genders: CategoricalRule) -> None:
        errors = _check(genders, "unknown")
        assert len(errors) == 1
        assert not errors[0].fixable
        assert errors[0].suggestion is None

    def test_default_fills_missing_and_unknown(self) -> None:
        """With a default, nothing is unfixable."""
        rule = CategoricalRule(("Thường", "VIP"), 0.3, default="Thường")
        missing = _check(rule, None)
        unknown = _check(rule, "Gold")
        assert missing[0].fixable
        assert missing[0].suggestion == "Thường"
        assert unknown[0].fixable
        assert unknown[0].suggestion == "Thường"

    def test_required_missing_unfixable(self) -> None:
        rule = CategoricalRule(("A", "B"), 0.3, required=True)
        errors = _check(rule, None)
        assert [e.code for e in errors] == [ErrorCode.NULL_VALUE]
        assert not errors[0].fixable


class TestStatusRule:
    """Tests for entity-dependent status vocabularies."""

    @pytest.fixture
    def rule(self) -> StatusRule:
        return StatusRule(0.3)

    def test_order_status_valid(self, rule: StatusRule) -> None:
        assert _check(rule, "Đã giao", {"order_id": "DH1"}) == []

    def test_payment_probe_wins_over_order(self, rule: StatusRule) -> None:
        """Payments carry an order_id too but use payment statuses."""
        record = {"payment_id": "TT1", "order_id": "DH1"}
        assert _check(rule, "Hoàn tiền", record) == []
        assert _check(rule, "Hoàn tiền", {"order_id": "DH1"}) != []

    def test_near_miss_suggests_member(self, rule: StatusRule) -> None:
        errors = _check(rule, "da giao", {"order_id": "DH1"})
        assert len(errors) == 1
        assert errors[0].code == ErrorCode.INVALID_STATUS
        assert errors[0].fixable
        assert errors[0].suggestion == "Đã giao"

    def test_case_only_mismatch(self, rule: StatusRule) -> None:
        errors = _check(rule, "ĐÃ GIAO", {"order_id": "DH1"})
        assert errors[0].code == ErrorCode.INVALID_FORMAT
        assert errors[0].suggestion == "Đã giao"

    def test_unknown_status_unfixable(self, rule: StatusRule) -> None:
        errors = _check(rule, "shipped", {"order_id": "DH1"})
        assert [e.code for e in errors] == [ErrorCode.INVALID_STATUS]
        assert not errors[0].fixable

    def test_missing_status_unfixable(self, rule: StatusRule) -> None:
        errors = _check(rule, None, {"order_id": "DH1"})
        assert [e.code for e in errors] == [ErrorCode.NULL_VALUE]
        assert not errors[0].fixable

    def test_record_without_probe_uses_union(self, rule: StatusRule) -> None:
        assert _check(rule, "Đóng", {}) == []
        assert _check(rule, "Đã thanh toán", {}) == []


class TestNumericRangeRule:
    """Tests for numeric ranges."""

    def test_price_in_range(self) -> None:
        rule = NumericRangeRule(0, 1_000_000)
        assert _check(rule, "150000.50") == []
        assert _check(rule, 0) == []

    def test_optional_missing_is_valid(self) -> None:
        assert _check(NumericRangeRule(0, 10), None) == []

    @pytest.mark.parametrize("value", ["abc", "nan", "inf", True])
    def test_non_numeric_unfixable(self, value: Any) -> None:
        errors = _check(NumericRangeRule(0, 10), value)
        assert [e.code for e in errors] == [ErrorCode.INVALID_FORMAT]
        assert not errors[0].fixable

    def test_out_of_range(self) -> None:
        errors = _check(NumericRangeRule(0, 10), "-5")
        assert [e.code for e in errors] == [ErrorCode.OUT_OF_RANGE]

    def test_integer_required(self) -> None:
        rule = NumericRangeRule(1, 100, integer=True, required=True)
        assert _check(rule, "3") == []
        assert _check(rule, "3.0") == []
        assert [e.code for e in _check(rule, "2.5")] == [ErrorCode.INVALID_FORMAT]
        assert [e.code for e in _check(rule, None)] == [ErrorCode.NULL_VALUE]
