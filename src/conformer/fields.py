"""
Field registry.

Maps field names to handlers that can validate and, where a repair
exists, correct a value. Field names shared across entity types
(``status``, ``email``, ``full_name``) resolve to one handler.
"""

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from conformer.config.settings import CorrectionConfig, LimitsConfig
from conformer.constants import (
    CUSTOMER_TYPES,
    GENDERS,
    PAYMENT_METHODS,
    POSITIONS,
    PRIORITIES,
    RESOLUTION_OUTCOMES,
)
from conformer.transform.correctors import (
    BirthDateCorrector,
    Corrector,
    EmailCorrector,
    EventDateCorrector,
    NameCorrector,
    PhoneCorrector,
    VocabularyCorrector,
)
from conformer.validation.models import ValidationError
from conformer.validation.rules import (
    CategoricalRule,
    DateOfBirthRule,
    EmailRule,
    EventDateRule,
    FieldRule,
    FullNameRule,
    NumericRangeRule,
    PhoneRule,
    StatusRule,
)

EVENT_DATE_FIELDS: tuple[str, ...] = (
    "registered_on",
    "hired_on",
    "paid_on",
    "rated_on",
    "created_on",
    "resolved_at",
)


@dataclass(frozen=True)
class FieldHandler:
    """A rule paired with its optional corrector."""

    rule: FieldRule
    corrector: Corrector | None = None

    @property
    def can_correct(self) -> bool:
        return self.corrector is not None

    def validate(
        self, field: str, value: Any, record: Mapping[str, Any]
    ) -> list[ValidationError]:
        return self.rule.check(field, value, record)

    def correct(
        self,
        value: Any,
        record: Mapping[str, Any],
        errors: Sequence[ValidationError],
    ) -> Any:
        """Apply the corrector; values without one are returned unchanged."""
        if self.corrector is None:
            return value
        return self.corrector.correct(value, record, errors)


class FieldRegistry:
    """Field name -> FieldHandler lookup."""

    def __init__(self) -> None:
        self._handlers: dict[str, FieldHandler] = {}

    def register(self, handler: FieldHandler, *fields: str) -> None:
        """Register ``handler`` under every name in ``fields``."""
        for name in fields:
            self._handlers[name] = handler

    def get(self, field: str) -> FieldHandler | None:
        return self._handlers.get(field)

    def fields(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, field: object) -> bool:
        return field in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields())

    def __len__(self) -> int:
        return len(self._handlers)


def build_field_registry(
    limits: LimitsConfig | None = None,
    corrections: CorrectionConfig | None = None,
    *,
    today: Callable[[], date] = date.today,
) -> FieldRegistry:
    """
    Build the standard registry for the conformed schema.

    Args:
        limits: Validation limits (defaults apply when omitted).
        corrections: Correction defaults and near-match threshold.
        today: Clock used for age checks; injectable for tests.

    Returns:
        Registry covering every validated field.
    """
    limits = limits or LimitsConfig()
    corrections = corrections or CorrectionConfig()
    ratio = corrections.near_match_ratio
    vocabulary = VocabularyCorrector()

    registry = FieldRegistry()
    registry.register(
        FieldHandler(FullNameRule(limits), NameCorrector(corrections)), "full_name"
    )
    registry.register(FieldHandler(EmailRule(limits), EmailCorrector()), "email")
    registry.register(FieldHandler(PhoneRule(limits), PhoneCorrector()), "phone")
    registry.register(
        FieldHandler(
            DateOfBirthRule(limits, corrections, today),
            BirthDateCorrector(limits, corrections, today),
        ),
        "date_of_birth",
    )
    registry.register(FieldHandler(StatusRule(ratio), vocabulary), "status")
    registry.register(
        FieldHandler(CategoricalRule(GENDERS, ratio), vocabulary), "gender"
    )
    registry.register(
        FieldHandler(
            CategoricalRule(
                CUSTOMER_TYPES, ratio, default=corrections.default_customer_type
            ),
            VocabularyCorrector(corrections.default_customer_type),
        ),
        "customer_type",
    )
    registry.register(
        FieldHandler(CategoricalRule(PRIORITIES, ratio), vocabulary), "priority"
    )
    registry.register(
        FieldHandler(CategoricalRule(PAYMENT_METHODS, ratio), vocabulary), "method"
    )
    registry.register(
        FieldHandler(CategoricalRule(POSITIONS, ratio), vocabulary), "position"
    )
    registry.register(
        FieldHandler(CategoricalRule(RESOLUTION_OUTCOMES, ratio), vocabulary),
        "outcome",
    )

    # Numeric fields have no corrector: a wrong amount cannot be guessed
    registry.register(
        FieldHandler(NumericRangeRule(limits.min_price, limits.max_price)),
        "unit_price",
        "total_amount",
        "amount",
    )
    registry.register(
        FieldHandler(
            NumericRangeRule(
                limits.min_quantity, limits.max_quantity, integer=True, required=True
            )
        ),
        "quantity",
    )
    registry.register(
        FieldHandler(
            NumericRangeRule(
                limits.min_rating, limits.max_rating, integer=True, required=True
            )
        ),
        "score",
    )

    event_date = EventDateCorrector()
    registry.register(
        FieldHandler(EventDateRule(required=True), event_date), "order_date"
    )
    registry.register(FieldHandler(EventDateRule(), event_date), *EVENT_DATE_FIELDS)

    return registry
