"""Rule evaluation for approval workflows.

Maps a PR attribute snapshot (a flat dict such as
``{"total_value": Decimal("1500.00"), "category_id": 3, "department_id": 1}``)
to the set of approver roles whose rules match.

Every matching rule contributes its role: a PR that matches a "manager"
rule and a "finance" rule needs sign-off from both. Evaluation itself
never raises; malformed rule input is rejected earlier, when a
``Condition`` is built.
"""

import logging
import operator
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .exceptions import InvalidInput, NoApproversMatched

logger = logging.getLogger(__name__)


LOGIC_AND = "AND"
LOGIC_OR = "OR"
LOGIC_CHOICES = (LOGIC_AND, LOGIC_OR)

OPERATORS = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

ORDERING_OPERATORS = {">", "<", ">=", "<="}


def _is_scalar_value(value):
    # bool is a Number subclass but never a valid threshold
    return isinstance(value, str) or (isinstance(value, Number) and not isinstance(value, bool))


@dataclass(frozen=True)
class Condition:
    """A single ``field operator value`` comparison."""

    field: str
    operator: str
    value: Any

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], strict: bool = True) -> "Condition":
        """Build a condition from its JSON form.

        With ``strict`` (the default, used when rules are created) every part
        is validated and ``InvalidInput`` is raised for malformed input.
        Non-strict parsing is used for rows already stored, where an
        unsupported operator must only be logged at evaluation time.
        """
        if not isinstance(data, Mapping):
            raise InvalidInput(
                "Condition must be an object with field, operator and value",
                condition=data,
            )

        missing = [key for key in ("field", "operator", "value") if key not in data]
        if missing:
            raise InvalidInput(
                f"Condition is missing: {', '.join(missing)}",
                condition=dict(data),
            )

        condition = cls(field=data["field"], operator=data["operator"], value=data["value"])
        if strict:
            condition.validate()
        return condition

    def validate(self) -> None:
        if not isinstance(self.field, str) or not self.field.strip():
            raise InvalidInput("Condition field must be a non-empty string", condition=self.to_dict())
        if self.operator not in OPERATORS:
            raise InvalidInput(
                f"Unsupported operator: {self.operator}. "
                f"Expected one of {', '.join(OPERATORS)}",
                condition=self.to_dict(),
            )
        if not _is_scalar_value(self.value):
            raise InvalidInput("Condition value must be a number or a string", condition=self.to_dict())
        if self.operator in ORDERING_OPERATORS and isinstance(self.value, str):
            # Strings compare lexicographically; allowed but worth knowing
            logger.debug("Ordering operator %s used with string value on %s", self.operator, self.field)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": self.value}

    def __str__(self):
        return f"{self.field} {self.operator} {self.value!r}"


@dataclass(frozen=True)
class Rule:
    """Evaluation view of a workflow rule: conditions, logic and target role."""

    approver_role: str
    conditions: Sequence[Condition] = field(default_factory=tuple)
    logic: str = LOGIC_AND
    id: Optional[int] = None


def normalize_conditions(condition) -> List[Condition]:
    """Accept one condition or a list of them and return validated Conditions."""
    if isinstance(condition, (Condition, Mapping)):
        items = [condition]
    elif isinstance(condition, (list, tuple)):
        items = list(condition)
    else:
        raise InvalidInput("Condition must be an object or a list of objects", condition=condition)

    if not items:
        raise InvalidInput("A rule needs at least one condition")

    result = []
    for item in items:
        if isinstance(item, Condition):
            item.validate()
            result.append(item)
        else:
            result.append(Condition.from_dict(item))
    return result


def normalize_logic(logic) -> str:
    if logic is None:
        return LOGIC_AND
    value = str(logic).upper()
    if value not in LOGIC_CHOICES:
        raise InvalidInput(f"Logic must be AND or OR, got {logic!r}", logic=logic)
    return value


class RuleEngine:
    """Evaluates workflow rules against PR snapshots."""

    @staticmethod
    def evaluate_condition(condition, snapshot: Mapping[str, Any]) -> bool:
        """Evaluate one condition against a PR snapshot.

        Supported operators: >, <, >=, <=, ==, !=
        A field that is absent from the snapshot (or None) never matches.
        """
        if not isinstance(condition, Condition):
            try:
                condition = Condition.from_dict(condition, strict=False)
            except InvalidInput as exc:
                logger.warning("Skipping malformed condition %r: %s", condition, exc.message)
                return False

        pr_value = snapshot.get(condition.field)
        if pr_value is None:
            return False

        compare = OPERATORS.get(condition.operator)
        if compare is None:
            logger.warning(
                "Unsupported operator %r in condition on %r; treating as no match",
                condition.operator,
                condition.field,
            )
            return False

        try:
            return bool(compare(pr_value, condition.value))
        except TypeError:
            logger.warning(
                "Cannot compare %s=%r with %r using %s; treating as no match",
                condition.field,
                pr_value,
                condition.value,
                condition.operator,
            )
            return False

    @classmethod
    def evaluate_conditions(
        cls,
        conditions: Iterable,
        snapshot: Mapping[str, Any],
        logic: str = LOGIC_AND,
    ) -> bool:
        """Evaluate a set of conditions combined with AND (default) or OR."""
        if str(logic).upper() == LOGIC_OR:
            return any(cls.evaluate_condition(c, snapshot) for c in conditions)
        return all(cls.evaluate_condition(c, snapshot) for c in conditions)

    @classmethod
    def determine_next_approvers(
        cls,
        rules: Iterable[Rule],
        snapshot: Mapping[str, Any],
        workflow_id: Optional[int] = None,
    ) -> List[str]:
        """Return every role whose rule matches ``snapshot``.

        Rules are checked in order and each matching rule adds its role once;
        the PR needs approval from all returned roles.

        Raises:
            NoApproversMatched: if no rule matches.
        """
        rules = list(rules)
        roles = {}

        for rule in rules:
            if cls.evaluate_conditions(rule.conditions, snapshot, rule.logic):
                roles.setdefault(rule.approver_role, rule.id)

        if not roles:
            raise NoApproversMatched(
                workflow_id=workflow_id,
                rule_ids=[rule.id for rule in rules],
                pr_id=snapshot.get("id"),
            )

        logger.debug(
            "Workflow %s matched roles %s for PR %s",
            workflow_id,
            list(roles),
            snapshot.get("id"),
        )
        return list(roles)
