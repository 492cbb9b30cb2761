"""
Tests for condition evaluation and approver resolution.
These run without the database.
"""

from decimal import Decimal

from django.test import SimpleTestCase

from core.approval.exceptions import InvalidInput, NoApproversMatched
from core.approval.rule_engine import (
    Condition,
    Rule,
    RuleEngine,
    normalize_conditions,
    normalize_logic,
)


SNAPSHOT = {
    "id": 7,
    "item": "Laptop",
    "quantity": 3,
    "total_value": Decimal("1500.00"),
    "department_id": 1,
    "category_id": 4,
    "status": "pending",
}


class EvaluateConditionTest(SimpleTestCase):

    def test_numeric_operators(self):
        cases = [
            (">", 1000, True),
            (">", 1500, False),
            ("<", 2000, True),
            (">=", 1500, True),
            ("<=", 1499.99, False),
            ("==", 1500, True),
            ("!=", 1500, False),
        ]
        for op, value, expected in cases:
            with self.subTest(op=op, value=value):
                condition = Condition("total_value", op, value)
                self.assertIs(RuleEngine.evaluate_condition(condition, SNAPSHOT), expected)

    def test_missing_field_is_false_for_every_operator(self):
        for op in (">", "<", ">=", "<=", "==", "!="):
            with self.subTest(op=op):
                condition = Condition("budget_code", op, 1)
                self.assertFalse(RuleEngine.evaluate_condition(condition, SNAPSHOT))

    def test_none_value_counts_as_missing(self):
        snapshot = dict(SNAPSHOT, category_id=None)
        self.assertFalse(RuleEngine.evaluate_condition(Condition("category_id", "!=", 4), snapshot))

    def test_string_never_equals_number(self):
        snapshot = dict(SNAPSHOT, category_id="4")
        self.assertFalse(RuleEngine.evaluate_condition(Condition("category_id", "==", 4), snapshot))
        self.assertTrue(RuleEngine.evaluate_condition(Condition("category_id", "!=", 4), snapshot))

    def test_string_equality(self):
        self.assertTrue(RuleEngine.evaluate_condition(Condition("item", "==", "Laptop"), SNAPSHOT))

    def test_unknown_operator_is_false_and_logged(self):
        condition = Condition("total_value", "~=", 1000)
        with self.assertLogs("core.approval.rule_engine", level="WARNING") as logs:
            self.assertFalse(RuleEngine.evaluate_condition(condition, SNAPSHOT))
        self.assertIn("Unsupported operator", logs.output[0])

    def test_incomparable_types_are_false_and_logged(self):
        condition = Condition("item", ">", 10)
        with self.assertLogs("core.approval.rule_engine", level="WARNING"):
            self.assertFalse(RuleEngine.evaluate_condition(condition, SNAPSHOT))

    def test_plain_mapping_is_accepted(self):
        condition = {"field": "quantity", "operator": ">=", "value": 3}
        self.assertTrue(RuleEngine.evaluate_condition(condition, SNAPSHOT))

    def test_malformed_mapping_is_false(self):
        with self.assertLogs("core.approval.rule_engine", level="WARNING"):
            self.assertFalse(RuleEngine.evaluate_condition({"field": "quantity"}, SNAPSHOT))


class EvaluateConditionsTest(SimpleTestCase):

    def setUp(self):
        self.true_cond = Condition("total_value", ">", 1000)
        self.false_cond = Condition("quantity", ">", 10)

    def test_and_requires_all(self):
        self.assertTrue(RuleEngine.evaluate_conditions([self.true_cond, self.true_cond], SNAPSHOT, "AND"))
        self.assertFalse(RuleEngine.evaluate_conditions([self.true_cond, self.false_cond], SNAPSHOT, "AND"))

    def test_or_requires_one(self):
        self.assertTrue(RuleEngine.evaluate_conditions([self.false_cond, self.true_cond], SNAPSHOT, "OR"))
        self.assertFalse(RuleEngine.evaluate_conditions([self.false_cond, self.false_cond], SNAPSHOT, "OR"))

    def test_default_logic_is_and(self):
        self.assertFalse(RuleEngine.evaluate_conditions([self.true_cond, self.false_cond], SNAPSHOT))

    def test_empty_sets(self):
        self.assertTrue(RuleEngine.evaluate_conditions([], SNAPSHOT, "AND"))
        self.assertFalse(RuleEngine.evaluate_conditions([], SNAPSHOT, "OR"))


class DetermineNextApproversTest(SimpleTestCase):

    def rule(self, rule_id, role, *conditions, logic="AND"):
        return Rule(id=rule_id, approver_role=role, conditions=conditions, logic=logic)

    def test_all_matching_roles_are_returned(self):
        """A PR matching two rules needs both roles, not just the first."""
        rules = [
            self.rule(1, "manager", Condition("total_value", ">", 1000)),
            self.rule(2, "finance", Condition("category_id", "==", 4)),
            self.rule(3, "director", Condition("total_value", ">", 10000)),
        ]
        roles = RuleEngine.determine_next_approvers(rules, SNAPSHOT)
        self.assertEqual(roles, ["manager", "finance"])

    def test_roles_are_deduplicated_in_first_seen_order(self):
        rules = [
            self.rule(1, "finance", Condition("category_id", "==", 4)),
            self.rule(2, "manager", Condition("total_value", ">", 1000)),
            self.rule(3, "finance", Condition("quantity", ">=", 1)),
        ]
        roles = RuleEngine.determine_next_approvers(rules, SNAPSHOT)
        self.assertEqual(roles, ["finance", "manager"])

    def test_or_rule_matches_when_any_condition_holds(self):
        rules = [
            self.rule(
                1, "it_lead",
                Condition("category_id", "==", 99),
                Condition("quantity", ">", 2),
                logic="OR",
            ),
        ]
        self.assertEqual(RuleEngine.determine_next_approvers(rules, SNAPSHOT), ["it_lead"])

    def test_and_rule_needs_all_conditions(self):
        rules = [
            self.rule(
                1, "it_lead",
                Condition("category_id", "==", 99),
                Condition("quantity", ">", 2),
            ),
            self.rule(2, "manager", Condition("total_value", ">", 0)),
        ]
        self.assertEqual(RuleEngine.determine_next_approvers(rules, SNAPSHOT), ["manager"])

    def test_no_match_raises_with_rule_ids(self):
        rules = [
            self.rule(11, "director", Condition("total_value", ">", 10000)),
            self.rule(12, "finance", Condition("category_id", "==", 99)),
        ]
        with self.assertRaises(NoApproversMatched) as ctx:
            RuleEngine.determine_next_approvers(rules, SNAPSHOT, workflow_id=5)

        self.assertEqual(ctx.exception.detail["workflow_id"], 5)
        self.assertEqual(ctx.exception.detail["rule_ids"], [11, 12])
        self.assertEqual(ctx.exception.message, "No approvers matched based on workflow rules.")

    def test_empty_rule_list_raises(self):
        with self.assertRaises(NoApproversMatched):
            RuleEngine.determine_next_approvers([], SNAPSHOT)


class ConditionValidationTest(SimpleTestCase):

    def test_from_dict(self):
        condition = Condition.from_dict({"field": "total_value", "operator": ">", "value": 1000})
        self.assertEqual(condition, Condition("total_value", ">", 1000))
        self.assertEqual(condition.to_dict(), {"field": "total_value", "operator": ">", "value": 1000})

    def test_missing_keys(self):
        with self.assertRaises(InvalidInput):
            Condition.from_dict({"field": "total_value", "value": 1000})

    def test_unsupported_operator(self):
        with self.assertRaises(InvalidInput):
            Condition.from_dict({"field": "total_value", "operator": "=>", "value": 1000})

    def test_rejected_values(self):
        for value in (True, None, [1], {"a": 1}):
            with self.subTest(value=value):
                with self.assertRaises(InvalidInput):
                    Condition.from_dict({"field": "total_value", "operator": "==", "value": value})

    def test_blank_field(self):
        with self.assertRaises(InvalidInput):
            Condition.from_dict({"field": " ", "operator": "==", "value": 1})

    def test_not_a_mapping(self):
        with self.assertRaises(InvalidInput):
            Condition.from_dict("total_value > 1000")

    def test_lenient_parse_keeps_unknown_operator(self):
        condition = Condition.from_dict({"field": "x", "operator": "~", "value": 1}, strict=False)
        self.assertEqual(condition.operator, "~")

    def test_normalize_single_and_list(self):
        single = {"field": "total_value", "operator": ">", "value": 1000}
        self.assertEqual(len(normalize_conditions(single)), 1)
        self.assertEqual(len(normalize_conditions([single, single])), 2)
        with self.assertRaises(InvalidInput):
            normalize_conditions([])
        with self.assertRaises(InvalidInput):
            normalize_conditions("nope")

    def test_normalize_logic(self):
        self.assertEqual(normalize_logic(None), "AND")
        self.assertEqual(normalize_logic("or"), "OR")
        with self.assertRaises(InvalidInput):
            normalize_logic("XOR")
