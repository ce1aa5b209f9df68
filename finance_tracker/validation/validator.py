"""
Two-Stage Validation Pipeline

DESIGN DECISION: Bill input is validated in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (name, amount, due date)
- Amount parses as a decimal, date parses as an ISO date
- Recurrence is a known value

STAGE 2 - SEMANTIC VALIDATION:
- Negative amounts
- Absurdly large or zero amounts

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues.
An invalid add or edit becomes a no-op and the issues are reported.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import ValidationError

from finance_tracker.config import get_settings
from finance_tracker.models.bill import (
    BillChanges,
    BillForm,
    BillTemplate,
    Recurrence,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.models.ledger import Paycheck, Todo


class BillFormValidator:
    """
    Validates bill input from the UI through a two-stage pipeline.

    Stage 1: Schema validation (presence and parsing)
    Stage 2: Semantic validation (value sanity)
    """

    def __init__(self, max_bill_amount: Optional[float] = None):
        if max_bill_amount is None:
            max_bill_amount = get_settings().app.max_bill_amount
        self._max_amount = Decimal(str(max_bill_amount))

    def _validate_schema(
        self,
        form: BillForm,
    ) -> tuple[bool, list[ValidationIssue], dict[str, Any]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues, parsed_fields)
        """
        issues = []
        parsed: dict[str, Any] = {}

        name = (form.name or "").strip()
        if not name:
            issues.append(_missing("name", "Bill name is required"))
        elif len(name) > 200:
            issues.append(ValidationIssue(
                field="name",
                issue_type="invalid_value",
                message="Bill name is longer than 200 characters",
                severity="error",
            ))
        else:
            parsed["name"] = name

        amount = parse_amount(form.amount)
        if amount is None:
            issues.append(_missing("amount", "Amount is required"))
        elif isinstance(amount, ValidationIssue):
            issues.append(amount)
        else:
            parsed["amount"] = amount

        due_date = parse_date(form.due_date)
        if due_date is None:
            issues.append(_missing("due_date", "Due date is required"))
        elif isinstance(due_date, ValidationIssue):
            issues.append(due_date)
        else:
            parsed["due_date"] = due_date

        try:
            parsed["recurrence"] = Recurrence(form.recurrence)
        except ValueError:
            issues.append(ValidationIssue(
                field="recurrence",
                issue_type="invalid_value",
                message=f"Unknown recurrence: {form.recurrence}",
                severity="error",
                suggested_fix="Choose none, weekly, monthly or yearly",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, parsed

    def _validate_semantic(
        self,
        amount: Optional[Decimal],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if amount is not None:
            if amount < 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="invalid_value",
                    message="Amount cannot be negative",
                    severity="error",
                    suggested_fix="Enter the amount you owe as a positive number",
                ))
            elif amount == 0:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Amount is zero",
                    severity="warning",
                    suggested_fix="Please verify the amount",
                ))
            elif amount > self._max_amount:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message=f"Amount ({amount:,.2f}) seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(self, form: BillForm) -> ValidationResult:
        """Run the full two-stage pipeline on new-bill input."""
        result, _ = self._run(form)
        return result

    def build_template(
        self,
        form: Union[BillForm, dict],
    ) -> tuple[ValidationResult, Optional[BillTemplate]]:
        """
        Validate new-bill input and, if valid, build the template.

        Returns:
            (validation_result, template_or_None)
        """
        if not isinstance(form, BillForm):
            try:
                form = BillForm.model_validate(form)
            except ValidationError as e:
                return _result(False, False, _issues_from(e)), None

        result, parsed = self._run(form)
        if not result.is_valid:
            return result, None
        return result, BillTemplate(**parsed)

    def validate_changes(
        self,
        changes: Union[BillChanges, dict],
    ) -> tuple[ValidationResult, Optional[BillChanges]]:
        """
        Validate a partial update.

        Returns:
            (validation_result, parsed_changes_or_None)
        """
        if isinstance(changes, BillChanges):
            parsed = changes
            schema_issues = []
        else:
            try:
                parsed = BillChanges.model_validate(changes)
                schema_issues = []
            except ValidationError as e:
                parsed = None
                schema_issues = _issues_from(e)

        schema_valid = not schema_issues
        semantic_valid = False
        semantic_issues = []
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(parsed.amount)

        result = _result(schema_valid, semantic_valid, schema_issues + semantic_issues)
        return result, parsed if result.is_valid else None

    def build_todo(
        self,
        task: Optional[str],
        due_date,
    ) -> tuple[ValidationResult, Optional[Todo]]:
        """Validate todo input; task and due date are both required."""
        issues = []
        task = (task or "").strip()
        if not task:
            issues.append(_missing("task", "Task is required"))
        parsed_date = _required(parse_date(due_date), "due_date", "Due date is required", issues)

        result = _result(not issues, not issues, issues)
        if not result.is_valid:
            return result, None
        return result, Todo(task=task, due_date=parsed_date)

    def build_paycheck(
        self,
        amount,
        pay_date,
    ) -> tuple[ValidationResult, Optional[Paycheck]]:
        """Validate paycheck input; amount and date are both required."""
        issues = []
        parsed_amount = _required(parse_amount(amount), "amount", "Amount is required", issues)
        parsed_date = _required(parse_date(pay_date, "date"), "date", "Date is required", issues)

        if parsed_amount is not None and parsed_amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Paycheck amount cannot be negative",
                severity="error",
            ))

        result = _result(not issues, not issues, issues)
        if not result.is_valid:
            return result, None
        return result, Paycheck(amount=parsed_amount, date=parsed_date)

    def _run(self, form: BillForm) -> tuple[ValidationResult, dict[str, Any]]:
        schema_valid, issues, parsed = self._validate_schema(form)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(parsed["amount"])
            issues.extend(semantic_issues)

        return _result(schema_valid, semantic_valid, issues), parsed

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ The bill could not be saved:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)


def _result(
    schema_valid: bool,
    semantic_valid: bool,
    issues: list[ValidationIssue],
) -> ValidationResult:
    return ValidationResult(
        schema_valid=schema_valid,
        semantic_valid=semantic_valid,
        is_valid=schema_valid and semantic_valid,
        issues=issues,
        warnings=[issue.message for issue in issues if issue.severity == "warning"],
    )


def _issues_from(error: ValidationError) -> list[ValidationIssue]:
    """Turn a pydantic ValidationError into schema issues."""
    return [
        ValidationIssue(
            field=".".join(str(part) for part in detail["loc"]) or "input",
            issue_type="invalid_format",
            message=detail["msg"],
            severity="error",
        )
        for detail in error.errors()
    ]


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type="missing",
        message=message,
        severity="error",
    )


def _required(parsed, field: str, message: str, issues: list[ValidationIssue]):
    """Collect the issue for a missing or unparseable value; return the value otherwise."""
    if parsed is None:
        issues.append(_missing(field, message))
        return None
    if isinstance(parsed, ValidationIssue):
        issues.append(parsed)
        return None
    return parsed


def parse_amount(value, field: str = "amount") -> Union[Decimal, ValidationIssue, None]:
    """Parse a user-typed amount; None when nothing was entered."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        return ValidationIssue(
            field=field,
            issue_type="invalid_format",
            message=f"Amount '{value}' is not a number",
            severity="error",
            suggested_fix="Enter a number such as 120.50",
        )
    return amount


def parse_date(value, field: str = "due_date") -> Union[date, ValidationIssue, None]:
    """Parse an ISO date; None when nothing was entered."""
    if value is None:
        return None
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return ValidationIssue(
            field=field,
            issue_type="invalid_format",
            message=f"Date '{value}' is not a valid date",
            severity="error",
            suggested_fix="Use the YYYY-MM-DD format",
        )
