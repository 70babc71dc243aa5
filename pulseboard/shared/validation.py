"""
PULSEBOARD DATA VALIDATION MODULE
Schema checking and pre-storage validation for project records

This module provides validation for:
- Record schemas (required fields, types, enumerated values)
- Pre-storage validation for every backend (required fields, max lengths,
  JSON-safe values)
"""

import logging
from datetime import datetime
from typing import Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum

from ..models import PROJECT_STATUSES, PROJECT_TYPES

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION RESULT TYPES
# =============================================================================

class ValidationSeverity(Enum):
    """Severity levels for validation issues"""
    INFO = "info"           # Informational, data is valid
    WARNING = "warning"     # Data is usable but flagged
    ERROR = "error"         # Data is invalid, should not be used


@dataclass
class ValidationIssue:
    """Represents a single validation issue"""
    field: str
    message: str
    severity: ValidationSeverity
    actual_value: Any = None
    expected: str = ""

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "message": self.message,
            "severity": self.severity.value,
            "actual_value": str(self.actual_value)[:100] if self.actual_value else None,
            "expected": self.expected,
        }


@dataclass
class ValidationResult:
    """Result of a validation operation"""
    valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    data: Any = None  # The validated (possibly corrected) data

    def add_issue(
        self,
        field: str,
        message: str,
        severity: ValidationSeverity,
        actual_value: Any = None,
        expected: str = ""
    ):
        self.issues.append(ValidationIssue(
            field=field,
            message=message,
            severity=severity,
            actual_value=actual_value,
            expected=expected,
        ))
        if severity == ValidationSeverity.ERROR:
            self.valid = False

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == ValidationSeverity.WARNING for i in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    def error_messages(self) -> List[str]:
        return [
            f"{i.field}: {i.message}"
            for i in self.issues
            if i.severity == ValidationSeverity.ERROR
        ]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "issues": [i.to_dict() for i in self.issues],
            "error_count": self.error_count,
        }

    def log_issues(self, prefix: str = ""):
        """Log all issues at appropriate levels"""
        for issue in self.issues:
            msg = f"{prefix}[{issue.field}] {issue.message}"
            if issue.severity == ValidationSeverity.INFO:
                logger.info(msg)
            elif issue.severity == ValidationSeverity.WARNING:
                logger.warning(msg)
            else:
                logger.error(msg)


# =============================================================================
# SCHEMA DEFINITIONS
# =============================================================================

PROJECT_SCHEMA = {
    "required": ["title", "project_type", "status", "solution_architect", "project_lead"],
    "optional": ["team_members", "stakeholders", "wiki_link", "useful_links", "modified_date"],
    "types": {
        "title": str,
        "project_type": str,
        "status": str,
        "solution_architect": str,
        "project_lead": str,
        "team_members": str,
        "stakeholders": str,
        "wiki_link": str,
        "useful_links": str,
        "modified_date": str,
    },
    "enum_values": {
        "project_type": PROJECT_TYPES,
        "status": PROJECT_STATUSES,
    }
}

STATUS_UPDATE_SCHEMA = {
    "required": ["project_id", "content", "commenter"],
    "types": {
        "project_id": str,
        "content": str,
        "commenter": str,
    }
}


# =============================================================================
# SCHEMA VALIDATOR
# =============================================================================

class SchemaValidator:
    """Validates data structures against defined schemas"""

    @staticmethod
    def validate_schema(
        data: Dict[str, Any],
        schema: Dict[str, Any],
        schema_name: str = "data"
    ) -> ValidationResult:
        """
        Validate a dictionary against a schema definition.

        Args:
            data: The data to validate
            schema: Schema definition with "required", "optional", "types", "enum_values"
            schema_name: Name for logging purposes
        """
        result = ValidationResult(valid=True, data=data)

        if not isinstance(data, dict):
            result.add_issue(
                schema_name, f"Expected dict, got {type(data).__name__}",
                ValidationSeverity.ERROR,
                actual_value=type(data).__name__,
                expected="dict"
            )
            return result

        # Required fields must be present and non-blank
        for field_name in schema.get("required", []):
            value = data.get(field_name)
            if value is None or (isinstance(value, str) and not value.strip()):
                result.add_issue(
                    f"{schema_name}.{field_name}",
                    f"Required field '{field_name}' is missing or empty",
                    ValidationSeverity.ERROR
                )

        types = schema.get("types", {})
        for field_name, expected_types in types.items():
            if field_name in data and data[field_name] is not None:
                if not isinstance(expected_types, tuple):
                    expected_types = (expected_types,)

                if not isinstance(data[field_name], expected_types):
                    result.add_issue(
                        f"{schema_name}.{field_name}",
                        f"Type mismatch: expected {expected_types}, got {type(data[field_name]).__name__}",
                        ValidationSeverity.ERROR,
                        actual_value=type(data[field_name]).__name__,
                        expected=str(expected_types)
                    )

        # Enumerated values are matched exactly
        enums = schema.get("enum_values", {})
        for field_name, valid_values in enums.items():
            if field_name in data and data[field_name] is not None:
                if data[field_name] not in valid_values:
                    result.add_issue(
                        f"{schema_name}.{field_name}",
                        f"Invalid enum value: '{data[field_name]}'",
                        ValidationSeverity.ERROR,
                        actual_value=data[field_name],
                        expected=str(list(valid_values))
                    )

        return result

    @staticmethod
    def validate_project(project: Dict[str, Any]) -> ValidationResult:
        return SchemaValidator.validate_schema(project, PROJECT_SCHEMA, "project")

    @staticmethod
    def validate_status_update(update: Dict[str, Any]) -> ValidationResult:
        return SchemaValidator.validate_schema(update, STATUS_UPDATE_SCHEMA, "status_update")


# =============================================================================
# STORAGE VALIDATOR
# =============================================================================

class StorageValidator:
    """Validates records before they are written by any storage backend"""

    TABLE_SCHEMAS = {
        "projects": {
            "schema": PROJECT_SCHEMA,
            "max_lengths": {
                "title": 500,
                "project_type": 50,
                "status": 20,
                "solution_architect": 200,
                "project_lead": 200,
                "team_members": 2000,
                "stakeholders": 2000,
                "wiki_link": 2000,
                "useful_links": 2000,
                "modified_date": 50,
            }
        },
        "status_updates": {
            "schema": STATUS_UPDATE_SCHEMA,
            "max_lengths": {
                "content": 10000,
                "commenter": 200,
            }
        },
    }

    @staticmethod
    def validate_for_storage(
        data: Dict[str, Any],
        table_name: str,
    ) -> ValidationResult:
        """
        Validate a record before insertion.

        Over-long strings and schema errors make the result invalid; stored
        values are never shortened. The sanitized record is returned in ``result.data``.
        """
        table = StorageValidator.TABLE_SCHEMAS.get(table_name)
        if not table:
            result = ValidationResult(valid=True, data=data)
            result.add_issue(
                "table", f"Unknown table: {table_name}",
                ValidationSeverity.WARNING
            )
            return result

        record = dict(data)
        result = SchemaValidator.validate_schema(record, table["schema"], table_name)

        for field_name, max_len in table.get("max_lengths", {}).items():
            value = record.get(field_name)
            if isinstance(value, str) and len(value) > max_len:
                result.add_issue(
                    field_name,
                    f"Value is {len(value)} chars, limit is {max_len}",
                    ValidationSeverity.ERROR,
                    actual_value=len(value),
                    expected=f"<= {max_len} chars"
                )

        result.data = StorageValidator._sanitize_for_json(record)
        return result

    @staticmethod
    def _sanitize_for_json(data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert values that JSON/SQL drivers cannot store directly"""
        sanitized = {}
        for key, value in data.items():
            if isinstance(value, datetime):
                sanitized[key] = value.isoformat()
            elif isinstance(value, Enum):
                sanitized[key] = value.value
            else:
                sanitized[key] = value
        return sanitized

