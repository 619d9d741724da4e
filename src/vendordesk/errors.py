# Vendor Desk - Business management back office for software vendors
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exception types shared by the Vendor Desk modules.

Three families of failures exist:

- ValidationError: a record or a partial update failed form-level rules.
  Raised before any write, it carries one message per failing field.
- DomainRuleError: a local invariant would be broken by the requested
  operation (deleting the sole administrator, referencing an unknown client,
  signing in from a foreign email domain, ...). No write is attempted.
- GatewayError: the table gateway rejected an operation (SQLite error,
  missing row). The operation is aborted and the in-memory state is left
  unchanged.
"""

from collections.abc import Mapping


class ValidationError(ValueError):
    """Field-level validation failure."""

    def __init__(self, errors: Mapping[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(f"Invalid data ({details})")


class DomainRuleError(ValueError):
    """A business rule prevents the requested operation."""


class GatewayError(RuntimeError):
    """The table gateway could not complete an operation."""
