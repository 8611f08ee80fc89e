#!/usr/bin/env python3
"""Print the row-level security predicate of every catalog resource and action.

Usage:
  uv run python scripts/rls_predicates.py operator 7f3c... --operator-id 7f3c...
  uv run python scripts/rls_predicates.py client u-42 --resource bookings
"""
from __future__ import annotations

import argparse
import sys

from parkaccess.domain.authorization import build_default_catalog, generate_rls_condition
from parkaccess.domain.value_objects import PermissionAction, UserType


def main() -> int:
    parser = argparse.ArgumentParser(description="Show RLS predicates for a user")
    parser.add_argument("user_type", choices=[t.value for t in UserType])
    parser.add_argument("user_id")
    parser.add_argument("--operator-id", default=None, help="Operator the user works for")
    parser.add_argument("--resource", default=None, help="Only this resource")
    args = parser.parse_args()

    catalog = build_default_catalog()
    resources = sorted(
        {p.resource for t in catalog.user_types() for p in catalog.for_user_type(t)} - {"*"}
    )
    if args.resource:
        resources = [args.resource]

    for resource in resources:
        for action in PermissionAction:
            predicate = generate_rls_condition(
                catalog,
                args.user_type,
                args.user_id,
                resource,
                action,
                operator_id=args.operator_id,
            )
            print(f"{resource:<20} {action.value:<7} {predicate}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
