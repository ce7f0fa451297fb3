"""Create the approvalflow DynamoDB tables and seed sample reference data.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
import json
from typing import Any

import boto3

from approvalflow.models.records import Department

TABLE_PREFIX = "approvalflow"

# logical table -> hash key attribute
TABLE_DEFINITIONS: list[dict[str, str]] = [
    {"name": "requests", "key": "requestId"},
    {"name": "approvers", "key": "email"},
    {"name": "it-reviewers", "key": "formId"},
    {"name": "departments", "key": "departmentId"},
    {"name": "settings", "key": "name"},
]

SAMPLE_APPROVERS: list[dict[str, Any]] = [
    {"email": "admin@example.com", "approverName": "System Admin", "level": 1, "role": "Admin",
     "position": "IT Administrator", "department": "IT", "subDepartment": "Infrastructure",
     "division": "Technology"},
    {"email": "it.manager@example.com", "approverName": "IT Manager", "level": 2, "role": "Approver",
     "position": "Manager", "department": "IT", "subDepartment": "", "division": "Technology"},
    {"email": "cto@example.com", "approverName": "Chief Technology Officer", "level": 10, "role": "Approver",
     "position": "VP", "department": "IT", "subDepartment": "", "division": "Technology"},
    {"email": "fin.lead@example.com", "approverName": "Finance Lead", "level": 2, "role": "Approver",
     "position": "Lead", "department": "Finance", "subDepartment": "", "division": "Operations"},
    {"email": "ap.lead@example.com", "approverName": "Payables Lead", "level": 2, "role": "Approver",
     "position": "Lead", "department": "Finance", "subDepartment": "Accounts Payable",
     "division": "Operations"},
    {"email": "coo@example.com", "approverName": "Chief Operating Officer", "level": 10, "role": "Approver",
     "position": "VP", "department": "Finance", "subDepartment": "", "division": "Operations"},
]

SAMPLE_IT_CHAINS: list[dict[str, str]] = [
    {"formId": form_id, "reviewerEmail": "it.reviewer@example.com",
     "managerEmail": "it.manager@example.com", "directorEmail": "it.director@example.com"}
    for form_id in ("009", "010", "011", "012", "014", "026")
]

SAMPLE_DEPARTMENTS: list[tuple[str, str]] = [
    ("IT", ""),
    ("IT", "Infrastructure"),
    ("IT", "Applications"),
    ("Finance", ""),
    ("Finance", "Accounts Payable"),
]

SAMPLE_SETTINGS: dict[str, Any] = {
    "helpdeskEmail": "helpdesk@example.com",
    "disabledForms": [],
    "itReviewForms": ["010", "011", "012", "009", "014", "026"],
}


def table_name(name: str, suffix: str = "") -> str:
    return f"{TABLE_PREFIX}-{name}{suffix}"


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all 5 DynamoDB tables. Skips if table already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        name = table_name(defn["name"], suffix)
        if name in existing:
            print(f"  Table {name} already exists, skipping")
            continue
        client.create_table(
            TableName=name,
            KeySchema=[{"AttributeName": defn["key"], "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": defn["key"], "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        print(f"  Created table {name}")


def seed_reference_data(ddb: Any, suffix: str = "") -> None:
    """Seed a sample roster, IT review chains, departments and settings."""
    tbl = ddb.Table(table_name("approvers", suffix))
    with tbl.batch_writer() as batch:
        for approver in SAMPLE_APPROVERS:
            batch.put_item(Item=approver)
    print(f"  Seeded {len(SAMPLE_APPROVERS)} approvers")

    tbl = ddb.Table(table_name("it-reviewers", suffix))
    with tbl.batch_writer() as batch:
        for chain in SAMPLE_IT_CHAINS:
            batch.put_item(Item=chain)
    print(f"  Seeded {len(SAMPLE_IT_CHAINS)} IT review chains")

    tbl = ddb.Table(table_name("departments", suffix))
    with tbl.batch_writer() as batch:
        for department, sub_department in SAMPLE_DEPARTMENTS:
            batch.put_item(Item={
                "departmentId": Department.make_id(department, sub_department),
                "department": department,
                "subDepartment": sub_department,
            })
    print(f"  Seeded {len(SAMPLE_DEPARTMENTS)} departments")

    tbl = ddb.Table(table_name("settings", suffix))
    with tbl.batch_writer() as batch:
        for name, value in SAMPLE_SETTINGS.items():
            batch.put_item(Item={"name": name, "value": json.dumps(value)})
    print(f"  Seeded {len(SAMPLE_SETTINGS)} settings")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for approvalflow")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_reference_data(ddb, suffix=args.table_suffix)

    print("Done!")


if __name__ == "__main__":
    main()
