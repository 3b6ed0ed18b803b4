from __future__ import annotations

import re
from pathlib import Path

import venturescope.models  # noqa: F401
from venturescope.models import Base

EXPECTED_TABLES = {
    "organizations",
    "users",
    "org_memberships",
    "user_sessions",
    "user_settings",
    "companies",
    "documents",
    "assessments",
    "assessment_shares",
    "assessment_comments",
    "chat_threads",
    "chat_messages",
    "usage_records",
    "deal_submissions",
    "intake_rate_limits",
    "ic_voting_rounds",
    "ic_round_participants",
    "ic_votes",
}

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations" / "versions"


def test_model_metadata_contains_tenant_schema():
    assert EXPECTED_TABLES == set(Base.metadata.tables.keys())


def test_baseline_migration_creates_every_model_table():
    source = "\n".join(path.read_text(encoding="utf-8") for path in MIGRATIONS_DIR.glob("*.py"))
    created = set(re.findall(r'op\.create_table\(\s*"([a-z_]+)"', source))
    assert created == set(Base.metadata.tables.keys())


def test_org_owned_rows_carry_org_foreign_key():
    for table_name in ("companies", "usage_records", "deal_submissions", "intake_rate_limits", "ic_voting_rounds"):
        table = Base.metadata.tables[table_name]
        targets = {fk.target_fullname for fk in table.foreign_keys}
        assert "organizations.id" in targets, table_name
