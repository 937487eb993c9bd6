"""
등록된 마이그레이션 목록

새 마이그레이션은 mNNN_<name>.py로 추가하고 아래 목록 끝에 등록.
적용된 마이그레이션은 수정/삭제/순서 변경 금지.
"""

from core.migrations.registry import Migration
from core.migrations.versions import (
    m001_rebuild_chart_with_parent_and_type_check,
    m002_add_account_contact_columns,
    m003_rebuild_account_code_as_text,
    m004_add_unique_account_name_code_in_chart,
    m005_add_is_active_to_account,
    m006_add_opening_balance_to_account,
    m007_add_posted_journal_guards_and_indexes,
    m008_seed_default_chart_heads,
)

MIGRATIONS: tuple[Migration, ...] = (
    m001_rebuild_chart_with_parent_and_type_check.migration,
    m002_add_account_contact_columns.migration,
    m003_rebuild_account_code_as_text.migration,
    m004_add_unique_account_name_code_in_chart.migration,
    m005_add_is_active_to_account.migration,
    m006_add_opening_balance_to_account.migration,
    m007_add_posted_journal_guards_and_indexes.migration,
    m008_seed_default_chart_heads.migration,
)
