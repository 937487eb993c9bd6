"""ChartRepository 통합 테스트"""

from decimal import Decimal

import pytest

from core.errors import NotFoundError, ValidationError
from core.ledger import AccountDraft, ChartDraft, ChartRepository
from core.types import AccountType


class TestCharts:
    """계정과목 생성/조회 테스트"""

    @pytest.mark.asyncio
    async def test_create_sub_head(self, charts: ChartRepository) -> None:
        """main head 아래 sub-head 생성"""
        parent = await charts.find_chart("Current Asset", AccountType.ASSET)

        chart = await charts.create_chart("Bank Accounts", "Asset", parent_id=parent.id)

        assert chart.parent_id == parent.id
        assert chart.type == AccountType.ASSET
        assert chart.is_main_head is False
        assert chart.created_at is not None

    @pytest.mark.asyncio
    async def test_rejects_invalid_type(self, charts: ChartRepository) -> None:
        """알 수 없는 유형"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.create_chart("Suspense", "Suspense")

        assert exc_info.value.rule == "invalid_chart_type"

    @pytest.mark.asyncio
    async def test_lookup_with_invalid_type(self, charts: ChartRepository) -> None:
        """조회도 알 수 없는 유형은 invalid_chart_type"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.find_chart("Cash", "Suspense")
        assert exc_info.value.rule == "invalid_chart_type"

        with pytest.raises(ValidationError) as exc_info:
            await charts.list_charts("Suspense")
        assert exc_info.value.rule == "invalid_chart_type"

    @pytest.mark.asyncio
    async def test_rejects_empty_name(self, charts: ChartRepository) -> None:
        """빈 이름"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.create_chart("  ", AccountType.ASSET)

        assert exc_info.value.rule == "empty_name"

    @pytest.mark.asyncio
    async def test_rejects_third_level(self, charts: ChartRepository) -> None:
        """sub-head 아래에는 만들 수 없음"""
        parent = await charts.find_chart("Current Asset", AccountType.ASSET)
        sub = await charts.create_chart("Bank Accounts", AccountType.ASSET, parent_id=parent.id)

        with pytest.raises(ValidationError) as exc_info:
            await charts.create_chart("Savings", AccountType.ASSET, parent_id=sub.id)

        assert exc_info.value.rule == "chart_depth"

    @pytest.mark.asyncio
    async def test_rejects_type_mismatch(self, charts: ChartRepository) -> None:
        """sub-head 유형은 부모와 같아야 함"""
        parent = await charts.find_chart("Current Asset", AccountType.ASSET)

        with pytest.raises(ValidationError) as exc_info:
            await charts.create_chart("Payables", AccountType.LIABILITY, parent_id=parent.id)

        assert exc_info.value.rule == "chart_type_mismatch"

    @pytest.mark.asyncio
    async def test_missing_parent(self, charts: ChartRepository) -> None:
        """부모가 없는 경우"""
        with pytest.raises(NotFoundError):
            await charts.create_chart("Orphan", AccountType.ASSET, parent_id=9999)

    @pytest.mark.asyncio
    async def test_rejects_duplicate(self, charts: ChartRepository) -> None:
        """같은 유형/이름 중복"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.create_chart("Current Asset", AccountType.ASSET)

        assert exc_info.value.rule == "duplicate_chart"

    @pytest.mark.asyncio
    async def test_same_name_different_type(self, charts: ChartRepository) -> None:
        """유형이 다르면 같은 이름 허용"""
        chart = await charts.create_chart("Revenue", AccountType.EQUITY)

        assert chart.type == AccountType.EQUITY

    @pytest.mark.asyncio
    async def test_find_or_create(self, charts: ChartRepository) -> None:
        """없으면 생성, 있으면 재사용"""
        first = await charts.find_or_create_chart("Inventory", "Asset", parent_name="Current Asset")
        second = await charts.find_or_create_chart("Inventory", "Asset", parent_name="Current Asset")

        assert first.id == second.id
        parent = await charts.get_chart(first.parent_id)
        assert parent.name == "Current Asset"


class TestAccounts:
    """계정 생성/수정 테스트"""

    @pytest.mark.asyncio
    async def test_create_account(self, charts: ChartRepository) -> None:
        """계정 생성"""
        head = await charts.find_chart("Current Liability", AccountType.LIABILITY)

        account = await charts.create_account(
            head.id,
            "Acme Supplies",
            code="SUP-001",
            phone1="010-0000-0000",
            goods_name="Paper",
        )

        assert account.code == "SUP-001"
        assert account.is_active is True
        assert account.opening_balance == Decimal("0.00")
        assert account.goods_name == "Paper"

    @pytest.mark.asyncio
    async def test_numeric_code_stored_as_text(self, charts: ChartRepository) -> None:
        """숫자 코드도 문자열로 저장"""
        head = await charts.find_chart("Current Asset", AccountType.ASSET)

        account = await charts.create_account(head.id, "Cash", code=101)

        assert account.code == "101"

    @pytest.mark.asyncio
    async def test_duplicate_name_and_code(self, charts: ChartRepository) -> None:
        """같은 chart 안 (name, code) 중복 거부, NULL 코드끼리도 중복"""
        head = await charts.find_chart("Current Asset", AccountType.ASSET)
        await charts.create_account(head.id, "Cash")

        with pytest.raises(ValidationError) as exc_info:
            await charts.create_account(head.id, "Cash")

        assert exc_info.value.rule == "duplicate_account"

        other = await charts.create_account(head.id, "Cash", code="C2")
        assert other.code == "C2"

    @pytest.mark.asyncio
    async def test_code_too_long(self, charts: ChartRepository) -> None:
        """40자 초과 코드"""
        head = await charts.find_chart("Current Asset", AccountType.ASSET)

        with pytest.raises(ValidationError) as exc_info:
            await charts.create_account(head.id, "Cash", code="X" * 41)

        assert exc_info.value.rule == "malformed_code"

    @pytest.mark.asyncio
    async def test_unknown_chart(self, charts: ChartRepository) -> None:
        """없는 chart"""
        with pytest.raises(NotFoundError):
            await charts.create_account(9999, "Cash")

    @pytest.mark.asyncio
    async def test_update_account(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """계정 수정"""
        account = await charts.update_account(
            book["Cash"], name="Cash on Hand", address="Seoul"
        )

        assert account.name == "Cash on Hand"
        assert account.address == "Seoul"

    @pytest.mark.asyncio
    async def test_update_cannot_set_opening_balance(
        self, charts: ChartRepository, book: dict[str, int]
    ) -> None:
        """기초 잔액은 수정 경로로 바꿀 수 없음"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.update_account(book["Cash"], opening_balance="100")

        assert exc_info.value.rule == "unknown_field"
        assert (await charts.get_account(book["Cash"])).opening_balance == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """변경할 수 없는 필드"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.update_account(book["Cash"], is_active=False)

        assert exc_info.value.rule == "unknown_field"

    @pytest.mark.asyncio
    async def test_deactivate(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """비활성화 후 활성 목록에서 제외"""
        await charts.set_account_active(book["Rent"], False)

        active_ids = {a.id for a in await charts.list_accounts(active_only=True)}
        all_ids = {a.id for a in await charts.list_accounts()}

        assert book["Rent"] not in active_ids
        assert book["Rent"] in all_ids

    @pytest.mark.asyncio
    async def test_get_missing_account(self, charts: ChartRepository) -> None:
        """없는 계정 조회"""
        with pytest.raises(NotFoundError) as exc_info:
            await charts.get_account(424242)

        assert exc_info.value.kind == "account"


class TestTreeAndImport:
    """트리 조회/일괄 입력 테스트"""

    @pytest.mark.asyncio
    async def test_tree(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """main head → sub-head → account 트리"""
        await charts.find_or_create_chart("Bank Accounts", "Asset", parent_name="Current Asset")

        roots = await charts.list_charts_with_accounts()
        by_name = {node.chart.name: node for node in roots}

        current = by_name["Current Asset"]
        assert [a.name for a in current.accounts] == ["Cash"]
        assert [child.chart.name for child in current.children] == ["Bank Accounts"]
        assert "Bank Accounts" not in by_name

    @pytest.mark.asyncio
    async def test_bulk_insert(self, charts: ChartRepository) -> None:
        """계정과목/계정 일괄 입력"""
        created_charts, created_accounts = await charts.bulk_insert(
            [ChartDraft(name="Debtors", type="Asset", parent_name="Current Asset")],
            [
                AccountDraft(name="Customer A", chart_name="Debtors", chart_type="Asset", code="C-1"),
                AccountDraft(name="Customer B", chart_name="Debtors", chart_type="Asset"),
            ],
        )

        assert [c.name for c in created_charts] == ["Debtors"]
        assert [a.name for a in created_accounts] == ["Customer A", "Customer B"]
        assert {a.chart_id for a in created_accounts} == {created_charts[0].id}

    @pytest.mark.asyncio
    async def test_bulk_insert_all_or_nothing(self, charts: ChartRepository) -> None:
        """하나라도 실패하면 전체 롤백"""
        with pytest.raises(ValidationError):
            await charts.bulk_insert(
                [ChartDraft(name="Debtors", type="Asset", parent_name="Current Asset")],
                [
                    AccountDraft(name="Customer A", chart_name="Debtors", chart_type="Asset"),
                    AccountDraft(name="Customer A", chart_name="Debtors", chart_type="Asset"),
                ],
            )

        assert await charts.find_chart("Debtors", AccountType.ASSET) is None
        assert await charts.list_accounts() == []

    @pytest.mark.asyncio
    async def test_bulk_insert_missing_chart(self, charts: ChartRepository) -> None:
        """chart 지정이 없는 계정"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.bulk_insert([], [AccountDraft(name="Loose")])

        assert exc_info.value.rule == "missing_chart"

    @pytest.mark.asyncio
    async def test_bulk_insert_accounts_start_at_zero(self, charts: ChartRepository) -> None:
        """일괄 입력 계정의 기초 잔액은 항상 0"""
        _, accounts = await charts.bulk_insert(
            [], [AccountDraft(name="Petty Cash", chart_name="Current Asset", chart_type="Asset")]
        )

        assert accounts[0].opening_balance == Decimal("0.00")


class TestOpeningBalances:
    """기초 잔액 설정 테스트"""

    @pytest.mark.asyncio
    async def test_balanced_change(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """변경분 합이 0이면 반영"""
        accounts = await charts.set_opening_balances(
            {book["Cash"]: "250", book["Capital"]: "-250"}
        )

        assert [a.opening_balance for a in accounts] == [Decimal("250.00"), Decimal("-250.00")]

    @pytest.mark.asyncio
    async def test_single_sided_change_rejected(
        self, charts: ChartRepository, book: dict[str, int]
    ) -> None:
        """한쪽만 바꾸면 거부, 아무것도 쓰지 않음"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.set_opening_balances({book["Cash"]: "100.00"})

        assert exc_info.value.rule == "unbalanced_opening_balances"
        assert exc_info.value.details["difference"] == "100.00"
        assert (await charts.get_account(book["Cash"])).opening_balance == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_change_measured_against_current(
        self, charts: ChartRepository, book: dict[str, int]
    ) -> None:
        """기존 잔액 대비 변경분으로 판단"""
        await charts.set_opening_balances({book["Cash"]: "300", book["Capital"]: "-300"})

        # Cash 300 → 500, Bank Loan 0 → -200: 변경분 +200 - 200
        accounts = await charts.set_opening_balances(
            {book["Cash"]: "500", book["Bank Loan"]: "-200"}
        )
        assert [a.opening_balance for a in accounts] == [Decimal("500.00"), Decimal("-200.00")]

        with pytest.raises(ValidationError):
            await charts.set_opening_balances({book["Capital"]: "-100"})

    @pytest.mark.asyncio
    async def test_malformed_amount(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """기초 잔액 형식 오류"""
        with pytest.raises(ValidationError) as exc_info:
            await charts.set_opening_balances({book["Cash"]: "12.345", book["Capital"]: "-12.345"})

        assert exc_info.value.rule == "malformed_amount"

    @pytest.mark.asyncio
    async def test_unknown_account(self, charts: ChartRepository, book: dict[str, int]) -> None:
        """없는 계정"""
        with pytest.raises(NotFoundError):
            await charts.set_opening_balances({book["Cash"]: "5", 9999: "-5"})

        assert (await charts.get_account(book["Cash"])).opening_balance == Decimal("0.00")
