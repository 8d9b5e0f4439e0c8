from datetime import date, datetime, timezone

import pytest

from agreements_pdf.errors import ConfigurationError
from agreements_pdf.models.settings import RetentionPolicy
from agreements_pdf.retention import (
    calculate_retention_period,
    parse_end_date,
    start_of_next_month,
    whole_years_between,
)

NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_start_of_next_month_rolls_over_year() -> None:
    """
    Given: 12월과 일반 월의 처리 시각
    When: 다음 달 1일 계산
    Then: 12월은 다음 해 1월 1일
    """
    assert start_of_next_month(datetime(2024, 12, 31, 23, 59)) == date(2025, 1, 1)
    assert start_of_next_month(datetime(2025, 1, 1)) == date(2025, 2, 1)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2025, 2, 1), date(2028, 1, 31), 2),
        (date(2025, 2, 1), date(2028, 2, 1), 3),
        (date(2025, 2, 1), date(2025, 2, 1), 0),
        (date(2025, 2, 1), date(2024, 3, 1), 0),
        (date(2025, 2, 1), date(2020, 1, 1), -5),
    ],
)
def test_whole_years_between_truncates_toward_zero(start, end, expected) -> None:
    """
    Given: 시작/종료일 쌍
    When: 경과 연수 계산
    Then: 부분 연도는 버리고 0 방향으로 절삭
    """
    assert whole_years_between(start, end) == expected


@pytest.mark.parametrize(
    "end_date,expected",
    [
        ("2028-01-31", "agreements_10"),  # 2 + 7 = 9
        ("2028-02-01", "agreements_10"),  # 3 + 7 = 10
        ("2029-02-01", "agreements_15"),  # 4 + 7 = 11
        ("2033-02-01", "agreements_15"),  # 8 + 7 = 15
        ("2034-02-01", "agreements_20"),  # 9 + 7 = 16
        ("2020-01-01", "agreements_10"),
    ],
)
def test_tier_boundaries(end_date, expected) -> None:
    """
    Given: 처리 시각 2025-01-15 (보존 시작 2025-02-01)
    When: 종료일별 보존 기간 계산
    Then: 10년 이하/15년 이하/초과 경계에 맞는 접두사 반환
    """
    assert calculate_retention_period(end_date, now=NOW) == expected


def test_missing_or_invalid_end_date_uses_maximum_tier() -> None:
    """
    Given: 종료일 없음/빈 문자열/파싱 불가 값
    When: 보존 기간 계산
    Then: 최장 보존 접두사 반환
    """
    for value in (None, "", "not-a-date", "31/12/2030"):
        assert calculate_retention_period(value, now=NOW) == "agreements_20"


def test_parse_end_date_accepts_datetime_strings() -> None:
    """
    Given: ISO 날짜, ISO 일시(Z 포함), datetime 객체
    When: 종료일 파싱
    Then: 모두 date로 변환
    """
    assert parse_end_date("2030-06-30") == date(2030, 6, 30)
    assert parse_end_date("2030-06-30T00:00:00Z") == date(2030, 6, 30)
    assert parse_end_date("2030-06-30T12:00:00.000+01:00") == date(2030, 6, 30)
    assert parse_end_date(datetime(2030, 6, 30, 8)) == date(2030, 6, 30)


def test_later_end_date_never_lowers_tier() -> None:
    """
    Given: 하루씩 늘어나는 종료일 목록
    When: 각 종료일의 보존 등급 계산
    Then: 등급이 감소하지 않음(단조성)
    """
    order = {"agreements_10": 0, "agreements_15": 1, "agreements_20": 2}
    ranks = []
    for year in range(2024, 2040):
        for month in (1, 2, 7, 12):
            ranks.append(order[calculate_retention_period(date(year, month, 1), now=NOW)])
    assert ranks == sorted(ranks)


def test_same_inputs_same_prefix() -> None:
    """
    Given: 동일한 (now, end_date, policy)
    When: 두 번 계산
    Then: 동일 결과
    """
    policy = RetentionPolicy()
    assert calculate_retention_period("2031-05-05", policy, NOW) == calculate_retention_period(
        "2031-05-05", policy, NOW
    )


def test_custom_policy_prefixes_and_thresholds() -> None:
    """
    Given: 사용자 정의 접두사/임계값 정책
    When: 보존 기간 계산
    Then: 정책 값이 적용됨
    """
    policy = RetentionPolicy(
        base_prefix="short",
        extended_prefix="medium",
        maximum_prefix="long",
        base_years=0,
        base_threshold=1,
        extended_threshold=2,
    )
    assert calculate_retention_period("2026-02-01", policy, NOW) == "short"
    assert calculate_retention_period("2027-02-01", policy, NOW) == "medium"
    assert calculate_retention_period("2028-02-01", policy, NOW) == "long"


def test_policy_rejects_inverted_thresholds() -> None:
    """
    Given: extended_threshold < base_threshold
    When: 정책 생성
    Then: ConfigurationError
    """
    with pytest.raises(ConfigurationError):
        RetentionPolicy(base_threshold=15, extended_threshold=10)
