from __future__ import annotations

import math
from typing import List, Union

# 만 단위(4자리씩) 끊어 읽기
MYRIAD_UNITS = ["", "만", "억", "조"]
SMALL_UNITS = ["", "십", "백", "천"]
DIGITS = ["", "일", "이", "삼", "사", "오", "육", "칠", "팔", "구"]

CURRENCY_UNIT = "원"

# 조 단위까지만 표현할 수 있다 (10^16 미만)
AMOUNT_WORDS_CEILING = 10 ** (4 * len(MYRIAD_UNITS))


def _split_myriads(n: int) -> List[int]:
    """하위 자리부터 4자리씩 끊은 값 목록."""
    parts: List[int] = []
    while n > 0:
        parts.append(n % 10000)
        n //= 10000
    return parts


def _four_digits_to_korean(n: int) -> str:
    if n == 0:
        return ""

    result = ""
    digit_array = [n // 1000, (n % 1000) // 100, (n % 100) // 10, n % 10]

    for i, digit in enumerate(digit_array):
        if digit == 0:
            continue
        scale = SMALL_UNITS[3 - i]
        # 십/백/천 앞의 "일"은 읽지 않는다 (일십 → 십)
        if digit == 1 and scale:
            result += scale
        else:
            result += DIGITS[digit] + scale

    return result


def to_korean_amount_words(n: int) -> str:
    """
    금액을 한글로 읽은 문자열로 바꾼다.

    예: 40000 → "사만원", 1200000 → "백이십만원", 0 → ""

    0 이상의 정수만 받는다. 10^16 이상은 단위표(조)를 넘으므로 ValueError.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"정수 금액만 변환할 수 있습니다: {n!r}")
    if n < 0:
        raise ValueError(f"음수 금액은 변환할 수 없습니다: {n}")
    if n >= AMOUNT_WORDS_CEILING:
        raise ValueError(f"조 단위를 넘는 금액은 변환할 수 없습니다: {n}")
    if n == 0:
        return ""

    parts = _split_myriads(n)
    result = ""
    for i in range(len(parts) - 1, -1, -1):
        part = parts[i]
        if part == 0:
            continue
        result += _four_digits_to_korean(part) + MYRIAD_UNITS[i]

    return result + CURRENCY_UNIT


def format_currency(amount: Union[int, float]) -> str:
    """ko-KR 숫자 표기 + "원". 0 도 "0원" 으로 표시한다."""
    if isinstance(amount, int):
        return f"{amount:,}{CURRENCY_UNIT}"
    if not math.isfinite(amount):
        amount = 0.0
    if amount.is_integer():
        return f"{int(amount):,}{CURRENCY_UNIT}"
    text = f"{amount:,.3f}".rstrip("0").rstrip(".")
    return f"{text}{CURRENCY_UNIT}"
