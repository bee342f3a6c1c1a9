"""
프로필 문서 병합 엔진

클라이언트가 보낸 (부분) 게임 상태 문서를 서버에 저장된 문서와 합칩니다.

규칙:
1. 정리(sanitize): null, 공백 문자열, 정리 후 비어버린 하위 문서는 "의견 없음" 으로 보고 제거
2. 서버 권한 키(coins 등)는 최상위에서 제거 - 클라이언트는 잔액을 설정할 수 없음
3. 정리 결과가 비어있으면 저장하지 않음 (호출 측에서 읽기 전용으로 처리)
4. 재귀 병합: 양쪽 모두 문서면 재귀, 그 외에는 클라이언트 값이 우선.
   서버에만 있는 키는 그대로 유지, 클라이언트에만 있는 키는 추가

모든 함수는 입력을 변경하지 않고 새 dict 를 반환합니다.
"""

from typing import Any, Dict, Iterable, Mapping

from pydantic import JsonValue

JsonDocument = Dict[str, JsonValue]

COINS_KEY = "coins"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def sanitize_document(document: Mapping[str, Any]) -> JsonDocument:
    """null / 빈 문자열 / 빈 하위 문서를 재귀적으로 제거"""
    cleaned: JsonDocument = {}
    for key, value in document.items():
        if isinstance(value, Mapping):
            value = sanitize_document(value)
            if not value:
                continue
        elif _is_blank(value):
            continue
        cleaned[key] = value
    return cleaned


def strip_authoritative_keys(
    document: Mapping[str, Any], keys: Iterable[str]
) -> JsonDocument:
    """서버 권한 키를 최상위에서 제거"""
    blocked = set(keys)
    return {key: value for key, value in document.items() if key not in blocked}


def prepare_client_document(
    document: Mapping[str, Any], authoritative_keys: Iterable[str]
) -> JsonDocument:
    return strip_authoritative_keys(sanitize_document(document), authoritative_keys)


def deep_merge(stored: Mapping[str, Any], incoming: Mapping[str, Any]) -> JsonDocument:
    """서버 문서 위에 클라이언트 문서를 재귀 병합

    Args:
        stored: 현재 저장된 문서
        incoming: 정리(sanitize)된 클라이언트 문서

    Returns:
        JsonDocument: 병합된 새 문서
    """
    merged: JsonDocument = dict(stored)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(value, Mapping):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = value
    return merged


def read_coins(document: Mapping[str, Any]) -> int:
    """저장된 잔액 읽기 - 없거나 숫자가 아니면 0, 음수는 0 으로 취급"""
    value = document.get(COINS_KEY)
    # bool 은 int 의 하위 타입이므로 먼저 걸러냄
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if value != value or value in (float("inf"), float("-inf")):
        return 0
    return max(int(value), 0)


def with_coins(document: Mapping[str, Any], coins: int) -> JsonDocument:
    if coins < 0:
        raise ValueError(f"coin balance cannot be negative: {coins}")
    updated: JsonDocument = dict(document)
    updated[COINS_KEY] = coins
    return updated
