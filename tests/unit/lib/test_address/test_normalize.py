"""Unit tests for Korean address normalization."""

import pytest

from geobatch.lib.address.normalize import (
    ABBREVIATION_MAP,
    expand_abbreviations,
    normalize_address,
    normalize_address_batch,
)


class TestNormalizeAddress:
    """Tests for normalize_address."""

    def test_expands_leading_province(self) -> None:
        result = normalize_address("서울 강남구 테헤란로 123")
        assert result.normalized == "서울특별시 강남구 테헤란로 123"
        assert result.confidence == 100
        assert "서울 → 서울특별시" in result.corrections

    def test_already_canonical_is_unchanged(self) -> None:
        result = normalize_address("서울특별시 강남구 테헤란로 123")
        assert result.normalized == "서울특별시 강남구 테헤란로 123"
        assert result.confidence == 100
        assert result.corrections == []

    def test_no_expansion_inside_longer_token(self) -> None:
        """A short name embedded in a longer word is left alone."""
        result = normalize_address("서울숲로 10")
        assert result.normalized == "서울숲로 10"
        assert not any("→" in note for note in result.corrections)

    def test_city_suffix_form_expands(self) -> None:
        assert normalize_address("서울시 중구 세종대로 110").normalized == "서울특별시 중구 세종대로 110"

    def test_trailing_token_expands(self) -> None:
        """An abbreviation at the end of the input is a whole token too."""
        result = normalize_address("서울")
        assert result.normalized == "서울특별시"
        assert result.confidence == 100
        assert normalize_address("강남구 서울").normalized == "강남구 서울특별시"

    def test_province_with_do_suffix_expands(self) -> None:
        result = normalize_address("제주도 제주시 연동 1")
        assert result.normalized == "제주특별자치도 제주시 연동 1"
        assert result.corrections == ["제주도 → 제주특별자치도"]

    def test_collapses_whitespace(self) -> None:
        result = normalize_address("  부산광역시   해운대구  우동  ")
        assert result.normalized == "부산광역시 해운대구 우동"
        assert "Cleaned whitespace and typos" in result.corrections

    def test_full_width_space(self) -> None:
        assert normalize_address("서울특별시　강남구").normalized == "서울특별시 강남구"

    def test_digit_space_digit_becomes_hyphen(self) -> None:
        assert normalize_address("서울특별시 강남구 역삼동 1 2").normalized == "서울특별시 강남구 역삼동 1-2"

    def test_short_address_penalty(self) -> None:
        """Shorter than five characters: -20."""
        result = normalize_address("중구")
        assert result.confidence == 80
        assert "Address is too short" in result.corrections

    def test_missing_admin_area_penalty(self) -> None:
        """No administrative suffix: -15."""
        result = normalize_address("테헤란로 123")
        assert result.confidence == 85
        assert "No administrative area found" in result.corrections

    def test_penalties_accumulate(self) -> None:
        assert normalize_address("테헤란로").confidence == 65

    @pytest.mark.parametrize(("with_area", "without_area"), [("강남구 역삼로 10", "강남 역삼로 10"), ("중구", "중앙")])
    def test_missing_admin_area_costs_exactly_15(self, with_area: str, without_area: str) -> None:
        assert normalize_address(with_area).confidence - normalize_address(without_area).confidence == 15

    @pytest.mark.parametrize("raw", ["", "   ", "　", None])
    def test_blank_input_yields_zero_confidence(self, raw: str | None) -> None:
        result = normalize_address(raw)
        assert result.normalized == ""
        assert result.confidence == 0

    def test_confidence_within_bounds(self) -> None:
        for raw in ["서울", "a", "서울 강남구", "12", "경기 수원시 팔달구 효원로 1"]:
            assert 0 <= normalize_address(raw).confidence <= 100

    def test_idempotent(self) -> None:
        for raw in ["서울 강남구 테헤란로 1 2", "  경기  수원시 ", "전남 목포시", "서울숲로 10"]:
            once = normalize_address(raw).normalized
            assert normalize_address(once).normalized == once

    def test_preserves_original(self) -> None:
        raw = "  서울 강남구 "
        assert normalize_address(raw).original == raw


class TestExpandAbbreviations:
    """Tests for expand_abbreviations."""

    def test_every_mapped_name_expands_alone(self) -> None:
        for abbr, full in ABBREVIATION_MAP.items():
            expanded, applied = expand_abbreviations(f"{abbr} 중앙로 1")
            assert expanded == f"{full} 중앙로 1"
            assert applied == [f"{abbr} → {full}"]

    def test_full_names_are_not_re_expanded(self) -> None:
        for full in set(ABBREVIATION_MAP.values()):
            expanded, applied = expand_abbreviations(f"{full} 중앙로 1")
            assert expanded == f"{full} 중앙로 1"
            assert applied == []


class TestNormalizeAddressBatch:
    """Tests for normalize_address_batch."""

    def test_independent_per_item(self) -> None:
        results = normalize_address_batch(["서울 강남구", "", "부산 해운대구"])
        assert [r.normalized for r in results] == ["서울특별시 강남구", "", "부산광역시 해운대구"]
        assert results[1].confidence == 0
