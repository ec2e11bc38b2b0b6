"""Administrative-region (province + city/county/district) aggregation."""

import re
from collections import Counter
from dataclasses import dataclass, field

from geobatch.lib.aggregator.address_counts import DEFAULT_TOP_N

PROVINCE_PATTERN = re.compile(r"^([가-힣]+(?:특별시|광역시|특별자치시|특별자치도|도))")
CITY_PATTERN = re.compile(r"([가-힣]+(?:시|군|구))")


@dataclass
class Region:
    """Province and (possibly empty) city/county/district of an address."""

    province: str
    city: str

    @property
    def full_name(self) -> str:
        return f"{self.province} {self.city}" if self.city else self.province


@dataclass
class RegionCount:
    """A region with its occurrence count and share of matched addresses."""

    province: str
    city: str
    full_name: str
    count: int
    percentage: float


@dataclass
class RegionAggregation:
    """Result of counting addresses per region.

    ``total`` counts only addresses whose leading province token matched.
    """

    total: int
    top_regions: list[RegionCount] = field(default_factory=list)
    province_counts: dict[str, int] = field(default_factory=dict)


def extract_region(address: str) -> Region | None:
    """Extract the leading province and the following city/county/district.

    Args:
        address: Normalized address.

    Returns:
        Region, or None when the address does not start with a province.
    """
    if not address:
        return None
    province_match = PROVINCE_PATTERN.match(address)
    if province_match is None:
        return None

    province = province_match.group(1)
    city_match = CITY_PATTERN.search(address[len(province) :].strip())
    return Region(province=province, city=city_match.group(1) if city_match else "")


def aggregate_regions(addresses: list[str], top_n: int = DEFAULT_TOP_N) -> RegionAggregation:
    """Count addresses per province + city/county/district.

    Addresses without a leading province are left out entirely; percentages
    are relative to the addresses that matched.

    Args:
        addresses: Normalized addresses of successfully geocoded rows.
        top_n: Maximum number of ranked regions to return.

    Returns:
        RegionAggregation with the top-N regions by count, descending.
    """
    regions: dict[str, Region] = {}
    region_counts: Counter[str] = Counter()
    province_counts: Counter[str] = Counter()

    for address in addresses:
        region = extract_region(address)
        if region is None:
            continue
        regions.setdefault(region.full_name, region)
        region_counts[region.full_name] += 1
        province_counts[region.province] += 1

    total = sum(region_counts.values())
    ranked = sorted(region_counts.items(), key=lambda item: item[1], reverse=True)
    top = [
        RegionCount(
            province=regions[name].province,
            city=regions[name].city,
            full_name=name,
            count=count,
            percentage=count / total * 100,
        )
        for name, count in ranked[:top_n]
    ]

    return RegionAggregation(total=total, top_regions=top, province_counts=dict(province_counts))
