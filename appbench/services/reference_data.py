"""
Reference Data Source

Holds the industry-average benchmark table the evaluator compares against.
The table is built once at process start (from the built-in data or from a
JSON file named by BENCHMARK_DATA_PATH) and is read-only afterwards: every
nested mapping is wrapped in types.MappingProxyType and the container is a
frozen dataclass.

Lookup keys:
- price:       (planType, region)
- conversion:  category, trial->paid when the app has a trial else install->paid
- LTV:         (category, planType)
- refund rate: category

Lookups return None for unknown keys. Collapsing None to 0 is the
evaluator's job.
"""

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from appbench.models.enums import AppCategory, PlanType, Region
from appbench.models.schemas import BenchmarkSnapshot


logger = logging.getLogger(__name__)


# =============================================================================
# Built-in benchmark data
# Conversion and refund rates are percentages, price and LTV are USD.
# =============================================================================

DEFAULT_BENCHMARK_DATA: Dict[str, Dict[str, Any]] = {
    "conversion": {
        AppCategory.EDUCATION.value: {"installTrial": 6.83, "trialPaid": 29.31, "installPaid": 0.83},
        AppCategory.HEALTH_FITNESS.value: {"installTrial": 4.79, "trialPaid": 38.56, "installPaid": 1.55},
        AppCategory.LIFESTYLE.value: {"installTrial": 3.96, "trialPaid": 21.8, "installPaid": 1.83},
        AppCategory.PHOTO_VIDEO.value: {"installTrial": 6.06, "trialPaid": 18.35, "installPaid": 3.15},
        AppCategory.PRODUCTIVITY.value: {"installTrial": 4.85, "trialPaid": 23.32, "installPaid": 0.66},
        AppCategory.UTILITIES.value: {"installTrial": 2.82, "trialPaid": 19.29, "installPaid": 0.33},
    },
    "pricing": {
        PlanType.WEEKLY.value: {
            Region.US.value: 8.1, Region.EUROPE.value: 8.3, Region.APAC.value: 6.4,
            Region.LATAM.value: 6.1, Region.MEA.value: 7.1,
        },
        PlanType.MONTHLY.value: {
            Region.US.value: 15.2, Region.EUROPE.value: 13.3, Region.APAC.value: 8.1,
            Region.LATAM.value: 6.7, Region.MEA.value: 9.5,
        },
        PlanType.ANNUAL.value: {
            Region.US.value: 44.6, Region.EUROPE.value: 42.0, Region.APAC.value: 38.1,
            Region.LATAM.value: 31.9, Region.MEA.value: 37.0,
        },
    },
    "ltv": {
        AppCategory.EDUCATION.value: {"weekly": 43.7, "monthly": 36.0, "annual": 45.8},
        AppCategory.HEALTH_FITNESS.value: {"weekly": 43.6, "monthly": 40.9, "annual": 46.1},
        AppCategory.LIFESTYLE.value: {"weekly": 30.0, "monthly": 42.8, "annual": 39.9},
        AppCategory.PHOTO_VIDEO.value: {"weekly": 24.8, "monthly": 53.2, "annual": 42.4},
        AppCategory.PRODUCTIVITY.value: {"weekly": 53.2, "monthly": 48.8, "annual": 54.8},
        AppCategory.UTILITIES.value: {"weekly": 58.4, "monthly": 45.0, "annual": 54.3},
    },
    "refundRate": {
        AppCategory.EDUCATION.value: 2.8,
        AppCategory.HEALTH_FITNESS.value: 2.9,
        AppCategory.LIFESTYLE.value: 3.1,
        AppCategory.PHOTO_VIDEO.value: 3.2,
        AppCategory.PRODUCTIVITY.value: 2.7,
        AppCategory.UTILITIES.value: 3.0,
    },
}


# =============================================================================
# File schema
# =============================================================================


class ConversionBenchmark(BaseModel):
    """Conversion funnel benchmarks for one category, in percent."""
    installTrial: float = Field(..., ge=0.0, le=100.0)
    trialPaid: float = Field(..., ge=0.0, le=100.0)
    installPaid: float = Field(..., ge=0.0, le=100.0)


class ReferenceData(BaseModel):
    """
    Shape of a reference table document.

    Same layout as DEFAULT_BENCHMARK_DATA; used to validate BENCHMARK_DATA_PATH
    files before they are frozen.
    """
    conversion: Dict[str, ConversionBenchmark]
    pricing: Dict[str, Dict[str, float]]
    ltv: Dict[str, Dict[str, float]]
    refundRate: Dict[str, float]


# =============================================================================
# Immutable table
# =============================================================================


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, Mapping) else value
        for key, value in mapping.items()
    })


@dataclass(frozen=True)
class ReferenceTable:
    """
    Read-only benchmark table.

    Instances are shared by every request; nothing here mutates after
    construction.
    """
    conversion: Mapping[str, Mapping[str, float]]
    pricing: Mapping[str, Mapping[str, float]]
    ltv: Mapping[str, Mapping[str, float]]
    refund_rate: Mapping[str, float]

    def price_benchmark(self, plan_type: str, region: str) -> Optional[float]:
        return self.pricing.get(plan_type, {}).get(region)

    def conversion_benchmark(self, category: str, has_trial: bool) -> Optional[float]:
        """Trial->paid rate when the app runs a trial, install->paid otherwise."""
        funnel = self.conversion.get(category)
        if funnel is None:
            return None
        return funnel.get("trialPaid" if has_trial else "installPaid")

    def ltv_benchmark(self, category: str, plan_type: str) -> Optional[float]:
        return self.ltv.get(category, {}).get(plan_type)

    def refund_benchmark(self, category: str) -> Optional[float]:
        return self.refund_rate.get(category)

    @property
    def categories(self) -> List[str]:
        return sorted(set(self.conversion) | set(self.ltv) | set(self.refund_rate))

    @property
    def regions(self) -> List[str]:
        return sorted({region for by_region in self.pricing.values() for region in by_region})

    @property
    def plan_types(self) -> List[str]:
        plans = set(self.pricing)
        for by_plan in self.ltv.values():
            plans.update(by_plan)
        return sorted(plans)

    def unknown_keys(self, category: str, region: str, plan_type: str) -> List[str]:
        """Names of the submission fields whose value is not a key of this table."""
        unknown = []
        if category not in self.categories:
            unknown.append("category")
        if region not in self.regions:
            unknown.append("region")
        if plan_type not in self.plan_types:
            unknown.append("planType")
        return unknown

    def snapshot(self, category: str, region: str, plan_type: str) -> BenchmarkSnapshot:
        """Raw benchmark values for one key; unknown parts are None."""
        return BenchmarkSnapshot(
            price=self.price_benchmark(plan_type, region),
            conversionRate=self.conversion_benchmark(category, has_trial=True),
            installToPaidRate=self.conversion_benchmark(category, has_trial=False),
            ltv=self.ltv_benchmark(category, plan_type),
            refundRate=self.refund_benchmark(category),
        )


def build_reference_table(data: Mapping[str, Any]) -> ReferenceTable:
    """
    Validate a raw benchmark document and freeze it.

    Raises:
        pydantic.ValidationError: If the document does not match ReferenceData.
    """
    parsed = ReferenceData.model_validate(data)
    return ReferenceTable(
        conversion=_freeze({k: v.model_dump() for k, v in parsed.conversion.items()}),
        pricing=_freeze(parsed.pricing),
        ltv=_freeze(parsed.ltv),
        refund_rate=_freeze(parsed.refundRate),
    )


def load_reference_table(path: Optional[str] = None) -> ReferenceTable:
    """
    Load the reference table once at startup.

    Args:
        path: Optional JSON file with the ReferenceData layout. The built-in
            table is used when omitted.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        pydantic.ValidationError: If the document has the wrong shape.
    """
    if not path:
        table = build_reference_table(DEFAULT_BENCHMARK_DATA)
        logger.info(
            f"Loaded built-in reference table: {len(table.categories)} categories, "
            f"{len(table.regions)} regions, {len(table.plan_types)} plan types"
        )
        return table

    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)

    table = build_reference_table(data)
    logger.info(
        f"Loaded reference table from {path}: {len(table.categories)} categories, "
        f"{len(table.regions)} regions, {len(table.plan_types)} plan types"
    )
    return table
