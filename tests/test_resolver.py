from __future__ import annotations

import pytest

from pointclimate.models.climate import REQUIRED_FIELDS, Period
from pointclimate.services.resolver import TemporalResolver
from tests.fakes import HCMC, FakePowerClient, build_year, fixed_clock


def _resolver(gateway: FakePowerClient, clock, max_attempts: int = 24) -> TemporalResolver:
    return TemporalResolver(gateway=gateway, max_attempts=max_attempts, clock=clock)


@pytest.mark.anyio
async def test_resolves_previous_month_when_complete() -> None:
    gateway = FakePowerClient({2026: build_year(2026)})
    record = await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC)

    assert record is not None
    assert record.period == "202609"
    assert record.temperature == 19.0
    assert gateway.years == [2026]


@pytest.mark.anyio
async def test_walks_back_two_months_within_same_year() -> None:
    gateway = FakePowerClient({2026: build_year(2026, invalid_months=[9, 8])})
    record = await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC)

    assert record is not None
    assert record.period == "202607"
    assert gateway.years == [2026]


@pytest.mark.anyio
async def test_walks_back_two_months_across_year_boundary() -> None:
    gateway = FakePowerClient(
        {
            2026: build_year(2026, invalid_months=[1, 2]),
            2025: build_year(2025, value=30.0),
        }
    )
    record = await _resolver(gateway, fixed_clock(2026, 3, 15)).resolve(HCMC)

    assert record is not None
    assert record.period == "202512"
    assert record.temperature == 42.0
    assert gateway.years == [2026, 2025]


@pytest.mark.anyio
async def test_first_candidate_in_previous_year_fetches_that_year() -> None:
    gateway = FakePowerClient({2025: build_year(2025)})
    record = await _resolver(gateway, fixed_clock(2026, 1, 5)).resolve(HCMC)

    assert record is not None
    assert record.period == "202512"
    assert gateway.years == [2025]


@pytest.mark.anyio
async def test_single_invalid_field_rejects_the_month() -> None:
    overrides = {("PS", "202609"): -999.0}
    gateway = FakePowerClient({2026: build_year(2026, overrides=overrides)})
    record = await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC)

    assert record is not None
    assert record.period == "202608"


@pytest.mark.anyio
async def test_missing_field_rejects_the_month() -> None:
    response = build_year(2026)
    del response.parameters["WS2M_RANGE"]["202609"]
    gateway = FakePowerClient({2026: response})
    record = await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC)

    assert record is not None
    assert record.period == "202608"


@pytest.mark.anyio
async def test_header_fill_value_is_honoured() -> None:
    gateway = FakePowerClient(
        {2026: build_year(2026, invalid_months=[9], fill_value=-9999.0)}
    )
    record = await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC)

    assert record is not None
    assert record.period == "202608"


@pytest.mark.anyio
async def test_initial_fetch_failure_returns_none() -> None:
    gateway = FakePowerClient.always_absent()
    assert await _resolver(gateway, fixed_clock(2026, 10, 18)).resolve(HCMC) is None
    assert gateway.years == [2026]


@pytest.mark.anyio
async def test_year_crossing_fetch_failure_returns_none() -> None:
    gateway = FakePowerClient({2026: build_year(2026, invalid_months=[1, 2])})
    assert await _resolver(gateway, fixed_clock(2026, 3, 15)).resolve(HCMC) is None
    assert gateway.years == [2026, 2025]


@pytest.mark.anyio
async def test_gives_up_after_attempt_bound() -> None:
    gateway = FakePowerClient(
        default=lambda year: build_year(year, invalid_months=range(1, 13))
    )
    record = await _resolver(gateway, fixed_clock(2026, 3, 15)).resolve(HCMC)

    assert record is None
    # 202602 back to 202403: 24 months over three archive years.
    assert gateway.years == [2026, 2025, 2024]


@pytest.mark.anyio
async def test_attempt_bound_is_configurable() -> None:
    gateway = FakePowerClient({2026: build_year(2026, invalid_months=[9, 8, 7])})

    assert await _resolver(gateway, fixed_clock(2026, 10, 18), max_attempts=3).resolve(HCMC) is None
    record = await _resolver(gateway, fixed_clock(2026, 10, 18), max_attempts=4).resolve(HCMC)
    assert record is not None and record.period == "202606"


@pytest.mark.anyio
async def test_resolved_period_never_after_first_candidate() -> None:
    clock = fixed_clock(2026, 6, 1)
    gateway = FakePowerClient.always_valid()
    resolver = _resolver(gateway, clock)
    record = await resolver.resolve(HCMC)

    assert record is not None
    assert Period.from_label(record.period) <= resolver.first_candidate()
    assert resolver.fields == list(REQUIRED_FIELDS)
