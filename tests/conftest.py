"""targeting テスト共通フィクスチャ"""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest
from k1s0_targeting import (
    Condition,
    Configuration,
    Rule,
    Select,
    Split,
    Variation,
)


def make_configuration() -> Configuration:
    return Configuration(
        disabled=False,
        variations=[
            Variation(name="A", value="a", description="variation a"),
            Variation(name="B", value="b", description="variation b"),
        ],
        rules=[
            Rule(
                conditions=[
                    Condition(
                        type="string",
                        subject="city",
                        predicate="is one of",
                        objects=["tokyo", "osaka"],
                    ),
                    Condition(
                        type="datetime",
                        subject="",
                        predicate="after",
                        objects=["2023-05-01T10:00:00+08:00"],
                    ),
                ],
                serve=Select(1),
            ),
            Rule(
                conditions=[
                    Condition(type="segment", predicate="is in", objects=["beta-users"]),
                ],
                serve=Split((3000, 7000)),
            ),
        ],
        default_serve=Select(0),
        disabled_serve=Select(0),
    )


@pytest.fixture
def configuration() -> Configuration:
    return make_configuration()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"
