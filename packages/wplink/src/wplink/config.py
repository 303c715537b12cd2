"""Configuration for the wplink catalog entity linker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_API_URL = "https://en.wikipedia.org/w/api.php"


@dataclass
class Thresholds:
    subject_close: float = 90.0
    subject_first_result: float = 70.0
    name_fuzzy: float = 80.0


@dataclass
class ProximityConfig:
    max_gap: int = 5  # max token distance between consecutive name parts
    min_fuzzy_token_length: int = 3
    min_name_part_length: int = 2


@dataclass
class OracleConfig:
    api_url: str = ""
    timeout: float | None = 10.0
    max_concurrency: int = 8
    result_limit: int = 10
    user_agent: str = "wplink/0.1 (catalog entity linker)"

    def __post_init__(self) -> None:
        if not self.api_url:
            self.api_url = os.environ.get("WPLINK_API_URL") or DEFAULT_API_URL


@dataclass
class MarkupConfig:
    link_class: str = "wp-search"
    data_attr: str = "data-wp-title"
    name_selector: str = '.contributors span[property="name"]'
    subject_selector: str = ".subject"


@dataclass
class LinkConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    proximity: ProximityConfig = field(default_factory=ProximityConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    markup: MarkupConfig = field(default_factory=MarkupConfig)
