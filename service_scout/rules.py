"""service_scout.rules: Named regular-expression rules used to classify URLs and pages.

Every classifier is an ordered tuple of :class:`Rule` objects.  A rule is a
``(label, predicate)`` pair, so a test can target one rule in isolation and new
rules are appended to configuration without touching control flow.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from service_scout.config import ScoutConfig

__all__: Sequence[str] = (
    "Rule",
    "Soft404Verdict",
    "PatternMatcher",
    "compile_rules",
    "matches_any",
    "first_match",
    "DEFAULT_SERVICE_RULES",
    "DEFAULT_EXCLUDE_RULES",
    "DEFAULT_SOFT404_TITLE_RULES",
    "DEFAULT_SOFT404_BODY_RULES",
)

RuleTable = Tuple[Tuple[str, str], ...]

# Path segments suggesting a citizen-facing transaction.
DEFAULT_SERVICE_RULES: RuleTable = (
    ("apply", r"/apply"),
    ("register", r"/register"),
    ("renew", r"/renew"),
    ("file", r"/file-"),
    ("request", r"/request"),
    ("search", r"/search"),
    ("find", r"/find-"),
    ("lookup", r"/lookup"),
    ("check", r"/check-"),
    ("verify", r"/verify"),
    ("license", r"/license"),
    ("permit", r"/permit"),
    ("benefits", r"/benefits"),
    ("assistance", r"/assistance"),
    ("services", r"/services?/"),
    ("programs", r"/programs?/"),
    ("forms", r"/forms?/"),
    ("online", r"/online-"),
    ("my-account", r"/my-"),
)

# Editorial, navigational and binary content.
DEFAULT_EXCLUDE_RULES: RuleTable = (
    ("news", r"[/\-]news"),
    ("press", r"/press"),
    ("blog", r"/blog"),
    ("article", r"/article"),
    ("about-us", r"/about-us"),
    ("contact-us", r"/contact-us"),
    ("careers", r"/careers"),
    ("jobs", r"/jobs"),
    ("staff", r"/staff"),
    ("team", r"/team"),
    ("history", r"/history"),
    ("privacy", r"/privacy"),
    ("terms", r"/terms"),
    ("accessibility", r"/accessibility"),
    ("sitemap", r"/sitemap"),
    ("pdf", r"\.pdf$"),
    ("word", r"\.doc"),
    ("excel", r"\.xls"),
    ("image", r"\.(jpg|png|gif|svg)$"),
    ("tag", r"/tag/"),
    ("category", r"/category/"),
    ("author", r"/author/"),
    ("pagination", r"/page/\d+"),
    ("dated-path", r"/\d{4}/\d{2}/"),
)

DEFAULT_SOFT404_TITLE_RULES: RuleTable = (
    ("404", r"404"),
    ("not-found", r"not\s+found"),
    ("page-missing", r"page\s+missing"),
    ("error", r"error"),
)

DEFAULT_SOFT404_BODY_RULES: RuleTable = (
    ("page-gone", r"page\s+(not\s+found|doesn['’]t\s+exist|does\s+not\s+exist|has\s+been\s+removed)"),
    ("404", r"404\s*(error|page)?"),
    ("content-gone", r"content\s+(not\s+found|unavailable|has\s+moved)"),
    ("no-longer", r"this\s+page\s+(no\s+longer|is\s+no\s+longer|cannot\s+be\s+found)"),
    ("could-not-find", r"we\s+(couldn['’]t|could\s+not|can['’]t)\s+find"),
    ("requested-missing", r"the\s+requested\s+(page|resource|url)\s+(was\s+not|could\s+not|cannot)"),
    ("sorry", r"sorry.*?(not\s+found|doesn['’]t\s+exist|no\s+longer\s+available)"),
    ("moved-away", r"has\s+been\s+(moved|deleted|removed|archived)"),
    ("looking-for", r"looking\s+for\s+something\?"),
    ("oops", r"oops|uh\s*oh"),
)

#: Longest matched text quoted in a soft-404 reason.
REASON_MAX_CHARS = 100


@dataclass(frozen=True, slots=True)
class Rule:
    """A labelled, case-insensitive regular expression."""

    label: str
    predicate: re.Pattern[str]

    @classmethod
    def from_pattern(cls, label: str, pattern: str) -> Rule:
        return cls(label, re.compile(pattern, re.IGNORECASE))

    def match(self, text: str) -> Optional[str]:
        """Return the matched substring, or None."""
        found = self.predicate.search(text)
        return found.group(0) if found else None


@dataclass(frozen=True, slots=True)
class Soft404Verdict:
    detected: bool
    reason: Optional[str] = None
    rule: Optional[str] = None


def compile_rules(table: Iterable[Tuple[str, str]]) -> Tuple[Rule, ...]:
    return tuple(Rule.from_pattern(label, pattern) for label, pattern in table)


def first_match(text: str, rules: Iterable[Rule]) -> Optional[Tuple[Rule, str]]:
    """Return ``(rule, matched_text)`` for the first rule that matches *text*."""
    for rule in rules:
        matched = rule.match(text)
        if matched is not None:
            return rule, matched
    return None


def matches_any(text: str, rules: Iterable[Rule]) -> bool:
    return first_match(text, rules) is not None


class PatternMatcher:
    """Stateless URL and page classifier built from rule tables."""

    def __init__(
        self,
        service_rules: Sequence[Rule] = compile_rules(DEFAULT_SERVICE_RULES),
        exclude_rules: Sequence[Rule] = compile_rules(DEFAULT_EXCLUDE_RULES),
        soft404_title_rules: Sequence[Rule] = compile_rules(DEFAULT_SOFT404_TITLE_RULES),
        soft404_body_rules: Sequence[Rule] = compile_rules(DEFAULT_SOFT404_BODY_RULES),
        scan_limit: int = 10_000,
    ) -> None:
        self.service_rules = tuple(service_rules)
        self.exclude_rules = tuple(exclude_rules)
        self.soft404_title_rules = tuple(soft404_title_rules)
        self.soft404_body_rules = tuple(soft404_body_rules)
        self.scan_limit = scan_limit

    @classmethod
    def from_config(cls, config: ScoutConfig) -> PatternMatcher:
        rules = config.rules
        return cls(
            service_rules=rules.compiled("service"),
            exclude_rules=rules.compiled("exclude"),
            soft404_title_rules=rules.compiled("soft404_title"),
            soft404_body_rules=rules.compiled("soft404_body"),
            scan_limit=config.audit.soft404_scan_limit,
        )

    def looks_like_service(self, url: str) -> bool:
        """Include-rule match and no exclude-rule match; exclusion wins."""
        if not matches_any(url, self.service_rules):
            return False
        return not matches_any(url, self.exclude_rules)

    def detect_soft404(self, html: str, title: Optional[str]) -> Soft404Verdict:
        """Classify a 200 page whose content says it is missing.

        The title is checked first.  Only the first ``scan_limit`` characters
        of the body are scanned; a phrase deeper in the page is ignored.
        """
        if title:
            hit = first_match(title, self.soft404_title_rules)
            if hit is not None:
                return Soft404Verdict(
                    True, f'Title contains 404 indicator: "{title}"', hit[0].label
                )

        hit = first_match(html[: self.scan_limit], self.soft404_body_rules)
        if hit is not None:
            rule, matched = hit
            return Soft404Verdict(
                True, f'Content contains: "{matched[:REASON_MAX_CHARS]}"', rule.label
            )
        return Soft404Verdict(False)
