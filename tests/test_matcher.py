"""Tests for body scanning."""

import types

from leakscan.matcher import Finding, scan
from leakscan.patterns import DEFAULT_RULES, PatternSet, Severity

from conftest import API_KEY_RULE


class TestScan:
    def test_secret_is_reported_with_rule_severity(self, api_key_patterns):
        findings = list(scan("http://a.test/leak", "config = { api_key: abcd1234efgh }", api_key_patterns))

        assert len(findings) == 1
        finding = findings[0]
        assert finding.target == "http://a.test/leak"
        assert finding.matched_text == "api_key: abcd1234efgh"
        assert finding.severity is Severity.HIGH
        assert finding.rule.pattern == API_KEY_RULE

    def test_clean_body_has_no_findings(self, api_key_patterns):
        assert list(scan("http://b.test/clean", "<html>nothing here</html>", api_key_patterns)) == []

    def test_empty_body(self, api_key_patterns):
        assert list(scan("http://b.test/", "", api_key_patterns)) == []

    def test_is_lazy(self, api_key_patterns):
        assert isinstance(scan("http://a.test", "api_key=abcdefgh12", api_key_patterns), types.GeneratorType)

    def test_all_occurrences_in_document_order(self, api_key_patterns):
        body = "apikey=firstvalue1\n...\nAPI-KEY: secondvalue2\napi_key=thirdvalue3"

        matches = [f.matched_text for f in scan("http://a.test", body, api_key_patterns)]

        assert matches == ["apikey=firstvalue1", "API-KEY: secondvalue2", "api_key=thirdvalue3"]

    def test_rules_apply_independently(self):
        patterns = PatternSet.compile([
            (API_KEY_RULE, "High"),
            ("internal-only", "Low"),
        ])
        body = "api_key=abcd1234efgh <!-- internal-only --> INTERNAL-ONLY"

        findings = list(scan("http://a.test", body, patterns))

        assert [(f.matched_text, f.severity) for f in findings] == [
            ("api_key=abcd1234efgh", Severity.HIGH),
            ("internal-only", Severity.LOW),
            ("INTERNAL-ONLY", Severity.LOW),
        ]

    def test_zero_length_matches_are_skipped(self):
        patterns = PatternSet.compile([("x*", "Low")])
        findings = list(scan("http://a.test", "abc xx", patterns))
        assert [f.matched_text for f in findings] == ["xx"]

    def test_scanning_twice_gives_same_findings(self):
        patterns = PatternSet.default()
        body = 'var cfg = {app_token: "AbCdEf123456", private-token=zz99yy88xx77};'

        first = list(scan("http://a.test", body, patterns))
        second = list(scan("http://a.test", body, patterns))

        assert first == second
        assert len(first) == 2

    def test_default_rules_detect_each_secret_kind(self):
        patterns = PatternSet.default()
        body = "\n".join([
            "affirm_private: 1234567890abcdef",
            "app-token=abcdefgh1234",
            "mapbox: pk12345678abcd",
            "private_token = 9876543210zyx",
            "API_KEY='A1B2C3D4E5F6'",
        ])

        findings = list(scan("http://a.test", body, patterns))

        assert {f.rule.pattern for f in findings} == set(DEFAULT_RULES)

    def test_finding_to_dict(self, api_key_patterns):
        finding = next(scan("http://a.test", "api_key: abcd1234efgh", api_key_patterns))
        assert finding.to_dict() == {
            'target': "http://a.test",
            'match': "api_key: abcd1234efgh",
            'severity': "High",
            'pattern': API_KEY_RULE,
        }
        assert isinstance(finding, Finding)
