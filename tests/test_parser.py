import pytest

from threat_analyzer.parser import (
    classify_web_request, detect_format, detect_severity, extract_country, extract_ip,
    extract_timestamp, parse_line, parse_lines,
)


class TestExtractors:
    def test_ip_first_match(self):
        assert extract_ip("from 10.0.0.1 to 10.0.0.2") == "10.0.0.1"

    def test_ip_octets_not_validated(self):
        assert extract_ip("bogus 999.999.999.999 here") == "999.999.999.999"

    def test_ip_missing(self):
        assert extract_ip("no address here") == "N/A"

    def test_country(self):
        assert extract_country("from 1.2.3.4 (Germany) then (France)") == "Germany"
        assert extract_country("no hint") == "Unknown"

    def test_timestamp_standard(self):
        assert extract_timestamp("2026-01-07 14:23:45 [INFO] ok") == "2026-01-07 14:23:45"

    def test_timestamp_apache(self):
        line = '1.2.3.4 - - [07/Jan/2026:14:23:45 +0000] "GET / HTTP/1.1" 200 5'
        assert extract_timestamp(line) == "07/Jan/2026:14:23:45"

    def test_timestamp_syslog(self):
        assert extract_timestamp("Jan  7 14:23:45 host sshd[1]: x") == "Jan  7 14:23:45"

    def test_timestamp_falls_back_to_clock(self, clock):
        assert extract_timestamp("nothing to see", clock) == "2026-01-07T14:23:45.123Z"


class TestSeverity:
    def test_explicit_tag_wins_over_keywords(self):
        assert detect_severity("[INFO] malware scan finished") == "INFO"

    def test_explicit_tag_case_insensitive(self):
        assert detect_severity("[high] something") == "HIGH"

    @pytest.mark.parametrize("line,expected", [
        ("exploit kit seen", "CRITICAL"),
        ("ddos suspected, failed requests", "HIGH"),
        ("suspicious failed login", "MEDIUM"),
        ("access denied", "FAILED"),
        ("login accepted", "SUCCESS"),
        ("heartbeat", "INFO"),
    ])
    def test_keyword_precedence(self, line, expected):
        assert detect_severity(line) == expected


class TestDispatch:
    def test_blank_lines(self):
        assert parse_line("") is None
        assert parse_line("   \t ") is None
        assert parse_line(None) is None

    def test_detect_format(self):
        assert detect_format("Jan 7 14:23:45 host sshd[1]: Accepted password for bob") == "ssh"
        assert detect_format('1.2.3.4 - - [x] "POST /login HTTP/1.1" 200 1') == "apache"
        assert detect_format('[x] "GET / HTTP/1.1" from 1.2.3.4') == "generic"
        assert detect_format("SSHD restarted") == "generic"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            parse_line("x", log_format="syslog")

    def test_parse_lines_skips_blanks(self, clock):
        events = parse_lines(["", "2026-01-07 14:23:45 [INFO] a", "  ", "b"], clock=clock)
        assert [e.raw for e in events] == ["2026-01-07 14:23:45 [INFO] a", "b"]

    def test_parse_lines_non_sequence(self):
        assert parse_lines(None) == []

    def test_line_is_trimmed(self):
        event = parse_line("   2026-01-07 14:23:45 [LOW] x   ")
        assert event.raw == "2026-01-07 14:23:45 [LOW] x"
        assert event.severity == "LOW"


class TestGenericParser:
    def test_brute_force_example(self):
        event = parse_line(
            "2026-01-07 14:23:45 [CRITICAL] Multiple SSH brute force attempts from "
            "45.142.120.10 (Russia) - 15 failed attempts in 30s"
        )
        assert event.severity == "CRITICAL"
        assert event.ip == "45.142.120.10"
        assert event.country == "Russia"
        assert event.is_threat is True
        assert event.source_format == "generic"
        assert event.timestamp == "2026-01-07 14:23:45"

    def test_medium_is_not_a_threat(self):
        event = parse_line("2026-01-07 14:27:15 [MEDIUM] Suspicious agent from 91.108.56.181 (Germany)")
        assert event.is_threat is False

    def test_to_dict_shape(self):
        data = parse_line("2026-01-07 14:23:47 [FAILED] Login attempt from 192.168.1.105").to_dict()
        assert data["type"] == "generic"
        assert data["isThreat"] is True
        assert "path" not in data


class TestSSHParser:
    def test_failed_password_wins_over_invalid_user(self):
        event = parse_line("Jan 7 14:23:45 sshd[1234]: Failed password for invalid user admin from 203.0.113.5")
        assert event.severity == "FAILED"
        assert event.ip == "203.0.113.5"
        assert event.username == "admin"
        assert event.is_threat is True
        assert event.source_format == "ssh"
        assert event.country == "Unknown"

    def test_accepted(self):
        event = parse_line("Jan 7 14:23:45 host sshd[1]: Accepted password for alice from 10.0.0.5 (US)")
        assert event.severity == "SUCCESS"
        assert event.is_threat is False
        assert event.username == "alice"
        assert event.country == "Unknown"

    def test_invalid_user(self):
        event = parse_line("Jan 7 14:23:45 host sshd[1]: Invalid user oracle from 10.0.0.9")
        assert event.severity == "HIGH"
        assert event.is_threat is True
        assert event.username == "oracle"

    def test_other_sshd_line(self):
        event = parse_line("Jan 7 14:23:45 host sshd[1]: Connection closed by 10.0.0.9")
        assert event.severity == "INFO"
        assert event.is_threat is False
        assert event.username == "unknown"


class TestWebParser:
    def _line(self, path, status=200):
        return f'203.0.113.9 - - [07/Jan/2026:14:23:45 +0000] "GET {path} HTTP/1.1" {status} 512'

    def test_fields(self):
        event = parse_line(self._line("/index.html"))
        assert event.source_format == "apache"
        assert event.method == "GET"
        assert event.path == "/index.html"
        assert event.status == 200
        assert event.severity == "INFO"
        assert event.is_threat is False
        assert event.timestamp == "07/Jan/2026:14:23:45"

    def test_client_error(self):
        event = parse_line(self._line("/missing", 404))
        assert (event.severity, event.is_threat) == ("MEDIUM", True)

    def test_server_error(self):
        event = parse_line(self._line("/boom", 503))
        assert (event.severity, event.is_threat) == ("HIGH", True)

    def test_sql_injection_overrides_status(self):
        event = parse_line(self._line("/items?id=1%20UNION%20SELECT%20pw", 500))
        assert event.severity == "CRITICAL"

    def test_later_rule_downgrades_sql_injection(self):
        event = parse_line(self._line("/q?x=union+select+../etc/passwd"))
        assert event.severity == "HIGH"
        assert event.is_threat is True

    def test_xss_path(self):
        event = parse_line(self._line("/search?q=javascript:alert(1)"))
        assert event.severity == "HIGH"

    def test_forced_nginx_tag(self):
        event = parse_line(self._line("/"), log_format="nginx")
        assert event.source_format == "nginx"

    def test_missing_request_defaults(self):
        event = parse_line('198.51.100.1 "DELETE"', log_format="apache")
        assert event.status == 0
        assert event.method == "UNKNOWN"
        assert event.path == "/"

    def test_classify_rule_order(self):
        assert classify_web_request(404, "/delete+from+users") == ("CRITICAL", True)
        assert classify_web_request(301, "/") == ("INFO", False)
