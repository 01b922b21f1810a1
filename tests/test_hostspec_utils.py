"""
Tests for host[:port] parsing.
"""
import unittest

from check_certs.exceptions import HostSpecError
from check_certs.utils.hostspec_utils import DEFAULT_PORT, split_host_port


class TestSplitHostPort(unittest.TestCase):

    def test_host_without_port_uses_default(self):
        self.assertEqual(split_host_port("example.com"), ("example.com", "443"))

    def test_host_with_port(self):
        self.assertEqual(split_host_port("example.com:8443"), ("example.com", "8443"))

    def test_empty_port_uses_default(self):
        self.assertEqual(split_host_port("example.com:"), ("example.com", DEFAULT_PORT))

    def test_bracketed_ipv6_with_port(self):
        self.assertEqual(split_host_port("[::1]:8443"), ("::1", "8443"))

    def test_bracketed_ipv6_with_empty_port(self):
        self.assertEqual(split_host_port("[2001:db8::1]:"), ("2001:db8::1", "443"))

    def test_service_name_port_is_kept_as_text(self):
        self.assertEqual(split_host_port("example.com:https"), ("example.com", "https"))

    def test_too_many_colons(self):
        with self.assertRaises(HostSpecError) as ctx:
            split_host_port("example.com:443:1")
        self.assertIn("too many colons", str(ctx.exception))
        self.assertIn("example.com:443:1", str(ctx.exception))

    def test_bare_ipv6_is_malformed(self):
        with self.assertRaises(HostSpecError):
            split_host_port("::1")

    def test_bracketed_host_without_port(self):
        with self.assertRaises(HostSpecError) as ctx:
            split_host_port("[::1]")
        self.assertIn("missing port", str(ctx.exception))

    def test_missing_closing_bracket(self):
        with self.assertRaises(HostSpecError) as ctx:
            split_host_port("[::1:443")
        self.assertIn("missing ']'", str(ctx.exception))

    def test_unexpected_brackets(self):
        with self.assertRaises(HostSpecError):
            split_host_port("exa[mple.com:443")
        with self.assertRaises(HostSpecError):
            split_host_port("example.com]:443")

    def test_host_spec_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            split_host_port("a:b:c")


if __name__ == '__main__':
    unittest.main()
