# ExprDiff - Configuration Tests
# Copyright (c) 2024 ExprDiff Contributors. All rights reserved.

"""
Tests for the configuration module and its presets.
"""

import pytest

from exprdiff.config import Config
from exprdiff.domain import COMPLEX, REAL


class TestConfig:
    """Tests for the main Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        cfg = Config()
        assert cfg.domain is None
        assert cfg.rel_tol == 1e-9
        assert cfg.abs_tol == 1e-12
        assert cfg.max_depth == 200

    def test_domain_from_string(self):
        """Test that a domain name is resolved to the domain object."""
        assert Config(domain='complex').domain is COMPLEX
        assert Config(domain='REAL').domain is REAL

    def test_invalid_domain(self):
        with pytest.raises(ValueError, match="Unknown numeric domain"):
            Config(domain='octonion')

    def test_negative_tolerance(self):
        with pytest.raises(ValueError, match="non-negative"):
            Config(rel_tol=-1.0)

    def test_invalid_depth(self):
        with pytest.raises(ValueError, match="max_depth"):
            Config(max_depth=0)

    def test_strict_preset(self):
        cfg = Config.strict()
        assert cfg.rel_tol == 0.0
        assert cfg.abs_tol == 0.0

    def test_loose_preset(self):
        cfg = Config.loose()
        assert cfg.rel_tol > Config().rel_tol

    def test_complex_preset(self):
        assert Config.complex().domain is COMPLEX

    def test_repr(self):
        assert repr(Config()) == "Config(domain=auto, rel_tol=1e-09, abs_tol=1e-12, max_depth=200)"
        assert 'domain=complex' in repr(Config.complex())
