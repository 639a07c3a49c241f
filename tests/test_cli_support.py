"""Tests for CLI option parsing helpers."""
import pytest
import typer

from lxcpilot.cli_support import (
    generate_name,
    parse_customizations,
    parse_key_values,
    parse_shares,
)
from lxcpilot.models.container import Customization, SharedFolder


class TestOptionParsing:
    """Test KEY=VALUE and HOST:GUEST parsing."""

    def test_key_values(self):
        assert parse_key_values(["a=1", "b=x=y"], "'--option'") == {"a": "1", "b": "x=y"}
        assert parse_key_values(None, "'--option'") == {}

    def test_key_values_rejects_bare_words(self):
        with pytest.raises(typer.BadParameter) as exc_info:
            parse_key_values(["oops"], "'--option'")

        assert exc_info.value.param_hint == "'--option'"

    def test_customizations_keep_order_and_repeats(self):
        assert parse_customizations(["lxc.cap.drop=sys_admin", "lxc.cap.drop=mknod"]) == [
            Customization("lxc.cap.drop", "sys_admin"),
            Customization("lxc.cap.drop", "mknod"),
        ]

    def test_shares(self):
        assert parse_shares(["/srv/www:/var/www"]) == [
            SharedFolder(hostpath="/srv/www", guestpath="/var/www")
        ]

    @pytest.mark.parametrize("value", ["/only-host", ":/guest", "/host:"])
    def test_bad_shares(self, value):
        with pytest.raises(typer.BadParameter) as exc_info:
            parse_shares([value])

        assert exc_info.value.param_hint == "'--share'"

    def test_generate_name(self):
        assert generate_name("box").startswith("box-")
