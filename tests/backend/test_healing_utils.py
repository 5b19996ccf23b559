"""
Tests for key derivation and header helpers.
"""

import uuid

from healing_records.core.healing_utils import build_healing_key, get_session_key, resolve_project
from healing_records.core.models import Locator
from healing_records.services import SelectorService


class TestBuildHealingKey:
    """Tests for deterministic healing identifiers."""

    def test_same_inputs_give_same_key(self):
        """Identical selector and page content always map to one key."""
        first = build_healing_key("sel1", "<html>A</html>")
        second = build_healing_key("sel1", "<html>A</html>")

        assert first == second
        assert len(first) == 64

    def test_one_byte_difference_changes_key(self):
        """Page content differing by one character yields a different key."""
        assert build_healing_key("sel1", "<html>A</html>") != build_healing_key("sel1", "<html>B</html>")

    def test_selector_difference_changes_key(self):
        assert build_healing_key("sel1", "<html>A</html>") != build_healing_key("sel2", "<html>A</html>")

    def test_no_collisions_for_random_distinct_content(self):
        """Randomized distinct page contents never collide for one selector."""
        contents = {f"<html>{uuid.uuid4().hex}</html>" for _ in range(500)}
        keys = {build_healing_key("sel1", content) for content in contents}

        assert len(keys) == len(contents)

    def test_empty_page_content(self):
        assert build_healing_key("sel1", None) == build_healing_key("sel1", "")


class TestSessionKey:
    """Tests for session key resolution from headers."""

    def test_primary_header_wins(self):
        headers = {"sessionkey": "primary", "hlm-sessionkey": "secondary"}
        assert get_session_key(headers) == "primary"

    def test_empty_primary_falls_back_to_secondary(self):
        headers = {"sessionkey": "", "hlm-sessionkey": "secondary"}
        assert get_session_key(headers) == "secondary"

    def test_missing_primary_falls_back_to_secondary(self):
        assert get_session_key({"hlm-sessionkey": "secondary"}) == "secondary"

    def test_header_names_are_case_insensitive(self):
        assert get_session_key({"SessionKey": "primary"}) == "primary"

    def test_no_session_headers(self):
        assert get_session_key({}) is None


class TestResolveProject:

    def test_project_header(self):
        assert resolve_project({"host-project": "shop"}, "no-project") == "shop"

    def test_defaults_when_missing_or_empty(self):
        assert resolve_project({}, "no-project") == "no-project"
        assert resolve_project({"host-project": ""}, "no-project") == "no-project"


class TestSelectorId:
    """Tests for selector identity derivation."""

    def test_selector_id_is_stable(self, database):
        service = SelectorService(database)
        locator = Locator(value="#login", type="css")

        first = service.get_selector_id(locator, "https://example.com", "findElement", False)
        second = service.get_selector_id(locator, "https://example.com", "findElement", False)

        assert first == second

    def test_url_only_counts_when_enabled(self, database):
        service = SelectorService(database)
        locator = Locator(value="#login", type="css")

        assert (service.get_selector_id(locator, "https://a.example", "findElement", False)
                == service.get_selector_id(locator, "https://b.example", "findElement", False))
        assert (service.get_selector_id(locator, "https://a.example", "findElement", True)
                != service.get_selector_id(locator, "https://b.example", "findElement", True))

    def test_command_and_strategy_are_part_of_identity(self, database):
        service = SelectorService(database)

        css = service.get_selector_id(Locator("login", "css"), None, "findElement", False)
        xpath = service.get_selector_id(Locator("login", "xpath"), None, "findElement", False)
        find_all = service.get_selector_id(Locator("login", "css"), None, "findElements", False)

        assert len({css, xpath, find_all}) == 3
