import pytest

from level.server.services import extract_handles, render_body
from level.server.services.rendering import is_safe_url


class TestExtractHandles:
    @pytest.mark.parametrize(
        "body,expected",
        [
            ("@alice can you look?", ["alice"]),
            ("cc @Alice and @bob, then @alice again", ["alice", "bob"]),
            ("ping @team-lead-", ["team-lead"]),
            ("mail me at dan@example.com", []),
            ("see https://example.com/@alice", []),
            ("", []),
            (None, []),
        ],
    )
    def test_handles(self, body, expected):
        assert extract_handles(body) == expected


class TestRenderBody:
    def test_markdown_and_mentions(self):
        assert render_body("Hey @dan, **thanks**") == (
            '<p>Hey <span class="user-mention">@dan</span>, <strong>thanks</strong></p>'
        )

    def test_raw_html_is_not_rendered(self):
        html = render_body("<script>alert(1)</script>")
        assert "<script>" not in html

    def test_mentions_inside_code_are_left_alone(self):
        html = render_body("`@dan` and @ann")
        assert "<code>@dan</code>" in html
        assert '<span class="user-mention">@ann</span>' in html

    def test_empty(self):
        assert render_body("") == ""

    def test_raw_html_is_shown_as_text(self):
        assert render_body("<b>bold</b>") == "<p>&lt;b&gt;bold&lt;/b&gt;</p>"

    def test_comparison_inside_code_is_escaped_once(self):
        assert render_body("Use `a < b` here") == "<p>Use <code>a &lt; b</code> here</p>"

    @pytest.mark.parametrize(
        "body",
        [
            "[click](javascript:alert(1))",
            "[click](JavaScript:alert(1))",
            "[click](data:text/html;base64,PHNjcmlwdD4=)",
            "[click](javascript\\:alert(1))",
        ],
    )
    def test_unsafe_link_targets_are_dropped(self, body):
        html = render_body(body)
        assert "href" not in html
        assert ">click</a>" in html

    @pytest.mark.parametrize(
        "url", ["https://example.com/a?b=1", "mailto:dan@example.com", "/spaces/acme/posts/1", "#top"]
    )
    def test_safe_link_targets_are_kept(self, url):
        assert f'href="{url}"' in render_body(f"[go]({url})")


class TestIsSafeUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("http://example.com", True),
            ("relative/path:with-colon", True),
            ("?q=a:b", True),
            ("javascript:alert(1)", False),
            (" java\tscript:alert(1)", False),
            ("vbscript:msgbox", False),
        ],
    )
    def test_schemes(self, url, expected):
        assert is_safe_url(url) is expected
