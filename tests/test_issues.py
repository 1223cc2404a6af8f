"""Tests for pagedigest.extractors.issues."""

from pagedigest.extractors.issues import detect_issues


def _types(issues):
    return [issue.type for issue in issues]


# ---------------------------------------------------------------------------
# Paywall
# ---------------------------------------------------------------------------

def test_subscribe_to_continue_reading():
    html = "<html><body><p>Subscribe to continue reading</p></body></html>"
    issues = detect_issues(html)
    paywall = [i for i in issues if i.type == "paywall"]
    assert len(paywall) == 1
    assert "explicit paywall message" in paywall[0].message
    assert 'keyword: "subscribe"' in paywall[0].message


def test_paywall_fixture(paywall_html):
    issues = detect_issues(paywall_html)
    assert _types(issues)[0] == "paywall"
    message = issues[0].message
    assert message.startswith("Paywall detected: ")
    assert "element: .paywall" in message
    assert 'keyword: "become a member"' in message


def test_paywall_element_alone():
    html = '<html><body><div id="paywall-gate"><p>Story</p></div></body></html>'
    issues = detect_issues(html)
    assert _types(issues) == ["paywall"]
    assert "element: [id*=\"paywall\"]" in issues[0].message


def test_explicit_phrase_outside_body():
    html = "<html><head><title>Premium content</title></head><body><p>x</p></body></html>"
    issues = detect_issues(html)
    assert "paywall" in _types(issues)


# ---------------------------------------------------------------------------
# Login wall
# ---------------------------------------------------------------------------

def test_login_form():
    html = """<html><body><form action="/account/login" method="post">
    <input name="user"></form></body></html>"""
    issues = detect_issues(html)
    assert _types(issues) == ["login_required"]
    assert "login form detected" in issues[0].message


def test_login_phrase_reports_first_match_only():
    html = "<html><body><p>Please log in. Login required. Please sign in.</p></body></html>"
    issues = detect_issues(html)
    assert _types(issues) == ["login_required"]
    assert issues[0].message == 'Login required: message: "please log in"'


def test_many_login_links():
    links = "".join(f'<a href="/signin?next=/p{i}">Sign in</a>' for i in range(4))
    issues = detect_issues(f"<html><body>{links}</body></html>")
    assert "login_required" in _types(issues)
    assert "multiple login links" in issues[0].message


def test_three_login_links_not_enough():
    links = "".join(f'<a href="/signin?next=/p{i}">Sign in</a>' for i in range(3))
    assert detect_issues(f"<html><body>{links}</body></html>") == []


# ---------------------------------------------------------------------------
# Partial content
# ---------------------------------------------------------------------------

def test_read_more_button():
    html = "<html><body><p>Opening lines.</p><button>Read more</button></body></html>"
    issues = detect_issues(html)
    assert _types(issues) == ["partial_content"]
    assert "read more button detected" in issues[0].message


def test_excerpt_class():
    html = '<html><body><div class="post-excerpt">Opening lines.</div></body></html>'
    issues = detect_issues(html)
    assert _types(issues) == ["partial_content"]
    assert "preview/excerpt class detected" in issues[0].message


# ---------------------------------------------------------------------------
# Bot challenges
# ---------------------------------------------------------------------------

def test_cloudflare_title():
    html = """<html><head><title>Just a moment...</title></head>
    <body><p>Checking your browser.</p></body></html>"""
    issues = detect_issues(html)
    assert _types(issues) == ["other"]
    assert "cloudflare" in issues[0].message


def test_recaptcha():
    html = '<html><body><div class="g-recaptcha" data-sitekey="abc"></div></body></html>'
    issues = detect_issues(html)
    assert _types(issues) == ["other"]
    assert "captcha" in issues[0].message


# ---------------------------------------------------------------------------
# General
# ---------------------------------------------------------------------------

def test_clean_article_has_no_issues(article_html):
    assert detect_issues(article_html) == []


def test_issue_order():
    html = """<html><body><div class="paywall">Members only</div>
    <form id="signin-form"></form><a href="/story">Continue reading</a></body></html>"""
    assert _types(detect_issues(html)) == ["paywall", "login_required", "partial_content"]


def test_empty_html():
    assert detect_issues("") == []
