import io

from draco.models import Comment, Emitted, ThreadPost
from draco.org import OrgRenderer, utc_date, wrap_body


def render_post(**fields):
    base = dict(id="abc", title="Title", url="", permalink="/r/x/comments/abc/t/", created_utc=0)
    base.update(fields)
    out = io.StringIO()
    OrgRenderer(out).write_post(ThreadPost(**base))
    return out.getvalue()


def render_comment(depth=0, **fields):
    base = dict(id="c1", author="alice", body="hi", created_utc=0, permalink="/r/x/comments/abc/t/c1/")
    base.update(fields)
    out = io.StringIO()
    OrgRenderer(out, columns=20).write_comment(Emitted(depth=depth, comment=Comment(**base)))
    return out.getvalue()


def test_utc_date():
    assert utc_date(0) == "1970-01-01 00:00:00 UTC"
    assert utc_date(1600000000) == "2020-09-13 12:26:40 UTC"


def test_wrap_body_keeps_line_breaks_and_blank_lines():
    text = "one two three four five six\n\nshort"
    assert wrap_body(text, 10) == ["one two", "three four", "five six", "", "short"]


def test_post_header_and_properties():
    doc = render_post(subreddit="emacs", author="op", score=5, ups=0)
    lines = doc.splitlines()
    assert lines[0] == "#+STARTUP:content"
    assert lines[1] == "* Title"
    assert ":subreddit: =emacs=" in lines
    assert ":score: =5=" in lines
    assert not any(line.startswith(":ups:") for line in lines)
    assert lines[-1] == ":END:"


def test_post_selftext_and_external_url():
    doc = render_post(selftext="body text", url="https://example.com/a")
    assert "#+BEGIN_SRC markdown\n body text\n#+END_SRC\nhttps://example.com/a\n" in doc


def test_self_post_url_is_not_repeated():
    doc = render_post(url="https://www.reddit.com/r/x/comments/abc/t/")
    assert "https://www.reddit.com" not in doc


def test_comment_heading_depth_and_flags():
    doc = render_comment(depth=2, is_submitter=True, flair="mod", edited=False, controversiality=0)
    lines = doc.splitlines()
    assert lines[0] == "**** alice"
    assert ":is_submitter: =True=" in lines
    assert ":flair: =mod=" in lines
    assert not any(line.startswith(":edited:") for line in lines)
    assert not any(line.startswith(":controversiality:") for line in lines)


def test_comment_edited_timestamp_is_formatted():
    doc = render_comment(edited=1600000000.0)
    assert ":edited: =2020-09-13 12:26:40 UTC=" in doc


def test_comment_body_is_wrapped_and_indented():
    doc = render_comment(body="* not a heading but a long line of text")
    block = doc.split("#+BEGIN_SRC markdown\n")[1].split("#+END_SRC")[0]
    for line in block.splitlines():
        assert line.startswith(" ")
        assert len(line) <= 21


def test_long_words_are_not_split():
    url = "https://example.com/" + "x" * 100
    assert wrap_body(f"see {url} here", 71) == ["see", url, "here"]
