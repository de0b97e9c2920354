from __future__ import annotations

import pytest

from conftest import USDC, FakeMarket
from controllers.channel_controller import ChannelPoster, fill_template
from enums.error_reason import ErrorReason
from models.errors import BotError
from models.template import Template
from repositories.post_repository import PostRepository
from repositories.template_repository import TemplateRepository


class FakeRenderer:
    def __init__(self) -> None:
        self.documents: list[tuple[str, str]] = []

    def render(self, html: str, css: str) -> bytes:
        self.documents.append((html, css))
        return b"\x89PNG fake"


class FakeTelegram:
    def __init__(self) -> None:
        self.sent: list[bytes] = []
        self.error: Exception | None = None

    def send_photo(self, image: bytes, caption=None):
        if self.error is not None:
            raise self.error
        self.sent.append(image)
        return 100 + len(self.sent), f"file-{len(self.sent)}"


class FakeJob:
    def __init__(self) -> None:
        self.removed = False

    def schedule_removal(self) -> None:
        self.removed = True


class FakeJobQueue:
    def __init__(self) -> None:
        self.jobs: list[dict] = []

    def run_repeating(self, callback, interval, first=None, name=None):
        job = FakeJob()
        self.jobs.append({"callback": callback, "interval": interval, "first": first, "name": name, "job": job})
        return job


@pytest.fixture
def repos(db_path):
    templates = TemplateRepository(db_path)
    templates.create("one", "<div>#$update_number at $timestamp</div>", "div {}")
    templates.create("two", "<p>$$$symbol $price_usd</p>", "p {}")
    return templates, PostRepository(db_path)


@pytest.fixture
def poster(repos):
    templates, posts = repos
    return ChannelPoster(templates, posts, FakeRenderer(), FakeTelegram(), market=None,
                         interval=30, template_id=None, token_address=None)


def test_fill_template_escapes_and_keeps_unknown():
    template = Template(id=1, name="t", html="<b>$name</b> $missing $$5", css="")
    assert fill_template(template, {"name": "<x&y>"}) == "<b>&lt;x&amp;y&gt;</b> $missing $5"


def test_post_once_renders_sends_and_records(poster, repos):
    post = poster.post_once()
    html, css = poster.renderer.documents[0]
    assert "#1 at" in html
    assert css == "div {}"
    assert post.message_id == 101
    assert post.image_url == "file-1"
    assert repos[1].list_recent()[0]["template_name"] == "one"


def test_templates_rotate_and_update_number_grows(poster):
    first = poster.post_once()
    second = poster.post_once()
    assert first.template_id != second.template_id
    assert "N/A N/A" in poster.renderer.documents[1][0]
    assert poster.post_once().template_id == first.template_id
    assert "#3 at" in poster.renderer.documents[2][0]


def test_market_fields_are_filled(repos):
    templates, posts = repos
    renderer = FakeRenderer()
    poster = ChannelPoster(templates, posts, renderer, FakeTelegram(), market=FakeMarket(),
                           template_id=2, token_address=USDC)
    poster.post_once()
    assert renderer.documents[0][0] == "<p>$USDC 0.5</p>"


def test_missing_template_is_a_render_error(poster):
    with pytest.raises(BotError) as exc:
        poster.post_once(template_id=9999)
    assert exc.value.reason == ErrorReason.RENDER_FAILED


def test_failed_send_records_nothing(poster, repos):
    poster.telegram.error = BotError(ErrorReason.CHANNEL_UNAVAILABLE, "403")
    with pytest.raises(BotError):
        poster.post_once()
    assert repos[1].list_recent() == []
    # el lock se libera aunque falle
    poster.telegram.error = None
    assert poster.post_once() is not None


def test_overlapping_run_is_skipped(poster):
    poster._busy.acquire()
    try:
        assert poster.post_once() is None
    finally:
        poster._busy.release()
    assert poster.renderer.documents == []


def test_start_and_stop_lifecycle(poster):
    queue = FakeJobQueue()
    assert poster.running is False
    poster.start(queue)
    poster.start(queue)
    assert poster.running is True
    assert len(queue.jobs) == 1
    assert queue.jobs[0]["interval"] == 30
    assert queue.jobs[0]["first"] == 0

    poster.stop()
    assert poster.running is False
    assert queue.jobs[0]["job"].removed is True


def test_two_posters_are_independent(repos):
    templates, posts = repos
    a = ChannelPoster(templates, posts, FakeRenderer(), FakeTelegram(), name="a")
    b = ChannelPoster(templates, posts, FakeRenderer(), FakeTelegram(), name="b")
    queue = FakeJobQueue()
    a.start(queue)
    b.start(queue)
    a.stop()
    assert a.running is False
    assert b.running is True
    assert [j["name"] for j in queue.jobs] == ["a", "b"]
